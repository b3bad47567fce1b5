import logging
import time
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError

from tripjournal.errors import NotFoundError, UpstreamError
from tripjournal.geocoding import GeocodeClient
from tripjournal.logger import events
from tripjournal.repositories.trip_repository import TripRepository

logger = logging.getLogger(__name__)


class BackfillResult:
    """Helper to track results of a country backfill run."""

    def __init__(self, total: int):
        self.total = total
        self.updated: list[dict[str, int | str]] = []
        self.skipped = 0
        self.failed = 0

    def add_updated(self, trip_id: int, country: str) -> None:
        self.updated.append({"id": trip_id, "country": country})

    def add_skipped(self) -> None:
        self.skipped += 1

    def add_error(self, trip_id: int, exception: Exception) -> None:
        self.failed += 1
        logger.error("Error updating trip %s: %s", trip_id, exception)

    @property
    def message(self) -> str:
        return f"Updated {len(self.updated)} trips with country data"


class CountryBackfill:
    """Fills in `country` for a user's trips that have coordinates but no country.

    Lookups run one at a time with a fixed pause between them so the free
    geocoding endpoint does not throttle us. Each trip is best effort: a failed
    lookup or write is logged and the run moves on to the next trip.
    """

    def __init__(
        self,
        repo: TripRepository,
        geocoder: GeocodeClient,
        delay: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.repo = repo
        self.geocoder = geocoder
        self.delay = geocoder.settings.backfill_delay if delay is None else delay
        self._sleep = sleep

    def run(self, auth_uid: str) -> BackfillResult:
        user_id = self.repo.get_user_id(auth_uid)
        if user_id is None:
            raise NotFoundError("User not found")

        trips = [(trip.id, trip.latitude, trip.longitude) for trip in self.repo.get_trips_missing_country(user_id)]
        result = BackfillResult(total=len(trips))

        for position, (trip_id, latitude, longitude) in enumerate(trips):
            if position:
                self._sleep(self.delay)
            try:
                country = self.geocoder.reverse_geocode(latitude, longitude).country
                if not country:
                    result.add_skipped()
                    continue
                self.repo.set_country(trip_id, country)
                result.add_updated(trip_id, country)
            except UpstreamError as e:
                result.add_error(trip_id, e)
            except SQLAlchemyError as e:
                self.repo.db.rollback()
                result.add_error(trip_id, e)

        events.log_event(
            "countries_backfilled",
            user_id=user_id,
            total=result.total,
            updated=len(result.updated),
            skipped=result.skipped,
            failed=result.failed,
        )
        return result

import logging
from functools import lru_cache

import httpx
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from tripjournal.errors import UpstreamError

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


class GeocodeSettings(BaseSettings):
    """Configuration for the reverse-geocoding service"""

    base_url: str = "https://api.bigdatacloud.net/data/reverse-geocode-client"
    locality_language: str = "en"
    timeout: float = 10.0
    # Pause between lookups when backfilling many trips
    backfill_delay: float = 0.1

    model_config = SettingsConfigDict(
        env_prefix="GEOCODE_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_geocode_settings() -> GeocodeSettings:
    """Get cached geocode settings."""
    return GeocodeSettings()


class ReverseGeocodeResult(BaseModel):
    country: str | None = None
    country_code: str | None = None
    city: str | None = None
    locality: str | None = None


class GeocodeClient:
    """Reverse geocoder backed by a single pooled httpx client.

    `reverse_geocode` raises UpstreamError on any failure; `find_country` is the
    best-effort variant used on write paths and returns None instead.
    """

    def __init__(self, settings: GeocodeSettings | None = None, transport: httpx.BaseTransport | None = None):
        self.settings = settings or get_geocode_settings()
        self._client = httpx.Client(timeout=self.settings.timeout, transport=transport)

    def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "localityLanguage": self.settings.locality_language,
        }
        try:
            resp = self._client.get(self.settings.base_url, params=params)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Reverse geocoding failed for (%s, %s): %s", latitude, longitude, e)
            raise UpstreamError() from e

        if not isinstance(data, dict):
            logger.warning("Unexpected reverse geocoding payload for (%s, %s): %r", latitude, longitude, data)
            raise UpstreamError()

        try:
            return ReverseGeocodeResult(
                country=data.get("countryName") or None,
                country_code=data.get("countryCode") or None,
                city=data.get("city") or None,
                locality=data.get("locality") or None,
            )
        except ValidationError as e:
            logger.warning("Malformed reverse geocoding fields for (%s, %s): %s", latitude, longitude, e)
            raise UpstreamError() from e

    def find_country(self, latitude: float, longitude: float) -> str | None:
        try:
            return self.reverse_geocode(latitude, longitude).country
        except UpstreamError as e:
            logger.warning("Country lookup skipped: %s", e)
            return None

    def close(self) -> None:
        self._client.close()

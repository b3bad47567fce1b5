import logging
from collections import defaultdict
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, insert, or_, select, update

from tripjournal.models.trip import GalleryImage, Trip
from tripjournal.models.user import User
from tripjournal.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)

GALLERY_ORDER = (GalleryImage.order_index.asc(), GalleryImage.uploaded_at.asc(), GalleryImage.id.asc())


class TripRepository(BaseRepository):
    def list_trips(
        self,
        auth_uid: str,
        page: int,
        limit: int,
        search: str | None = None,
        country: str | None = None,
    ) -> list[tuple[Trip, str | None]]:
        stmt = select(Trip, User.display_name).join(User, Trip.user_id == User.id).where(User.auth_uid == auth_uid)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Trip.title.ilike(pattern), Trip.destination.ilike(pattern)))
        if country:
            stmt = stmt.where(Trip.country.ilike(f"%{country}%"))
        stmt = stmt.order_by(Trip.created_at.desc(), Trip.id.desc()).offset((page - 1) * limit).limit(limit)
        return [(trip, user_name) for trip, user_name in self.db.execute(stmt).all()]

    def get_trip_for_owner(self, trip_id: int, auth_uid: str) -> tuple[Trip, str | None] | None:
        stmt = select(Trip, User.display_name).join(User, Trip.user_id == User.id).where(Trip.id == trip_id, User.auth_uid == auth_uid)
        row = self.db.execute(stmt).one_or_none()
        return (row[0], row[1]) if row else None

    def get_owned_trip(self, trip_id: int, user_id: int) -> Trip | None:
        stmt = select(Trip).where(Trip.id == trip_id, Trip.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_trip(self, user_id: int, **fields: Any) -> Trip:
        """Stage a new trip and flush it to get its id; the caller owns the commit."""
        trip = Trip(user_id=user_id, **fields)
        self.db.add(trip)
        self.db.flush()
        self.db.refresh(trip)
        return trip

    def apply_trip_changes(self, trip: Trip, changes: dict[str, Any]) -> Trip:
        for key, value in changes.items():
            setattr(trip, key, value)
        trip.updated_at = datetime.now(UTC)
        self.db.flush()
        return trip

    def delete_trip(self, trip_id: int, auth_uid: str) -> bool:
        user_id = self.get_user_id(auth_uid)
        if user_id is None:
            return False
        trip = self.get_owned_trip(trip_id, user_id)
        if not trip:
            return False
        # Gallery images and comments go with it through ON DELETE CASCADE
        self.db.delete(trip)
        self.db.commit()
        return True

    def get_gallery_images(self, trip_id: int) -> list[GalleryImage]:
        stmt = select(GalleryImage).where(GalleryImage.trip_id == trip_id).order_by(*GALLERY_ORDER)
        return list(self.db.execute(stmt).scalars().all())

    def get_gallery_images_for_trips(self, trip_ids: list[int]) -> dict[int, list[GalleryImage]]:
        if not trip_ids:
            return {}
        stmt = select(GalleryImage).where(GalleryImage.trip_id.in_(trip_ids)).order_by(*GALLERY_ORDER)
        grouped: dict[int, list[GalleryImage]] = defaultdict(list)
        for image in self.db.execute(stmt).scalars():
            grouped[image.trip_id].append(image)
        return grouped

    def insert_gallery_images(self, rows: list[dict[str, Any]]) -> list[GalleryImage]:
        """Batch insert gallery rows, returned in the same order as `rows`.

        Args:
            rows: dicts with keys trip_id, url, path, filename, original_name, order_index
        """
        if not rows:
            return []

        now = datetime.now(UTC)
        for data in rows:
            data["uploaded_at"] = now

        stmt = insert(GalleryImage).returning(GalleryImage, sort_by_parameter_order=True)
        images = list(self.db.scalars(stmt, rows).all())
        logger.debug("Inserted %d gallery images", len(images))
        return images

    def delete_gallery_images(self, trip_id: int) -> int:
        result = self.db.execute(delete(GalleryImage).where(GalleryImage.trip_id == trip_id))
        return result.rowcount or 0

    def _owned_trip_ids(self, auth_uid: str):
        return select(Trip.id).join(User, Trip.user_id == User.id).where(User.auth_uid == auth_uid)

    def add_gallery_image(
        self,
        trip_id: int,
        auth_uid: str,
        url: str,
        path: str,
        filename: str,
        original_name: str | None = None,
        order_index: int | None = None,
    ) -> GalleryImage | None:
        user_id = self.get_user_id(auth_uid)
        if user_id is None or not self.get_owned_trip(trip_id, user_id):
            return None
        image = GalleryImage(
            trip_id=trip_id,
            url=url,
            path=path,
            filename=filename,
            original_name=original_name or filename,
            order_index=order_index if order_index is not None else 0,
        )
        self.db.add(image)
        self.db.commit()
        self.db.refresh(image)
        return image

    def delete_gallery_image(self, trip_id: int, image_id: int, auth_uid: str) -> bool:
        stmt = (
            delete(GalleryImage)
            .where(
                GalleryImage.id == image_id,
                GalleryImage.trip_id == trip_id,
                GalleryImage.trip_id.in_(self._owned_trip_ids(auth_uid)),
            )
            .returning(GalleryImage.id)
        )
        deleted = self.db.execute(stmt).scalar_one_or_none()
        self.db.commit()
        return deleted is not None

    def update_gallery_image_order(self, trip_id: int, image_id: int, auth_uid: str, order_index: int) -> GalleryImage | None:
        stmt = (
            update(GalleryImage)
            .where(
                GalleryImage.id == image_id,
                GalleryImage.trip_id == trip_id,
                GalleryImage.trip_id.in_(self._owned_trip_ids(auth_uid)),
            )
            .values(order_index=order_index)
            .returning(GalleryImage)
        )
        image = self.db.execute(stmt).scalar_one_or_none()
        self.db.commit()
        return image

    def get_trips_missing_country(self, user_id: int) -> list[Trip]:
        stmt = (
            select(Trip)
            .where(
                Trip.user_id == user_id,
                Trip.country.is_(None),
                Trip.latitude.is_not(None),
                Trip.longitude.is_not(None),
            )
            .order_by(Trip.id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def set_country(self, trip_id: int, country: str) -> None:
        self.db.execute(update(Trip).where(Trip.id == trip_id).values(country=country))
        self.db.commit()

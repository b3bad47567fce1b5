"""
Trip aggregate write path.

A trip and its ordered gallery images are written as one unit: either the
trip row and every gallery row are committed together, or nothing is. The
gallery is never diffed; a write that touches it deletes every existing row
of the trip and inserts the submitted list again, so image ids change on
every gallery-touching update.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from tripjournal.errors import NotFoundError, PersistenceError
from tripjournal.geocoding import GeocodeClient
from tripjournal.logger import events
from tripjournal.models.db import transaction
from tripjournal.repositories.trip_repository import TripRepository
from tripjournal.schemas.trip import CoordinatesInput, GalleryImageInput, TripCreateRequest, TripResponse, TripUpdateRequest
from tripjournal.validation import require_text

logger = logging.getLogger(__name__)

# Handled separately from the plain column fields
_COMPOSITE_FIELDS = {"title", "destination", "coordinates", "latitude", "longitude", "gallery_images"}


def normalize_coordinates(
    coordinates: CoordinatesInput | None,
    latitude: float | None,
    longitude: float | None,
) -> tuple[float | None, float | None]:
    """Pick each half from the coordinates object if it has one, else from the scalar.

    The halves are resolved independently; a lone latitude or longitude is
    passed through unchanged.
    """
    object_lat = coordinates.lat if coordinates is not None else None
    object_lng = coordinates.lng if coordinates is not None else None
    return (
        object_lat if object_lat is not None else latitude,
        object_lng if object_lng is not None else longitude,
    )


def build_gallery_rows(trip_id: int, images: list[GalleryImageInput]) -> list[dict[str, Any]]:
    """Turn submitted gallery descriptors into insert rows, preserving input order.

    `order_index` falls back to the zero-based position in `images`;
    `original_name` falls back to the filename.
    """
    return [
        {
            "trip_id": trip_id,
            "url": image.url,
            "path": image.path,
            "filename": image.filename,
            "original_name": image.original_name or image.filename,
            "order_index": image.order_index if image.order_index is not None else position,
        }
        for position, image in enumerate(images)
    ]


class TripService:
    def __init__(self, repo: TripRepository, geocoder: GeocodeClient):
        self.repo = repo
        self.geocoder = geocoder

    def create_trip(self, auth_uid: str, payload: TripCreateRequest) -> TripResponse:
        title = require_text(payload.title, "Title is required")
        destination = require_text(payload.destination, "Destination is required")

        latitude, longitude = normalize_coordinates(payload.coordinates, payload.latitude, payload.longitude)

        # Looked up before the transaction opens so no connection is held across the HTTP call
        country = payload.country or None
        if country is None and latitude is not None and longitude is not None:
            country = self.geocoder.find_country(latitude, longitude)

        try:
            with transaction(self.repo.db):
                user_id = self.repo.get_user_id(auth_uid)
                if user_id is None:
                    raise NotFoundError("User not found")

                trip = self.repo.create_trip(
                    user_id,
                    title=title,
                    destination=destination,
                    country=country,
                    latitude=latitude,
                    longitude=longitude,
                    start_date=payload.start_date,
                    end_date=payload.end_date,
                    description=payload.description,
                    notes=payload.notes,
                    tags=payload.tags or [],
                    images=payload.images or [],
                    is_public=bool(payload.is_public),
                    cover_image=payload.cover_image,
                    cover_image_path=payload.cover_image_path,
                )
                gallery = self.repo.insert_gallery_images(build_gallery_rows(trip.id, payload.gallery_images or []))
        except SQLAlchemyError as e:
            logger.error("Failed to create trip for user %s: %s", auth_uid, e)
            raise PersistenceError("Failed to create trip") from e

        events.log_event("trip_created", trip_id=trip.id, user_id=trip.user_id, gallery_images=len(gallery), country=trip.country)
        return TripResponse.from_db_trip(trip, gallery)

    def update_trip(self, trip_id: int, auth_uid: str, payload: TripUpdateRequest) -> TripResponse:
        changes = self._collect_changes(payload)

        try:
            with transaction(self.repo.db):
                user_id = self.repo.get_user_id(auth_uid)
                trip = self.repo.get_owned_trip(trip_id, user_id) if user_id is not None else None
                if trip is None:
                    raise NotFoundError("Trip not found or unauthorized")

                self.repo.apply_trip_changes(trip, changes)

                if payload.replaces_gallery:
                    removed = self.repo.delete_gallery_images(trip.id)
                    gallery = self.repo.insert_gallery_images(build_gallery_rows(trip.id, payload.gallery_images or []))
                    events.log_event("gallery_replaced", trip_id=trip.id, removed=removed, inserted=len(gallery))
                else:
                    gallery = self.repo.get_gallery_images(trip.id)
        except SQLAlchemyError as e:
            logger.error("Failed to update trip %s for user %s: %s", trip_id, auth_uid, e)
            raise PersistenceError("Failed to update trip") from e

        events.log_event("trip_updated", trip_id=trip.id, fields=sorted(changes))
        return TripResponse.from_db_trip(trip, gallery)

    @staticmethod
    def _collect_changes(payload: TripUpdateRequest) -> dict[str, Any]:
        """Column values to overwrite; omitted and null fields are left out so the stored value stays."""
        changes = {key: value for key, value in payload.model_dump(exclude=_COMPOSITE_FIELDS).items() if value is not None}

        if payload.title is not None:
            changes["title"] = require_text(payload.title, "Title cannot be empty")
        if payload.destination is not None:
            changes["destination"] = require_text(payload.destination, "Destination cannot be empty")

        latitude, longitude = normalize_coordinates(payload.coordinates, payload.latitude, payload.longitude)
        if latitude is not None:
            changes["latitude"] = latitude
        if longitude is not None:
            changes["longitude"] = longitude
        return changes

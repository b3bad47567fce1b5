"""Tests for the transactional trip write path against a real database."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from tripjournal.errors import NotFoundError, PersistenceError
from tripjournal.models.trip import GalleryImage, Trip
from tripjournal.models.user import User
from tripjournal.repositories.trip_repository import TripRepository
from tripjournal.schemas.trip import TripCreateRequest, TripUpdateRequest
from tripjournal.trip_service import TripService

AUTH_UID = "service-user"


def _boom(*args, **kwargs):
    raise OperationalError("INSERT INTO trip_gallery_images", {}, Exception("disk full"))


@pytest.fixture
def user(db_session) -> User:
    user = User(auth_uid=AUTH_UID, email="svc@example.com", display_name="Service User")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def service(db_session, geocode_client) -> TripService:
    return TripService(TripRepository(db_session), geocode_client)


def _create_payload(**overrides) -> TripCreateRequest:
    payload = {
        "title": "Kyoto",
        "destination": "Kyoto",
        "gallery_images": [
            {"url": "u0", "path": "p0", "filename": "0.jpg"},
            {"url": "u1", "path": "p1", "filename": "1.jpg"},
        ],
    }
    payload.update(overrides)
    return TripCreateRequest.model_validate(payload)


class TestTripServiceAtomicity:
    def test_create_rolls_back_trip_when_gallery_insert_fails(self, service, user, db_session, monkeypatch):
        monkeypatch.setattr(TripRepository, "insert_gallery_images", _boom)

        with pytest.raises(PersistenceError) as exc_info:
            service.create_trip(AUTH_UID, _create_payload())

        assert exc_info.value.message == "Failed to create trip"
        assert db_session.execute(select(func.count(Trip.id))).scalar_one() == 0

    def test_update_rolls_back_fields_and_gallery(self, service, user, db_session, monkeypatch):
        created = service.create_trip(AUTH_UID, _create_payload())
        monkeypatch.setattr(TripRepository, "insert_gallery_images", _boom)

        with pytest.raises(PersistenceError) as exc_info:
            service.update_trip(created.id, AUTH_UID, TripUpdateRequest.model_validate({"title": "Osaka", "gallery_images": []}))

        assert exc_info.value.message == "Failed to update trip"
        assert db_session.execute(select(Trip.title).where(Trip.id == created.id)).scalar_one() == "Kyoto"
        image_ids = db_session.execute(select(GalleryImage.id).where(GalleryImage.trip_id == created.id).order_by(GalleryImage.id)).scalars().all()
        assert image_ids == [image.id for image in created.gallery_images]

    def test_create_unknown_user(self, service, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            service.create_trip("nobody", _create_payload())

        assert exc_info.value.message == "User not found"
        assert db_session.execute(select(func.count(Trip.id))).scalar_one() == 0


class TestTripServiceGallery:
    def test_explicit_order_index_respected(self, service, user):
        created = service.create_trip(
            AUTH_UID,
            _create_payload(
                gallery_images=[
                    {"url": "u0", "path": "p0", "filename": "late.jpg", "order_index": 10},
                    {"url": "u1", "path": "p1", "filename": "early.jpg", "order_index": 0},
                ]
            ),
        )

        # returned in submission order
        assert [image.filename for image in created.gallery_images] == ["late.jpg", "early.jpg"]
        assert [image.order_index for image in created.gallery_images] == [10, 0]

    def test_read_back_in_display_order(self, service, user, db_session):
        created = service.create_trip(
            AUTH_UID,
            _create_payload(
                gallery_images=[
                    {"url": "u0", "path": "p0", "filename": "late.jpg", "order_index": 10},
                    {"url": "u1", "path": "p1", "filename": "early.jpg", "order_index": 0},
                ]
            ),
        )

        images = TripRepository(db_session).get_gallery_images(created.id)

        assert [image.filename for image in images] == ["early.jpg", "late.jpg"]

    def test_update_omitting_gallery_keeps_ids(self, service, user):
        created = service.create_trip(AUTH_UID, _create_payload())

        updated = service.update_trip(created.id, AUTH_UID, TripUpdateRequest.model_validate({"notes": "rainy"}))

        assert updated.notes == "rainy"
        assert [image.id for image in updated.gallery_images] == [image.id for image in created.gallery_images]

    def test_update_foreign_trip(self, service, user, db_session):
        created = service.create_trip(AUTH_UID, _create_payload())
        db_session.add(User(auth_uid="intruder"))
        db_session.commit()

        with pytest.raises(NotFoundError) as exc_info:
            service.update_trip(created.id, "intruder", TripUpdateRequest.model_validate({"gallery_images": []}))

        assert exc_info.value.message == "Trip not found or unauthorized"
        remaining = db_session.execute(select(func.count(GalleryImage.id)).where(GalleryImage.trip_id == created.id)).scalar_one()
        assert remaining == 2


class SessionRecordingGeocoder:
    """Records whether the session had an open transaction at lookup time."""

    def __init__(self, session):
        self.session = session
        self.in_transaction: list[bool] = []

    def find_country(self, latitude, longitude):
        self.in_transaction.append(self.session.in_transaction())
        return "Japan"


class TestTripServiceGeocoding:
    def test_country_lookup_runs_outside_transaction(self, user, db_session):
        geocoder = SessionRecordingGeocoder(db_session)
        service = TripService(TripRepository(db_session), geocoder)

        created = service.create_trip(AUTH_UID, _create_payload(latitude=35.0116, longitude=135.7681))

        assert geocoder.in_transaction == [False]
        assert created.country == "Japan"

    def test_lookup_skipped_when_country_supplied(self, user, db_session):
        geocoder = SessionRecordingGeocoder(db_session)
        service = TripService(TripRepository(db_session), geocoder)

        created = service.create_trip(AUTH_UID, _create_payload(latitude=35.0, longitude=135.7, country="Japan"))

        assert geocoder.in_transaction == []
        assert created.country == "Japan"

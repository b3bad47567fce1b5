import os
from collections.abc import Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.engine.base import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session
from testcontainers.postgres import PostgresContainer

from tests.helpers import TEST_JWT_SECRET, auth_headers

POSTGRES_IMAGE = "postgres:17-alpine"

# HS256 tokens signed with a shared secret stand in for the identity provider
os.environ.update({"AUTH_JWT_ALGORITHM": "HS256", "AUTH_JWT_SECRET_KEY": TEST_JWT_SECRET, "AUTH_PROJECT_ID": "", "LOG_COLORS": "false"})


class GeocodeStub:
    """Plays the reverse-geocoding service: answers from a (lat, lng) -> payload table."""

    def __init__(self):
        self.payloads: dict[tuple[float, float], dict] = {}
        self.calls: list[tuple[float, float]] = []
        self.fail = False

    def add(self, latitude: float, longitude: float, country: str, country_code: str = "", city: str = "", locality: str = ""):
        self.payloads[(latitude, longitude)] = {
            "countryName": country,
            "countryCode": country_code,
            "city": city,
            "locality": locality,
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        latitude = float(request.url.params["latitude"])
        longitude = float(request.url.params["longitude"])
        self.calls.append((latitude, longitude))
        if self.fail:
            return httpx.Response(503, text="Service Unavailable")
        return httpx.Response(200, json=self.payloads.get((latitude, longitude), {}))


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer]:
    """PostgreSQL container shared by the whole test session."""
    with PostgresContainer(image=POSTGRES_IMAGE, driver="psycopg") as container:
        # Point POSTGRES_* at the container so code reading settings from the
        # environment talks to it
        url = make_url(container.get_connection_url())
        os.environ.update(
            {
                "POSTGRES_DB": url.database or "",
                "POSTGRES_USER": url.username or "",
                "POSTGRES_PASSWORD": url.password or "",
                "POSTGRES_HOST": url.host or "",
                "POSTGRES_PORT": str(url.port or 5432),
            }
        )

        yield container


@pytest.fixture(scope="session")
def engine(postgres_container: PostgresContainer) -> Generator[Engine]:
    """Session-scoped SQLAlchemy engine with the schema created once."""
    from tripjournal.models import Comment, GalleryImage, Trip, User  # noqa: F401
    from tripjournal.models.db import Base

    engine = create_engine(postgres_container.get_connection_url())
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine: Engine) -> Generator[Session]:
    """Database session isolated per test.

    The outer transaction is rolled back at teardown; commits made by the code
    under test only release savepoints inside it.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session_factory = sessionmaker(bind=connection, join_transaction_mode="create_savepoint", expire_on_commit=False)
    session = session_factory()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def geocode_stub() -> GeocodeStub:
    return GeocodeStub()


@pytest.fixture(scope="function")
def geocode_client(geocode_stub: GeocodeStub):
    """Real GeocodeClient wired to the stub through httpx.MockTransport."""
    from tripjournal.geocoding import GeocodeClient, GeocodeSettings

    client = GeocodeClient(GeocodeSettings(backfill_delay=0.0), transport=httpx.MockTransport(geocode_stub.handler))
    yield client
    client.close()


@pytest.fixture(scope="function")
def client(db_session: Session, geocode_client) -> Generator[TestClient]:
    """FastAPI test client bound to the per-test session and the stubbed geocoder."""
    from tripjournal.auth_utils import get_auth_settings, get_identity_verifier
    from tripjournal.dependencies import get_geocode_client
    from tripjournal.main import app
    from tripjournal.models.db import get_db

    def override_get_db():
        yield db_session

    def override_get_geocode_client():
        yield geocode_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_geocode_client] = override_get_geocode_client

    # Pick up the AUTH_* environment set above
    get_auth_settings.cache_clear()
    get_identity_verifier.cache_clear()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def test_user_data() -> dict[str, str]:
    """Claims of the default test identity."""
    return {"uid": "traveler-uid-1", "email": "traveler@example.com", "name": "Test Traveler"}


@pytest.fixture(scope="function")
def authenticated_client(client: TestClient, test_user_data: dict[str, str]) -> Generator[TestClient]:
    """Test client with a bearer token whose profile already exists."""
    client.headers.update(auth_headers(**test_user_data))
    response = client.get("/users/profile")
    assert response.status_code == 200

    yield client

    client.headers.clear()


@pytest.fixture(scope="function")
def other_user_headers(client: TestClient) -> dict[str, str]:
    """Headers of a second, registered identity."""
    headers = auth_headers(uid="traveler-uid-2", email="other@example.com", name="Other Traveler")
    response = client.get("/users/profile", headers=headers)
    assert response.status_code == 200
    return headers


@pytest.fixture(scope="function")
def trip_fixture(authenticated_client: TestClient) -> dict:
    """A trip owned by the default test identity, with two gallery images."""
    payload = {
        "title": "Lisbon weekend",
        "destination": "Lisbon",
        "country": "Portugal",
        "coordinates": {"lat": 38.7223, "lng": -9.1393},
        "tags": ["city", "food"],
        "gallery_images": [
            {"url": "https://cdn.example.com/a.jpg", "path": "trips/a.jpg", "filename": "a.jpg"},
            {"url": "https://cdn.example.com/b.jpg", "path": "trips/b.jpg", "filename": "b.jpg"},
        ],
    }
    response = authenticated_client.post("/trips", json=payload)
    assert response.status_code == 201
    return response.json()


@pytest.fixture(scope="function")
def invalid_auth_headers() -> dict[str, str]:
    """Fixture providing invalid authorization header."""
    return {"Authorization": "Bearer invalid_token"}


@pytest.fixture(scope="function")
def expired_auth_headers() -> dict[str, str]:
    """Fixture providing an expired token in Authorization header."""
    return auth_headers(uid="traveler-uid-1", expires_in=-3600)

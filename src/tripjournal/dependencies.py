"""
Dependency Injection for the Geocode Client

The client owns an httpx connection pool, so it is created once during
application startup and shared across all requests.
"""

import logging
from collections.abc import Generator

from tripjournal.geocoding import GeocodeClient

logger = logging.getLogger(__name__)

# Global instance of the geocode client (initialized during app startup)
_geocode_client_instance: GeocodeClient | None = None


def get_geocode_client() -> Generator[GeocodeClient]:
    """Dependency injection function for GeocodeClient.

    Used with FastAPI's Depends() in the trip routes. Tests override it with a
    stub client.

    Yields:
        GeocodeClient instance
    """
    if _geocode_client_instance is None:
        raise RuntimeError("Geocode client not initialized. Make sure the application lifespan is properly configured.")
    yield _geocode_client_instance


def set_geocode_client_instance(client: GeocodeClient | None) -> None:
    """Set (or clear, with None) the global geocode client instance.

    This is called during application startup and shutdown via the lifespan
    context manager.
    """
    global _geocode_client_instance
    _geocode_client_instance = client
    logger.info("Geocode client instance %s", "set" if client else "cleared")


def get_geocode_client_instance() -> GeocodeClient:
    """Get the global geocode client instance without using dependency injection.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _geocode_client_instance is None:
        raise RuntimeError("Geocode client not initialized. Make sure the application lifespan is properly configured.")
    return _geocode_client_instance

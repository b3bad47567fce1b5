import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tripjournal.auth_utils import Identity, get_current_identity
from tripjournal.country_backfill import CountryBackfill
from tripjournal.dependencies import get_geocode_client
from tripjournal.errors import NotFoundError, TripJournalError, UpstreamError, ValidationError
from tripjournal.geocoding import GeocodeClient
from tripjournal.models.db import get_db
from tripjournal.repositories.trip_repository import TripRepository
from tripjournal.schemas.trip import (
    CountryBackfillResponse,
    GalleryImageCreateRequest,
    GalleryImageOrderRequest,
    GalleryImageResponse,
    MessageResponse,
    ReverseGeocodeRequest,
    ReverseGeocodeResponse,
    TripCreateRequest,
    TripResponse,
    TripUpdateRequest,
)
from tripjournal.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["trips"])
logger = logging.getLogger(__name__)


def get_trip_repository(db: Session = Depends(get_db)) -> TripRepository:
    return TripRepository(db)


def get_trip_service(
    repo: TripRepository = Depends(get_trip_repository),
    geocoder: GeocodeClient = Depends(get_geocode_client),
) -> TripService:
    return TripService(repo, geocoder)


@router.get("", response_model=list[TripResponse])
def list_trips(
    repo: TripRepository = Depends(get_trip_repository),
    identity: Identity = Depends(get_current_identity),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None, description="Case-insensitive match on title or destination"),
    country: str | None = Query(None, description="Case-insensitive match on country"),
) -> list[TripResponse]:
    rows = repo.list_trips(identity.uid, page, limit, search=search, country=country)
    galleries = repo.get_gallery_images_for_trips([trip.id for trip, _ in rows])
    return [TripResponse.from_db_trip(trip, galleries.get(trip.id, []), user_name=user_name) for trip, user_name in rows]


@router.post("/reverse-geocode", response_model=ReverseGeocodeResponse)
def reverse_geocode(
    request: ReverseGeocodeRequest,
    geocoder: GeocodeClient = Depends(get_geocode_client),
    identity: Identity = Depends(get_current_identity),
) -> ReverseGeocodeResponse:
    if request.latitude is None or request.longitude is None:
        raise ValidationError("Latitude and longitude are required")
    try:
        result = geocoder.reverse_geocode(request.latitude, request.longitude)
    except UpstreamError as e:
        logger.error("Error in reverse geocoding: %s", e)
        raise TripJournalError("Failed to get location details") from e
    return ReverseGeocodeResponse(**result.model_dump())


@router.post("/update-countries", response_model=CountryBackfillResponse)
def update_countries(
    repo: TripRepository = Depends(get_trip_repository),
    geocoder: GeocodeClient = Depends(get_geocode_client),
    identity: Identity = Depends(get_current_identity),
) -> CountryBackfillResponse:
    result = CountryBackfill(repo, geocoder).run(identity.uid)
    return CountryBackfillResponse(message=result.message, updated_trips=result.updated)


@router.get("/{trip_id}", response_model=TripResponse)
def get_trip(
    trip_id: int,
    repo: TripRepository = Depends(get_trip_repository),
    identity: Identity = Depends(get_current_identity),
) -> TripResponse:
    found = repo.get_trip_for_owner(trip_id, identity.uid)
    if not found:
        raise NotFoundError("Trip not found")
    trip, user_name = found
    return TripResponse.from_db_trip(trip, repo.get_gallery_images(trip.id), user_name=user_name)


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
def create_trip(
    request: TripCreateRequest,
    service: TripService = Depends(get_trip_service),
    identity: Identity = Depends(get_current_identity),
) -> TripResponse:
    return service.create_trip(identity.uid, request)


@router.put("/{trip_id}", response_model=TripResponse)
def update_trip(
    trip_id: int,
    request: TripUpdateRequest,
    service: TripService = Depends(get_trip_service),
    identity: Identity = Depends(get_current_identity),
) -> TripResponse:
    return service.update_trip(trip_id, identity.uid, request)


@router.delete("/{trip_id}", response_model=MessageResponse)
def delete_trip(
    trip_id: int,
    repo: TripRepository = Depends(get_trip_repository),
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    if not repo.delete_trip(trip_id, identity.uid):
        raise NotFoundError("Trip not found or unauthorized")
    logger.info("Trip %s deleted", trip_id)
    return MessageResponse(message="Trip deleted successfully")


@router.post("/{trip_id}/gallery", response_model=GalleryImageResponse, status_code=status.HTTP_201_CREATED)
def add_gallery_image(
    trip_id: int,
    request: GalleryImageCreateRequest,
    repo: TripRepository = Depends(get_trip_repository),
    identity: Identity = Depends(get_current_identity),
) -> GalleryImageResponse:
    if not request.url or not request.path or not request.filename:
        raise ValidationError("URL, path, and filename are required")

    image = repo.add_gallery_image(
        trip_id,
        identity.uid,
        url=request.url,
        path=request.path,
        filename=request.filename,
        original_name=request.original_name,
        order_index=request.order_index,
    )
    if not image:
        raise NotFoundError("Trip not found or unauthorized")
    return GalleryImageResponse.model_validate(image)


@router.delete("/{trip_id}/gallery/{image_id}", response_model=MessageResponse)
def delete_gallery_image(
    trip_id: int,
    image_id: int,
    repo: TripRepository = Depends(get_trip_repository),
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    if not repo.delete_gallery_image(trip_id, image_id, identity.uid):
        raise NotFoundError("Gallery image not found or unauthorized")
    return MessageResponse(message="Gallery image deleted successfully")


@router.put("/{trip_id}/gallery/{image_id}/order", response_model=GalleryImageResponse)
def update_gallery_image_order(
    trip_id: int,
    image_id: int,
    request: GalleryImageOrderRequest,
    repo: TripRepository = Depends(get_trip_repository),
    identity: Identity = Depends(get_current_identity),
) -> GalleryImageResponse:
    if request.order_index is None:
        raise ValidationError("Order index is required")

    image = repo.update_gallery_image_order(trip_id, image_id, identity.uid, request.order_index)
    if not image:
        raise NotFoundError("Gallery image not found or unauthorized")
    return GalleryImageResponse.model_validate(image)

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    lat: float
    lng: float

    @classmethod
    def from_pair(cls, latitude: float | None, longitude: float | None) -> "Coordinates | None":
        """Derived view of a stored lat/lng pair; None unless both halves are present"""
        if latitude is None or longitude is None:
            return None
        return cls(lat=float(latitude), lng=float(longitude))


class CoordinatesInput(BaseModel):
    lat: float | None = None
    lng: float | None = None


class GalleryImageInput(BaseModel):
    url: str
    path: str
    filename: str
    original_name: str | None = None
    order_index: int | None = Field(None, description="Display position; defaults to the position in the submitted list")


class GalleryImageCreateRequest(BaseModel):
    """Single image appended to an existing trip; required fields are checked by the route"""

    url: str | None = None
    path: str | None = None
    filename: str | None = None
    original_name: str | None = None
    order_index: int | None = None


class GalleryImageOrderRequest(BaseModel):
    order_index: int | None = None


class GalleryImageResponse(BaseModel):
    id: int
    trip_id: int
    url: str
    path: str
    filename: str
    original_name: str | None = None
    order_index: int
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TripFields(BaseModel):
    """Fields shared by create and update payloads"""

    title: str | None = None
    destination: str | None = None
    country: str | None = None
    coordinates: CoordinatesInput | None = Field(None, description="Takes precedence over latitude/longitude")
    latitude: float | None = None
    longitude: float | None = None
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    images: list[str] | None = None
    is_public: bool | None = None
    cover_image: str | None = None
    cover_image_path: str | None = None
    gallery_images: list[GalleryImageInput] | None = None


class TripCreateRequest(TripFields):
    pass


class TripUpdateRequest(TripFields):
    """Partial update: omitted or null fields keep their stored value.

    `gallery_images` is the exception: sending the key at all (even `[]`)
    replaces the whole gallery.
    """

    @property
    def replaces_gallery(self) -> bool:
        return "gallery_images" in self.model_fields_set


class TripResponse(BaseModel):
    id: int
    user_id: int
    title: str
    destination: str
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = None
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    is_public: bool = False
    cover_image: str | None = None
    cover_image_path: str | None = None
    likes_count: int = 0
    created_at: datetime
    updated_at: datetime
    user_name: str | None = None
    coordinates: Coordinates | None = None
    gallery_images: list[GalleryImageResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_db_trip(cls, trip, gallery_images: list, user_name: str | None = None) -> "TripResponse":
        """Merge a Trip row with its gallery rows and the derived coordinates view

        Args:
            trip: Trip database model
            gallery_images: GalleryImage rows in display order
            user_name: owner's display name, when the query joined it
        """
        columns = {column.key: getattr(trip, column.key) for column in trip.__table__.columns}
        return cls(
            **columns,
            user_name=user_name,
            coordinates=Coordinates.from_pair(trip.latitude, trip.longitude),
            gallery_images=[GalleryImageResponse.model_validate(image) for image in gallery_images],
        )


class MessageResponse(BaseModel):
    message: str


class ReverseGeocodeRequest(BaseModel):
    latitude: float | None = None
    longitude: float | None = None


class ReverseGeocodeResponse(BaseModel):
    country: str | None = None
    country_code: str | None = Field(None, serialization_alias="countryCode")
    city: str | None = None
    locality: str | None = None


class UpdatedTripCountry(BaseModel):
    id: int
    country: str


class CountryBackfillResponse(BaseModel):
    message: str
    updated_trips: list[UpdatedTripCountry] = Field(serialization_alias="updatedTrips")

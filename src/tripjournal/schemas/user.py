from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProfileResponse(BaseModel):
    id: int
    auth_uid: str
    email: str | None = None
    display_name: str | None = None
    profile_image_url: str | None = None
    is_public: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateRequest(BaseModel):
    display_name: str | None = None
    profile_image_url: str | None = None
    is_public: bool | None = None


class UserStatsResponse(BaseModel):
    total_trips: int = 0
    countries_visited: int = 0
    total_likes: int = 0

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CommentCreateRequest(BaseModel):
    content: str | None = None


class CommentResponse(BaseModel):
    id: int
    trip_id: int
    user_id: int
    content: str
    created_at: datetime
    user_name: str | None = None
    profile_image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)

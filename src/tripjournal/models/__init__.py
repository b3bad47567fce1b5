from .comment import Comment
from .trip import GalleryImage, Trip
from .user import User

__all__ = ["Comment", "GalleryImage", "Trip", "User"]

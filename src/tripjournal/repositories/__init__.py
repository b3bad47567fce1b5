# Repositories package

from .base_repository import BaseRepository
from .comment_repository import CommentRepository
from .trip_repository import TripRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "CommentRepository",
    "TripRepository",
    "UserRepository",
]

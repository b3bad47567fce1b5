from sqlalchemy import select
from sqlalchemy.orm import Session

from tripjournal.models.user import User


class BaseRepository:
    """Base repository class with common database session functionality."""

    def __init__(self, db: Session):
        self.db = db

    def get_user_id(self, auth_uid: str) -> int | None:
        """Resolve an identity-provider subject id to the internal user id."""
        stmt = select(User.id).where(User.auth_uid == auth_uid)
        return self.db.execute(stmt).scalar_one_or_none()

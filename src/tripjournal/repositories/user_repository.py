import logging
from datetime import UTC, datetime

from sqlalchemy import distinct, func, select
from sqlalchemy.exc import IntegrityError

from tripjournal.models.trip import Trip
from tripjournal.models.user import User
from tripjournal.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    def get_user_by_auth_uid(self, auth_uid: str) -> User | None:
        stmt = select(User).where(User.auth_uid == auth_uid)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_user(self, auth_uid: str, email: str | None, display_name: str | None) -> User:
        user = User(auth_uid=auth_uid, email=email, display_name=display_name)
        self.db.add(user)
        try:
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise
        return user

    def get_or_create_user(self, auth_uid: str, email: str | None, name: str | None) -> User:
        """Return the profile for `auth_uid`, creating it from the token claims on first use."""
        user = self.get_user_by_auth_uid(auth_uid)
        if user:
            return user
        try:
            user = self.create_user(auth_uid, email, name or email)
            logger.info("Created profile for new user %s", user.id)
            return user
        except IntegrityError:
            # A concurrent request inserted the same identity first
            user = self.get_user_by_auth_uid(auth_uid)
            if user is None:
                raise
            return user

    def update_profile(
        self,
        auth_uid: str,
        display_name: str | None = None,
        profile_image_url: str | None = None,
        is_public: bool | None = None,
    ) -> User | None:
        user = self.get_user_by_auth_uid(auth_uid)
        if not user:
            return None
        if display_name is not None:
            user.display_name = display_name
        if profile_image_url is not None:
            user.profile_image_url = profile_image_url
        if is_public is not None:
            user.is_public = is_public
        user.updated_at = datetime.now(UTC)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_stats(self, auth_uid: str) -> dict[str, int]:
        stmt = (
            select(
                func.count(Trip.id),
                func.count(distinct(Trip.country)),
                func.coalesce(func.sum(Trip.likes_count), 0),
            )
            .select_from(Trip)
            .join(User, Trip.user_id == User.id)
            .where(User.auth_uid == auth_uid)
        )
        total_trips, countries_visited, total_likes = self.db.execute(stmt).one()
        return {
            "total_trips": int(total_trips or 0),
            "countries_visited": int(countries_visited or 0),
            "total_likes": int(total_likes or 0),
        }

from sqlalchemy import delete, select

from tripjournal.models.comment import Comment
from tripjournal.models.trip import Trip
from tripjournal.models.user import User
from tripjournal.repositories.base_repository import BaseRepository


class CommentRepository(BaseRepository):
    def get_comments_for_trip(self, trip_id: int) -> list[tuple[Comment, str | None, str | None]]:
        """Comments of a trip with the commenter's name and avatar, newest first."""
        stmt = (
            select(Comment, User.display_name, User.profile_image_url)
            .join(User, Comment.user_id == User.id)
            .where(Comment.trip_id == trip_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return [(comment, name, avatar) for comment, name, avatar in self.db.execute(stmt).all()]

    def trip_exists(self, trip_id: int) -> bool:
        return self.db.execute(select(Trip.id).where(Trip.id == trip_id)).scalar_one_or_none() is not None

    def create_comment(self, trip_id: int, user_id: int, content: str) -> Comment:
        comment = Comment(trip_id=trip_id, user_id=user_id, content=content)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def delete_comment(self, comment_id: int, auth_uid: str) -> bool:
        """Delete a comment if `auth_uid` wrote it; missing and foreign comments both return False."""
        author_id = select(User.id).where(User.auth_uid == auth_uid).scalar_subquery()
        stmt = delete(Comment).where(Comment.id == comment_id, Comment.user_id == author_id).returning(Comment.id)
        deleted = self.db.execute(stmt).scalar_one_or_none()
        self.db.commit()
        return deleted is not None

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tripjournal.auth_utils import Identity, get_current_identity
from tripjournal.errors import NotFoundError
from tripjournal.models.db import get_db
from tripjournal.repositories.comment_repository import CommentRepository
from tripjournal.schemas.comment import CommentCreateRequest, CommentResponse
from tripjournal.schemas.trip import MessageResponse
from tripjournal.validation import require_text

router = APIRouter(prefix="/comments", tags=["comments"])
logger = logging.getLogger(__name__)


def get_comment_repository(db: Session = Depends(get_db)) -> CommentRepository:
    return CommentRepository(db)


@router.get("/trips/{trip_id}", response_model=list[CommentResponse])
def list_comments(trip_id: int, repo: CommentRepository = Depends(get_comment_repository)) -> list[CommentResponse]:
    return [
        CommentResponse(
            id=comment.id,
            trip_id=comment.trip_id,
            user_id=comment.user_id,
            content=comment.content,
            created_at=comment.created_at,
            user_name=user_name,
            profile_image_url=profile_image_url,
        )
        for comment, user_name, profile_image_url in repo.get_comments_for_trip(trip_id)
    ]


@router.post("/trips/{trip_id}", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    trip_id: int,
    request: CommentCreateRequest,
    repo: CommentRepository = Depends(get_comment_repository),
    identity: Identity = Depends(get_current_identity),
) -> CommentResponse:
    content = require_text(request.content, "Comment content is required")

    user_id = repo.get_user_id(identity.uid)
    if user_id is None:
        raise NotFoundError("User not found")
    if not repo.trip_exists(trip_id):
        raise NotFoundError("Trip not found")

    comment = repo.create_comment(trip_id, user_id, content)
    return CommentResponse.model_validate(comment)


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    repo: CommentRepository = Depends(get_comment_repository),
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    if not repo.delete_comment(comment_id, identity.uid):
        raise NotFoundError("Comment not found or unauthorized")
    logger.info("Comment %s deleted", comment_id)
    return MessageResponse(message="Comment deleted successfully")

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tripjournal.auth_utils import Identity, get_current_identity
from tripjournal.errors import NotFoundError
from tripjournal.models.db import get_db
from tripjournal.repositories.user_repository import UserRepository
from tripjournal.schemas.user import ProfileResponse, ProfileUpdateRequest, UserStatsResponse

router = APIRouter(prefix="/users", tags=["users"])


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


@router.get("/profile", response_model=ProfileResponse)
def get_profile(repo: UserRepository = Depends(get_user_repository), identity: Identity = Depends(get_current_identity)):
    return repo.get_or_create_user(identity.uid, identity.email, identity.name)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(req: ProfileUpdateRequest, repo: UserRepository = Depends(get_user_repository), identity: Identity = Depends(get_current_identity)):
    user = repo.update_profile(identity.uid, display_name=req.display_name, profile_image_url=req.profile_image_url, is_public=req.is_public)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("/stats", response_model=UserStatsResponse)
def get_stats(repo: UserRepository = Depends(get_user_repository), identity: Identity = Depends(get_current_identity)):
    return UserStatsResponse(**repo.get_stats(identity.uid))

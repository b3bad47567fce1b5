from fastapi import APIRouter, Depends

from tripjournal.auth_utils import Identity, get_current_identity
from tripjournal.schemas.auth import VerifiedUser, VerifyResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/verify", response_model=VerifyResponse)
def verify_token(identity: Identity = Depends(get_current_identity)):
    return VerifyResponse(valid=True, user=VerifiedUser(uid=identity.uid, email=identity.email, name=identity.name))

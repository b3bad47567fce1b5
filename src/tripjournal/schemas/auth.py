from pydantic import BaseModel


class VerifiedUser(BaseModel):
    uid: str
    email: str | None = None
    name: str | None = None


class VerifyResponse(BaseModel):
    valid: bool = True
    user: VerifiedUser

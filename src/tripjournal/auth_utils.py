import logging
from functools import lru_cache

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

GOOGLE_SECURE_TOKEN_JWKS = "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"


class AuthSettings(BaseSettings):
    """Settings for verifying identity-provider tokens, loaded from environment variables."""

    jwt_algorithm: str = "RS256"
    jwks_url: str = GOOGLE_SECURE_TOKEN_JWKS
    # Identity provider project; enables audience and issuer checks when set
    project_id: str = ""
    # Only used with HS* algorithms (local development and tests)
    jwt_secret_key: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="AUTH_", extra="ignore")

    @property
    def issuer(self) -> str | None:
        return f"https://securetoken.google.com/{self.project_id}" if self.project_id else None


class Identity(BaseModel):
    uid: str
    email: str | None = None
    name: str | None = None


class IdentityVerifier:
    """Validates bearer tokens issued by the external identity provider."""

    def __init__(self, settings: AuthSettings):
        self.settings = settings
        self._jwks_client = None if self._uses_shared_secret else jwt.PyJWKClient(settings.jwks_url)

    @property
    def _uses_shared_secret(self) -> bool:
        return self.settings.jwt_algorithm.upper().startswith("HS")

    def _signing_key(self, token: str):
        if self._jwks_client is None:
            return self.settings.jwt_secret_key
        return self._jwks_client.get_signing_key_from_jwt(token).key

    def verify(self, token: str) -> Identity:
        """Decode and verify `token`, returning the normalized claims.

        Raises:
            jwt.ExpiredSignatureError: the token has expired
            jwt.PyJWTError: any other verification failure
        """
        options = {"verify_aud": bool(self.settings.project_id)}
        payload = jwt.decode(
            token,
            self._signing_key(token),
            algorithms=[self.settings.jwt_algorithm],
            audience=self.settings.project_id or None,
            issuer=self.settings.issuer,
            options=options,
        )
        uid = payload.get("sub") or payload.get("user_id")
        if not uid:
            raise jwt.InvalidTokenError("Token has no subject")
        return Identity(uid=str(uid), email=payload.get("email"), name=payload.get("name"))


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    return AuthSettings()


@lru_cache(maxsize=1)
def get_identity_verifier() -> IdentityVerifier:
    return IdentityVerifier(get_auth_settings())


security = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    # Handle missing authentication header with consistent 401 status
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        return verifier.verify(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired") from None
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid token") from None

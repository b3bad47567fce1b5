from datetime import UTC, datetime, timedelta

import jwt

TEST_JWT_SECRET = "trip-journal-test-secret-key-32-bytes-minimum"


def make_token(uid: str | None, email: str | None = None, name: str | None = None, expires_in: int = 3600) -> str:
    """Sign an HS256 token shaped like the identity provider's ID tokens."""
    payload: dict = {"exp": datetime.now(UTC) + timedelta(seconds=expires_in)}
    if uid is not None:
        payload["sub"] = uid
    if email is not None:
        payload["email"] = email
    if name is not None:
        payload["name"] = name
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


def auth_headers(uid: str | None, email: str | None = None, name: str | None = None, expires_in: int = 3600) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(uid, email=email, name=name, expires_in=expires_in)}"}

"""Password hashing and JWT tokens.

Access tokens carry the account's display name and role so clients can show
who is signed in without another request. Refresh tokens carry only the id.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from courtdesk.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: dict, lifetime: timedelta) -> str:
    payload = {**claims, "exp": datetime.now(UTC) + lifetime}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, name: str, role: str) -> str:
    return _encode(
        {"sub": str(user_id), "type": ACCESS, "name": name, "role": role},
        timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(user_id: int) -> str:
    return _encode(
        {"sub": str(user_id), "type": REFRESH},
        timedelta(days=settings.refresh_token_expire_days),
    )


def decode_token(token: str, expected_type: str) -> int:
    """Validate a token of the given type and return the user id it names.

    Raises JWTError for a bad signature, an expired token, the wrong token
    type or a missing subject.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    try:
        return int(payload["sub"])
    except (KeyError, ValueError):
        raise JWTError("Token has no valid subject") from None

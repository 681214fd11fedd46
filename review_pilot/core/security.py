"""Security utilities: password hashing, JWT issuance and verification, roles."""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from ..models import UserRole
from .config import Settings, get_settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

ROLE_HIERARCHY = {
    UserRole.USER: 0,
    UserRole.MANAGER: 1,
    UserRole.ADMIN: 2,
}


# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@lru_cache
def _hashing_context(rounds: int) -> CryptContext:
    return pwd_context.copy(bcrypt__rounds=rounds)


@lru_cache
def _dummy_hash(rounds: int) -> str:
    # Verified against when the email is unknown, so that path costs a bcrypt check too
    return _hashing_context(rounds).hash("review-pilot-timing-equalizer")


def hash_password(password: str, settings: Settings | None = None) -> str:
    """Hash a password using bcrypt at the configured cost."""
    settings = settings or get_settings()
    return _hashing_context(settings.bcrypt_rounds).hash(password)


def verify_password(
    plain_password: str,
    hashed_password: str | None,
    settings: Settings | None = None,
) -> bool:
    """Verify a password against its hash. A missing hash never verifies."""
    if not hashed_password:
        rounds = (settings or get_settings()).bcrypt_rounds
        pwd_context.verify(plain_password, _dummy_hash(rounds))
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash could not be parsed")
        return False


# JWT Token handling
class TokenPayload(BaseModel):
    """Claims carried by a session token."""

    user_id: int
    email: str
    role: UserRole
    exp: datetime
    iat: datetime


def generate_token(
    user_id: int,
    email: str,
    role: UserRole | str,
    expires_delta: timedelta | None = None,
    secret: str | None = None,
    settings: Settings | None = None,
) -> str:
    """Create a signed session token (7 days unless told otherwise)."""
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.jwt_expires_days))

    payload = {
        "user_id": user_id,
        "email": email,
        "role": UserRole(role).value,
        "exp": expire,
        "iat": now,
    }

    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_token(
    token: str,
    secret: str | None = None,
    settings: Settings | None = None,
) -> TokenPayload | None:
    """Decode and validate a token.

    Bad signature, expiry and garbage input all return None.
    """
    if secret is None:
        secret = (settings or get_settings()).jwt_secret
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
        return TokenPayload(**payload)
    except (jwt.InvalidTokenError, ValidationError, TypeError) as e:
        logger.debug(f"Token rejected: {type(e).__name__}")
        return None


# Role-based access control
def has_role(role: UserRole | str, required: UserRole | str) -> bool:
    """True when ``role`` sits at or above ``required`` in the hierarchy.

    Unknown role names rank as ``user``.
    """
    def level(value: UserRole | str) -> int:
        try:
            return ROLE_HIERARCHY[UserRole(value)]
        except ValueError:
            return 0

    return level(role) >= level(required)


def is_admin(role: UserRole | str) -> bool:
    return role == UserRole.ADMIN


def is_manager(role: UserRole | str) -> bool:
    return has_role(role, UserRole.MANAGER)

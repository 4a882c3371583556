"""Security utilities: password hashing and bearer token helpers."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings
from app.core.errors import Unauthenticated

logger = logging.getLogger(__name__)

settings = get_settings()

# ── Password hashing (Argon2) ────────────────────────────────

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ── JWT ───────────────────────────────────────────────────────

def create_jwt(
    subject: str,
    tenant_id: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": subject,
        "tid": tenant_id,
        "role": role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jose.JWTError on failure."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def verify_token(token: str | None) -> uuid.UUID:
    """Verify a bearer token and return the principal id it names.

    Signature and ``exp`` are checked against this process's key and clock;
    ``tid`` and ``role`` claims are informational only and are ignored here.
    Raises Unauthenticated when the token is absent, malformed, expired,
    badly signed, or has no usable subject.
    """
    if not token:
        raise Unauthenticated("Missing bearer token")

    try:
        payload = decode_jwt(token)
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise Unauthenticated("Invalid or expired token") from exc

    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise Unauthenticated("Malformed token payload") from exc

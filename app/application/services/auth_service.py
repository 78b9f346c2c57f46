"""Auth service: admin JWT tokens, password hashing and the shared update secret."""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import get_settings
from app.core.exceptions import ForbiddenException
from app.domain.schemas.auth import AdminRead

logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Not a recognizable hash (misconfigured ADMIN_PASSWORD_HASH)
        logger.warning("Admin password hash is not valid")
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def authenticate_admin(username: str, password: str) -> Optional[AdminRead]:
    """Check credentials against ADMIN_USERNAME / ADMIN_PASSWORD_HASH."""
    settings = get_settings()
    if username.strip().lower() != settings.ADMIN_USERNAME.lower():
        return None
    if not verify_password(password, settings.ADMIN_PASSWORD_HASH):
        return None
    return AdminRead(username=settings.ADMIN_USERNAME)


def verify_admin_secret(secret: Optional[str]) -> None:
    """
    Check the shared secret of the direct update endpoint.

    Raises ForbiddenException on mismatch. An unset ADMIN_SECRET rejects
    every call.
    """
    expected = get_settings().ADMIN_SECRET
    if not expected or not secret or not hmac.compare_digest(secret.encode(), expected.encode()):
        logger.warning("Direct update rejected: secret mismatch")
        raise ForbiddenException("No autorizado")

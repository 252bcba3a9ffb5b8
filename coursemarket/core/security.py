"""
Password hashing and bearer token handling.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from coursemarket.config import settings
from coursemarket.core.exceptions import InvalidToken
from coursemarket.schemas.user import Identity


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    """
    Hash a password with bcrypt. Each call uses a fresh salt.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plain password against a stored hash.

    Returns False on mismatch and on hashes passlib cannot parse.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a claim set, adding expiry and issued-at times.

    Args:
        data: Claims to encode
        expires_delta: Lifetime of the token, ACCESS_TOKEN_EXPIRE_MINUTES by default

    Returns:
        str: The encoded JWT
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = dict(data)
    to_encode.update({"exp": now + expires_delta, "iat": now})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def issue_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a bearer token for anything with ``id`` and ``role``."""
    role = getattr(user.role, "value", user.role)
    return create_access_token(
        data={"sub": str(user.id), "id": user.id, "role": role},
        expires_delta=expires_delta,
    )


def verify_token(token: str) -> Identity:
    """
    Decode a bearer token into the identity it was issued for.

    Raises:
        InvalidToken: bad signature, malformed or expired token, or claims
            that do not describe a known user role
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    try:
        return Identity(id=payload.get("id"), role=payload.get("role"))
    except ValidationError as exc:
        raise InvalidToken("Token claims do not describe a user") from exc

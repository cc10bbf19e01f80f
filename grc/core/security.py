"""
Security utilities: password hashing and JWT tokens.
"""
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from grc.core.config import Settings
from grc.core.errors import Unauthenticated


@lru_cache
def get_pwd_context(rounds: int = 12) -> CryptContext:
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=rounds,
    )


def verify_password(plain_password: str, hashed_password: str, settings: Settings) -> bool:
    """Verify a password against its hash."""
    return get_pwd_context(settings.BCRYPT_ROUNDS).verify(plain_password, hashed_password)


def dummy_verify(settings: Settings) -> None:
    """Spend the same time as a real verify when the account does not exist."""
    get_pwd_context(settings.BCRYPT_ROUNDS).dummy_verify()


def get_password_hash(password: str, settings: Settings) -> str:
    return get_pwd_context(settings.BCRYPT_ROUNDS).hash(password)


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": now + expires_delta, "iat": now})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> dict:
    """Decode and validate JWT token; signature and expiry are both checked."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise Unauthenticated("Invalid or expired token")

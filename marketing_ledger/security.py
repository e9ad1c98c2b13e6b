"""
Security utilities: password hashing and JWT tokens.

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext
   - passlib's CryptContext wraps Argon2id; deprecated="auto" lets a
     future scheme take over while old hashes still verify

2. JWT TOKENS
   - After login the user receives a signed JWT whose "sub" is the user id
   - Signed with SECRET_KEY using ALGORITHM (HS256 by default)
   - Tokens expire after ACCESS_TOKEN_EXPIRE_MINUTES
"""

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from marketing_ledger.config import settings


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time check of a plaintext password against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------

def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to encode (must include "sub").
        expires_delta: Optional custom lifetime. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.

    Raises:
        JWTError: If the token is expired, tampered with, or invalid.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

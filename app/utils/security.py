from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from app.config import get_settings

settings = get_settings()

password_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return password_ctx.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return password_ctx.verify(password, hashed)


def create_access_token(user_id: int, email: str, role: str) -> str:
    """Issue a signed access token for the given user."""
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_EXPIRES_MINUTES)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "exp": expires,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        jwt.PyJWTError: If the token is malformed, tampered with or expired
    """
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])

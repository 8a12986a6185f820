"""
Password hashing and bearer-token helpers
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt

from elearning.config import settings


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def sign_token(payload: Dict[str, Any]) -> str:
    """Issue a signed access token carrying the given claims"""
    claims = dict(payload)
    claims["exp"] = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify an access token

    Raises:
        jwt.InvalidTokenError: bad signature, malformed or expired token
    """
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])

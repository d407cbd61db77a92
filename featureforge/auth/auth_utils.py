import logging
import secrets
from datetime import datetime, timedelta

from fastapi import HTTPException
from jose import jwt
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from featureforge.config.settings import settings

# Reduce passlib noise
logging.getLogger("passlib").setLevel(logging.ERROR)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto"
)

# ---------------- PASSWORD HASHING ---------------- #

def hash_password(password: str) -> str:
    """
    Hashes a password using the configured context.

    Args:
        password: The plain text password

    Returns:
        str: The hashed password
    """
    return pwd_context.hash(password[:72])

def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verifies a plain password against a hash.

    Raises:
        HTTPException: If hash in database is invalid/unknown
    """
    try:
        return pwd_context.verify(password[:72], hashed_password)
    except UnknownHashError:
        raise HTTPException(
            status_code=500,
            detail="Invalid password hash stored in database"
        )

def generate_temporary_password() -> str:
    """Random password for accounts created through a team invitation."""
    return secrets.token_urlsafe(16)

# ---------------- JWT TOKEN ---------------- #

def create_access_token(data: dict):
    """
    Creates a JWT access token with expiration.

    Args:
        data: Payload data to include in the token

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )

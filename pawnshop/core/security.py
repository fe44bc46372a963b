from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from typing import Optional, Dict, Any
from pawnshop.core.config import Settings, settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Validates that a password meets minimum length requirements
def is_valid_password(password: str) -> bool:
    return len(password) >= 8

# Hashes a password using bcrypt after validating its length
def hash_password(password: str) -> str:
    if not is_valid_password(password):
        raise ValueError("Password must be at least 8 characters long")

    try:
        return pwd_context.hash(password)
    except Exception as e:
        raise ValueError("Failed to hash password") from e

# Verifies a plain password against its hashed version
def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(password, hashed_password)
    except (ValueError, TypeError):
        return False

# Creates a signed JWT for a user; sub carries the user id.
# `jwt_settings` defaults to the environment settings.
def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    jwt_settings: Optional[Settings] = None,
) -> str:
    config = jwt_settings or settings
    try:
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)
    except JWTError as e:
        raise ValueError("Failed to create access token") from e

# Decodes and validates a JWT returning its payload, or None when invalid or expired
def decode_token(token: str, jwt_settings: Optional[Settings] = None) -> Optional[Dict[str, Any]]:
    config = jwt_settings or settings
    try:
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        return None

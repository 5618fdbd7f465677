from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from hrmaster.core.config import settings
import hashlib
import hmac
import secrets


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    if not hashed_password or not hashed_password.startswith("sha256$"):
        return False
    parts = hashed_password.split("$")
    if len(parts) != 3:
        return False
    salt = parts[1]
    return hmac.compare_digest(hash_password(plain_password, salt), hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using SHA256 with salt"""
    salt = secrets.token_hex(16)
    return hash_password(password, salt)


def hash_password(password: str, salt: str) -> str:
    """Hash password with salt using SHA256"""
    salted_password = salt + password
    hashed = hashlib.sha256(salted_password.encode()).hexdigest()
    return f"sha256${salt}${hashed}"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "type": "access",
        "iat": datetime.utcnow()
    })

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def verify_token(token: str):
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None

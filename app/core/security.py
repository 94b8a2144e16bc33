import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _truncate(value: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return value.encode('utf-8')[:72].decode('utf-8', errors='ignore')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_truncate(plain_password), hashed_password)

def verify_otp(plain_otp: str, hashed_otp: Optional[str]) -> bool:
    if not hashed_otp:
        return False
    return pwd_context.verify(_truncate(plain_otp), hashed_otp)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(_truncate(password))

def get_otp_hash(otp: str) -> str:
    return pwd_context.hash(_truncate(otp))

def generate_otp() -> str:
    """Six digit one-time code."""
    return str(secrets.randbelow(1000000)).zfill(6)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    return encoded_jwt


def verify_token(token: str):
    """Return ``(payload, error)`` where error is None, "expired" or "invalid"."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        return payload, None
    except ExpiredSignatureError:
        return None, "expired"
    except JWTError:
        return None, "invalid"

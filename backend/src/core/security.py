"""
Güvenlik yardımcıları
Şifre hash'leme ve JWT üretimi
"""
from datetime import datetime, timezone, timedelta
import jwt
from passlib.context import CryptContext

from core.config import settings


# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Şifreyi hashle"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Şifreyi doğrula"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str) -> tuple[str, int]:
    """
    Access token oluştur
    Returns: (token, expires_in_seconds)
    """
    expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)

    payload = {
        "sub": user_id,
        "type": "access",
        "exp": now + expires_delta,
        "iat": now
    }

    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def decode_access_token(token: str) -> dict:
    """
    Access token'ı çöz
    jwt.ExpiredSignatureError ve jwt.InvalidTokenError fırlatabilir
    """
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("sub") is None or payload.get("type") != "access":
        raise jwt.InvalidTokenError("Geçersiz token tipi")
    return payload

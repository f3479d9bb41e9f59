"""
FastAPI Dependencies
JWT doğrulama, kullanıcı bilgisi çekme, rol kontrolü
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorDatabase
import jwt

from db.mongo import Collections, get_db
from core.security import decode_access_token
from models.user import UserRole
from services.realtime import RealtimeNotifier, get_notifier

__all__ = [
    "get_db", "get_notifier", "RealtimeNotifier", "get_current_user",
    "require_role", "require_admin", "ensure_self_or_admin", "is_admin",
]


# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncIOMotorDatabase = Depends(get_db)
) -> dict:
    """
    JWT token'dan mevcut kullanıcıyı al
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Kimlik doğrulama başarısız",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token süresi dolmuş",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise credentials_exception

    # Kullanıcıyı veritabanından al
    user = await db[Collections.USERS].find_one({"id": payload["sub"]}, {"_id": 0, "password": 0})
    if user is None:
        raise credentials_exception

    if not user.get("is_active", True):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Kullanıcı hesabı devre dışı"
        )

    return user


def is_admin(user: dict) -> bool:
    return user.get("role") == UserRole.ADMIN.value


def require_role(role: UserRole):
    """
    Belirli bir role sahip olma gereksinimi

    Kullanım:
    @router.delete("/{user_id}")
    async def delete_user(
        current_user: dict = Depends(require_role(UserRole.ADMIN))
    ):
        ...
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") != role.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Bu işlem için yetkiniz yok"
            )
        return current_user

    return role_checker


require_admin = require_role(UserRole.ADMIN)


def ensure_self_or_admin(current_user: dict, user_id: str) -> None:
    """Kullanıcı yalnızca kendi kaydında işlem yapabilir (yönetici hariç)"""
    if current_user["id"] != user_id and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Bu işlem için yetkiniz yok"
        )

"""
Authentication API
Login, logout, mevcut kullanıcı
"""
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from typing import Optional
from datetime import datetime, timezone
import logging

from api.v1.deps import get_current_user, get_db
from core.errors import ServiceError
from core.security import create_access_token, verify_password
from db.mongo import Collections
from models.activity import ActivityType
from models.user import UserOut
from services.activity_service import ActivityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# Models
class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    msg: str = "Giriş başarılı"
    token: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    role: str
    user_id: str
    user: UserOut


# Endpoints
@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Kullanıcı girişi (e-posta veya kullanıcı adı)
    """
    if not login_data.email or not login_data.password:
        raise ServiceError("Email ve şifre gereklidir")

    identifier = login_data.email.strip().lower()
    user = await db[Collections.USERS].find_one(
        {"$or": [{"email": identifier}, {"username": identifier}]}, {"_id": 0}
    )
    if not user or not verify_password(login_data.password, user["password"]):
        logger.info(f"Başarısız giriş denemesi: {identifier}")
        raise ServiceError("Geçersiz email veya şifre")

    if not user.get("is_active", True):
        raise ServiceError("Kullanıcı hesabı devre dışı")

    access_token, expires_in = create_access_token(user["id"])

    # Son giriş zamanını güncelle
    now = datetime.now(timezone.utc)
    await db[Collections.USERS].update_one(
        {"id": user["id"]},
        {"$set": {"last_login": now, "last_seen": now}}
    )
    await ActivityService(db).record(
        "Giriş yapıldı",
        activity_type=ActivityType.LOGIN,
        user=user["id"],
    )
    user["last_login"] = now

    logger.info(f"Giriş: {user['email']}")
    return LoginResponse(
        token=access_token,
        access_token=access_token,
        expires_in=expires_in,
        role=user["role"],
        user_id=user["id"],
        user=UserOut(**user),
    )


@router.get("/me", response_model=UserOut)
async def get_current_user_info(current_user: dict = Depends(get_current_user)):
    """
    Mevcut kullanıcı bilgilerini getir
    """
    return current_user


@router.post("/logout")
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Çıkış yap (token istemci tarafında silinir)
    """
    await ActivityService(db).record(
        "Çıkış yapıldı",
        activity_type=ActivityType.LOGOUT,
        user=current_user["id"],
    )
    return {"msg": "Çıkış başarılı"}

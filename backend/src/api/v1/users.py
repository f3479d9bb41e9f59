"""
Kullanıcı API
Kullanıcı yönetimi, şifre, avatar, dürtme, analiz ve başarılar
"""
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List

from api.v1.deps import (
    ensure_self_or_admin, get_current_user, get_db, get_notifier, is_admin, require_admin, RealtimeNotifier
)
from models.user import (
    Achievement, NudgeRequest, PasswordChange, UserAnalytics, UserCreate, UserOut, UserUpdate
)
from services.user_service import UserService


router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(
    db: AsyncIOMotorDatabase = Depends(get_db),
    notifier: RealtimeNotifier = Depends(get_notifier)
) -> UserService:
    return UserService(db, notifier)


@router.get("/", response_model=List[UserOut])
async def list_users(
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return await service.list_users()


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return await service.get_user(user_id)


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """
    Yeni kullanıcı (sadece yönetici)
    """
    return await service.create_user(user_data, created_by=current_user["id"])


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """
    Profil güncelleme
    Rol ve aktiflik sadece yönetici tarafından değiştirilebilir
    """
    ensure_self_or_admin(current_user, user_id)
    if not is_admin(current_user) and (user_data.role is not None or user_data.is_active is not None):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Rol değiştirme yetkiniz yok"
        )
    return await service.update_user(user_id, user_data)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    await service.delete_user(user_id)
    return {"msg": "Kullanıcı silindi"}


@router.put("/{user_id}/password")
async def change_password(
    user_id: str,
    password_data: PasswordChange,
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    ensure_self_or_admin(current_user, user_id)
    await service.change_password(user_id, password_data)
    return {"msg": "Şifre başarıyla değiştirildi"}


@router.post("/{user_id}/avatar", response_model=UserOut)
async def upload_avatar(
    user_id: str,
    avatar: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """
    Profil resmi yükle
    """
    ensure_self_or_admin(current_user, user_id)
    content = await avatar.read()
    return await service.update_avatar(user_id, avatar.filename, content)


@router.post("/{user_id}/nudge")
async def nudge_user(
    user_id: str,
    nudge_data: NudgeRequest,
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """
    Personeli dürt
    """
    return await service.nudge(user_id, current_user, nudge_data)


@router.get("/{user_id}/analytics", response_model=UserAnalytics)
async def get_user_analytics(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    ensure_self_or_admin(current_user, user_id)
    return await service.analytics(user_id)


@router.get("/{user_id}/achievements", response_model=List[Achievement])
async def get_user_achievements(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return await service.achievements(user_id)

"""
Bildirim API
Aktivite kayıtlarının bildirim görünümü
"""
from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List

from api.v1.deps import ensure_self_or_admin, get_current_user, get_db, is_admin
from models.activity import NotificationOut
from services.activity_service import ActivityService


router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_activity_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> ActivityService:
    return ActivityService(db)


@router.get("/{user_id}", response_model=List[NotificationOut])
async def list_notifications(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    current_user: dict = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service)
):
    ensure_self_or_admin(current_user, user_id)
    return await service.notifications_for_user(user_id, limit)


@router.get("/{user_id}/unread-count")
async def get_unread_count(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service)
):
    ensure_self_or_admin(current_user, user_id)
    return {"count": await service.unread_count(user_id)}


@router.put("/{user_id}/read-all")
async def mark_all_read(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service)
):
    ensure_self_or_admin(current_user, user_id)
    updated = await service.mark_all_read(user_id)
    return {"msg": "Tüm bildirimler okundu olarak işaretlendi", "updated": updated}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service)
):
    await service.mark_read(notification_id, None if is_admin(current_user) else current_user["id"])
    return {"msg": "Bildirim okundu olarak işaretlendi"}


@router.delete("/{user_id}/delete-read")
async def delete_read(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service)
):
    ensure_self_or_admin(current_user, user_id)
    deleted = await service.delete_read(user_id)
    return {"msg": f"{deleted} okunmuş bildirim silindi", "deleted": deleted}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service)
):
    await service.delete(notification_id, None if is_admin(current_user) else current_user["id"])
    return {"msg": "Bildirim silindi"}

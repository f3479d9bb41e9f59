"""
Aktivite Servisi
Tüm modüllerin kullandığı ortak denetim kaydı ve bildirim kaynağı
"""
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import uuid
import logging

from core.errors import NotFoundError
from core.utils import as_utc
from db.mongo import Collections
from models.activity import (
    ActivityType, NOTIFICATION_KINDS, NotificationOut, format_notification_time
)

logger = logging.getLogger(__name__)


class ActivityService:
    """Aktivite / bildirim iş mantığı"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.ACTIVITIES]

    # ========================================================================
    # KAYIT
    # ========================================================================

    async def record(
        self,
        action: str,
        activity_type: ActivityType = ActivityType.OTHER,
        user: Optional[str] = None,
        related_user: Optional[str] = None,
        related_task: Optional[str] = None,
        related_process: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> dict:
        """Yeni aktivite kaydı oluştur"""
        doc = {
            "id": str(uuid.uuid4()),
            "action": action,
            "message": message or action,
            "user": user,
            "related_user": related_user,
            "related_task": related_task,
            "related_process": related_process,
            "activity_type": ActivityType(activity_type).value,
            "details": details,
            "metadata": metadata or {},
            "read": False,
            "created_at": datetime.now(timezone.utc),
        }
        await self.collection.insert_one(doc)
        doc.pop("_id", None)

        logger.debug(f"Aktivite kaydedildi: {doc['activity_type']} ({action})")
        return doc

    # ========================================================================
    # SORGULAR
    # ========================================================================

    @staticmethod
    def _user_filter(user_id: str) -> dict:
        return {"$or": [{"related_user": user_id}, {"user": user_id}]}

    async def list_for_user(self, user_id: str, limit: int = 50) -> List[dict]:
        """Kullanıcıyı ilgilendiren aktiviteler (yeniden eskiye)"""
        cursor = self.collection.find(self._user_filter(user_id), {"_id": 0})
        cursor = cursor.sort("created_at", -1).limit(limit)
        return await cursor.to_list(length=limit)

    async def notifications_for_user(self, user_id: str, limit: int = 50) -> List[NotificationOut]:
        """Aktiviteleri bildirim formatına çevir"""
        activities = await self.list_for_user(user_id, limit)

        sender_ids = {a["user"] for a in activities if a.get("user")}
        senders: Dict[str, dict] = {}
        if sender_ids:
            users = await self.db[Collections.USERS].find(
                {"id": {"$in": list(sender_ids)}},
                {"_id": 0, "id": 1, "name": 1, "email": 1, "avatar": 1}
            ).to_list(length=len(sender_ids))
            senders = {u["id"]: u for u in users}

        notifications = []
        for activity in activities:
            try:
                activity_type = ActivityType(activity.get("activity_type", "other"))
            except ValueError:
                activity_type = ActivityType.OTHER

            kind, title = NOTIFICATION_KINDS.get(
                activity_type, ("info", activity.get("action") or "Bildirim")
            )
            created_at = as_utc(activity["created_at"])

            notifications.append(NotificationOut(
                id=activity["id"],
                type=kind,
                title=title,
                message=activity.get("message") or activity.get("action", ""),
                read=activity.get("read", False),
                created_at=created_at,
                time_ago=format_notification_time(created_at),
                sender=senders.get(activity.get("user")),
                task_id=activity.get("related_task"),
                metadata=activity.get("metadata") or {},
            ))

        return notifications

    async def unread_count(self, user_id: str) -> int:
        """Okunmamış bildirim sayısı"""
        return await self.collection.count_documents(
            {**self._user_filter(user_id), "read": False}
        )

    # ========================================================================
    # GÜNCELLEME / SİLME
    # ========================================================================

    async def get(self, activity_id: str) -> dict:
        activity = await self.collection.find_one({"id": activity_id}, {"_id": 0})
        if not activity:
            raise NotFoundError("Bildirim bulunamadı")
        return activity

    def _owned(self, activity_id: str, owner_id: Optional[str]) -> dict:
        query = {"id": activity_id}
        if owner_id:
            query.update(self._user_filter(owner_id))
        return query

    async def mark_read(self, activity_id: str, owner_id: Optional[str] = None) -> None:
        """Bildirimi okundu işaretle; owner_id verilirse sadece o kullanıcının bildirimi"""
        result = await self.collection.update_one(self._owned(activity_id, owner_id), {"$set": {"read": True}})
        if result.matched_count == 0:
            raise NotFoundError("Bildirim bulunamadı")

    async def mark_all_read(self, user_id: str) -> int:
        """Kullanıcının tüm bildirimlerini okundu işaretle"""
        result = await self.collection.update_many(
            self._user_filter(user_id), {"$set": {"read": True}}
        )
        return result.modified_count

    async def delete(self, activity_id: str, owner_id: Optional[str] = None) -> None:
        """Bildirimi sil"""
        result = await self.collection.delete_one(self._owned(activity_id, owner_id))
        if result.deleted_count == 0:
            raise NotFoundError("Bildirim bulunamadı")

    async def delete_read(self, user_id: str) -> int:
        """Okunmuş bildirimleri sil"""
        result = await self.collection.delete_many(
            {**self._user_filter(user_id), "read": True}
        )
        return result.deleted_count

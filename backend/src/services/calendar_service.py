"""
Takvim Servisi
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import uuid
import logging

from core.errors import NotFoundError, ServiceError
from core.utils import as_utc
from db.mongo import Collections
from models.calendar_event import CalendarEventCreate, CalendarEventUpdate, EventStatus

logger = logging.getLogger(__name__)


class CalendarService:
    """Takvim etkinlikleri CRUD"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.CALENDAR_EVENTS]

    async def get_event(self, event_id: str) -> dict:
        event = await self.collection.find_one({"id": event_id}, {"_id": 0})
        if not event:
            raise NotFoundError("Etkinlik bulunamadı")
        return event

    async def list_events(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        assigned_personnel: Optional[str] = None
    ) -> List[dict]:
        query = {"assigned_personnel": assigned_personnel} if assigned_personnel else {}
        events = await self.collection.find(query, {"_id": 0}).to_list(length=None)

        if start:
            events = [e for e in events if as_utc(e["event_date"]) >= as_utc(start)]
        if end:
            events = [e for e in events if as_utc(e["event_date"]) <= as_utc(end)]

        events.sort(key=lambda e: (as_utc(e["event_date"]), e.get("event_time") or ""))
        return events

    async def create_event(self, data: CalendarEventCreate, created_by: str) -> dict:
        if (not data.title or not data.event_date or not data.event_time
                or not data.assigned_personnel or not data.event_type):
            raise ServiceError("Başlık, tarih, saat, personel ve etkinlik türü zorunludur")

        now = datetime.now(timezone.utc)
        event = {
            "id": str(uuid.uuid4()),
            **data.model_dump(),
            "title": data.title.strip(),
            "event_type": data.event_type.value,
            "priority": data.priority.value,
            "status": EventStatus.PLANNED.value,
            "completed_at": None,
            "completed_by": None,
            "completion_notes": None,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        await self.collection.insert_one(event)
        event.pop("_id", None)
        return event

    async def update_event(self, event_id: str, data: CalendarEventUpdate, actor_id: str) -> dict:
        """Güncelle; tamamlandıya ilk geçişte completed_at/by atanır"""
        event = await self.get_event(event_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field in ("event_type", "status", "priority"):
            if field in changes:
                changes[field] = getattr(data, field).value

        now = datetime.now(timezone.utc)
        if changes.get("status") == EventStatus.COMPLETED.value and not event.get("completed_at"):
            changes["completed_at"] = now
            changes["completed_by"] = actor_id
        changes["updated_at"] = now

        await self.collection.update_one({"id": event_id}, {"$set": changes})
        return await self.get_event(event_id)

    async def delete_event(self, event_id: str) -> None:
        result = await self.collection.delete_one({"id": event_id})
        if result.deleted_count == 0:
            raise NotFoundError("Etkinlik bulunamadı")

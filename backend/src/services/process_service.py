"""
Süreç Servisi
Süreç CRUD, durum ve ilerleme kuralları
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import math
import uuid
import logging

from core.errors import NotFoundError, ServiceError
from core.utils import as_utc
from db.mongo import Collections
from models.process import ProcessCreate, ProcessStatus, ProcessUpdate
from services.activity_service import ActivityService

logger = logging.getLogger(__name__)


def elapsed_days(start: Optional[datetime]) -> Optional[int]:
    """Başlangıçtan bugüne geçen gün (yukarı yuvarlanmış)"""
    if not start:
        return None
    seconds = (datetime.now(timezone.utc) - as_utc(start)).total_seconds()
    return max(0, math.ceil(seconds / 86400))


class ProcessService:
    """Süreç iş mantığı servisi"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.PROCESSES]
        self.activities = ActivityService(db)

    async def get_process(self, process_id: str) -> dict:
        process = await self.collection.find_one({"id": process_id}, {"_id": 0})
        if not process:
            raise NotFoundError("Süreç bulunamadı")
        return process

    async def list_processes(self, status: Optional[ProcessStatus] = None) -> List[dict]:
        query = {"status": status.value} if status else {}
        return await self.collection.find(query, {"_id": 0}).sort("created_at", -1).to_list(length=None)

    async def create_process(self, data: ProcessCreate, created_by: str) -> dict:
        """Yeni süreç"""
        if not data.title or not data.description or not created_by:
            raise ServiceError("Başlık, açıklama ve oluşturan kişi zorunludur")

        now = datetime.now(timezone.utc)
        process = {
            "id": str(uuid.uuid4()),
            **data.model_dump(),
            "title": data.title.strip(),
            "priority": data.priority.value,
            "status": ProcessStatus.PLANNING.value,
            "progress": 0,
            "actual_duration": None,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        await self.collection.insert_one(process)
        process.pop("_id", None)

        await self.activities.record(
            f"Yeni süreç oluşturuldu: \"{process['title']}\"",
            user=created_by,
            related_process=process["id"],
        )
        return process

    async def update_process(self, process_id: str, data: ProcessUpdate) -> dict:
        await self.get_process(process_id)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "priority" in changes:
            changes["priority"] = data.priority.value
        changes["updated_at"] = datetime.now(timezone.utc)

        await self.collection.update_one({"id": process_id}, {"$set": changes})
        return await self.get_process(process_id)

    async def update_status(self, process_id: str, status: Optional[ProcessStatus], actor_id: str) -> dict:
        """Durum değişikliği; tamamlandı ilerlemeyi 100 yapar"""
        if status is None:
            raise ServiceError("Durum bilgisi gerekli")

        process = await self.get_process(process_id)
        changes = {"status": status.value, "updated_at": datetime.now(timezone.utc)}
        if status == ProcessStatus.COMPLETED:
            changes["progress"] = 100
            changes["actual_duration"] = elapsed_days(process.get("start_date"))

        await self.collection.update_one({"id": process_id}, {"$set": changes})
        await self.activities.record(
            f"\"{process['title']}\" süreci \"{status.value}\" durumuna güncellendi",
            user=actor_id,
            related_process=process_id,
        )
        return await self.get_process(process_id)

    async def update_progress(self, process_id: str, progress: Optional[int], actor_id: str) -> dict:
        """İlerleme yüzdesi; %100 süreci tamamlar"""
        if progress is None or progress < 0 or progress > 100:
            raise ServiceError("İlerleme 0-100 arasında olmalıdır")

        process = await self.get_process(process_id)
        changes = {"progress": progress, "updated_at": datetime.now(timezone.utc)}
        if progress == 100 and process["status"] != ProcessStatus.COMPLETED.value:
            changes["status"] = ProcessStatus.COMPLETED.value
            changes["actual_duration"] = elapsed_days(process.get("start_date"))

        await self.collection.update_one({"id": process_id}, {"$set": changes})
        await self.activities.record(
            f"\"{process['title']}\" süreci %{progress} tamamlandı",
            user=actor_id,
            related_process=process_id,
        )
        return await self.get_process(process_id)

    async def delete_process(self, process_id: str) -> None:
        result = await self.collection.delete_one({"id": process_id})
        if result.deleted_count == 0:
            raise NotFoundError("Süreç bulunamadı")

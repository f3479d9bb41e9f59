"""
Teknisyen Servisi
Teknisyen kayıtları, müsaitlik, iş istatistikleri ve pasifleştirme
"""
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import uuid
import logging

from core.errors import NotFoundError, ServiceError
from db.mongo import Collections
from models.service_job import ServiceJobStatus
from models.technician import (
    Availability, AvailabilityStatus, AvailabilityUpdate, Performance, TechnicianCreate, TechnicianUpdate
)

logger = logging.getLogger(__name__)

ACTIVE_JOB_STATUSES = [ServiceJobStatus.SCHEDULED.value, ServiceJobStatus.IN_PROGRESS.value]
USER_SUMMARY = {"_id": 0, "id": 1, "name": 1, "email": 1, "avatar": 1, "phone": 1}


class TechnicianService:
    """Teknisyen iş mantığı"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.TECHNICIANS]
        self.jobs = db[Collections.SERVICE_JOBS]

    async def _attach_user(self, technician: dict) -> dict:
        technician["user_details"] = await self.db[Collections.USERS].find_one(
            {"id": technician["user"]}, USER_SUMMARY
        )
        return technician

    async def get_raw(self, technician_id: str) -> dict:
        technician = await self.collection.find_one({"id": technician_id}, {"_id": 0})
        if not technician:
            raise NotFoundError("Teknisyen bulunamadı")
        return technician

    async def list_technicians(self) -> List[dict]:
        """Aktif teknisyenler, puana göre"""
        technicians = await self.collection.find({"is_active": True}, {"_id": 0}).to_list(length=None)
        technicians.sort(key=lambda t: (t.get("performance") or {}).get("rating", 0), reverse=True)
        return [await self._attach_user(t) for t in technicians]

    async def get_technician(self, technician_id: str) -> dict:
        """Teknisyen ve üzerindeki açık servis işleri"""
        technician = await self._attach_user(await self.get_raw(technician_id))
        technician["active_jobs"] = await self.jobs.find(
            {"assigned_technician": technician["user"], "status": {"$in": ACTIVE_JOB_STATUSES}},
            {"_id": 0}
        ).to_list(length=None)
        return technician

    async def create_technician(self, data: TechnicianCreate) -> dict:
        """Kullanıcı başına tek teknisyen kaydı"""
        if not data.user_id or not data.employee_id or not data.specialization:
            raise ServiceError("Gerekli alanlar eksik")

        if not await self.db[Collections.USERS].find_one({"id": data.user_id}, {"_id": 1}):
            raise NotFoundError("Kullanıcı bulunamadı")
        if await self.collection.find_one({"user": data.user_id}, {"_id": 1}):
            raise ServiceError("Bu kullanıcı için teknisyen kaydı zaten mevcut")
        if await self.collection.find_one({"employee_id": data.employee_id}, {"_id": 1}):
            raise ServiceError("Bu personel numarası zaten kullanılıyor")

        now = datetime.now(timezone.utc)
        fields = data.model_dump(mode="json", exclude={"user_id"})
        technician = {
            "id": str(uuid.uuid4()),
            "user": data.user_id,
            **fields,
            "performance": Performance().model_dump(),
            "current_jobs": 0,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        await self.collection.insert_one(technician)
        technician.pop("_id", None)

        logger.info(f"Teknisyen oluşturuldu: {technician['employee_id']}")
        return await self._attach_user(technician)

    async def update_technician(self, technician_id: str, data: TechnicianUpdate) -> dict:
        await self.get_raw(technician_id)

        changes = {
            k: v for k, v in data.model_dump(mode="json", exclude_unset=True).items() if v is not None
        }
        changes["updated_at"] = datetime.now(timezone.utc)
        await self.collection.update_one({"id": technician_id}, {"$set": changes})
        return await self._attach_user(await self.get_raw(technician_id))

    async def update_availability(self, technician_id: str, data: AvailabilityUpdate) -> dict:
        """Sadece gönderilen müsaitlik alanları değişir"""
        technician = await self.get_raw(technician_id)

        availability = Availability(**(technician.get("availability") or {})).model_dump(mode="json")
        availability.update(data.model_dump(mode="json", exclude_none=True))

        await self.collection.update_one(
            {"id": technician_id},
            {"$set": {"availability": availability, "updated_at": datetime.now(timezone.utc)}}
        )
        return await self._attach_user(await self.get_raw(technician_id))

    async def stats(self, technician_id: str) -> dict:
        """Teknisyene atanmış servis işlerinin özeti"""
        technician = await self.get_raw(technician_id)
        jobs = await self.jobs.find({"assigned_technician": technician["user"]}, {"_id": 0}).to_list(length=None)

        completed = [j for j in jobs if j.get("status") == ServiceJobStatus.COMPLETED.value]
        revenue = 0.0
        for job in completed:
            cost = job.get("cost") or {}
            actual = cost.get("actual")
            revenue += actual if actual is not None else (cost.get("estimated") or 0)

        durations = [j["actual_duration"] for j in jobs if j.get("actual_duration") is not None]
        total = len(jobs)
        return {
            "total_jobs": total,
            "completed_jobs": len(completed),
            "cancelled_jobs": sum(1 for j in jobs if j.get("status") == ServiceJobStatus.CANCELLED.value),
            "total_revenue": revenue,
            "avg_duration": sum(durations) / len(durations) if durations else 0,
            "completion_rate": len(completed) / total * 100 if total else 0,
        }

    async def overview(self) -> dict:
        """Aktif teknisyenlerin müsaitlik dağılımı ve açık iş sayısı"""
        technicians = await self.collection.find({"is_active": True}, {"_id": 0}).to_list(length=None)
        by_status = {status.value: 0 for status in AvailabilityStatus}
        for technician in technicians:
            status = (technician.get("availability") or {}).get("status", AvailabilityStatus.AVAILABLE.value)
            by_status[status] = by_status.get(status, 0) + 1

        ratings = [(t.get("performance") or {}).get("rating", 0) for t in technicians]
        return {
            "total": len(technicians),
            "availability": by_status,
            "active_jobs": await self.jobs.count_documents({"status": {"$in": ACTIVE_JOB_STATUSES}}),
            "average_rating": round(sum(ratings) / len(ratings), 2) if ratings else 0,
        }

    async def deactivate(self, technician_id: str) -> dict:
        """Açık işi olan teknisyen pasifleştirilemez"""
        technician = await self.get_raw(technician_id)

        active_jobs = await self.jobs.count_documents(
            {"assigned_technician": technician["user"], "status": {"$in": ACTIVE_JOB_STATUSES}}
        )
        if active_jobs > 0:
            raise ServiceError(f"Aktif işleri olan teknisyen silinemez ({active_jobs} aktif iş)")

        await self.collection.update_one(
            {"id": technician_id},
            {"$set": {"is_active": False, "updated_at": datetime.now(timezone.utc)}}
        )
        logger.info(f"Teknisyen pasifleştirildi: {technician_id}")
        return {"msg": "Teknisyen pasifleştirildi"}

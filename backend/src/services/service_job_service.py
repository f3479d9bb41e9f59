"""
Servis İşi Servisi
Saha işleri, atomik iş numarası üretimi ve istatistikler
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import re
import uuid
import logging

from core.errors import NotFoundError, ServiceError
from core.utils import as_utc
from db.mongo import Collections
from models.service_job import (
    ServiceJobCreate, ServiceJobStatus, ServiceJobStatusUpdate, ServiceJobUpdate
)
from services.sequence_service import SequenceService

logger = logging.getLogger(__name__)

JOB_NUMBER_PREFIX = "SJ"
OPEN_STATUSES = (ServiceJobStatus.SCHEDULED.value, ServiceJobStatus.IN_PROGRESS.value, ServiceJobStatus.ON_HOLD.value)


class ServiceJobService:
    """Servis işi iş mantığı"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.SERVICE_JOBS]
        self.sequences = SequenceService(db)

    async def get_job(self, job_id: str) -> dict:
        job = await self.collection.find_one({"id": job_id}, {"_id": 0})
        if not job:
            raise NotFoundError("Servis işi bulunamadı")
        return job

    async def list_jobs(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        service_type: Optional[str] = None,
        technician: Optional[str] = None,
        customer: Optional[str] = None,
        city: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None
    ) -> List[dict]:
        """Filtreli servis işi listesi (planlanan tarihe göre yeniden eskiye)"""
        query = {}
        if status:
            query["status"] = status
        if priority:
            query["priority"] = priority
        if service_type:
            query["service_type"] = service_type
        if technician:
            query["assigned_technician"] = technician
        if customer:
            query["customer"] = customer
        if city:
            query["location.city"] = {"$regex": re.escape(city), "$options": "i"}

        jobs = await self.collection.find(query, {"_id": 0}).to_list(length=None)

        if start_date:
            jobs = [j for j in jobs if as_utc(j["scheduled_date"]) >= as_utc(start_date)]
        if end_date:
            jobs = [j for j in jobs if as_utc(j["scheduled_date"]) <= as_utc(end_date)]
        if search:
            pattern = re.compile(re.escape(search), re.IGNORECASE)
            jobs = [
                j for j in jobs
                if pattern.search(j.get("job_number", ""))
                or pattern.search(j.get("description", ""))
                or pattern.search((j.get("location") or {}).get("city", ""))
            ]

        jobs.sort(key=lambda j: as_utc(j["scheduled_date"]), reverse=True)
        return jobs

    async def create_job(self, data: ServiceJobCreate, created_by: str) -> dict:
        """Yeni servis işi; numara counters koleksiyonundan alınır"""
        if (not data.customer or not data.service_type or not data.scheduled_date
                or not data.estimated_duration or not data.description or not data.location or not data.cost):
            raise ServiceError("Gerekli alanlar eksik")

        if not await self.db[Collections.CUSTOMERS].find_one({"id": data.customer}, {"_id": 1}):
            raise NotFoundError("Müşteri bulunamadı")
        if data.assigned_technician:
            if not await self.db[Collections.USERS].find_one({"id": data.assigned_technician}, {"_id": 1}):
                raise NotFoundError("Teknisyen bulunamadı")

        now = datetime.now(timezone.utc)
        job = {
            "id": str(uuid.uuid4()),
            "job_number": await self.sequences.next_number(JOB_NUMBER_PREFIX),
            **data.model_dump(),
            "service_type": data.service_type.value,
            "priority": data.priority.value,
            "status": ServiceJobStatus.SCHEDULED.value,
            "actual_duration": None,
            "photos": [],
            "customer_signature": None,
            "completed_at": None,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        await self.collection.insert_one(job)
        job.pop("_id", None)

        logger.info(f"Servis işi oluşturuldu: {job['job_number']}")
        return job

    async def update_status(self, job_id: str, data: ServiceJobStatusUpdate) -> dict:
        """Durum değiştir; tamamlandıda completed_at bir kez atanır"""
        if not data.status:
            raise ServiceError("Durum belirtilmeli")
        if data.status not in [s.value for s in ServiceJobStatus]:
            raise ServiceError("Geçersiz durum")

        job = await self.get_job(job_id)
        changes = {"status": data.status, "updated_at": datetime.now(timezone.utc)}
        if data.status == ServiceJobStatus.COMPLETED.value and not job.get("completed_at"):
            changes["completed_at"] = changes["updated_at"]
        if data.notes:
            changes["notes"] = data.notes
        if data.actual_duration is not None:
            changes["actual_duration"] = data.actual_duration

        await self.collection.update_one({"id": job_id}, {"$set": changes})
        return await self.get_job(job_id)

    async def update_job(self, job_id: str, data: ServiceJobUpdate) -> dict:
        await self.get_job(job_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field in ("service_type", "priority"):
            if field in changes:
                changes[field] = getattr(data, field).value
        if changes.get("assigned_technician"):
            if not await self.db[Collections.USERS].find_one({"id": changes["assigned_technician"]}, {"_id": 1}):
                raise NotFoundError("Teknisyen bulunamadı")

        changes["updated_at"] = datetime.now(timezone.utc)
        await self.collection.update_one({"id": job_id}, {"$set": changes})
        return await self.get_job(job_id)

    async def delete_job(self, job_id: str) -> None:
        result = await self.collection.delete_one({"id": job_id})
        if result.deleted_count == 0:
            raise NotFoundError("Servis işi bulunamadı")

    async def stats(self) -> dict:
        """Durum sayıları, gelir, geciken iş ve tamamlanma oranı"""
        jobs = await self.collection.find({}, {"_id": 0}).to_list(length=None)
        now = datetime.now(timezone.utc)

        def count(status: ServiceJobStatus) -> int:
            return sum(1 for j in jobs if j.get("status") == status.value)

        completed = [j for j in jobs if j.get("status") == ServiceJobStatus.COMPLETED.value]
        revenue = 0.0
        for job in completed:
            cost = job.get("cost") or {}
            actual = cost.get("actual")
            revenue += actual if actual is not None else (cost.get("estimated") or 0)

        durations = [j["actual_duration"] for j in jobs if j.get("actual_duration") is not None]
        total = len(jobs)
        return {
            "total": total,
            "scheduled": count(ServiceJobStatus.SCHEDULED),
            "in_progress": count(ServiceJobStatus.IN_PROGRESS),
            "completed": len(completed),
            "cancelled": count(ServiceJobStatus.CANCELLED),
            "on_hold": count(ServiceJobStatus.ON_HOLD),
            "total_revenue": revenue,
            "avg_duration": sum(durations) / len(durations) if durations else 0,
            "overdue": sum(
                1 for j in jobs
                if j.get("status") in OPEN_STATUSES and as_utc(j["scheduled_date"]) < now
            ),
            "completion_rate": len(completed) / total * 100 if total else 0,
        }

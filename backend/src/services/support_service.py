"""
Destek Servisi
Destek talebi değerlendirme akışı ve yerinde/uzaktan/bakım destek kayıtları
"""
from typing import Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone, timedelta
import re
import uuid
import logging

from core.errors import NotFoundError, PermissionDeniedError, ServiceError
from core.utils import as_utc
from db.mongo import Collections
from models.support import (
    EvaluationStatus, MaintenanceSupportCreate, OnsiteSupportCreate, RemoteSupportCreate,
    SUPPORT_PREFIXES, SUPPORT_STATUSES, SupportCategory, SupportRequestCreate, SupportStatusUpdate,
    SupportTicketBase
)
from services.sequence_service import SequenceService

logger = logging.getLogger(__name__)

REQUEST_NUMBER_PREFIX = "SR"
DECISION_WINDOW_DAYS = 30

TICKET_COLLECTIONS: Dict[SupportCategory, str] = {
    SupportCategory.ONSITE: Collections.ONSITE_SUPPORTS,
    SupportCategory.REMOTE: Collections.REMOTE_SUPPORTS,
    SupportCategory.MAINTENANCE: Collections.MAINTENANCE_SUPPORTS,
}

INITIAL_STATUS: Dict[SupportCategory, str] = {
    SupportCategory.ONSITE: "requested",
    SupportCategory.REMOTE: "requested",
    SupportCategory.MAINTENANCE: "scheduled",
}

CUSTOMER_SUMMARY = {
    "_id": 0, "id": 1, "cari_unvan1": 1, "email": 1, "phone": 1, "city": 1, "address": 1,
    "has_maintenance_contract": 1, "has_service_contract": 1, "created_at": 1,
}


class SupportService:
    """Destek iş mantığı servisi"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.requests = db[Collections.SUPPORT_REQUESTS]
        self.customers = db[Collections.CUSTOMERS]
        self.sequences = SequenceService(db)

    async def _customer(self, customer_id: str) -> dict:
        customer = await self.customers.find_one({"id": customer_id}, {"_id": 0})
        if not customer:
            raise NotFoundError("Müşteri bulunamadı")
        return customer

    async def _customer_map(self, customer_ids) -> Dict[str, dict]:
        ids = list({cid for cid in customer_ids if cid})
        if not ids:
            return {}
        found = await self.customers.find({"id": {"$in": ids}}, CUSTOMER_SUMMARY).to_list(length=len(ids))
        return {c["id"]: c for c in found}

    # ========================================================================
    # DESTEK TALEPLERİ
    # ========================================================================

    async def get_request(self, request_id: str) -> dict:
        request = await self.requests.find_one({"id": request_id}, {"_id": 0})
        if not request:
            raise NotFoundError("Destek talebi bulunamadı")
        return request

    async def list_pending(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        request_type: Optional[str] = None,
        evaluator: Optional[str] = None,
        customer: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[dict]:
        """Talepler (filtreli), müşteri bilgisiyle"""
        query = {}
        if status:
            query["evaluation_status"] = status
        if priority:
            query["priority"] = priority
        if request_type:
            query["request_type"] = request_type
        if evaluator:
            query["assigned_evaluator"] = evaluator
        if customer:
            query["customer"] = customer

        requests = await self.requests.find(query, {"_id": 0}).to_list(length=None)
        customers = await self._customer_map(r["customer"] for r in requests)
        for request in requests:
            request["customer_info"] = customers.get(request["customer"])

        if search:
            pattern = re.compile(re.escape(search), re.IGNORECASE)
            requests = [
                r for r in requests
                if pattern.search(r.get("request_number", ""))
                or pattern.search(r.get("description", ""))
                or pattern.search((r.get("customer_info") or {}).get("cari_unvan1") or "")
            ]

        requests.sort(key=lambda r: as_utc(r["submitted_date"]), reverse=True)
        return requests

    async def create_request(self, data: SupportRequestCreate) -> dict:
        """Yeni destek talebi; karar tarihi varsayılan +30 gün"""
        if not data.customer or not data.request_type or not data.description or not data.estimated_value:
            raise ServiceError("Gerekli alanlar eksik")
        await self._customer(data.customer)

        now = datetime.now(timezone.utc)
        request = {
            "id": str(uuid.uuid4()),
            "request_number": await self.sequences.next_number(REQUEST_NUMBER_PREFIX),
            **data.model_dump(),
            "request_type": data.request_type.value,
            "priority": data.priority.value,
            "risk_assessment": data.risk_assessment.value if data.risk_assessment else None,
            "business_impact": data.business_impact.value if data.business_impact else None,
            "decision_deadline": data.decision_deadline or now + timedelta(days=DECISION_WINDOW_DAYS),
            "submitted_date": now,
            "evaluation_status": EvaluationStatus.SUBMITTED.value,
            "evaluation_notes": None,
            "approved_at": None,
            "approved_by": None,
            "rejected_at": None,
            "rejected_by": None,
            "rejection_reason": None,
            "created_at": now,
            "updated_at": now,
        }
        await self.requests.insert_one(request)
        request.pop("_id", None)

        logger.info(f"Destek talebi oluşturuldu: {request['request_number']}")
        return request

    async def approve(self, request_id: str, notes: Optional[str], actor_id: str) -> dict:
        await self.get_request(request_id)
        now = datetime.now(timezone.utc)
        await self.requests.update_one({"id": request_id}, {"$set": {
            "evaluation_status": EvaluationStatus.APPROVED.value,
            "evaluation_notes": notes,
            "approved_at": now,
            "approved_by": actor_id,
            "updated_at": now,
        }})
        return await self.get_request(request_id)

    async def reject(self, request_id: str, notes: Optional[str], actor_id: str) -> dict:
        """Reddetme gerekçe ister"""
        if not notes or not notes.strip():
            raise ServiceError("Reddetme gerekçesi yazılmalı")

        await self.get_request(request_id)
        now = datetime.now(timezone.utc)
        await self.requests.update_one({"id": request_id}, {"$set": {
            "evaluation_status": EvaluationStatus.REJECTED.value,
            "evaluation_notes": notes,
            "rejection_reason": notes,
            "rejected_at": now,
            "rejected_by": actor_id,
            "updated_at": now,
        }})
        return await self.get_request(request_id)

    async def active_customers(self) -> List[dict]:
        """Onaylanmış talebi olan müşteriler"""
        approved = await self.requests.find(
            {"evaluation_status": EvaluationStatus.APPROVED.value}, {"_id": 0}
        ).to_list(length=None)
        customers = await self._customer_map(r["customer"] for r in approved)

        return [
            {
                **customers[r["customer"]],
                "support_request": {
                    "id": r["id"],
                    "request_number": r["request_number"],
                    "request_type": r["request_type"],
                    "priority": r["priority"],
                    "estimated_value": r.get("estimated_value"),
                    "approved_at": r.get("approved_at"),
                },
            }
            for r in approved if r["customer"] in customers
        ]

    async def inactive_customers(self) -> List[dict]:
        """Talebi reddedilmiş müşteriler"""
        rejected = await self.requests.find(
            {"evaluation_status": EvaluationStatus.REJECTED.value}, {"_id": 0}
        ).to_list(length=None)
        customers = await self._customer_map(r["customer"] for r in rejected)

        return [
            {
                **customers[r["customer"]],
                "exclusion_reason": r.get("rejection_reason") or "other",
                "exclusion_date": r.get("rejected_at"),
                "exclusion_notes": r.get("evaluation_notes"),
                "last_support_date": r.get("submitted_date"),
                "potential_value": r.get("estimated_value"),
                "risk_level": r.get("risk_assessment") or "medium",
                "can_reactivate": True,
            }
            for r in rejected if r["customer"] in customers
        ]

    async def stats(self) -> dict:
        """Değerlendirme durumlarına göre sayılar ve gecikenler"""
        requests = await self.requests.find({}, {"_id": 0}).to_list(length=None)
        now = datetime.now(timezone.utc)
        closed = (EvaluationStatus.APPROVED.value, EvaluationStatus.REJECTED.value)

        def count(status: EvaluationStatus) -> int:
            return sum(1 for r in requests if r.get("evaluation_status") == status.value)

        return {
            "total": len(requests),
            "submitted": count(EvaluationStatus.SUBMITTED),
            "under_review": count(EvaluationStatus.UNDER_REVIEW),
            "pending_approval": count(EvaluationStatus.PENDING_APPROVAL),
            "approved": count(EvaluationStatus.APPROVED),
            "rejected": count(EvaluationStatus.REJECTED),
            "total_value": sum(r.get("estimated_value") or 0 for r in requests),
            "overdue": sum(
                1 for r in requests
                if r.get("evaluation_status") not in closed
                and r.get("decision_deadline") and as_utc(r["decision_deadline"]) < now
            ),
        }

    # ========================================================================
    # SAHA DESTEK KAYITLARI
    # ========================================================================

    def _tickets(self, category: SupportCategory):
        return self.db[TICKET_COLLECTIONS[category]]

    async def list_tickets(self, category: SupportCategory) -> List[dict]:
        tickets = await self._tickets(category).find({}, {"_id": 0}).sort("created_at", -1).to_list(length=None)
        customers = await self._customer_map(t.get("customer") for t in tickets)
        for ticket in tickets:
            ticket["customer_info"] = customers.get(ticket.get("customer"))
        return tickets

    async def _create_ticket(self, category: SupportCategory, data: SupportTicketBase, extra: dict) -> dict:
        if data.assigned_technician:
            if not await self.db[Collections.USERS].find_one({"id": data.assigned_technician}, {"_id": 1}):
                raise NotFoundError("Teknisyen bulunamadı")

        now = datetime.now(timezone.utc)
        ticket = {
            "id": str(uuid.uuid4()),
            "support_number": await self.sequences.next_number(SUPPORT_PREFIXES[category]),
            **data.model_dump(),
            **extra,
            "priority": data.priority.value,
            "status": INITIAL_STATUS[category],
            "completed_at": None,
            "created_at": now,
            "updated_at": now,
        }
        await self._tickets(category).insert_one(ticket)
        ticket.pop("_id", None)

        logger.info(f"Destek kaydı oluşturuldu: {ticket['support_number']}")
        return ticket

    async def create_onsite(self, data: OnsiteSupportCreate) -> dict:
        """Yerinde destek; müşterinin servis anlaşması olmalı"""
        if (not data.customer or not data.scheduled_date or not data.estimated_duration
                or not data.description or not data.location or not data.cost):
            raise ServiceError("Gerekli alanlar eksik")

        customer = await self._customer(data.customer)
        if not customer.get("has_service_contract"):
            raise PermissionDeniedError("Müşterinin servis anlaşması bulunmuyor")

        return await self._create_ticket(
            SupportCategory.ONSITE, data, {"support_type": data.support_type.value}
        )

    async def create_remote(self, data: RemoteSupportCreate) -> dict:
        if not data.customer or not data.description:
            raise ServiceError("Gerekli alanlar eksik")
        await self._customer(data.customer)

        return await self._create_ticket(
            SupportCategory.REMOTE, data, {"support_type": data.support_type.value}
        )

    async def create_maintenance(self, data: MaintenanceSupportCreate) -> dict:
        if not data.customer or not data.scheduled_date or not data.description:
            raise ServiceError("Gerekli alanlar eksik")
        await self._customer(data.customer)

        return await self._create_ticket(
            SupportCategory.MAINTENANCE, data, {"maintenance_type": data.maintenance_type.value}
        )

    async def update_ticket_status(self, category: SupportCategory, ticket_id: str, data: SupportStatusUpdate) -> dict:
        """Kayıt durumunu güncelle; tamamlandıda completed_at atanır"""
        if not data.status:
            raise ServiceError("Durum belirtilmeli")
        if data.status not in SUPPORT_STATUSES[category]:
            raise ServiceError("Geçersiz durum")

        collection = self._tickets(category)
        ticket = await collection.find_one({"id": ticket_id}, {"_id": 0})
        if not ticket:
            raise NotFoundError("Destek kaydı bulunamadı")

        now = datetime.now(timezone.utc)
        changes = {"status": data.status, "updated_at": now}
        if data.status == "completed" and not ticket.get("completed_at"):
            changes["completed_at"] = now
        if data.notes:
            changes["notes"] = data.notes

        await collection.update_one({"id": ticket_id}, {"$set": changes})
        ticket.update(changes)
        return ticket

    async def all_tickets(self) -> List[dict]:
        """Üç destek türünün birleşik listesi, support_category ile"""
        combined = []
        for category in SupportCategory:
            for ticket in await self.list_tickets(category):
                ticket["support_category"] = category.value
                if category == SupportCategory.MAINTENANCE:
                    ticket["support_type"] = ticket.get("maintenance_type")
                combined.append(ticket)

        combined.sort(key=lambda t: as_utc(t["created_at"]), reverse=True)
        return combined

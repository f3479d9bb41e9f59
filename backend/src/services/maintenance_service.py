"""
Bakım Anlaşması Servisi
Anlaşma oluşturma/iptal, fiyat önerileri, aktif/pasif/yenileme görünümleri
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import math
import re
import logging

from core.errors import ServiceError
from core.utils import as_utc
from db.mongo import Collections
from models.customer import (
    ContractCancellation, DURATION_MULTIPLIERS, MaintenanceContractCreate,
    MaintenanceContractUpdate, MaintenancePlan, PLAN_BASE_PRICES, Reactivation, RenewalStart
)
from services.customer_service import CustomerService

logger = logging.getLogger(__name__)

PLAN_NAMES = {
    MaintenancePlan.BASIC: "Temel Bakım",
    MaintenancePlan.STANDARD: "Standart Bakım",
    MaintenancePlan.PREMIUM: "Premium Bakım",
    MaintenancePlan.ENTERPRISE: "Kurumsal Bakım",
}

PLAN_FEATURES = {
    MaintenancePlan.BASIC: ["Aylık sistem kontrolü", "Telefon desteği", "Temel raporlama"],
    MaintenancePlan.STANDARD: ["Haftalık sistem kontrolü", "7/24 telefon desteği", "Detaylı raporlama", "Uzaktan erişim"],
    MaintenancePlan.PREMIUM: ["Günlük izleme", "7/24 öncelikli destek", "Proaktif bakım", "Yerinde destek"],
    MaintenancePlan.ENTERPRISE: ["Sürekli izleme", "Özel destek ekibi", "SLA garantisi", "Stratejik danışmanlık"],
}


def add_months(value: datetime, months: int) -> datetime:
    """Ay ekle, gün taşarsa ayın son gününe çek"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    for day in (value.day, 30, 29, 28):
        try:
            return value.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    return value


def pricing_suggestions(duration: Optional[int] = None) -> dict:
    """Paket bazlı fiyat önerileri"""
    multiplier = DURATION_MULTIPLIERS.get(duration, 1.0)
    suggestions = [
        {
            "type": plan.value,
            "name": PLAN_NAMES[plan],
            "price": math.floor(PLAN_BASE_PRICES[plan] * multiplier),
            "features": PLAN_FEATURES[plan],
        }
        for plan in MaintenancePlan
    ]
    return {
        "suggestions": suggestions,
        "duration": str(duration or 12),
        "base_currency": "TRY",
    }


def _matches(customer: dict, search: Optional[str]) -> bool:
    if not search:
        return True
    pattern = re.compile(re.escape(search), re.IGNORECASE)
    return any(
        pattern.search(customer.get(field) or "")
        for field in ("cari_unvan1", "cari_unvan2", "email", "city")
    )


class MaintenanceService:
    """Bakım anlaşmaları iş mantığı"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.CUSTOMERS]
        self.customers = CustomerService(db)

    async def _save(self, customer_id: str, changes: dict) -> dict:
        changes["updated_at"] = datetime.now(timezone.utc)
        await self.collection.update_one({"id": customer_id}, {"$set": changes})
        return await self.customers.get_customer(customer_id)

    # ========================================================================
    # ANLAŞMALAR
    # ========================================================================

    async def create_contract(self, data: MaintenanceContractCreate) -> dict:
        """Müşteriye bakım anlaşması tanımla"""
        if not data.customer_id or not data.start_date or not data.end_date or not data.value:
            raise ServiceError("Gerekli alanlar eksik (müşteri, başlangıç tarihi, bitiş tarihi, fiyat)")

        start, end = as_utc(data.start_date), as_utc(data.end_date)
        if end <= start:
            raise ServiceError("Bitiş tarihi başlangıç tarihinden sonra olmalıdır")

        customer = await self.customers.get_customer(data.customer_id)
        current_end = as_utc(customer.get("maintenance_end_date"))
        if customer.get("has_maintenance_contract") and current_end and current_end > datetime.now(timezone.utc):
            raise ServiceError("Müşterinin zaten aktif bakım anlaşması var")

        changes = {
            "has_maintenance_contract": True,
            "maintenance_start_date": start,
            "maintenance_end_date": end,
            "maintenance_value": data.value,
            "maintenance_plan": data.plan.value,
        }
        if data.notes:
            changes["notes"] = data.notes

        updated = await self._save(data.customer_id, changes)
        logger.info(f"Bakım anlaşması oluşturuldu: {data.customer_id}")
        return {
            "customer": updated,
            "contract": {
                "start_date": start,
                "end_date": end,
                "value": data.value,
                "plan": data.plan.value,
                "duration": math.ceil((end - start).total_seconds() / 86400),
            },
        }

    async def update_contract(self, customer_id: str, data: MaintenanceContractUpdate) -> dict:
        await self.customers.get_customer(customer_id)

        changes = {}
        if data.start_date:
            changes["maintenance_start_date"] = data.start_date
        if data.end_date:
            changes["maintenance_end_date"] = data.end_date
        if data.value:
            changes["maintenance_value"] = data.value
        if data.plan:
            changes["maintenance_plan"] = data.plan.value
        if data.notes:
            changes["notes"] = data.notes
        return await self._save(customer_id, changes)

    async def cancel_contract(self, customer_id: str, data: ContractCancellation) -> dict:
        customer = await self.customers.get_customer(customer_id)
        if not customer.get("has_maintenance_contract"):
            raise ServiceError("Müşterinin aktif bakım anlaşması yok")

        return await self._save(customer_id, {
            "has_maintenance_contract": False,
            "contract_cancelled_at": datetime.now(timezone.utc),
            "cancellation_reason": data.reason,
            "cancellation_notes": data.notes,
        })

    # ========================================================================
    # GÖRÜNÜMLER
    # ========================================================================

    async def _contract_customers(self) -> List[dict]:
        customers = await self.collection.find({}, {"_id": 0}).to_list(length=None)
        for customer in customers:
            customer["maintenance_end_date"] = as_utc(customer.get("maintenance_end_date"))
        return customers

    async def active(self, search: Optional[str] = None, city: Optional[str] = None) -> List[dict]:
        """Bitiş tarihi geçmemiş anlaşmalar (tarihsiz olanlar dahil)"""
        now = datetime.now(timezone.utc)
        result = [
            c for c in await self._contract_customers()
            if c.get("has_maintenance_contract")
            and (c["maintenance_end_date"] is None or c["maintenance_end_date"] > now)
            and (not city or city.lower() in (c.get("city") or "").lower())
            and _matches(c, search)
        ]
        far_future = datetime.max.replace(tzinfo=timezone.utc)
        result.sort(key=lambda c: c["maintenance_end_date"] or far_future)
        return result

    async def inactive(self, search: Optional[str] = None, reason: Optional[str] = None) -> List[dict]:
        """İptal edilmiş veya süresi dolmuş anlaşmalar"""
        now = datetime.now(timezone.utc)
        result = []
        for customer in await self._contract_customers():
            end = customer["maintenance_end_date"]
            if customer.get("has_maintenance_contract"):
                if not end or end >= now:
                    continue
                end_reason = "expired"
            else:
                end_reason = "cancelled"

            if reason and reason != "all" and reason != end_reason:
                continue
            if not _matches(customer, search):
                continue
            result.append({**customer, "contract_end_reason": end_reason, "last_maintenance_date": end})

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        result.sort(key=lambda c: c["maintenance_end_date"] or epoch, reverse=True)
        return result

    async def renewal(
        self,
        search: Optional[str] = None,
        urgency: Optional[str] = None,
        probability: Optional[str] = None
    ) -> List[dict]:
        """6 ay içinde bitecek anlaşmalar, aciliyet ve yenilenme olasılığıyla"""
        now = datetime.now(timezone.utc)
        horizon = add_months(now, 6)
        result = []

        for customer in await self._contract_customers():
            end = customer["maintenance_end_date"]
            if not customer.get("has_maintenance_contract") or not end or not (now <= end <= horizon):
                continue

            days = math.ceil((end - now).total_seconds() / 86400)
            if days <= 30:
                renewal_probability = "high"
            elif days > 90:
                renewal_probability = "low"
            else:
                renewal_probability = "medium"

            if days <= 30:
                level = "critical"
            elif days <= 60:
                level = "urgent"
            else:
                level = "normal"

            if urgency and urgency != "all" and urgency != level:
                continue
            if probability and probability != "all" and probability != renewal_probability:
                continue
            if not _matches(customer, search):
                continue

            value = customer.get("maintenance_value") or 0
            result.append({
                **customer,
                "days_until_expiry": days,
                "urgency": level,
                "current_value": value,
                "renewal_value": math.floor(value * 1.1) if value else 0,
                "renewal_probability": renewal_probability,
                "last_contact_date": customer.get("updated_at"),
            })

        result.sort(key=lambda c: c["maintenance_end_date"])
        return result

    async def start_renewal(self, customer_id: str, data: RenewalStart) -> dict:
        """Yenileme sürecini başlat"""
        await self.customers.get_customer(customer_id)
        changes = {"renewal_notes": data.notes}
        if data.new_end_date:
            changes["maintenance_end_date"] = data.new_end_date
        if data.new_value:
            changes["maintenance_value"] = data.new_value
        return await self._save(customer_id, changes)

    async def reactivate(self, customer_id: str, data: Reactivation) -> dict:
        """Pasif anlaşmayı yeniden aktifleştir"""
        await self.customers.get_customer(customer_id)
        changes = {
            "has_maintenance_contract": True,
            "reactivation_notes": data.notes,
            "reactivated_at": datetime.now(timezone.utc),
        }
        if data.new_start_date:
            changes["maintenance_start_date"] = data.new_start_date
        if data.new_end_date:
            changes["maintenance_end_date"] = data.new_end_date
        return await self._save(customer_id, changes)

    async def stats(self) -> dict:
        """Aktif / pasif / yakında bitecek sayıları"""
        now = datetime.now(timezone.utc)
        one_month, three_months = add_months(now, 1), add_months(now, 3)

        active = inactive = expiring_month = expiring_three = 0
        for customer in await self._contract_customers():
            end = customer["maintenance_end_date"]
            has_contract = customer.get("has_maintenance_contract")
            if has_contract and end and end > now:
                active += 1
            if not has_contract or (end and end < now):
                inactive += 1
            if has_contract and end and now <= end <= one_month:
                expiring_month += 1
            if has_contract and end and now <= end <= three_months:
                expiring_three += 1

        return {
            "active": active,
            "inactive": inactive,
            "expiring_this_month": expiring_month,
            "expiring_three_months": expiring_three,
        }

"""
Müşteri Servisi
Cari hesap CRUD, VKN/e-posta benzersizliği ve arama
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import re
import uuid
import logging

from core.errors import NotFoundError, ServiceError
from db.mongo import Collections
from models.customer import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("cari_unvan1", "cari_unvan2", "cari_kod", "vkn", "city", "district", "email")


def search_filter(text: str, fields=SEARCH_FIELDS) -> dict:
    """Birden çok alanda büyük/küçük harf duyarsız arama"""
    pattern = re.escape(text.strip())
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}


class CustomerService:
    """Müşteri iş mantığı servisi"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.CUSTOMERS]

    async def get_customer(self, customer_id: str) -> dict:
        customer = await self.collection.find_one({"id": customer_id}, {"_id": 0})
        if not customer:
            raise NotFoundError("Müşteri bulunamadı")
        return customer

    async def list_customers(
        self,
        search: Optional[str] = None,
        city: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> List[dict]:
        """Müşteri listesi (yeniden eskiye)"""
        query = {}
        if search:
            query.update(search_filter(search))
        if city:
            query["city"] = {"$regex": re.escape(city), "$options": "i"}
        if is_active is not None:
            query["is_active"] = is_active

        cursor = self.collection.find(query, {"_id": 0}).sort("created_at", -1)
        return await cursor.to_list(length=None)

    async def search(self, text: str) -> List[dict]:
        return await self.list_customers(search=text)

    async def _ensure_unique(self, vkn: Optional[str], email: Optional[str], exclude_id: Optional[str] = None) -> None:
        """VKN ve e-posta başka müşteride kayıtlı olmamalı"""
        scope = {"id": {"$ne": exclude_id}} if exclude_id else {}

        if vkn and await self.collection.find_one({**scope, "vkn": vkn}, {"_id": 1}):
            raise ServiceError("Bu VKN ile kayıtlı müşteri zaten mevcut")
        if email and await self.collection.find_one({**scope, "email": email}, {"_id": 1}):
            raise ServiceError("Bu e-posta adresi ile kayıtlı müşteri zaten mevcut")

    async def create_customer(self, data: CustomerCreate) -> dict:
        """Yeni müşteri oluştur"""
        if not data.cari_unvan1 or not data.cari_unvan1.strip():
            raise ServiceError("Müşteri ünvanı zorunludur")

        await self._ensure_unique(data.vkn, data.email)

        now = datetime.now(timezone.utc)
        customer = {
            "id": str(uuid.uuid4()),
            **data.model_dump(),
            "maintenance_plan": None,
            "created_at": now,
            "updated_at": now,
        }
        # sparse unique index: boş VKN alanı hiç yazılmaz
        if customer.get("vkn") is None:
            customer.pop("vkn")

        await self.collection.insert_one(customer)
        customer.pop("_id", None)

        logger.info(f"Müşteri oluşturuldu: {customer['cari_unvan1']}")
        return customer

    async def update_customer(self, customer_id: str, data: CustomerUpdate) -> dict:
        """Gönderilen alanları güncelle"""
        await self.get_customer(customer_id)

        changes = data.model_dump(exclude_unset=True)
        unset = {}
        if "vkn" in changes and changes["vkn"] is None:
            changes.pop("vkn")
            unset["vkn"] = ""

        await self._ensure_unique(changes.get("vkn"), changes.get("email"), exclude_id=customer_id)

        changes["updated_at"] = datetime.now(timezone.utc)
        update = {"$set": changes}
        if unset:
            update["$unset"] = unset

        await self.collection.update_one({"id": customer_id}, update)
        return await self.get_customer(customer_id)

    async def delete_customer(self, customer_id: str) -> None:
        result = await self.collection.delete_one({"id": customer_id})
        if result.deleted_count == 0:
            raise NotFoundError("Müşteri bulunamadı")
        logger.info(f"Müşteri silindi: {customer_id}")

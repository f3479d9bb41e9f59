"""
Sıra Numarası Servisi
counters koleksiyonunda atomik artırım ile iş/talep numarası üretimi
"""
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from datetime import datetime, timezone

from db.mongo import Collections


class SequenceService:
    """Atomik sayaç servisi"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.COUNTERS]

    async def next_value(self, name: str) -> int:
        """
        Sayaç değerini bir artırıp yeni değeri döndür
        find_one_and_update tek işlem olduğu için eşzamanlı çağrılar aynı değeri alamaz
        """
        counter = await self.collection.find_one_and_update(
            {"_id": name},
            {"$inc": {"value": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["value"]

    async def next_number(self, prefix: str, year: Optional[int] = None, width: int = 4) -> str:
        """
        Yıllık numara üret
        Format: <PREFIX><YYYY><NNNN> (örn: SJ20260001)
        """
        if year is None:
            year = datetime.now(timezone.utc).year

        value = await self.next_value(f"{prefix}-{year}")
        return f"{prefix}{year}{value:0{width}d}"

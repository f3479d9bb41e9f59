"""
MongoDB Connection Management
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from typing import Optional
from core.config import settings
import logging

logger = logging.getLogger(__name__)

# Global MongoDB client ve database
_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def get_database() -> AsyncIOMotorDatabase:
    """
    MongoDB database instance'ını döndür
    Singleton pattern kullanarak tek bir bağlantı sağlar
    """
    global _client, _database

    if _database is None:
        logger.info(f"MongoDB bağlantısı kuruluyor: {settings.MONGO_URL}")

        try:
            _client = AsyncIOMotorClient(
                settings.MONGO_URL,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                tz_aware=True,
            )

            # Bağlantıyı test et
            await _client.admin.command('ping')

            _database = _client[settings.DB_NAME]
            logger.info(f"✅ MongoDB bağlantısı başarılı: {settings.DB_NAME}")

        except Exception as e:
            logger.error(f"❌ MongoDB bağlantı hatası: {e}")
            _client = None
            raise

    return _database


async def close_database_connection():
    """
    MongoDB bağlantısını kapat
    """
    global _client, _database

    if _client is not None:
        logger.info("MongoDB bağlantısı kapatılıyor...")
        _client.close()
        _client = None
        _database = None
        logger.info("✅ MongoDB bağlantısı kapatıldı")


async def ping_database(db: Optional[AsyncIOMotorDatabase] = None) -> bool:
    """
    Veritabanı bağlantısını kontrol et
    """
    try:
        db = db if db is not None else await get_database()
        await db.command('ping')
        return True
    except Exception as e:
        logger.error(f"Database ping hatası: {e}")
        return False


# Collection isimleri (constants)
class Collections:
    """MongoDB koleksiyon isimleri"""

    # Kullanıcılar
    USERS = "users"

    # Müşteri ve iletişim
    CUSTOMERS = "customers"
    COMMUNICATIONS = "communications"

    # Görev ve süreç
    TASKS = "tasks"
    PROCESSES = "processes"
    CALENDAR_EVENTS = "calendar_events"

    # Mesajlaşma
    CHATS = "chats"

    # Servis ve destek
    ISSUES = "issues"
    SERVICE_JOBS = "service_jobs"
    SUPPORT_REQUESTS = "support_requests"
    ONSITE_SUPPORTS = "onsite_supports"
    REMOTE_SUPPORTS = "remote_supports"
    MAINTENANCE_SUPPORTS = "maintenance_supports"
    TECHNICIANS = "technicians"

    # Sistem
    SETTINGS = "settings"
    ACTIVITIES = "activities"
    COUNTERS = "counters"


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """
    Koleksiyon index'lerini oluştur
    Numara alanlarındaki unique index'ler sayaç servisini destekler
    """
    await db[Collections.USERS].create_index("id", unique=True)
    await db[Collections.USERS].create_index("email", unique=True)

    await db[Collections.CUSTOMERS].create_index("id", unique=True)
    await db[Collections.CUSTOMERS].create_index("vkn", unique=True, sparse=True)

    await db[Collections.TASKS].create_index("id", unique=True)
    await db[Collections.TASKS].create_index([("assigned_to", ASCENDING), ("created_at", DESCENDING)])
    await db[Collections.TASKS].create_index("status")

    await db[Collections.CHATS].create_index("id", unique=True)
    await db[Collections.CHATS].create_index("participants")

    await db[Collections.ISSUES].create_index("id", unique=True)
    await db[Collections.ISSUES].create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    await db[Collections.ISSUES].create_index("assigned_to")

    await db[Collections.SERVICE_JOBS].create_index("id", unique=True)
    await db[Collections.SERVICE_JOBS].create_index("job_number", unique=True)
    await db[Collections.SERVICE_JOBS].create_index("scheduled_date")

    await db[Collections.SUPPORT_REQUESTS].create_index("id", unique=True)
    await db[Collections.SUPPORT_REQUESTS].create_index("request_number", unique=True)
    await db[Collections.SUPPORT_REQUESTS].create_index("evaluation_status")

    for name in (Collections.ONSITE_SUPPORTS, Collections.REMOTE_SUPPORTS, Collections.MAINTENANCE_SUPPORTS):
        await db[name].create_index("id", unique=True)
        await db[name].create_index("support_number", unique=True)

    await db[Collections.TECHNICIANS].create_index("id", unique=True)
    await db[Collections.TECHNICIANS].create_index("employee_id", unique=True)
    await db[Collections.TECHNICIANS].create_index("user")

    await db[Collections.ACTIVITIES].create_index([("related_user", ASCENDING), ("created_at", DESCENDING)])
    await db[Collections.ACTIVITIES].create_index([("user", ASCENDING), ("created_at", DESCENDING)])

    await db[Collections.PROCESSES].create_index("id", unique=True)
    await db[Collections.CALENDAR_EVENTS].create_index([("event_date", ASCENDING)])
    await db[Collections.COMMUNICATIONS].create_index([("customer_id", ASCENDING), ("sent_at", DESCENDING)])

    logger.info("✅ MongoDB index'leri hazır")


# Dependency injection için
async def get_db() -> AsyncIOMotorDatabase:
    """
    FastAPI dependency olarak kullanılacak database getter
    """
    return await get_database()

"""
Sistem Ayarları Servisi
Tek ayar dokümanı, gizli alan maskeleme ve sistem durumu
"""
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from datetime import datetime, timezone
import copy
import time
import logging

from core.config import settings as app_settings
from core.errors import ServiceError
from db.mongo import Collections, ping_database
from models.system_settings import (
    EmailSettings, SECRET_MASK, SETTINGS_SECTIONS, SettingsUpdate, SmsSettings, SystemSettings
)

logger = logging.getLogger(__name__)

SETTINGS_KEY = "system"
STARTED_AT = time.monotonic()

# bölüm -> maskelenen alan
SECRET_FIELDS = {
    "email": "smtp_pass",
    "sms": "api_secret",
}


def mask_secrets(document: dict) -> dict:
    """Gizli alanları gösterim için maskele; boşsa boş bırak"""
    masked = copy.deepcopy(document)
    for section, field in SECRET_FIELDS.items():
        values = masked.get(section) or {}
        if field in values:
            values[field] = SECRET_MASK if values[field] else ""
    return masked


class SettingsService:
    """Ayar dokümanı okuma/yazma"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[Collections.SETTINGS]

    async def ensure_defaults(self) -> dict:
        """Doküman yoksa varsayılanlarla oluştur"""
        document = await self.collection.find_one({"key": SETTINGS_KEY}, {"_id": 0})
        if document:
            return document

        now = datetime.now(timezone.utc)
        document = {
            "key": SETTINGS_KEY,
            **SystemSettings(created_at=now, updated_at=now).model_dump(),
        }
        await self.collection.update_one(
            {"key": SETTINGS_KEY}, {"$setOnInsert": document}, upsert=True
        )
        logger.info("Varsayılan sistem ayarları oluşturuldu")
        return await self.collection.find_one({"key": SETTINGS_KEY}, {"_id": 0})

    async def get_settings(self) -> dict:
        """Maskelenmiş ayarlar"""
        document = await self.ensure_defaults()
        document.pop("key", None)
        return mask_secrets(document)

    async def update_settings(self, data: SettingsUpdate, actor_id: str) -> dict:
        """
        Bölüm bazında birleştir.
        Maske değeri gelirse kayıtlı gizli değer korunur.
        """
        current = await self.ensure_defaults()
        changes = {}

        for section, values in data.model_dump(exclude_none=True).items():
            if section not in SETTINGS_SECTIONS:
                continue
            merged = {**(current.get(section) or {}), **values}
            secret = SECRET_FIELDS.get(section)
            if secret and values.get(secret) == SECRET_MASK:
                merged[secret] = (current.get(section) or {}).get(secret, "")
            # Bölüm şemasına göre doğrula
            section_model = SystemSettings.model_fields[section].annotation
            try:
                changes[section] = section_model(**merged).model_dump()
            except ValidationError as e:
                error = e.errors()[0]
                field = ".".join(str(part) for part in error["loc"])
                raise ServiceError(f"Geçersiz ayar ({section}.{field}): {error['msg']}")

        changes["last_updated_by"] = actor_id
        changes["updated_at"] = datetime.now(timezone.utc)
        await self.collection.update_one({"key": SETTINGS_KEY}, {"$set": changes})

        logger.info(f"Sistem ayarları güncellendi: {actor_id}")
        return await self.get_settings()

    async def email_config(self) -> EmailSettings:
        """Kayıtlı SMTP ayarları; boş alanlar ortam ayarlarından"""
        document = await self.ensure_defaults()
        stored = document.get("email") or {}
        return EmailSettings(
            smtp_host=stored.get("smtp_host") or app_settings.SMTP_SERVER,
            smtp_port=stored.get("smtp_port") or app_settings.SMTP_PORT,
            smtp_user=stored.get("smtp_user") or app_settings.SMTP_USER,
            smtp_pass=stored.get("smtp_pass") or app_settings.SMTP_PASSWORD,
            smtp_secure=stored.get("smtp_secure", app_settings.SMTP_USE_TLS),
            from_name=stored.get("from_name") or app_settings.SMTP_FROM_NAME,
            from_email=stored.get("from_email") or "",
        )

    async def sms_config(self) -> SmsSettings:
        document = await self.ensure_defaults()
        return SmsSettings(**(document.get("sms") or {}))

    async def system_status(self) -> dict:
        document: Optional[dict] = await self.collection.find_one({"key": SETTINGS_KEY}, {"_id": 0})
        email = (document or {}).get("email") or {}
        sms = (document or {}).get("sms") or {}

        return {
            "database": "connected" if await ping_database(self.db) else "disconnected",
            "server": "running",
            "email": "configured" if email.get("smtp_user") and email.get("smtp_pass") else "not_configured",
            "sms": "configured" if sms.get("enabled") and sms.get("api_key") else "not_configured",
            "storage": "available",
            "uptime": round(time.monotonic() - STARTED_AT, 1),
            "version": app_settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc),
        }

"""
Sistem Ayarları API (sadece yönetici)
"""
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime

from api.v1.deps import get_db, require_admin
from core.errors import ServiceError
from models.system_settings import SettingsUpdate, TestMessageRequest
from services.email_service import EmailService
from services.settings_service import SettingsService
from services.sms_service import SmsService


router = APIRouter(prefix="/settings", tags=["Settings"])


def get_settings_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


@router.get("/")
async def get_settings(
    current_user: dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    """
    Ayarlar; gizli alanlar maskeli döner
    """
    return await service.get_settings()


@router.put("/")
async def update_settings(
    data: SettingsUpdate,
    current_user: dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    settings_doc = await service.update_settings(data, current_user["id"])
    return {"msg": "Ayarlar başarıyla güncellendi", "settings": settings_doc}


@router.post("/test-email")
async def send_test_email(
    data: TestMessageRequest,
    current_user: dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    config = await service.email_config()
    if not config.smtp_user:
        raise ServiceError("Email ayarları yapılandırılmamış")

    result = await EmailService(config).send_email(
        data.to or config.smtp_user,
        "Test Email - Süreç Yönetimi Sistemi",
        "Bu bir test emailidir.\n\nEmail ayarlarınız doğru şekilde yapılandırılmış.\n\n"
        f"Gönderim tarihi: {datetime.now().strftime('%d.%m.%Y %H:%M:%S')}",
    )
    if not result["success"]:
        raise ServiceError(f"Test emaili gönderilemedi: {result['error']}")
    return {"msg": "Test emaili başarıyla gönderildi", "message_id": result["message_id"]}


@router.post("/test-sms")
async def send_test_sms(
    data: TestMessageRequest,
    current_user: dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    config = await service.sms_config()
    if not config.enabled:
        raise ServiceError("SMS ayarları yapılandırılmamış veya devre dışı")
    if not data.to:
        raise ServiceError("Telefon numarası gerekli")

    result = await SmsService(config).send_sms(
        data.to,
        "Test SMS - Süreç Yönetimi Sistemi. SMS ayarlarınız doğru şekilde yapılandırılmış. "
        f"Tarih: {datetime.now().strftime('%d.%m.%Y %H:%M')}",
    )
    if not result["success"]:
        raise ServiceError(f"Test SMS gönderilemedi: {result['error']}")
    return {"msg": "Test SMS başarıyla gönderildi", "message_id": result["message_id"]}


@router.get("/system-status")
async def get_system_status(
    current_user: dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    return await service.system_status()

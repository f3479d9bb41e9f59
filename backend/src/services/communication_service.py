"""
Müşteri İletişim Servisi
E-posta/SMS gönderimi ve Communication kayıtları
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import uuid
import logging

from core.errors import ServiceError
from db.mongo import Collections
from models.communication import CommunicationSend, CommunicationStatus, CommunicationType
from services.customer_service import CustomerService
from services.email_service import EmailService
from services.settings_service import SettingsService
from services.sms_service import SmsService

logger = logging.getLogger(__name__)


class CommunicationService:
    """İletişim gönderimi ve geçmişi"""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        email: Optional[EmailService] = None,
        sms: Optional[SmsService] = None
    ):
        self.db = db
        self.collection = db[Collections.COMMUNICATIONS]
        self.customers = CustomerService(db)
        self.settings = SettingsService(db)
        self.email = email
        self.sms = sms

    async def _email_sender(self) -> EmailService:
        if self.email is None:
            self.email = EmailService(await self.settings.email_config())
        return self.email

    async def _sms_sender(self) -> SmsService:
        if self.sms is None:
            self.sms = SmsService(await self.settings.sms_config())
        return self.sms

    async def list_communications(self, customer_id: Optional[str] = None) -> List[dict]:
        query = {"customer_id": customer_id} if customer_id else {}
        return await self.collection.find(query, {"_id": 0}).sort("sent_at", -1).to_list(length=None)

    async def send(self, data: CommunicationSend, sent_by: str) -> dict:
        """
        Müşteriye e-posta ve/veya SMS gönder.
        Kayıt her durumda tutulur; gönderim hatası status=failed olur.
        """
        if not data.customer_id or not data.content:
            raise ServiceError("Müşteri ID ve mesaj içeriği zorunludur")
        if not data.send_email and not data.send_sms:
            raise ServiceError("En az bir iletişim yöntemi seçmelisiniz")

        customer = await self.customers.get_customer(data.customer_id)
        email_to = customer.get("email") if data.send_email else None
        sms_to = customer.get("phone") if data.send_sms else None

        errors, responses = [], []
        if data.send_email:
            if email_to:
                sender = await self._email_sender()
                result = await sender.send_email(email_to, data.subject or "Bilgilendirme", data.content)
                if result["success"]:
                    responses.append(f"email: {result['message_id']}")
                else:
                    errors.append(f"Email: {result['error']}")
            else:
                errors.append("Email: Müşterinin e-posta adresi yok")

        if data.send_sms:
            if sms_to:
                sender = await self._sms_sender()
                result = await sender.send_sms(sms_to, data.content)
                if result["success"]:
                    responses.append(f"sms: {result['message_id']}")
                else:
                    errors.append(f"SMS: {result['error']}")
            else:
                errors.append("SMS: Müşterinin telefon numarası yok")

        now = datetime.now(timezone.utc)
        communication = {
            "id": str(uuid.uuid4()),
            "customer_id": data.customer_id,
            "type": (CommunicationType.EMAIL if data.send_email else CommunicationType.SMS).value,
            "subject": data.subject,
            "content": data.content,
            "sent_at": now,
            "status": (CommunicationStatus.FAILED if errors else CommunicationStatus.SENT).value,
            "sent_by": sent_by,
            "email_to": email_to,
            "sms_to": sms_to,
            "response": "; ".join(responses) or None,
            "error_message": "; ".join(errors) or None,
        }
        await self.collection.insert_one(communication)
        communication.pop("_id", None)

        await self.db[Collections.CUSTOMERS].update_one(
            {"id": data.customer_id}, {"$set": {"last_contact": now}}
        )

        if errors:
            logger.warning(f"İletişim kısmen/tamamen başarısız: {communication['id']} ({communication['error_message']})")
        else:
            logger.info(f"İletişim gönderildi: {communication['id']}")
        return communication

"""
Müşteri İletişim Modelleri
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class CommunicationType(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    CALL = "call"
    MEETING = "meeting"


class CommunicationStatus(str, Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    PENDING = "pending"


class CommunicationSend(BaseModel):
    """Müşteriye e-posta ve/veya SMS gönderimi"""
    customer_id: Optional[str] = None
    subject: Optional[str] = None
    content: Optional[str] = None
    send_email: bool = False
    send_sms: bool = False


class CommunicationOut(BaseModel):
    id: str
    customer_id: str
    type: CommunicationType
    subject: Optional[str] = None
    content: str
    sent_at: datetime
    status: CommunicationStatus
    sent_by: str
    email_to: Optional[str] = None
    sms_to: Optional[str] = None
    response: Optional[str] = None
    error_message: Optional[str] = None

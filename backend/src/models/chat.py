"""
Mesajlaşma Modelleri
Sohbet, mesaj durumu ve okundu bilgisi
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime
from enum import Enum


class MessageType(str, Enum):
    """Mesaj tipleri"""
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
    AUDIO = "audio"
    REPLY = "reply"


class MessageStatus(str, Enum):
    """Mesaj iletim durumu"""
    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class StatusDetails(BaseModel):
    """İletim zaman bilgileri"""
    sent_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    read_by: List[str] = Field(default_factory=list)


class MessageOut(BaseModel):
    """Mesaj"""
    id: str
    sender_id: str
    content: str
    type: MessageType = MessageType.TEXT
    status: MessageStatus = MessageStatus.SENT
    status_details: StatusDetails = Field(default_factory=StatusDetails)
    read: bool = False
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    reply_to: Optional[str] = None
    forwarded: bool = False
    forwarded_from: Optional[str] = None
    is_deleted: bool = False
    timestamp: datetime


class ChatParticipant(BaseModel):
    """Sohbet katılımcısı"""
    id: str
    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[str] = None
    status_message: Optional[str] = None
    is_online: bool = False
    last_seen: Optional[datetime] = None


class ChatOut(BaseModel):
    """Sohbet"""
    id: str
    participants: List[ChatParticipant]
    messages: List[MessageOut] = Field(default_factory=list)
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None
    unread_count: Dict[str, int] = Field(default_factory=dict)
    created_at: datetime


class GetOrCreateChat(BaseModel):
    """İki kullanıcı arasındaki sohbet"""
    user_id_1: Optional[str] = None
    user_id_2: Optional[str] = None


class MessageCreate(BaseModel):
    """Yeni mesaj"""
    content: Optional[str] = None
    type: MessageType = MessageType.TEXT
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    reply_to: Optional[str] = None
    forwarded: bool = False
    forwarded_from: Optional[str] = None


class MessageSendResult(BaseModel):
    """Mesaj gönderim sonucu"""
    success: bool = True
    message_id: str
    chat_id: str
    message: MessageOut


class ChatUpload(BaseModel):
    """Yüklenen dosya bilgisi"""
    file_url: str
    file_name: str
    file_size: int
    file_type: str

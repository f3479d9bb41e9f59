"""
Aktivite ve Bildirim Modelleri
Denetim kaydı girdileri ve kullanıcıya gösterilen bildirimler
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional, Tuple
from datetime import datetime, timezone
from enum import Enum


class ActivityType(str, Enum):
    """Aktivite tipleri"""
    NUDGE = "nudge"
    TASK_CREATED = "task_created"
    TASK_COMPLETED = "task_completed"
    TASK_APPROVED = "task_approved"
    TASK_REJECTED = "task_rejected"
    TASK_UPDATED = "task_updated"
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    LOGIN = "login"
    LOGOUT = "logout"
    ISSUE_CREATED = "issue_created"
    OTHER = "other"


# activity_type -> (bildirim tipi, başlık)
NOTIFICATION_KINDS: Dict[ActivityType, Tuple[str, str]] = {
    ActivityType.NUDGE: ("nudge", "Dürtüldünüz!"),
    ActivityType.TASK_CREATED: ("task", "Yeni Görev"),
    ActivityType.TASK_APPROVED: ("approval", "Görev Onaylandı"),
    ActivityType.TASK_REJECTED: ("rejection", "Görev Reddedildi"),
    ActivityType.TASK_COMPLETED: ("task", "Görev Tamamlandı"),
    ActivityType.TASK_UPDATED: ("task", "Görev Güncellendi"),
    ActivityType.ISSUE_CREATED: ("issue", "Yeni Sorun"),
}


class ActivityOut(BaseModel):
    """Aktivite kaydı"""
    id: str
    action: str
    message: Optional[str] = None
    user: Optional[str] = None
    related_user: Optional[str] = None
    related_task: Optional[str] = None
    related_process: Optional[str] = None
    activity_type: ActivityType = ActivityType.OTHER
    details: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    read: bool = False
    created_at: datetime


class NotificationOut(BaseModel):
    """Kullanıcı bildirimi"""
    id: str
    type: str
    title: str
    message: str
    read: bool = False
    created_at: datetime
    time_ago: Optional[str] = None
    sender: Optional[Dict[str, Any]] = None
    task_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


def format_notification_time(dt: datetime) -> str:
    """
    Bildirim zamanını formatla
    Örn: "2 saat önce", "Dün", "3 gün önce"
    """
    now = datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    diff = now - dt

    seconds = diff.total_seconds()
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 60:
        return "Az önce"
    elif minutes < 60:
        return f"{int(minutes)} dakika önce"
    elif hours < 24:
        return f"{int(hours)} saat önce"
    elif days < 2:
        return "Dün"
    elif days < 7:
        return f"{int(days)} gün önce"
    elif days < 30:
        weeks = int(days / 7)
        return f"{weeks} hafta önce"
    else:
        return dt.strftime("%d.%m.%Y")

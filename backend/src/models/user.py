"""
Kullanıcı Modelleri
Roller, profil, bildirim sesi ve dürtme
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum


# ============================================================================
# ENUM'LAR
# ============================================================================

class UserRole(str, Enum):
    """Kullanıcı rolleri"""
    ADMIN = "yonetici"      # Yönetici
    STAFF = "kullanici"     # Personel


class NotificationSound(str, Enum):
    """Dürtme ve mesaj bildirim sesleri"""
    HAMZA = "hamzaaa"
    IBRAHIM = "ibraaaamabi"
    LOKMA = "lokmalaaaa"
    MUHARREM = "muharrreeeeem"


def normalize_role(value):
    """'kullanıcı' yazımını 'kullanici' rolüne çevir"""
    if isinstance(value, str) and value.strip().lower() == "kullanıcı":
        return UserRole.STAFF.value
    return value


# ============================================================================
# KULLANICI
# ============================================================================

class UserCreate(BaseModel):
    """Yeni kullanıcı"""
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    avatar: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def role_alias(cls, value):
        return normalize_role(value)


class UserUpdate(BaseModel):
    """Kullanıcı güncelleme"""
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    avatar: Optional[str] = None
    status_message: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("role", mode="before")
    @classmethod
    def role_alias(cls, value):
        return normalize_role(value)


class UserOut(BaseModel):
    """Kullanıcı çıktısı (şifre hariç)"""
    id: str
    name: str
    username: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: UserRole
    avatar: Optional[str] = None
    status_message: str = "Selam!"
    notification_sound: NotificationSound = NotificationSound.HAMZA
    is_online: bool = False
    is_active: bool = True
    last_seen: Optional[datetime] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class PasswordChange(BaseModel):
    """Şifre değiştirme"""
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class StatusMessageUpdate(BaseModel):
    """Durum mesajı"""
    status_message: Optional[str] = None


class NotificationSoundUpdate(BaseModel):
    """Bildirim sesi"""
    notification_sound: Optional[str] = None


class NudgeRequest(BaseModel):
    """Dürtme isteği"""
    message: Optional[str] = None
    task_id: Optional[str] = None
    task_title: Optional[str] = None
    motivational_message: Optional[str] = None


class Achievement(BaseModel):
    """Başarı rozeti"""
    id: str
    title: str
    description: str
    icon: str
    unlocked: bool
    unlocked_at: Optional[datetime] = None
    progress: int
    target: int


class UserAnalytics(BaseModel):
    """Kullanıcı performans analizi"""
    summary: Dict[str, Any]
    priority_stats: Dict[str, Dict[str, int]]
    monthly_performance: List[dict] = Field(default_factory=list)
    weekly_activity: List[dict] = Field(default_factory=list)
    insights: Dict[str, List[str]] = Field(default_factory=dict)

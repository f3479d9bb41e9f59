"""
Sistem Ayarları Modelleri
Bildirim, sistem, e-posta, SMS, güvenlik, görünüm, API ve log ayarları
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, Literal, Optional
from datetime import datetime

# Arayüzde gösterilen gizli değer
SECRET_MASK = "********"


class NotificationSettings(BaseModel):
    email_notifications: bool = True
    task_assignment_notifications: bool = True
    status_update_notifications: bool = True
    overdue_task_notifications: bool = True
    sms_notifications: bool = False


class SystemSection(BaseModel):
    max_file_size: int = Field(5, ge=1, le=50)
    session_timeout: int = Field(60, ge=15, le=480)
    max_users_per_org: int = Field(100, ge=1, le=1000)
    backup_enabled: bool = True
    maintenance_mode: bool = False
    allow_registration: bool = True


class EmailSettings(BaseModel):
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_pass: str = ""
    smtp_secure: bool = True
    from_name: str = "Süreç Yönetimi Sistemi"
    from_email: str = ""


class SmsSettings(BaseModel):
    provider: Literal["netgsm", "iletimerkezi", "verimor"] = "netgsm"
    api_key: str = ""
    api_secret: str = ""
    sender_name: str = "DEMO"
    enabled: bool = False


class SecuritySettings(BaseModel):
    password_min_length: int = Field(6, ge=4, le=20)
    password_require_uppercase: bool = True
    password_require_lowercase: bool = True
    password_require_numbers: bool = True
    password_require_special_chars: bool = False
    password_expiry_days: int = Field(90, ge=30, le=365)
    max_login_attempts: int = Field(5, ge=3, le=10)
    lockout_duration: int = Field(15, ge=5, le=60)
    two_factor_enabled: bool = False


class AppearanceSettings(BaseModel):
    default_theme: Literal["light", "dark", "system"] = "system"
    company_name: str = "Süreç Yönetimi"
    company_logo: str = ""
    primary_color: str = "#007bff"
    language: Literal["tr", "en"] = "tr"


class ApiSettings(BaseModel):
    rate_limit_enabled: bool = True
    max_requests_per_minute: int = Field(100, ge=10, le=1000)
    enable_api_docs: bool = True


class LoggingSettings(BaseModel):
    level: Literal["error", "warn", "info", "debug"] = "info"
    retention_days: int = Field(30, ge=7, le=365)
    enable_audit_log: bool = True


class SystemSettings(BaseModel):
    """Tek settings dokümanı"""
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    system: SystemSection = Field(default_factory=SystemSection)
    email: EmailSettings = Field(default_factory=EmailSettings)
    sms: SmsSettings = Field(default_factory=SmsSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    appearance: AppearanceSettings = Field(default_factory=AppearanceSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    last_updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


SETTINGS_SECTIONS = (
    "notifications", "system", "email", "sms",
    "security", "appearance", "api", "logging",
)


class SettingsUpdate(BaseModel):
    """Kısmi ayar güncellemesi (bölüm bazında birleştirilir)"""
    notifications: Optional[Dict[str, Any]] = None
    system: Optional[Dict[str, Any]] = None
    email: Optional[Dict[str, Any]] = None
    sms: Optional[Dict[str, Any]] = None
    security: Optional[Dict[str, Any]] = None
    appearance: Optional[Dict[str, Any]] = None
    api: Optional[Dict[str, Any]] = None
    logging: Optional[Dict[str, Any]] = None


class TestMessageRequest(BaseModel):
    to: Optional[str] = None

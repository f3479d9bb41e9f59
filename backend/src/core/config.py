"""
Backend Configuration
Ortam değişkenleri ve sistem ayarları
"""
from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    """Uygulama ayarları"""

    # Uygulama
    APP_NAME: str = "Süreç Yönetimi"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # MongoDB
    MONGO_URL: str = "mongodb://localhost:27017"
    DB_NAME: str = "surec_yonetimi"

    # JWT
    JWT_SECRET: str = "change-me-in-production-use-strong-secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 saat

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # SMTP (Settings dokümanında değer yoksa kullanılır)
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_NAME: str = "Süreç Yönetimi Sistemi"
    SMTP_USE_TLS: bool = True

    # SMS
    SMS_TIMEOUT_SECONDS: float = 15.0
    NETGSM_URL: str = "https://api.netgsm.com.tr/sms/send/get"
    ILETIMERKEZI_URL: str = "https://api.iletimerkezi.com/v1/send-sms/json"
    VERIMOR_URL: str = "https://sms.verimor.com.tr/v2/send.json"

    # Dosya yükleme
    UPLOAD_DIR: str = "uploads"
    AVATAR_DIR: str = "avatars"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    CHAT_ALLOWED_EXTENSIONS: List[str] = [
        ".jpeg", ".jpg", ".png", ".gif", ".webp",
        ".pdf", ".doc", ".docx", ".txt",
        ".zip", ".rar"
    ]
    AVATAR_ALLOWED_EXTENSIONS: List[str] = [".jpeg", ".jpg", ".png", ".gif", ".webp"]

    # Güvenlik
    PASSWORD_MIN_LENGTH: int = 6
    DEFAULT_ADMIN_EMAIL: str = "admin@surecyonetimi.com.tr"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/surec.log"

    # Redis (opsiyonel - Socket.IO çoklu instance için)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = False

    # Socket.IO
    SOCKETIO_PATH: str = "socket.io"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()


# Yardımcı fonksiyonlar
def get_upload_path(filename: str, subdir: str = "") -> Path:
    """Yükleme dosya yolunu döndür"""
    upload_dir = Path(settings.UPLOAD_DIR) / subdir if subdir else Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir / filename


def is_allowed_file(filename: str, allowed: List[str]) -> bool:
    """Dosya uzantısının izinli olup olmadığını kontrol et"""
    ext = Path(filename).suffix.lower()
    return ext in allowed


def get_file_size_mb(size_bytes: int) -> float:
    """Dosya boyutunu MB cinsinden döndür"""
    return size_bytes / (1024 * 1024)


def validate_password(password: str) -> tuple[bool, str]:
    """
    Şifre kurallarını kontrol et
    Returns: (is_valid, error_message)
    """
    if not password or len(password) < settings.PASSWORD_MIN_LENGTH:
        return False, f"Şifre en az {settings.PASSWORD_MIN_LENGTH} karakter olmalıdır"

    return True, ""

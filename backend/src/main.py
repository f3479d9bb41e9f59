"""
Süreç Yönetimi Backend Main Application
FastAPI + Socket.IO, MongoDB kullanan saha servis yönetim sistemi
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
import logging

import socketio

# Core imports
from core.config import settings
from core.errors import register_exception_handlers
from core.logging_config import setup_logging
from db.mongo import Collections, close_database_connection, ensure_indexes, get_database
from models.user import UserCreate, UserRole
from services.realtime import gateway, sio
from services.settings_service import SettingsService
from services.user_service import UserService

# API Routers
from api.sockets import register_socket_handlers
from api.v1 import (
    auth, calendar, chat, communications, customers, issues, maintenance,
    notifications, processes, service_jobs, settings as settings_api, support,
    tasks, technicians, users
)

setup_logging()
logger = logging.getLogger(__name__)

# Yükleme dizinleri
UPLOAD_DIR = Path(settings.UPLOAD_DIR)
AVATAR_DIR = Path(settings.AVATAR_DIR)
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
AVATAR_DIR.mkdir(parents=True, exist_ok=True)


async def seed_default_admin(db) -> None:
    """Hiç yönetici yoksa öntanımlı yönetici hesabını oluştur"""
    admin = await db[Collections.USERS].find_one({"role": UserRole.ADMIN.value}, {"_id": 1})
    if admin:
        return

    await UserService(db).create_user(UserCreate(
        name="Sistem Yöneticisi",
        email=settings.DEFAULT_ADMIN_EMAIL,
        password=settings.DEFAULT_ADMIN_PASSWORD,
        phone="-",
        role=UserRole.ADMIN,
    ))
    logger.warning(
        f"Öntanımlı yönetici oluşturuldu ({settings.DEFAULT_ADMIN_EMAIL}); ilk girişte şifreyi değiştirin"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Uygulama başlatma ve kapatma işlemleri
    """
    # Startup
    logger.info(f"🚀 {settings.APP_NAME} backend başlatılıyor...")

    db = await get_database()
    await ensure_indexes(db)
    await gateway.reset_presence()
    await seed_default_admin(db)
    await SettingsService(db).ensure_defaults()

    logger.info(f"✅ {settings.APP_NAME} backend hazır")

    yield

    # Shutdown
    logger.info("🛑 Backend kapatılıyor...")
    await close_database_connection()


# FastAPI uygulaması
fastapi_app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Görev, müşteri, servis ve destek yönetimi API",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

register_exception_handlers(fastapi_app)

# CORS ayarları
fastapi_app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Static files
fastapi_app.mount("/uploads", StaticFiles(directory=str(UPLOAD_DIR)), name="uploads")
fastapi_app.mount("/avatars", StaticFiles(directory=str(AVATAR_DIR)), name="avatars")


# Health check
@fastapi_app.get("/health")
async def health_check():
    """Sistem sağlık kontrolü"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


# API Routers
for module in (
    auth, users, tasks, chat, notifications, customers, communications,
    issues, processes, service_jobs, support, technicians, calendar, settings_api
):
    fastapi_app.include_router(module.router, prefix="/api/v1")
fastapi_app.include_router(maintenance.router, prefix="/api/v1")
fastapi_app.include_router(maintenance.contracts_router, prefix="/api/v1")


# Root endpoint
@fastapi_app.get("/")
async def root():
    """API kök endpoint"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
        "health": "/health"
    }


# Socket.IO; REST istekleri FastAPI'ye aktarılır
register_socket_handlers(sio, gateway)
app = socketio.ASGIApp(sio, other_asgi_app=fastapi_app, socketio_path=settings.SOCKETIO_PATH)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )

"""
Test fixture'ları
mongomock-motor veritabanı, sahte olay yayıncısı ve yetkili HTTP istemcisi
"""
from datetime import datetime, timezone
import uuid

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from core.security import create_access_token, hash_password
from db.mongo import Collections, get_db
from models.user import UserRole
from services.realtime import get_notifier
from main import fastapi_app


class FakeNotifier:
    """Yayınlanan olayları listede tutar"""

    def __init__(self):
        self.events = []

    async def emit_to_user(self, user_id, event, data):
        if user_id:
            self.events.append((user_id, event, data))

    async def emit_to_users(self, user_ids, event, data):
        for user_id in dict.fromkeys(user_ids):
            await self.emit_to_user(user_id, event, data)

    async def broadcast(self, event, data):
        self.events.append((None, event, data))

    def named(self, event):
        return [e for e in self.events if e[1] == event]


@pytest.fixture
def db():
    return AsyncMongoMockClient()[f"test_{uuid.uuid4().hex}"]


@pytest.fixture
def notifier():
    return FakeNotifier()


async def _insert_user(db, name, email, role, password="secret123"):
    now = datetime.now(timezone.utc)
    user = {
        "id": str(uuid.uuid4()),
        "name": name,
        "username": email,
        "email": email,
        "password": hash_password(password),
        "phone": "05551234567",
        "role": role.value,
        "avatar": None,
        "status_message": "Selam!",
        "notification_sound": "hamzaaa",
        "is_online": False,
        "is_active": True,
        "last_seen": None,
        "last_login": None,
        "created_at": now,
        "updated_at": now,
    }
    await db[Collections.USERS].insert_one(user)
    user.pop("_id", None)
    return user


@pytest.fixture
async def admin(db):
    return await _insert_user(db, "Ayşe Yönetici", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
async def staff(db):
    return await _insert_user(db, "Mehmet Personel", "mehmet@example.com", UserRole.STAFF)


@pytest.fixture
async def other_staff(db):
    return await _insert_user(db, "Zeynep Personel", "zeynep@example.com", UserRole.STAFF)


@pytest.fixture
def auth_headers():
    """Kullanıcı için Bearer header üretir"""
    def build(user: dict) -> dict:
        token, _ = create_access_token(user["id"])
        return {"Authorization": f"Bearer {token}"}
    return build


@pytest.fixture
async def client(db, notifier):
    async def override_db():
        return db

    fastapi_app.dependency_overrides[get_db] = override_db
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier

    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    fastapi_app.dependency_overrides.clear()

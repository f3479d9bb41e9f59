"""
Gerçek Zamanlı Katman
Socket.IO sunucusu, kullanıcı odaları, çevrimiçi durumu ve olay yayını
"""
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Set, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase
from fastapi.encoders import jsonable_encoder
from datetime import datetime, timezone
from urllib.parse import parse_qs
import logging

import jwt
import socketio

from core.config import settings
from core.security import decode_access_token
from db.mongo import Collections, get_database

logger = logging.getLogger(__name__)


def create_socket_server() -> socketio.AsyncServer:
    """
    Socket.IO sunucusunu oluştur
    REDIS_ENABLED ise odalar Redis üzerinden instance'lar arasında paylaşılır
    """
    client_manager = None
    if settings.REDIS_ENABLED:
        client_manager = socketio.AsyncRedisManager(settings.REDIS_URL)
        logger.info(f"Socket.IO Redis adapter aktif: {settings.REDIS_URL}")

    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.CORS_ORIGINS,
        client_manager=client_manager,
        logger=settings.DEBUG,
        engineio_logger=settings.DEBUG,
    )


def user_room(user_id: str) -> str:
    """Kullanıcıya özel oda adı"""
    return f"user_{user_id}"


# ============================================================================
# OLAY YAYINI
# ============================================================================

class RealtimeNotifier:
    """REST katmanının kullandığı olay yayıncısı"""

    def __init__(self, server: socketio.AsyncServer):
        self.server = server

    async def emit_to_user(self, user_id: Optional[str], event: str, data: Any) -> None:
        """Tek kullanıcının odasına olay gönder"""
        if not user_id:
            return
        try:
            await self.server.emit(event, jsonable_encoder(data), room=user_room(user_id))
        except Exception as e:
            # yayın hatası isteği bozmamalı
            logger.error(f"Socket olayı gönderilemedi ({event} -> {user_id}): {e}")

    async def emit_to_users(self, user_ids: Iterable[str], event: str, data: Any) -> None:
        """Birden çok kullanıcıya olay gönder"""
        for user_id in dict.fromkeys(user_ids):
            await self.emit_to_user(user_id, event, data)

    async def broadcast(self, event: str, data: Any) -> None:
        """Tüm bağlı istemcilere yayın"""
        try:
            await self.server.emit(event, jsonable_encoder(data))
        except Exception as e:
            logger.error(f"Socket yayını başarısız ({event}): {e}")


# ============================================================================
# ÇEVRİMİÇİ DURUMU
# ============================================================================

class PresenceRegistry:
    """Kullanıcı başına bağlı socket'ları takip eder"""

    def __init__(self):
        self._sockets: Dict[str, Set[str]] = {}
        self._owners: Dict[str, str] = {}

    def add(self, sid: str, user_id: str) -> bool:
        """Socket'ı kaydet; kullanıcının ilk bağlantısıysa True"""
        previous = self._owners.get(sid)
        if previous and previous != user_id:
            self.remove(sid)

        sockets = self._sockets.setdefault(user_id, set())
        first = len(sockets) == 0
        sockets.add(sid)
        self._owners[sid] = user_id
        return first

    def remove(self, sid: str) -> Tuple[Optional[str], bool]:
        """Socket'ı çıkar; (user_id, kullanıcı çevrimdışı oldu mu)"""
        user_id = self._owners.pop(sid, None)
        if user_id is None:
            return None, False

        sockets = self._sockets.get(user_id, set())
        sockets.discard(sid)
        if not sockets:
            self._sockets.pop(user_id, None)
            return user_id, True
        return user_id, False

    def user_for(self, sid: str) -> Optional[str]:
        return self._owners.get(sid)

    def is_online(self, user_id: str) -> bool:
        return bool(self._sockets.get(user_id))


# ============================================================================
# SOCKET OLAYLARI
# ============================================================================

DatabaseProvider = Callable[[], Awaitable[AsyncIOMotorDatabase]]


def _token_from_handshake(environ: dict, auth: Any) -> Optional[str]:
    """auth parametresi, query string veya Authorization header'dan token al"""
    if isinstance(auth, dict) and auth.get("token"):
        return auth["token"]
    if isinstance(auth, str) and auth:
        return auth

    query = parse_qs(environ.get("QUERY_STRING", ""))
    if query.get("token"):
        return query["token"][0]

    header = environ.get("HTTP_AUTHORIZATION", "")
    if header.startswith("Bearer "):
        return header[7:]
    return None


class RealtimeGateway:
    """Socket olaylarının iş mantığı"""

    def __init__(
        self,
        server: socketio.AsyncServer,
        presence: PresenceRegistry,
        db_provider: DatabaseProvider = get_database,
    ):
        self.server = server
        self.presence = presence
        self.db_provider = db_provider

    async def _users(self):
        db = await self.db_provider()
        return db[Collections.USERS]

    async def _broadcast_status(self, user_id: str, is_online: bool, last_seen: datetime) -> None:
        await self.server.emit("user_status_changed", jsonable_encoder({
            "user_id": user_id,
            "is_online": is_online,
            "last_seen": last_seen,
        }))

    async def connect(self, sid: str, environ: dict, auth: Any = None) -> bool:
        """
        Bağlantı kabulü
        Token yoksa anonim kabul edilir, geçersiz token reddedilir
        """
        token = _token_from_handshake(environ, auth)
        if not token:
            await self.server.save_session(sid, {"user_id": None})
            return True

        try:
            payload = decode_access_token(token)
        except jwt.ExpiredSignatureError:
            logger.warning(f"Socket bağlantısı reddedildi, token süresi dolmuş: {sid}")
            return False
        except jwt.InvalidTokenError:
            logger.warning(f"Socket bağlantısı reddedildi, geçersiz token: {sid}")
            return False

        await self.server.save_session(sid, {"user_id": payload["sub"]})
        logger.info(f"Socket bağlandı: {sid} (kullanıcı {payload['sub']})")
        return True

    async def join_user(self, sid: str, user_id: Any) -> None:
        """Kullanıcı odasına katıl ve çevrimiçi işaretle"""
        if not isinstance(user_id, str) or not user_id:
            await self.server.emit("error", {"message": "user_id gerekli"}, room=sid)
            return

        session = await self.server.get_session(sid)
        authenticated = (session or {}).get("user_id")
        if authenticated and authenticated != user_id:
            logger.warning(f"join_user reddedildi: {sid} {user_id} odasına katılamaz")
            await self.server.emit("error", {"message": "Bu odaya katılma yetkiniz yok"}, room=sid)
            return

        previous = self.presence.user_for(sid)
        if previous and previous != user_id:
            # socket başka kullanıcıya geçiyor; eski oda ve durum bırakılır
            await self.server.leave_room(sid, user_room(previous))
            _, went_offline = self.presence.remove(sid)
            if went_offline:
                await self._mark_offline(previous)

        room = user_room(user_id)
        await self.server.enter_room(sid, room)
        first_connection = self.presence.add(sid, user_id)

        if first_connection:
            now = datetime.now(timezone.utc)
            users = await self._users()
            await users.update_one(
                {"id": user_id},
                {"$set": {"is_online": True, "last_seen": now, "last_login": now}}
            )
            await self._broadcast_status(user_id, True, now)

        logger.info(f"Kullanıcı odaya katıldı: {room} ({sid})")
        await self.server.emit("joined_room", {"room": room, "user_id": user_id}, room=sid)

    async def relay_typing(self, sid: str, event: str, data: Any) -> None:
        """Yazıyor bilgisini alıcının odasına ilet"""
        if not isinstance(data, dict) or not data.get("recipient_id"):
            return

        sender_id = self.presence.user_for(sid) or data.get("user_id")
        await self.server.emit(event, jsonable_encoder({
            "chat_id": data.get("chat_id"),
            "user_id": sender_id,
            "user_name": data.get("user_name"),
        }), room=user_room(data["recipient_id"]))

    async def heartbeat(self, sid: str, user_id: Any = None) -> None:
        """Son görülme zamanını yenile"""
        target = self.presence.user_for(sid) or (user_id if isinstance(user_id, str) else None)
        if not target:
            return
        users = await self._users()
        await users.update_one(
            {"id": target},
            {"$set": {"last_seen": datetime.now(timezone.utc), "is_online": True}}
        )

    async def disconnect(self, sid: str) -> None:
        """Son socket kapanınca kullanıcıyı çevrimdışı yap"""
        user_id, went_offline = self.presence.remove(sid)
        if not user_id or not went_offline:
            return

        await self._mark_offline(user_id)

    async def _mark_offline(self, user_id: str) -> None:
        now = datetime.now(timezone.utc)
        users = await self._users()
        await users.update_one(
            {"id": user_id},
            {"$set": {"is_online": False, "last_seen": now}}
        )
        await self._broadcast_status(user_id, False, now)
        logger.info(f"Kullanıcı çevrimdışı: {user_id}")

    async def reset_presence(self) -> None:
        """Sunucu açılışında tüm kullanıcıları çevrimdışı yap"""
        users = await self._users()
        result = await users.update_many({"is_online": True}, {"$set": {"is_online": False}})
        logger.info(f"{result.modified_count} kullanıcı çevrimdışı olarak işaretlendi")


# Global instance'lar
sio = create_socket_server()
presence = PresenceRegistry()
notifier = RealtimeNotifier(sio)
gateway = RealtimeGateway(sio, presence)


def get_notifier() -> RealtimeNotifier:
    """
    FastAPI dependency olarak olay yayıncısı
    """
    return notifier

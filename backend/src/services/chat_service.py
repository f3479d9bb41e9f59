"""
Mesajlaşma Servisi
Sohbet oluşturma, mesaj gönderme, okundu bilgisi ve okunmamış sayaçları
"""
from typing import Dict, List, Optional, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
from pathlib import Path
import uuid
import logging

import aiofiles

from core.config import settings, get_file_size_mb, get_upload_path, is_allowed_file
from core.errors import NotFoundError, PermissionDeniedError, ServiceError
from core.utils import as_utc
from db.mongo import Collections
from models.chat import MessageCreate, MessageStatus, MessageType
from models.user import NotificationSound

logger = logging.getLogger(__name__)

PUBLIC_USER_FIELDS = {
    "_id": 0, "id": 1, "name": 1, "email": 1, "avatar": 1, "role": 1,
    "status_message": 1, "is_online": 1, "last_seen": 1, "notification_sound": 1,
}


def visible_messages(messages: List[dict]) -> List[dict]:
    """Silinmiş mesajları çıkar"""
    return [m for m in messages if not m.get("is_deleted")]


class ChatService:
    """Sohbet iş mantığı servisi"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.chats = db[Collections.CHATS]
        self.users = db[Collections.USERS]

    # ========================================================================
    # YARDIMCILAR
    # ========================================================================

    async def get_chat(self, chat_id: str) -> dict:
        chat = await self.chats.find_one({"id": chat_id}, {"_id": 0})
        if not chat:
            raise NotFoundError("Sohbet bulunamadı")
        return chat

    @staticmethod
    def ensure_participant(chat: dict, user_id: str) -> None:
        if user_id not in chat.get("participants", []):
            raise PermissionDeniedError("Bu sohbete erişim yetkiniz yok")

    async def _public_users(self, user_ids: List[str]) -> Dict[str, dict]:
        if not user_ids:
            return {}
        users = await self.users.find(
            {"id": {"$in": list(user_ids)}}, PUBLIC_USER_FIELDS
        ).to_list(length=len(user_ids))
        return {u["id"]: u for u in users}

    async def _expand(self, chat: dict, users: Optional[Dict[str, dict]] = None) -> dict:
        """Katılımcıları kullanıcı bilgisiyle doldur, silinmiş mesajları çıkar"""
        if users is None:
            users = await self._public_users(chat.get("participants", []))

        participants = [
            users.get(pid, {"id": pid, "name": "Silinmiş Kullanıcı"})
            for pid in chat.get("participants", [])
        ]
        return {
            **chat,
            "participants": participants,
            "messages": visible_messages(chat.get("messages", [])),
        }

    # ========================================================================
    # SOHBETLER
    # ========================================================================

    async def get_or_create(self, user_id_1: Optional[str], user_id_2: Optional[str]) -> dict:
        """İki kullanıcı arasındaki sohbeti getir, yoksa oluştur"""
        if not user_id_1 or not user_id_2:
            raise ServiceError("İki kullanıcı ID'si de gereklidir")
        if user_id_1 == user_id_2:
            raise ServiceError("Kendinizle sohbet başlatamazsınız")

        users = await self._public_users([user_id_1, user_id_2])
        if len(users) < 2:
            raise NotFoundError("Kullanıcı bulunamadı")

        chat = await self.chats.find_one(
            {"participants": {"$all": [user_id_1, user_id_2], "$size": 2}},
            {"_id": 0}
        )

        if not chat:
            now = datetime.now(timezone.utc)
            chat = {
                "id": str(uuid.uuid4()),
                "participants": [user_id_1, user_id_2],
                "messages": [],
                "last_message": None,
                "last_message_time": None,
                "unread_count": {user_id_1: 0, user_id_2: 0},
                "created_at": now,
                "updated_at": now,
            }
            await self.chats.insert_one(chat)
            chat.pop("_id", None)
            logger.info(f"Yeni sohbet oluşturuldu: {chat['id']}")

        return await self._expand(chat, users)

    async def list_user_chats(self, user_id: str) -> List[dict]:
        """Kullanıcının sohbetleri, son mesaja göre sıralı"""
        chats = await self.chats.find(
            {"participants": user_id}, {"_id": 0}
        ).to_list(length=None)

        participant_ids = {pid for chat in chats for pid in chat.get("participants", [])}
        users = await self._public_users(list(participant_ids))

        expanded = [await self._expand(chat, users) for chat in chats]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        expanded.sort(
            key=lambda c: as_utc(c.get("last_message_time")) or epoch,
            reverse=True,
        )
        return expanded

    async def get_messages(
        self,
        chat_id: str,
        user_id: str,
        limit: int = 50,
        before: Optional[str] = None
    ) -> List[dict]:
        """Sohbetin silinmemiş mesajları (en yeni `limit` kadar)"""
        chat = await self.get_chat(chat_id)
        self.ensure_participant(chat, user_id)

        messages = visible_messages(chat.get("messages", []))
        if before:
            ids = [m["id"] for m in messages]
            if before in ids:
                messages = messages[:ids.index(before)]
        return messages[-limit:]

    async def unread_total(self, user_id: str) -> int:
        """Tüm sohbetlerdeki okunmamış mesaj toplamı"""
        chats = await self.chats.find(
            {"participants": user_id}, {"_id": 0, "unread_count": 1}
        ).to_list(length=None)
        return sum(int((c.get("unread_count") or {}).get(user_id, 0)) for c in chats)

    # ========================================================================
    # MESAJLAR
    # ========================================================================

    async def send_message(
        self,
        chat_id: str,
        sender_id: str,
        data: MessageCreate
    ) -> Tuple[dict, List[str]]:
        """
        Mesaj ekle
        Returns: (mesaj, diğer katılımcılar)
        """
        if not sender_id or not data.content or not data.content.strip():
            raise ServiceError("Gönderen ve mesaj içeriği gereklidir")

        chat = await self.get_chat(chat_id)
        self.ensure_participant(chat, sender_id)

        now = datetime.now(timezone.utc)
        message = {
            "id": str(uuid.uuid4()),
            "sender_id": sender_id,
            "content": data.content,
            "type": (data.type or MessageType.TEXT).value,
            "status": MessageStatus.SENT.value,
            "status_details": {
                "sent_at": now,
                "delivered_at": now,
                "read_at": None,
                "read_by": [],
            },
            "read": False,
            "file_url": data.file_url,
            "file_name": data.file_name,
            "file_size": data.file_size,
            "file_type": data.file_type,
            "reply_to": data.reply_to,
            "forwarded": data.forwarded,
            "forwarded_from": data.forwarded_from,
            "is_deleted": False,
            "timestamp": now,
        }

        others = [pid for pid in chat["participants"] if pid != sender_id]
        preview = data.content if message["type"] == MessageType.TEXT.value else (data.file_name or data.content)

        # Tek atomik güncelleme: mesaj, son mesaj ve okunmamış sayaçlar
        await self.chats.update_one(
            {"id": chat_id},
            {
                "$push": {"messages": message},
                "$set": {
                    "last_message": preview,
                    "last_message_time": now,
                    "updated_at": now,
                },
                "$inc": {f"unread_count.{pid}": 1 for pid in others},
            }
        )

        return message, others

    async def mark_read(self, chat_id: str, reader_id: str) -> Tuple[datetime, List[str]]:
        """
        Okuyucuya gelen mesajları okundu yap, sayacı okunan mesaj kadar azalt
        Returns: (okunma zamanı, diğer katılımcılar)
        """
        chat = await self.get_chat(chat_id)
        self.ensure_participant(chat, reader_id)

        now = datetime.now(timezone.utc)
        counter = f"unread_count.{reader_id}"
        updates = {}
        newly_read = 0

        # indeks bazlı $set; eşzamanlı $push mevcut indeksleri değiştirmez
        for index, message in enumerate(chat.get("messages", [])):
            if message.get("sender_id") == reader_id:
                continue

            prefix = f"messages.{index}"
            read_by = (message.get("status_details") or {}).get("read_by") or []
            if reader_id not in read_by:
                newly_read += 1
                updates[f"{prefix}.status_details.read_by"] = read_by + [reader_id]

            if message.get("is_deleted"):
                continue
            updates[f"{prefix}.read"] = True
            if message.get("status") != MessageStatus.READ.value:
                updates[f"{prefix}.status"] = MessageStatus.READ.value
                updates[f"{prefix}.status_details.read_at"] = now

        # sadece bu okumada işaretlenen mesajlar düşülür; arada gelen mesaj sayılı kalır
        change = {"$inc": {counter: -newly_read}}
        if updates:
            change["$set"] = updates
        await self.chats.update_one({"id": chat_id}, change)
        await self.chats.update_one({"id": chat_id, counter: {"$lt": 0}}, {"$set": {counter: 0}})

        others = [pid for pid in chat["participants"] if pid != reader_id]
        return now, others

    async def delete_message(self, chat_id: str, message_id: str, user_id: str) -> List[str]:
        """
        Mesajı yumuşak sil
        Returns: sohbet katılımcıları
        """
        chat = await self.get_chat(chat_id)

        index = next(
            (i for i, m in enumerate(chat.get("messages", [])) if m.get("id") == message_id),
            None
        )
        if index is None or chat["messages"][index].get("is_deleted"):
            raise NotFoundError("Mesaj bulunamadı")

        if chat["messages"][index].get("sender_id") != user_id:
            raise PermissionDeniedError("Sadece kendi mesajlarınızı silebilirsiniz")

        now = datetime.now(timezone.utc)
        await self.chats.update_one(
            {"id": chat_id},
            {"$set": {
                f"messages.{index}.is_deleted": True,
                f"messages.{index}.deleted_at": now,
                f"messages.{index}.deleted_by": user_id,
                "updated_at": now,
            }}
        )
        logger.info(f"Mesaj silindi: {message_id} (sohbet {chat_id})")
        return list(chat["participants"])

    # ========================================================================
    # KULLANICI TERCİHLERİ
    # ========================================================================

    async def list_users(self, exclude_user_id: Optional[str] = None) -> List[dict]:
        """Sohbet için kullanıcı listesi: önce çevrimiçi, sonra son görülme"""
        query = {"id": {"$ne": exclude_user_id}} if exclude_user_id else {}
        users = await self.users.find(query, PUBLIC_USER_FIELDS).to_list(length=None)

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        users.sort(
            key=lambda u: (bool(u.get("is_online")), as_utc(u.get("last_seen")) or epoch),
            reverse=True,
        )
        return users

    async def update_status_message(self, user_id: str, status_message: Optional[str]) -> str:
        """Durum mesajını güncelle"""
        text = (status_message or "").strip()
        if not text:
            raise ServiceError("Durum mesajı gereklidir")

        result = await self.users.update_one(
            {"id": user_id},
            {"$set": {"status_message": text, "updated_at": datetime.now(timezone.utc)}}
        )
        if result.matched_count == 0:
            raise NotFoundError("Kullanıcı bulunamadı")
        return text

    async def update_notification_sound(self, user_id: str, sound: Optional[str]) -> str:
        """Bildirim sesini güncelle"""
        valid = [s.value for s in NotificationSound]
        if sound not in valid:
            raise ServiceError(f"Geçersiz bildirim sesi. Geçerli değerler: {', '.join(valid)}")

        result = await self.users.update_one(
            {"id": user_id},
            {"$set": {"notification_sound": sound, "updated_at": datetime.now(timezone.utc)}}
        )
        if result.matched_count == 0:
            raise NotFoundError("Kullanıcı bulunamadı")
        return sound

    # ========================================================================
    # DOSYA
    # ========================================================================

    async def store_upload(self, filename: Optional[str], content_type: Optional[str], content: bytes) -> dict:
        """Sohbet dosyasını kaydet"""
        if not filename:
            raise ServiceError("Dosya seçilmedi")
        if not is_allowed_file(filename, settings.CHAT_ALLOWED_EXTENSIONS):
            raise ServiceError("Desteklenmeyen dosya türü")
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise ServiceError(f"Dosya boyutu {get_file_size_mb(settings.MAX_UPLOAD_SIZE):.0f}MB'ı aşamaz")

        stored_name = f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
        path = get_upload_path(stored_name, "chat")

        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

        return {
            "file_url": f"/uploads/chat/{stored_name}",
            "file_name": filename,
            "file_size": len(content),
            "file_type": content_type or "application/octet-stream",
        }

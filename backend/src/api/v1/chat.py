"""
Sohbet API
Birebir sohbetler, mesajlar, okundu bilgisi, dosya yükleme
"""
from fastapi import APIRouter, Depends, UploadFile, File, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional

from api.v1.deps import ensure_self_or_admin, get_current_user, get_db, get_notifier, RealtimeNotifier
from models.chat import (
    ChatOut, ChatParticipant, ChatUpload, GetOrCreateChat, MessageCreate, MessageOut, MessageSendResult
)
from models.user import NotificationSoundUpdate, StatusMessageUpdate
from services.chat_service import ChatService


router = APIRouter(prefix="/chat", tags=["Chat"])


def get_chat_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> ChatService:
    return ChatService(db)


# ============================================================================
# DOSYA VE KULLANICI TERCİHLERİ
# ============================================================================

@router.post("/upload", response_model=ChatUpload)
async def upload_chat_file(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service)
):
    """
    Sohbet dosyası yükle (en fazla 10MB)
    """
    content = await file.read()
    return await service.store_upload(file.filename, file.content_type, content)


@router.put("/user/{user_id}/status")
async def update_status_message(
    user_id: str,
    data: StatusMessageUpdate,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service)
):
    ensure_self_or_admin(current_user, user_id)
    text = await service.update_status_message(user_id, data.status_message)
    return {"msg": "Durum mesajı güncellendi", "status_message": text}


@router.put("/user/{user_id}/notification-sound")
async def update_notification_sound(
    user_id: str,
    data: NotificationSoundUpdate,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service)
):
    ensure_self_or_admin(current_user, user_id)
    sound = await service.update_notification_sound(user_id, data.notification_sound)
    return {"msg": "Bildirim sesi güncellendi", "notification_sound": sound}


@router.get("/all-users", response_model=List[ChatParticipant])
async def list_chat_users(
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service)
):
    return await service.list_users(exclude_user_id=current_user["id"])


# ============================================================================
# SOHBETLER
# ============================================================================

@router.get("/user/{user_id}", response_model=List[ChatOut])
async def list_user_chats(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service)
):
    ensure_self_or_admin(current_user, user_id)
    return await service.list_user_chats(user_id)


@router.get("/user/{user_id}/unread-count")
async def get_unread_total(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service)
):
    ensure_self_or_admin(current_user, user_id)
    return {"unread_count": await service.unread_total(user_id)}


@router.post("/get-or-create", response_model=ChatOut)
async def get_or_create_chat(
    data: GetOrCreateChat,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service)
):
    return await service.get_or_create(data.user_id_1, data.user_id_2)


# ============================================================================
# MESAJLAR
# ============================================================================

@router.get("/{chat_id}/messages", response_model=List[MessageOut])
async def get_messages(
    chat_id: str,
    limit: int = Query(50, ge=1, le=500),
    before: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service)
):
    return await service.get_messages(chat_id, current_user["id"], limit=limit, before=before)


@router.post("/{chat_id}/message", response_model=MessageSendResult)
async def send_message(
    chat_id: str,
    data: MessageCreate,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
    notifier: RealtimeNotifier = Depends(get_notifier)
):
    """
    Mesaj gönder; diğer katılımcılara new_message yayınlanır
    """
    message, others = await service.send_message(chat_id, current_user["id"], data)
    await notifier.emit_to_users(others, "new_message", {"chat_id": chat_id, "message": message})
    return MessageSendResult(message_id=message["id"], chat_id=chat_id, message=MessageOut(**message))


@router.put("/{chat_id}/read/{user_id}")
async def mark_messages_read(
    chat_id: str,
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
    notifier: RealtimeNotifier = Depends(get_notifier)
):
    ensure_self_or_admin(current_user, user_id)
    read_at, others = await service.mark_read(chat_id, user_id)
    await notifier.emit_to_users(others, "messages_read", {
        "chat_id": chat_id,
        "user_id": user_id,
        "read_at": read_at,
    })
    return {"msg": "Mesajlar okundu olarak işaretlendi", "read_at": read_at}


@router.delete("/{chat_id}/message/{message_id}")
async def delete_message(
    chat_id: str,
    message_id: str,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
    notifier: RealtimeNotifier = Depends(get_notifier)
):
    participants = await service.delete_message(chat_id, message_id, current_user["id"])
    await notifier.emit_to_users(participants, "message_deleted", {
        "chat_id": chat_id,
        "message_id": message_id,
    })
    return {"msg": "Mesaj silindi"}

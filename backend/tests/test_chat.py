"""
Mesajlaşma testleri: sohbet oluşturma, okunmamış sayaçları, okundu bilgisi ve silme
"""
from core.config import settings
from db.mongo import Collections
from models.chat import MessageCreate
from services.chat_service import ChatService


async def _open_chat(client, first, second, auth_headers):
    response = await client.post(
        "/api/v1/chat/get-or-create",
        json={"user_id_1": first["id"], "user_id_2": second["id"]},
        headers=auth_headers(first),
    )
    assert response.status_code == 200
    return response.json()


async def _send(client, chat_id, sender, content, auth_headers):
    response = await client.post(
        f"/api/v1/chat/{chat_id}/message", json={"content": content}, headers=auth_headers(sender)
    )
    assert response.status_code == 200
    return response.json()


async def test_get_or_create_is_idempotent(client, db, staff, other_staff, auth_headers):
    first = await _open_chat(client, staff, other_staff, auth_headers)
    second = await _open_chat(client, other_staff, staff, auth_headers)

    assert first["id"] == second["id"]
    assert {p["name"] for p in first["participants"]} == {staff["name"], other_staff["name"]}
    assert await db[Collections.CHATS].count_documents({}) == 1


async def test_cannot_chat_with_self(client, staff, auth_headers):
    response = await client.post(
        "/api/v1/chat/get-or-create",
        json={"user_id_1": staff["id"], "user_id_2": staff["id"]},
        headers=auth_headers(staff),
    )
    assert response.status_code == 400


async def test_send_increments_only_recipient_counter(client, notifier, staff, other_staff, auth_headers):
    chat = await _open_chat(client, staff, other_staff, auth_headers)

    result = await _send(client, chat["id"], staff, "Merhaba", auth_headers)
    await _send(client, chat["id"], staff, "Orada mısın?", auth_headers)

    assert result["chat_id"] == chat["id"]
    assert result["message"]["status"] == "sent"

    recipient = await client.get(
        f"/api/v1/chat/user/{other_staff['id']}/unread-count", headers=auth_headers(other_staff)
    )
    sender = await client.get(
        f"/api/v1/chat/user/{staff['id']}/unread-count", headers=auth_headers(staff)
    )
    assert recipient.json() == {"unread_count": 2}
    assert sender.json() == {"unread_count": 0}

    events = notifier.named("new_message")
    assert [e[0] for e in events] == [other_staff["id"], other_staff["id"]]


async def test_empty_message_is_rejected(client, staff, other_staff, auth_headers):
    chat = await _open_chat(client, staff, other_staff, auth_headers)

    response = await client.post(
        f"/api/v1/chat/{chat['id']}/message", json={"content": "   "}, headers=auth_headers(staff)
    )
    assert response.status_code == 400


async def test_outsider_cannot_send(client, admin, staff, other_staff, auth_headers):
    chat = await _open_chat(client, staff, other_staff, auth_headers)

    response = await client.post(
        f"/api/v1/chat/{chat['id']}/message", json={"content": "Selam"}, headers=auth_headers(admin)
    )
    assert response.status_code == 403


async def test_mark_read_resets_counter_and_emits(client, db, notifier, staff, other_staff, auth_headers):
    chat = await _open_chat(client, staff, other_staff, auth_headers)
    await _send(client, chat["id"], staff, "Merhaba", auth_headers)
    await _send(client, chat["id"], other_staff, "Selam", auth_headers)

    response = await client.put(
        f"/api/v1/chat/{chat['id']}/read/{other_staff['id']}", headers=auth_headers(other_staff)
    )
    assert response.status_code == 200

    stored = await db[Collections.CHATS].find_one({"id": chat["id"]})
    assert stored["unread_count"][other_staff["id"]] == 0
    assert stored["unread_count"][staff["id"]] == 1

    incoming, outgoing = stored["messages"]
    assert incoming["status"] == "read"
    assert incoming["status_details"]["read_by"] == [other_staff["id"]]
    # kendi mesajı okundu sayılmaz
    assert outgoing["status"] == "sent"

    assert [e[0] for e in notifier.named("messages_read")] == [staff["id"]]


async def test_soft_deleted_message_is_hidden(client, db, notifier, staff, other_staff, auth_headers):
    chat = await _open_chat(client, staff, other_staff, auth_headers)
    sent = await _send(client, chat["id"], staff, "Yanlış mesaj", auth_headers)
    await _send(client, chat["id"], staff, "Doğru mesaj", auth_headers)

    response = await client.delete(
        f"/api/v1/chat/{chat['id']}/message/{sent['message_id']}", headers=auth_headers(staff)
    )
    assert response.status_code == 200

    messages = await client.get(f"/api/v1/chat/{chat['id']}/messages", headers=auth_headers(other_staff))
    assert [m["content"] for m in messages.json()] == ["Doğru mesaj"]

    stored = await db[Collections.CHATS].find_one({"id": chat["id"]})
    assert len(stored["messages"]) == 2
    assert stored["messages"][0]["is_deleted"] is True
    assert {e[0] for e in notifier.named("message_deleted")} == {staff["id"], other_staff["id"]}


async def test_only_sender_can_delete(client, staff, other_staff, auth_headers):
    chat = await _open_chat(client, staff, other_staff, auth_headers)
    sent = await _send(client, chat["id"], staff, "Benim mesajım", auth_headers)

    response = await client.delete(
        f"/api/v1/chat/{chat['id']}/message/{sent['message_id']}", headers=auth_headers(other_staff)
    )
    assert response.status_code == 403


async def test_invalid_notification_sound_is_rejected(client, staff, auth_headers):
    response = await client.put(
        f"/api/v1/chat/user/{staff['id']}/notification-sound",
        json={"notification_sound": "davul"},
        headers=auth_headers(staff),
    )
    assert response.status_code == 400


async def test_messages_are_paged_with_limit_and_before(client, staff, other_staff, auth_headers):
    chat = await _open_chat(client, staff, other_staff, auth_headers)
    sent = [await _send(client, chat["id"], staff, f"Mesaj {i}", auth_headers) for i in range(5)]
    url = f"/api/v1/chat/{chat['id']}/messages"

    latest = await client.get(url, params={"limit": 2}, headers=auth_headers(other_staff))
    assert [m["content"] for m in latest.json()] == ["Mesaj 3", "Mesaj 4"]

    older = await client.get(
        url, params={"limit": 2, "before": sent[3]["message_id"]}, headers=auth_headers(other_staff)
    )
    assert [m["content"] for m in older.json()] == ["Mesaj 1", "Mesaj 2"]

    invalid = await client.get(url, params={"limit": 0}, headers=auth_headers(other_staff))
    assert invalid.status_code == 400


async def test_message_arriving_during_read_stays_unread(db, staff, other_staff):
    service = ChatService(db)
    chat = await service.get_or_create(staff["id"], other_staff["id"])
    await service.send_message(chat["id"], staff["id"], MessageCreate(content="Birinci"))
    snapshot = await service.get_chat(chat["id"])
    await service.send_message(chat["id"], staff["id"], MessageCreate(content="İkinci"))

    async def stale_chat(chat_id):
        return snapshot

    service.get_chat = stale_chat
    await service.mark_read(chat["id"], other_staff["id"])

    stored = await db[Collections.CHATS].find_one({"id": chat["id"]})
    assert stored["unread_count"][other_staff["id"]] == 1
    assert stored["messages"][0]["status"] == "read"
    assert stored["messages"][1]["status"] == "sent"


async def test_repeated_read_does_not_go_negative(client, db, staff, other_staff, auth_headers):
    chat = await _open_chat(client, staff, other_staff, auth_headers)
    await _send(client, chat["id"], staff, "Merhaba", auth_headers)
    url = f"/api/v1/chat/{chat['id']}/read/{other_staff['id']}"

    await client.put(url, headers=auth_headers(other_staff))
    await client.put(url, headers=auth_headers(other_staff))

    stored = await db[Collections.CHATS].find_one({"id": chat["id"]})
    assert stored["unread_count"][other_staff["id"]] == 0


async def test_chat_upload(client, staff, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))

    response = await client.post(
        "/api/v1/chat/upload",
        files={"file": ("teklif.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth_headers(staff),
    )

    body = response.json()
    assert body["file_url"].startswith("/uploads/chat/")
    assert body["file_name"] == "teklif.pdf"
    assert body["file_size"] == 8
    assert (tmp_path / "chat" / body["file_url"].rsplit("/", 1)[1]).exists()


async def test_chat_upload_rejects_unknown_extension(client, staff, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))

    response = await client.post(
        "/api/v1/chat/upload",
        files={"file": ("script.exe", b"MZ", "application/octet-stream")},
        headers=auth_headers(staff),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Desteklenmeyen dosya türü"


async def test_chat_upload_size_limit(client, staff, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 2 * 1024 * 1024)

    response = await client.post(
        "/api/v1/chat/upload",
        files={"file": ("buyuk.pdf", b"0" * (settings.MAX_UPLOAD_SIZE + 1), "application/pdf")},
        headers=auth_headers(staff),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Dosya boyutu 2MB'ı aşamaz"
    assert not (tmp_path / "chat").exists()

"""
Kimlik doğrulama ve kullanıcı yönetimi testleri
"""
from core.config import settings
from db.mongo import Collections
from main import seed_default_admin


async def test_login_returns_token_and_user(client, admin):
    response = await client.post(
        "/api/v1/auth/login", json={"email": "ADMIN@example.com", "password": "secret123"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token"] == body["access_token"]
    assert body["user_id"] == admin["id"]
    assert body["role"] == "yonetici"
    assert "password" not in body["user"]


async def test_login_rejects_wrong_password(client, admin):
    response = await client.post(
        "/api/v1/auth/login", json={"email": "admin@example.com", "password": "yanlis"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Geçersiz email veya şifre"


async def test_login_requires_both_fields(client):
    response = await client.post("/api/v1/auth/login", json={"email": "admin@example.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Email ve şifre gereklidir"


async def test_me_requires_token(client):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


async def test_me_rejects_garbage_token(client):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer abc.def.ghi"})
    assert response.status_code == 401


async def test_inactive_user_is_forbidden(client, db, staff, auth_headers):
    await db[Collections.USERS].update_one({"id": staff["id"]}, {"$set": {"is_active": False}})
    response = await client.get("/api/v1/auth/me", headers=auth_headers(staff))
    assert response.status_code == 403


async def test_staff_cannot_create_user(client, staff, auth_headers):
    response = await client.post(
        "/api/v1/users/",
        json={"name": "X", "email": "x@example.com", "password": "secret123", "phone": "1", "role": "kullanici"},
        headers=auth_headers(staff),
    )
    assert response.status_code == 403


async def test_admin_creates_user_with_role_alias(client, admin, auth_headers):
    response = await client.post(
        "/api/v1/users/",
        json={
            "name": "Ali Veli",
            "email": "Ali@Example.com",
            "password": "secret123",
            "phone": "05550000000",
            "role": "kullanıcı",
        },
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "ali@example.com"
    assert body["role"] == "kullanici"
    assert "password" not in body


async def test_create_user_rejects_duplicate_email(client, admin, staff, auth_headers):
    response = await client.post(
        "/api/v1/users/",
        json={"name": "Tekrar", "email": staff["email"], "password": "secret123", "phone": "1", "role": "kullanici"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Bu e-posta zaten kayıtlı"


async def test_create_user_requires_all_fields(client, admin, auth_headers):
    response = await client.post(
        "/api/v1/users/", json={"name": "Eksik"}, headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Tüm alanlar zorunludur"


async def test_last_admin_cannot_be_deleted(client, db, admin, auth_headers):
    response = await client.delete(f"/api/v1/users/{admin['id']}", headers=auth_headers(admin))

    assert response.status_code == 400
    assert await db[Collections.USERS].count_documents({"id": admin["id"]}) == 1


async def test_staff_cannot_promote_self(client, staff, auth_headers):
    response = await client.put(
        f"/api/v1/users/{staff['id']}", json={"role": "yonetici"}, headers=auth_headers(staff)
    )
    assert response.status_code == 403


async def test_nudge_records_activity_and_emits(client, db, notifier, admin, staff, auth_headers):
    response = await client.post(
        f"/api/v1/users/{staff['id']}/nudge",
        json={"message": "Hadi!", "task_title": "Rapor"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    events = notifier.named("nudge_notification")
    assert len(events) == 1
    assert events[0][0] == staff["id"]
    activity = await db[Collections.ACTIVITIES].find_one({"activity_type": "nudge"})
    assert activity["related_user"] == staff["id"]
    assert "Rapor" in activity["message"]


async def test_default_admin_is_seeded_once(client, db):
    await seed_default_admin(db)
    await seed_default_admin(db)

    admins = await db[Collections.USERS].find({"role": "yonetici"}).to_list(length=None)
    assert [a["email"] for a in admins] == [settings.DEFAULT_ADMIN_EMAIL]

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": settings.DEFAULT_ADMIN_EMAIL, "password": settings.DEFAULT_ADMIN_PASSWORD},
    )
    assert response.status_code == 200

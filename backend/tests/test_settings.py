"""
Sistem ayarları testleri: maskeleme ve bölüm birleştirme
"""
from db.mongo import Collections
from models.system_settings import SECRET_MASK
from services.settings_service import mask_secrets


def test_mask_secrets_leaves_empty_values():
    masked = mask_secrets({"email": {"smtp_pass": ""}, "sms": {"api_secret": "gizli"}})

    assert masked["email"]["smtp_pass"] == ""
    assert masked["sms"]["api_secret"] == SECRET_MASK


async def test_settings_are_admin_only(client, staff, auth_headers):
    response = await client.get("/api/v1/settings/", headers=auth_headers(staff))
    assert response.status_code == 403


async def test_defaults_are_created_on_first_read(client, db, admin, auth_headers):
    response = await client.get("/api/v1/settings/", headers=auth_headers(admin))

    body = response.json()
    assert response.status_code == 200
    assert body["system"]["session_timeout"] == 60
    assert body["sms"]["provider"] == "netgsm"
    assert await db[Collections.SETTINGS].count_documents({}) == 1


async def test_secret_is_masked_and_preserved(client, db, admin, auth_headers):
    headers = auth_headers(admin)
    await client.put(
        "/api/v1/settings/",
        json={"email": {"smtp_user": "bot@example.com", "smtp_pass": "s3cr3t"}},
        headers=headers,
    )

    shown = (await client.get("/api/v1/settings/", headers=headers)).json()
    assert shown["email"]["smtp_pass"] == SECRET_MASK

    # maskeli değer geri gönderildiğinde kayıtlı şifre değişmez
    response = await client.put(
        "/api/v1/settings/",
        json={"email": {"smtp_pass": SECRET_MASK, "from_name": "Destek"}},
        headers=headers,
    )
    assert response.json()["msg"] == "Ayarlar başarıyla güncellendi"

    stored = await db[Collections.SETTINGS].find_one({"key": "system"})
    assert stored["email"]["smtp_pass"] == "s3cr3t"
    assert stored["email"]["smtp_user"] == "bot@example.com"
    assert stored["email"]["from_name"] == "Destek"
    assert stored["last_updated_by"] == admin["id"]


async def test_out_of_range_value_is_rejected(client, admin, auth_headers):
    response = await client.put(
        "/api/v1/settings/", json={"system": {"session_timeout": 5}}, headers=auth_headers(admin)
    )
    assert response.status_code == 400


async def test_test_sms_requires_enabled_provider(client, admin, auth_headers):
    response = await client.post(
        "/api/v1/settings/test-sms", json={"to": "05551234567"}, headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "SMS ayarları yapılandırılmamış veya devre dışı"

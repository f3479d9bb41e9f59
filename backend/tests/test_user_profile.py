"""
Kullanıcı profili testleri: şifre, avatar, performans analizi ve başarılar
"""
from datetime import datetime, timedelta, timezone
import uuid

import pytest

from core.config import settings
from core.security import verify_password
from db.mongo import Collections


async def _change_password(client, user, auth_headers, current, new):
    return await client.put(
        f"/api/v1/users/{user['id']}/password",
        json={"current_password": current, "new_password": new},
        headers=auth_headers(user),
    )


async def test_password_change(client, db, staff, auth_headers):
    response = await _change_password(client, staff, auth_headers, "secret123", "yenisifre1")

    assert response.json() == {"msg": "Şifre başarıyla değiştirildi"}
    stored = await db[Collections.USERS].find_one({"id": staff["id"]})
    assert verify_password("yenisifre1", stored["password"])


@pytest.mark.parametrize("current,new,detail", [
    ("secret123", "kisa", "Şifre en az 6 karakter olmalıdır"),
    ("yanlis123", "yenisifre1", "Mevcut şifre yanlış"),
    ("secret123", "secret123", "Yeni şifre mevcut şifreden farklı olmalıdır"),
    ("", "yenisifre1", "Mevcut şifre ve yeni şifre gereklidir"),
])
async def test_password_rules(client, db, staff, auth_headers, current, new, detail):
    response = await _change_password(client, staff, auth_headers, current, new)

    assert response.status_code == 400
    assert response.json()["detail"] == detail
    stored = await db[Collections.USERS].find_one({"id": staff["id"]})
    assert verify_password("secret123", stored["password"])


async def test_cannot_change_someone_elses_password(client, staff, other_staff, auth_headers):
    response = await client.put(
        f"/api/v1/users/{other_staff['id']}/password",
        json={"current_password": "secret123", "new_password": "yenisifre1"},
        headers=auth_headers(staff),
    )
    assert response.status_code == 403


async def test_avatar_upload(client, staff, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "AVATAR_DIR", str(tmp_path))

    response = await client.post(
        f"/api/v1/users/{staff['id']}/avatar",
        files={"avatar": ("profil.PNG", b"\x89PNG\r\n", "image/png")},
        headers=auth_headers(staff),
    )

    avatar = response.json()["avatar"]
    assert avatar.startswith("/avatars/") and avatar.endswith(".png")
    assert (tmp_path / avatar.rsplit("/", 1)[1]).read_bytes() == b"\x89PNG\r\n"


async def test_avatar_must_be_an_image(client, staff, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "AVATAR_DIR", str(tmp_path))

    response = await client.post(
        f"/api/v1/users/{staff['id']}/avatar",
        files={"avatar": ("rapor.pdf", b"%PDF", "application/pdf")},
        headers=auth_headers(staff),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Sadece resim dosyaları yüklenebilir"
    assert list(tmp_path.iterdir()) == []


async def test_avatar_size_limit(client, staff, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "AVATAR_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 4)

    response = await client.post(
        f"/api/v1/users/{staff['id']}/avatar",
        files={"avatar": ("profil.png", b"12345", "image/png")},
        headers=auth_headers(staff),
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Dosya boyutu")


# ============================================================================
# ANALİZ
# ============================================================================

async def _insert_tasks(db, user_id):
    now = datetime.now(timezone.utc)
    yesterday, tomorrow = now - timedelta(days=1), now + timedelta(days=1)

    def task(status, due_date=None, completed_at=None, priority="medium"):
        return {
            "id": str(uuid.uuid4()),
            "title": f"Görev {status}",
            "description": "-",
            "assigned_to": user_id,
            "assigned_by": "yonetici",
            "status": status,
            "priority": priority,
            "due_date": due_date,
            "completed_at": completed_at,
            "created_at": now - timedelta(days=2),
            "updated_at": now,
        }

    await db[Collections.TASKS].insert_many([
        task("completed", due_date=tomorrow, completed_at=now, priority="urgent"),
        task("completed", due_date=yesterday - timedelta(hours=12), completed_at=yesterday),
        task("in-progress", due_date=yesterday),
        task("pending"),
    ])


async def test_analytics_summary_and_score(client, db, staff, auth_headers):
    await _insert_tasks(db, staff["id"])

    response = await client.get(f"/api/v1/users/{staff['id']}/analytics", headers=auth_headers(staff))

    body = response.json()
    summary = body["summary"]
    assert summary["total_tasks"] == 4
    assert summary["completed_tasks"] == 2
    assert summary["in_progress_tasks"] == 1
    assert summary["pending_tasks"] == 1
    assert summary["overdue_tasks"] == 1
    assert summary["on_time_tasks"] == 1
    assert summary["late_tasks"] == 1
    assert summary["completion_rate"] == 50
    assert summary["on_time_rate"] == 50
    # 0.4 * 50 + 0.4 * 50 + 0.2 * (100 - 25)
    assert summary["performance_score"] == 55
    assert body["priority_stats"]["urgent"] == {"total": 1, "completed": 1}
    assert len(body["monthly_performance"]) == 6
    assert [w["week"] for w in body["weekly_activity"]] == ["Hafta 1", "Hafta 2", "Hafta 3", "Hafta 4"]
    assert "Acil görevlerde yüksek başarı oranı" in body["insights"]["strengths"]


async def test_analytics_for_user_without_tasks(client, staff, auth_headers):
    response = await client.get(f"/api/v1/users/{staff['id']}/analytics", headers=auth_headers(staff))

    summary = response.json()["summary"]
    assert summary["total_tasks"] == 0
    assert summary["performance_score"] == 20


async def test_analytics_is_private(client, staff, other_staff, auth_headers):
    response = await client.get(f"/api/v1/users/{staff['id']}/analytics", headers=auth_headers(other_staff))
    assert response.status_code == 403


async def test_achievements_follow_completed_tasks(client, db, staff, auth_headers):
    await _insert_tasks(db, staff["id"])

    response = await client.get(f"/api/v1/users/{staff['id']}/achievements", headers=auth_headers(staff))

    badges = {b["id"]: b for b in response.json()}
    assert badges["first_task"]["unlocked"] is True
    assert badges["first_task"]["unlocked_at"] is not None
    assert badges["task_master_5"]["unlocked"] is False
    assert badges["task_master_5"]["progress"] == 2
    assert badges["task_master_5"]["unlocked_at"] is None
    assert badges["on_time_master"]["progress"] == 1
    assert badges["no_nudge"]["progress"] == 2


async def test_nudge_resets_no_nudge_progress(client, db, admin, staff, auth_headers):
    await _insert_tasks(db, staff["id"])
    await client.post(f"/api/v1/users/{staff['id']}/nudge", json={}, headers=auth_headers(admin))

    response = await client.get(f"/api/v1/users/{staff['id']}/achievements", headers=auth_headers(staff))

    badges = {b["id"]: b for b in response.json()}
    assert badges["no_nudge"]["progress"] == 0

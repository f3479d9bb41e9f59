"""
Teknisyen testleri
"""
from datetime import datetime, timezone

from db.mongo import Collections


async def _create(client, admin, user, auth_headers, employee_id="T-001"):
    return await client.post(
        "/api/v1/technicians/",
        json={"user_id": user["id"], "employee_id": employee_id, "specialization": ["hardware-repair"]},
        headers=auth_headers(admin),
    )


async def test_create_technician(client, admin, staff, auth_headers):
    response = await _create(client, admin, staff, auth_headers)

    body = response.json()
    assert response.status_code == 201
    assert body["user"] == staff["id"]
    assert body["user_details"]["name"] == staff["name"]
    assert body["availability"]["status"] == "available"


async def test_one_technician_per_user(client, admin, staff, auth_headers):
    await _create(client, admin, staff, auth_headers)

    response = await _create(client, admin, staff, auth_headers, employee_id="T-002")
    assert response.status_code == 400
    assert response.json()["detail"] == "Bu kullanıcı için teknisyen kaydı zaten mevcut"


async def test_employee_id_is_unique(client, admin, staff, other_staff, auth_headers):
    await _create(client, admin, staff, auth_headers)

    response = await _create(client, admin, other_staff, auth_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Bu personel numarası zaten kullanılıyor"


async def test_availability_update_merges_fields(client, admin, staff, auth_headers):
    technician = (await _create(client, admin, staff, auth_headers)).json()

    response = await client.patch(
        f"/api/v1/technicians/{technician['id']}/availability",
        json={"status": "busy"},
        headers=auth_headers(staff),
    )

    availability = response.json()["availability"]
    assert availability["status"] == "busy"
    assert availability["working_hours"] == {"start": "09:00", "end": "17:00"}


async def test_technician_with_active_jobs_cannot_be_deactivated(client, db, admin, staff, auth_headers):
    technician = (await _create(client, admin, staff, auth_headers)).json()
    await db[Collections.SERVICE_JOBS].insert_one({
        "id": "job-1",
        "assigned_technician": staff["id"],
        "status": "in-progress",
        "scheduled_date": datetime.now(timezone.utc),
    })

    response = await client.delete(f"/api/v1/technicians/{technician['id']}", headers=auth_headers(admin))

    assert response.status_code == 400
    assert response.json()["detail"] == "Aktif işleri olan teknisyen silinemez (1 aktif iş)"


async def test_deactivate_is_soft(client, db, admin, staff, auth_headers):
    technician = (await _create(client, admin, staff, auth_headers)).json()

    response = await client.delete(f"/api/v1/technicians/{technician['id']}", headers=auth_headers(admin))

    assert response.json() == {"msg": "Teknisyen pasifleştirildi"}
    stored = await db[Collections.TECHNICIANS].find_one({"id": technician["id"]})
    assert stored["is_active"] is False

    listed = (await client.get("/api/v1/technicians/", headers=auth_headers(admin))).json()
    assert listed == []

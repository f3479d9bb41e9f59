"""
Süreç testleri
"""
from db.mongo import Collections


async def _process(client, user, auth_headers):
    response = await client.post(
        "/api/v1/processes/",
        json={"title": "ERP geçişi", "description": "Muhasebe modülü", "start_date": "2026-01-01T00:00:00Z"},
        headers=auth_headers(user),
    )
    assert response.status_code == 201
    return response.json()


async def test_process_starts_in_planning(client, db, admin, auth_headers):
    process = await _process(client, admin, auth_headers)

    assert process["status"] == "planning"
    assert process["progress"] == 0
    assert process["created_by"] == admin["id"]
    assert await db[Collections.ACTIVITIES].count_documents({"related_process": process["id"]}) == 1


async def test_process_requires_description(client, admin, auth_headers):
    response = await client.post("/api/v1/processes/", json={"title": "Eksik"}, headers=auth_headers(admin))
    assert response.status_code == 400


async def test_completing_sets_full_progress(client, admin, auth_headers):
    process = await _process(client, admin, auth_headers)

    response = await client.put(
        f"/api/v1/processes/{process['id']}/status", json={"status": "completed"}, headers=auth_headers(admin)
    )

    body = response.json()
    assert body["progress"] == 100
    assert body["actual_duration"] >= 0


async def test_full_progress_completes_process(client, admin, auth_headers):
    process = await _process(client, admin, auth_headers)
    url = f"/api/v1/processes/{process['id']}/progress"

    partial = await client.put(url, json={"progress": 40}, headers=auth_headers(admin))
    assert partial.json()["status"] == "planning"

    done = await client.put(url, json={"progress": 100}, headers=auth_headers(admin))
    assert done.json()["status"] == "completed"


async def test_progress_out_of_range(client, admin, auth_headers):
    process = await _process(client, admin, auth_headers)

    response = await client.put(
        f"/api/v1/processes/{process['id']}/progress", json={"progress": 120}, headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "İlerleme 0-100 arasında olmalıdır"


async def test_delete_missing_process(client, admin, auth_headers):
    response = await client.delete("/api/v1/processes/yok", headers=auth_headers(admin))
    assert response.status_code == 404

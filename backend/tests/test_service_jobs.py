"""
Servis işi ve sıra numarası testleri
"""
import asyncio
from datetime import datetime, timezone

from db.mongo import Collections
from services.sequence_service import SequenceService


async def test_sequence_numbers_are_unique_under_concurrency(db):
    sequences = SequenceService(db)

    numbers = await asyncio.gather(*(sequences.next_number("SJ", year=2026) for _ in range(25)))

    assert len(set(numbers)) == 25
    assert sorted(numbers)[0] == "SJ20260001"
    assert sorted(numbers)[-1] == "SJ20260025"


async def test_sequence_restarts_each_year(db):
    sequences = SequenceService(db)

    assert await sequences.next_number("SR", year=2025) == "SR20250001"
    assert await sequences.next_number("SR", year=2026) == "SR20260001"
    assert await sequences.next_number("SR", year=2025) == "SR20250002"


async def _customer(db):
    now = datetime.now(timezone.utc)
    customer = {"id": "cust-1", "cari_unvan1": "Acme Ltd", "is_active": True, "created_at": now, "updated_at": now}
    await db[Collections.CUSTOMERS].insert_one(customer)
    return customer


def _job_payload(customer_id, **extra):
    return {
        "customer": customer_id,
        "service_type": "repair",
        "scheduled_date": "2026-03-01T09:00:00+00:00",
        "estimated_duration": 2,
        "description": "Klima arızası",
        "location": {"address": "Atatürk Cad. 1", "city": "İzmir"},
        "cost": {"estimated": 1500},
        **extra,
    }


async def test_create_job_assigns_job_number(client, db, staff, auth_headers):
    await _customer(db)
    year = datetime.now(timezone.utc).year

    first = await client.post("/api/v1/service-jobs/", json=_job_payload("cust-1"), headers=auth_headers(staff))
    second = await client.post("/api/v1/service-jobs/", json=_job_payload("cust-1"), headers=auth_headers(staff))

    assert first.status_code == 201
    assert first.json()["job_number"] == f"SJ{year}0001"
    assert second.json()["job_number"] == f"SJ{year}0002"
    assert first.json()["status"] == "scheduled"


async def test_create_job_requires_fields(client, db, staff, auth_headers):
    await _customer(db)

    response = await client.post(
        "/api/v1/service-jobs/", json={"customer": "cust-1"}, headers=auth_headers(staff)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Gerekli alanlar eksik"


async def test_complete_job_sets_completed_at_once(client, db, staff, auth_headers):
    await _customer(db)
    job = (await client.post("/api/v1/service-jobs/", json=_job_payload("cust-1"), headers=auth_headers(staff))).json()

    await client.patch(f"/api/v1/service-jobs/{job['id']}/status", json={"status": "completed"}, headers=auth_headers(staff))
    stored = await db[Collections.SERVICE_JOBS].find_one({"id": job["id"]})
    await client.patch(f"/api/v1/service-jobs/{job['id']}/status", json={"status": "completed"}, headers=auth_headers(staff))
    restored = await db[Collections.SERVICE_JOBS].find_one({"id": job["id"]})

    assert stored["completed_at"] is not None
    assert restored["completed_at"] == stored["completed_at"]


async def test_invalid_job_status_is_rejected(client, db, staff, auth_headers):
    await _customer(db)
    job = (await client.post("/api/v1/service-jobs/", json=_job_payload("cust-1"), headers=auth_headers(staff))).json()

    response = await client.patch(
        f"/api/v1/service-jobs/{job['id']}/status", json={"status": "bitti"}, headers=auth_headers(staff)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Geçersiz durum"

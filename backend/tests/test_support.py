"""
Destek testleri: talep değerlendirme ve saha destek kayıtları
"""
from datetime import datetime, timezone, timedelta

from db.mongo import Collections


async def _customer(db, customer_id="cust-1", **extra):
    now = datetime.now(timezone.utc)
    customer = {
        "id": customer_id,
        "cari_unvan1": "Acme Ltd",
        "is_active": True,
        "has_service_contract": False,
        "created_at": now,
        "updated_at": now,
        **extra,
    }
    await db[Collections.CUSTOMERS].insert_one(customer)
    return customer


async def _request(client, staff, auth_headers, **extra):
    response = await client.post(
        "/api/v1/support/request",
        json={
            "customer": "cust-1",
            "request_type": "technical",
            "description": "Sunucu kurulumu",
            "estimated_value": 25000,
            **extra,
        },
        headers=auth_headers(staff),
    )
    assert response.status_code == 201
    return response.json()


async def test_request_defaults_deadline_and_number(client, db, staff, auth_headers):
    await _customer(db)

    request = await _request(client, staff, auth_headers)

    year = datetime.now(timezone.utc).year
    assert request["request_number"] == f"SR{year}0001"
    assert request["evaluation_status"] == "submitted"
    deadline = datetime.fromisoformat(request["decision_deadline"].replace("Z", "+00:00"))
    submitted = datetime.fromisoformat(request["submitted_date"].replace("Z", "+00:00"))
    assert abs((deadline - submitted) - timedelta(days=30)) < timedelta(seconds=5)


async def test_request_for_unknown_customer_is_404(client, staff, auth_headers):
    response = await client.post(
        "/api/v1/support/request",
        json={"customer": "yok", "request_type": "technical", "description": "x", "estimated_value": 1},
        headers=auth_headers(staff),
    )
    assert response.status_code == 404


async def test_reject_requires_notes(client, db, staff, auth_headers):
    await _customer(db)
    request = await _request(client, staff, auth_headers)

    response = await client.post(
        f"/api/v1/support/pending/{request['id']}/reject", json={"notes": "  "}, headers=auth_headers(staff)
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Reddetme gerekçesi yazılmalı"
    stored = await db[Collections.SUPPORT_REQUESTS].find_one({"id": request["id"]})
    assert stored["evaluation_status"] == "submitted"


async def test_rejected_customer_listed_as_inactive(client, db, staff, auth_headers):
    await _customer(db)
    request = await _request(client, staff, auth_headers)

    response = await client.post(
        f"/api/v1/support/pending/{request['id']}/reject",
        json={"notes": "Bütçe yetersiz"},
        headers=auth_headers(staff),
    )
    assert response.json()["request"]["evaluation_status"] == "rejected"

    inactive = (await client.get("/api/v1/support/inactive", headers=auth_headers(staff))).json()
    assert [c["id"] for c in inactive] == ["cust-1"]
    assert inactive[0]["exclusion_reason"] == "Bütçe yetersiz"


async def test_approved_customer_listed_as_active(client, db, staff, auth_headers):
    await _customer(db)
    request = await _request(client, staff, auth_headers)

    await client.post(
        f"/api/v1/support/pending/{request['id']}/approve", json={}, headers=auth_headers(staff)
    )

    active = (await client.get("/api/v1/support/active", headers=auth_headers(staff))).json()
    assert active[0]["support_request"]["request_number"] == request["request_number"]

    stats = (await client.get("/api/v1/support/stats/overview", headers=auth_headers(staff))).json()
    assert stats["approved"] == 1
    assert stats["total_value"] == 25000


def _onsite_payload(customer_id="cust-1"):
    return {
        "customer": customer_id,
        "scheduled_date": "2026-05-01T10:00:00+00:00",
        "estimated_duration": 3,
        "description": "Yerinde kurulum",
        "location": {"address": "Kordon 5", "city": "İzmir"},
        "cost": {"estimated": 2000},
    }


async def test_onsite_requires_service_contract(client, db, staff, auth_headers):
    await _customer(db, has_service_contract=False)

    response = await client.post("/api/v1/support/onsite", json=_onsite_payload(), headers=auth_headers(staff))

    assert response.status_code == 403
    assert response.json()["detail"] == "Müşterinin servis anlaşması bulunmuyor"
    assert await db[Collections.ONSITE_SUPPORTS].count_documents({}) == 0


async def test_onsite_created_for_contract_customer(client, db, staff, auth_headers):
    await _customer(db, has_service_contract=True)

    response = await client.post("/api/v1/support/onsite", json=_onsite_payload(), headers=auth_headers(staff))

    body = response.json()
    assert response.status_code == 201
    assert body["status"] == "requested"
    assert body["support_number"].startswith("OS")


async def test_ticket_status_validation(client, db, staff, auth_headers):
    await _customer(db)
    ticket = (await client.post(
        "/api/v1/support/remote",
        json={"customer": "cust-1", "description": "VPN sorunu"},
        headers=auth_headers(staff),
    )).json()

    invalid = await client.patch(
        f"/api/v1/support/remote/{ticket['id']}/status", json={"status": "scheduled"}, headers=auth_headers(staff)
    )
    valid = await client.patch(
        f"/api/v1/support/remote/{ticket['id']}/status", json={"status": "completed"}, headers=auth_headers(staff)
    )

    assert invalid.status_code == 400
    assert valid.json()["completed_at"] is not None


async def test_all_requests_merges_categories(client, db, staff, auth_headers):
    await _customer(db)
    headers = auth_headers(staff)
    await client.post("/api/v1/support/remote", json={"customer": "cust-1", "description": "VPN"}, headers=headers)
    await client.post(
        "/api/v1/support/maintenance-support",
        json={
            "customer": "cust-1",
            "scheduled_date": "2026-06-01T08:00:00+00:00",
            "description": "Periyodik bakım",
            "maintenance_type": "preventive",
        },
        headers=headers,
    )

    tickets = (await client.get("/api/v1/support/all-requests", headers=headers)).json()

    categories = sorted(t["support_category"] for t in tickets)
    assert categories == ["maintenance", "remote"]
    maintenance = next(t for t in tickets if t["support_category"] == "maintenance")
    assert maintenance["support_type"] == "preventive"
    assert maintenance["status"] == "scheduled"

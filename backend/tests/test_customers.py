"""
Müşteri testleri: VKN doğrulaması, benzersizlik ve arama
"""
import pytest

from db.mongo import Collections


async def test_invalid_vkn_is_rejected_and_not_stored(client, db, staff, auth_headers):
    response = await client.post(
        "/api/v1/customers/",
        json={"cari_unvan1": "Acme Ltd", "vkn": "12345"},
        headers=auth_headers(staff),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "VKN 10 haneli bir sayı olmalıdır"
    assert await db[Collections.CUSTOMERS].count_documents({}) == 0


async def test_create_customer_normalizes_email(client, staff, auth_headers):
    response = await client.post(
        "/api/v1/customers/",
        json={"cari_unvan1": "Acme Ltd", "vkn": "1234567890", "email": " Info@ACME.com "},
        headers=auth_headers(staff),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "info@acme.com"
    assert body["vkn"] == "1234567890"
    assert body["is_active"] is True


@pytest.mark.parametrize("email", ["foo@bar..com", "adres-yok", "a@b"])
async def test_invalid_email_is_rejected(client, db, staff, auth_headers, email):
    response = await client.post(
        "/api/v1/customers/",
        json={"cari_unvan1": "Acme Ltd", "email": email},
        headers=auth_headers(staff),
    )

    assert response.status_code == 400
    assert await db[Collections.CUSTOMERS].count_documents({}) == 0


async def test_empty_email_is_stored_as_missing(client, staff, auth_headers):
    response = await client.post(
        "/api/v1/customers/", json={"cari_unvan1": "Acme Ltd", "email": "  "}, headers=auth_headers(staff)
    )

    assert response.status_code == 201
    assert response.json()["email"] is None


async def test_duplicate_vkn_is_rejected(client, staff, auth_headers):
    payload = {"cari_unvan1": "Acme Ltd", "vkn": "1234567890"}
    first = await client.post("/api/v1/customers/", json=payload, headers=auth_headers(staff))
    second = await client.post(
        "/api/v1/customers/", json={**payload, "cari_unvan1": "Başka"}, headers=auth_headers(staff)
    )

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["detail"] == "Bu VKN ile kayıtlı müşteri zaten mevcut"


async def test_customers_without_vkn_can_coexist(client, staff, auth_headers):
    for name in ("Bir", "İki"):
        response = await client.post(
            "/api/v1/customers/", json={"cari_unvan1": name, "vkn": ""}, headers=auth_headers(staff)
        )
        assert response.status_code == 201


async def test_title_is_required(client, staff, auth_headers):
    response = await client.post(
        "/api/v1/customers/", json={"city": "İzmir"}, headers=auth_headers(staff)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Müşteri ünvanı zorunludur"


async def test_search_matches_title_and_city(client, staff, auth_headers):
    headers = auth_headers(staff)
    await client.post("/api/v1/customers/", json={"cari_unvan1": "Deniz Yazılım", "city": "İzmir"}, headers=headers)
    await client.post("/api/v1/customers/", json={"cari_unvan1": "Dağ Makine", "city": "Ankara"}, headers=headers)

    by_title = await client.get("/api/v1/customers/search/yazılım", headers=headers)
    by_city = await client.get("/api/v1/customers/", params={"city": "ankara"}, headers=headers)

    assert [c["cari_unvan1"] for c in by_title.json()] == ["Deniz Yazılım"]
    assert [c["cari_unvan1"] for c in by_city.json()] == ["Dağ Makine"]


async def test_missing_customer_is_404(client, staff, auth_headers):
    response = await client.get("/api/v1/customers/yok", headers=auth_headers(staff))
    assert response.status_code == 404
    assert response.json()["detail"] == "Müşteri bulunamadı"

"""
Sorun kayıtları ve bildirim testleri
"""
from db.mongo import Collections


async def _issue(client, user, auth_headers, **extra):
    response = await client.post(
        "/api/v1/issues/",
        json={"title": "Yazıcı çalışmıyor", "description": "Muhasebe katı", **extra},
        headers=auth_headers(user),
    )
    assert response.status_code == 201
    return response.json()


async def test_issue_assignees_are_notified(client, notifier, admin, staff, auth_headers):
    issue = await _issue(client, admin, auth_headers, assigned_to=[staff["id"], staff["id"]])

    assert issue["status"] == "open"
    assert issue["assigned_to"] == [staff["id"]]
    assert [e[0] for e in notifier.named("new_issue_assigned")] == [staff["id"]]


async def test_resolving_sets_resolver(client, admin, staff, auth_headers):
    issue = await _issue(client, admin, auth_headers)

    response = await client.put(
        f"/api/v1/issues/{issue['id']}", json={"status": "resolved"}, headers=auth_headers(staff)
    )

    body = response.json()
    assert body["status"] == "resolved"
    assert body["resolved_by"] == staff["id"]
    assert body["resolved_at"] is not None


async def test_self_assign_and_unassign(client, admin, staff, auth_headers):
    issue = await _issue(client, admin, auth_headers)
    url = f"/api/v1/issues/{issue['id']}/self-assign"

    assigned = await client.post(url, json={"action": "assign"}, headers=auth_headers(staff))
    assert assigned.json()["assigned_to"] == [staff["id"]]

    unassigned = await client.post(url, json={"action": "unassign"}, headers=auth_headers(staff))
    assert unassigned.json()["assigned_to"] == []


async def test_issue_requires_title(client, admin, auth_headers):
    response = await client.post(
        "/api/v1/issues/", json={"description": "Başlıksız"}, headers=auth_headers(admin)
    )
    assert response.status_code == 400


async def test_notifications_follow_activity_log(client, db, admin, staff, auth_headers):
    await client.post(
        "/api/v1/tasks/",
        json={"title": "Rapor", "description": "Haftalık", "assigned_to": staff["id"]},
        headers=auth_headers(admin),
    )
    headers = auth_headers(staff)

    notifications = (await client.get(f"/api/v1/notifications/{staff['id']}", headers=headers)).json()
    assert notifications[0]["type"] == "task"
    assert notifications[0]["title"] == "Yeni Görev"
    assert notifications[0]["sender"]["id"] == admin["id"]

    count = await client.get(f"/api/v1/notifications/{staff['id']}/unread-count", headers=headers)
    assert count.json() == {"count": 1}

    await client.put(f"/api/v1/notifications/{staff['id']}/read-all", headers=headers)
    count = await client.get(f"/api/v1/notifications/{staff['id']}/unread-count", headers=headers)
    assert count.json() == {"count": 0}

    deleted = await client.delete(f"/api/v1/notifications/{staff['id']}/delete-read", headers=headers)
    assert deleted.json()["deleted"] == 1
    assert await db[Collections.ACTIVITIES].count_documents({"related_user": staff["id"]}) == 0


async def _assign_task(client, admin, staff, auth_headers, title):
    await client.post(
        "/api/v1/tasks/",
        json={"title": title, "description": "-", "assigned_to": staff["id"]},
        headers=auth_headers(admin),
    )


async def test_single_notification_read_and_delete_read(client, db, admin, staff, auth_headers):
    await _assign_task(client, admin, staff, auth_headers, "Birinci")
    await _assign_task(client, admin, staff, auth_headers, "İkinci")
    headers = auth_headers(staff)
    notifications = (await client.get(f"/api/v1/notifications/{staff['id']}", headers=headers)).json()
    assert len(notifications) == 2

    response = await client.put(f"/api/v1/notifications/{notifications[0]['id']}/read", headers=headers)
    assert response.status_code == 200

    count = await client.get(f"/api/v1/notifications/{staff['id']}/unread-count", headers=headers)
    assert count.json() == {"count": 1}

    # sadece okunmuş olan silinir
    deleted = await client.delete(f"/api/v1/notifications/{staff['id']}/delete-read", headers=headers)
    assert deleted.json()["deleted"] == 1
    remaining = (await client.get(f"/api/v1/notifications/{staff['id']}", headers=headers)).json()
    assert [n["id"] for n in remaining] == [notifications[1]["id"]]
    assert remaining[0]["read"] is False


async def test_notifications_of_other_users_are_protected(client, db, admin, staff, other_staff, auth_headers):
    await _assign_task(client, admin, staff, auth_headers, "Rapor")
    notification = (await client.get(
        f"/api/v1/notifications/{staff['id']}", headers=auth_headers(staff)
    )).json()[0]
    outsider = auth_headers(other_staff)

    read = await client.put(f"/api/v1/notifications/{notification['id']}/read", headers=outsider)
    assert read.status_code == 404
    removed = await client.delete(f"/api/v1/notifications/{notification['id']}", headers=outsider)
    assert removed.status_code == 404
    read_all = await client.put(f"/api/v1/notifications/{staff['id']}/read-all", headers=outsider)
    assert read_all.status_code == 403

    stored = await db[Collections.ACTIVITIES].find_one({"id": notification["id"]})
    assert stored["read"] is False


async def test_missing_notification_is_not_found(client, staff, auth_headers):
    response = await client.put("/api/v1/notifications/yok/read", headers=auth_headers(staff))
    assert response.status_code == 404

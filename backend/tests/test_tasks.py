"""
Görev akışı testleri: atama, durum geçişleri ve onay
"""
import pytest

from db.mongo import Collections
from models.task import ALLOWED_TRANSITIONS, TaskStatus, can_transition


async def _create_task(client, assigner, assignee, auth_headers, **extra):
    response = await client.post(
        "/api/v1/tasks/",
        json={"title": "Sunucu bakımı", "description": "Aylık kontrol", "assigned_to": assignee["id"], **extra},
        headers=auth_headers(assigner),
    )
    assert response.status_code == 201
    return response.json()["task"]


async def _set_status(client, task_id, status, user, auth_headers):
    return await client.put(
        f"/api/v1/tasks/{task_id}/status", json={"status": status}, headers=auth_headers(user)
    )


def test_completed_is_terminal_except_self():
    assert ALLOWED_TRANSITIONS[TaskStatus.COMPLETED] == frozenset({TaskStatus.COMPLETED})
    assert not can_transition(TaskStatus.COMPLETED, TaskStatus.PENDING)


@pytest.mark.parametrize("current,target,allowed", [
    (TaskStatus.PENDING, TaskStatus.IN_PROGRESS, True),
    (TaskStatus.IN_PROGRESS, TaskStatus.PENDING_APPROVAL, True),
    (TaskStatus.PENDING_APPROVAL, TaskStatus.REJECTED, True),
    (TaskStatus.REJECTED, TaskStatus.IN_PROGRESS, True),
    (TaskStatus.CANCELLED, TaskStatus.PENDING, True),
    (TaskStatus.CANCELLED, TaskStatus.COMPLETED, False),
    (TaskStatus.PENDING, TaskStatus.REJECTED, False),
])
def test_transition_table(current, target, allowed):
    assert can_transition(current, target) is allowed


async def test_create_task_requires_assignee(client, db, admin, auth_headers):
    response = await client.post(
        "/api/v1/tasks/",
        json={"title": "Başlık", "description": "Açıklama"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert await db[Collections.TASKS].count_documents({}) == 0


async def test_create_task_notifies_assignee(client, db, notifier, admin, staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)

    assert task["status"] == "pending"
    assert task["assigned_by"] == admin["id"]
    assert task["assigned_to_user"]["name"] == staff["name"]

    events = notifier.named("new_task_assigned")
    assert [e[0] for e in events] == [staff["id"]]
    activity = await db[Collections.ACTIVITIES].find_one({"related_task": task["id"]})
    assert activity["activity_type"] == "task_created"


async def test_completed_at_is_set_once(client, db, admin, staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)

    first = await _set_status(client, task["id"], "completed", staff, auth_headers)
    assert first.status_code == 200
    stored = await db[Collections.TASKS].find_one({"id": task["id"]})
    assert stored["completed_at"] is not None

    again = await _set_status(client, task["id"], "completed", staff, auth_headers)
    assert again.status_code == 200
    restored = await db[Collections.TASKS].find_one({"id": task["id"]})
    assert restored["completed_at"] == stored["completed_at"]


async def test_disallowed_transition_is_rejected(client, admin, staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)
    await _set_status(client, task["id"], "completed", staff, auth_headers)

    response = await _set_status(client, task["id"], "in-progress", staff, auth_headers)
    assert response.status_code == 400


async def test_unrelated_user_cannot_change_status(client, admin, staff, other_staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)

    response = await _set_status(client, task["id"], "in-progress", other_staff, auth_headers)
    assert response.status_code == 403


async def test_submit_for_approval_notifies_assigner(client, notifier, admin, staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)

    response = await _set_status(client, task["id"], "pending-approval", staff, auth_headers)

    assert response.status_code == 200
    assert [e[0] for e in notifier.named("task_needs_approval")] == [admin["id"]]


async def test_approve_requires_pending_approval(client, admin, staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)

    response = await client.put(
        f"/api/v1/tasks/{task['id']}/approve", json={"approved": True}, headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Bu görev onay bekleyen durumda değil"


async def test_approve_completes_task(client, notifier, admin, staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)
    await _set_status(client, task["id"], "pending-approval", staff, auth_headers)

    response = await client.put(
        f"/api/v1/tasks/{task['id']}/approve", json={"approved": True}, headers=auth_headers(admin)
    )

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "completed"
    assert body["approved_by"] == admin["id"]
    assert body["completed_at"] is not None
    assert [e[0] for e in notifier.named("task_approved")] == [staff["id"]]


async def test_reject_records_reason(client, admin, staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)
    await _set_status(client, task["id"], "pending-approval", staff, auth_headers)

    response = await client.put(
        f"/api/v1/tasks/{task['id']}/approve",
        json={"approved": False, "rejection_reason": "Eksik rapor"},
        headers=auth_headers(admin),
    )

    body = response.json()
    assert body["status"] == "rejected"
    assert body["rejection_reason"] == "Eksik rapor"
    assert body["notes"] == "Red nedeni: Eksik rapor"


async def test_only_assigner_or_admin_can_approve(client, admin, staff, other_staff, auth_headers):
    task = await _create_task(client, admin, staff, auth_headers)
    await _set_status(client, task["id"], "pending-approval", staff, auth_headers)

    response = await client.put(
        f"/api/v1/tasks/{task['id']}/approve", json={"approved": True}, headers=auth_headers(other_staff)
    )
    assert response.status_code == 403


async def test_pending_approval_listing(client, admin, staff, auth_headers):
    first = await _create_task(client, admin, staff, auth_headers)
    await _create_task(client, admin, staff, auth_headers, title="İkinci")
    await _set_status(client, first["id"], "pending-approval", staff, auth_headers)

    response = await client.get("/api/v1/tasks/pending-approval", headers=auth_headers(admin))

    assert [t["id"] for t in response.json()] == [first["id"]]

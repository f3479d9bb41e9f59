"""
Görev Servisi - İş Mantığı
Görev atama, durum geçişleri, onay akışı ve bildirim dağıtımı
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
import uuid
import logging

from core.errors import NotFoundError, PermissionDeniedError, ServiceError
from db.mongo import Collections
from models.activity import ActivityType
from models.task import (
    STATUS_TEXT, TaskApproval, TaskCreate, TaskStatus, TaskUpdate, can_transition
)
from models.user import UserRole
from services.activity_service import ActivityService
from services.realtime import RealtimeNotifier

logger = logging.getLogger(__name__)

TASK_USER_FIELDS = {"_id": 0, "id": 1, "name": 1, "email": 1, "avatar": 1}


class TaskService:
    """Görev iş mantığı servisi"""

    def __init__(self, db: AsyncIOMotorDatabase, notifier: Optional[RealtimeNotifier] = None):
        self.db = db
        self.tasks = db[Collections.TASKS]
        self.users = db[Collections.USERS]
        self.activities = ActivityService(db)
        self.notifier = notifier

    async def _emit(self, user_id: Optional[str], event: str, data: dict) -> None:
        if self.notifier is not None:
            await self.notifier.emit_to_user(user_id, event, data)

    # ========================================================================
    # SORGULAR
    # ========================================================================

    async def _with_users(self, tasks: List[dict]) -> List[dict]:
        """assigned_to / assigned_by kullanıcı özetlerini ekle"""
        user_ids = {t.get("assigned_to") for t in tasks} | {t.get("assigned_by") for t in tasks}
        user_ids.discard(None)
        users = {}
        if user_ids:
            found = await self.users.find(
                {"id": {"$in": list(user_ids)}}, TASK_USER_FIELDS
            ).to_list(length=len(user_ids))
            users = {u["id"]: u for u in found}

        for task in tasks:
            task["assigned_to_user"] = users.get(task.get("assigned_to"))
            task["assigned_by_user"] = users.get(task.get("assigned_by"))
        return tasks

    async def _find(self, query: dict) -> List[dict]:
        tasks = await self.tasks.find(query, {"_id": 0}).sort("created_at", -1).to_list(length=None)
        return await self._with_users(tasks)

    async def list_tasks(self, status: Optional[TaskStatus] = None) -> List[dict]:
        """Tüm görevler (yeniden eskiye)"""
        query = {"status": status.value} if status else {}
        return await self._find(query)

    async def list_user_tasks(self, user_id: str) -> List[dict]:
        """Kullanıcıya atanmış görevler"""
        return await self._find({"assigned_to": user_id})

    async def list_pending_approval(self) -> List[dict]:
        """Onay bekleyen görevler"""
        return await self._find({"status": TaskStatus.PENDING_APPROVAL.value})

    async def get_raw(self, task_id: str) -> dict:
        task = await self.tasks.find_one({"id": task_id}, {"_id": 0})
        if not task:
            raise NotFoundError("Görev bulunamadı")
        return task

    async def get_task(self, task_id: str) -> dict:
        task = await self.get_raw(task_id)
        return (await self._with_users([task]))[0]

    # ========================================================================
    # OLUŞTURMA / GÜNCELLEME
    # ========================================================================

    async def create_task(self, data: TaskCreate, assigned_by: str) -> dict:
        """Yeni görev ata"""
        if not data.title or not data.description or not data.assigned_to or not assigned_by:
            raise ServiceError("Başlık, açıklama, atanan kişi ve atan kişi zorunludur")

        assignee = await self.users.find_one({"id": data.assigned_to}, {"_id": 0})
        assigner = await self.users.find_one({"id": assigned_by}, {"_id": 0})
        if not assignee or not assigner:
            raise NotFoundError("Kullanıcı bulunamadı")

        now = datetime.now(timezone.utc)
        task = {
            "id": str(uuid.uuid4()),
            "title": data.title.strip(),
            "description": data.description,
            "assigned_to": data.assigned_to,
            "assigned_by": assigned_by,
            "priority": data.priority.value,
            "status": TaskStatus.PENDING.value,
            "due_date": data.due_date,
            "completed_at": None,
            "approved_by": None,
            "approved_at": None,
            "rejection_reason": None,
            "notes": None,
            "created_at": now,
            "updated_at": now,
        }
        await self.tasks.insert_one(task)
        task.pop("_id", None)

        await self.activities.record(
            f"Yeni görev atandı: {task['title']}",
            activity_type=ActivityType.TASK_CREATED,
            user=assigned_by,
            related_user=data.assigned_to,
            related_task=task["id"],
            message=f"{assigner['name']} size yeni bir görev atadı: {task['title']}",
        )

        await self._emit(data.assigned_to, "new_task_assigned", {
            "task": task,
            "assigned_by": {"id": assigner["id"], "name": assigner["name"]},
            "message": f"Size yeni bir görev atandı: {task['title']}",
        })

        logger.info(f"Görev oluşturuldu: {task['id']} -> {data.assigned_to}")
        return (await self._with_users([task]))[0]

    async def update_task(self, task_id: str, data: TaskUpdate) -> dict:
        """Görev alanlarını güncelle (durum hariç)"""
        await self.get_raw(task_id)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "assigned_to" in changes:
            if not await self.users.find_one({"id": changes["assigned_to"]}, {"_id": 1}):
                raise NotFoundError("Kullanıcı bulunamadı")
        if "priority" in changes:
            changes["priority"] = data.priority.value

        changes["updated_at"] = datetime.now(timezone.utc)
        await self.tasks.update_one({"id": task_id}, {"$set": changes})
        return await self.get_task(task_id)

    async def delete_task(self, task_id: str) -> None:
        result = await self.tasks.delete_one({"id": task_id})
        if result.deleted_count == 0:
            raise NotFoundError("Görev bulunamadı")

    # ========================================================================
    # DURUM AKIŞI
    # ========================================================================

    async def update_status(self, task_id: str, status: Optional[TaskStatus], actor: dict) -> dict:
        """
        Görev durumunu değiştir
        Geçişler ALLOWED_TRANSITIONS tablosuna göre kontrol edilir
        """
        if status is None:
            raise ServiceError("Durum bilgisi gereklidir")

        task = await self.get_raw(task_id)
        is_admin = actor.get("role") == UserRole.ADMIN.value
        if not is_admin and actor["id"] not in (task["assigned_to"], task["assigned_by"]):
            raise PermissionDeniedError("Bu görevi güncelleme yetkiniz yok")

        current = TaskStatus(task["status"])
        if not can_transition(current, status):
            raise ServiceError(
                f"'{STATUS_TEXT[current]}' durumundaki görev '{STATUS_TEXT[status]}' durumuna alınamaz"
            )

        now = datetime.now(timezone.utc)
        changes = {"status": status.value, "updated_at": now}
        if status == TaskStatus.COMPLETED and not task.get("completed_at"):
            changes["completed_at"] = now
        if status != TaskStatus.COMPLETED and current == TaskStatus.COMPLETED:
            changes["completed_at"] = None

        await self.tasks.update_one({"id": task_id}, {"$set": changes})
        task.update(changes)

        if current == status:
            # aynı duruma tekrar geçiş: bildirim yok
            return (await self._with_users([task]))[0]

        if status == TaskStatus.PENDING_APPROVAL and actor["id"] == task["assigned_to"]:
            await self.activities.record(
                f"Görev onaya gönderildi: {task['title']}",
                activity_type=ActivityType.TASK_UPDATED,
                user=actor["id"],
                related_user=task["assigned_by"],
                related_task=task_id,
                message=f"{actor.get('name', '')} '{task['title']}' görevini tamamladı ve onayınızı bekliyor",
            )
            await self._emit(task["assigned_by"], "task_needs_approval", {
                "task": task,
                "completed_by": {"id": actor["id"], "name": actor.get("name")},
                "message": f"'{task['title']}' görevi onayınızı bekliyor",
            })
        else:
            notify_user = task["assigned_by"] if actor["id"] == task["assigned_to"] else task["assigned_to"]
            activity_type = (
                ActivityType.TASK_COMPLETED if status == TaskStatus.COMPLETED else ActivityType.TASK_UPDATED
            )
            await self.activities.record(
                f"Görev durumu güncellendi: {task['title']}",
                activity_type=activity_type,
                user=actor["id"],
                related_user=notify_user,
                related_task=task_id,
                message=f"'{task['title']}' görevinin durumu '{STATUS_TEXT[status]}' olarak güncellendi",
                metadata={"from": current.value, "to": status.value},
            )
            await self._emit(notify_user, "task_status_updated", {
                "task": task,
                "status": status.value,
                "status_text": STATUS_TEXT[status],
                "updated_by": {"id": actor["id"], "name": actor.get("name")},
                "message": f"'{task['title']}' görevi: {STATUS_TEXT[status]}",
            })

        logger.info(f"Görev durumu: {task_id} {current.value} -> {status.value}")
        return (await self._with_users([task]))[0]

    async def approve(self, task_id: str, decision: TaskApproval, actor: dict) -> dict:
        """Onay bekleyen görevi onayla veya reddet"""
        task = await self.get_raw(task_id)

        if task["status"] != TaskStatus.PENDING_APPROVAL.value:
            raise ServiceError("Bu görev onay bekleyen durumda değil")

        now = datetime.now(timezone.utc)
        if decision.approved:
            changes = {
                "status": TaskStatus.COMPLETED.value,
                "completed_at": task.get("completed_at") or now,
                "approved_by": actor["id"],
                "approved_at": now,
                "updated_at": now,
            }
            event, activity_type = "task_approved", ActivityType.TASK_APPROVED
            message = f"'{task['title']}' görevi onaylandı"
        else:
            reason = (decision.rejection_reason or "").strip() or "Belirtilmedi"
            changes = {
                "status": TaskStatus.REJECTED.value,
                "rejection_reason": reason,
                "notes": f"Red nedeni: {reason}",
                "updated_at": now,
            }
            event, activity_type = "task_rejected", ActivityType.TASK_REJECTED
            message = f"'{task['title']}' görevi reddedildi. Neden: {reason}"

        await self.tasks.update_one({"id": task_id}, {"$set": changes})
        task.update(changes)

        await self.activities.record(
            message,
            activity_type=activity_type,
            user=actor["id"],
            related_user=task["assigned_to"],
            related_task=task_id,
            message=message,
        )
        await self._emit(task["assigned_to"], event, {
            "task": task,
            "approved_by" if decision.approved else "rejected_by": {"id": actor["id"], "name": actor.get("name")},
            "message": message,
        })

        return (await self._with_users([task]))[0]

"""
Sorun Kaydı Servisi
Sorun CRUD, atama bildirimleri, notlar, ekler ve istatistikler
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import date, datetime, timezone, timedelta
import uuid
import logging

from core.errors import NotFoundError, ServiceError
from core.utils import as_utc
from db.mongo import Collections
from models.activity import ActivityType
from models.issue import (
    IssueAttachmentCreate, IssueCreate, IssueNoteCreate, IssueStatus, IssueUpdate
)
from services.activity_service import ActivityService
from services.realtime import RealtimeNotifier

logger = logging.getLogger(__name__)

UNRESOLVED = [IssueStatus.OPEN.value, IssueStatus.IN_PROGRESS.value]


class IssueService:
    """Sorun iş mantığı servisi"""

    def __init__(self, db: AsyncIOMotorDatabase, notifier: Optional[RealtimeNotifier] = None):
        self.db = db
        self.collection = db[Collections.ISSUES]
        self.activities = ActivityService(db)
        self.notifier = notifier

    async def get_issue(self, issue_id: str) -> dict:
        issue = await self.collection.find_one({"id": issue_id}, {"_id": 0})
        if not issue:
            raise NotFoundError("Sorun bulunamadı")
        return issue

    async def list_issues(
        self,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        priority: Optional[str] = None,
        day: Optional[date] = None
    ) -> List[dict]:
        """
        Filtreli liste
        status: resolved | unresolved | all | tam durum değeri
        """
        query = {}
        if status == "unresolved":
            query["status"] = {"$in": UNRESOLVED}
        elif status and status != "all":
            query["status"] = status
        if assigned_to and assigned_to != "all":
            query["assigned_to"] = assigned_to
        if priority and priority != "all":
            query["priority"] = priority

        issues = await self.collection.find(query, {"_id": 0}).sort("created_at", -1).to_list(length=None)

        if day:
            start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
            end = start + timedelta(days=1)
            issues = [i for i in issues if start <= as_utc(i["created_at"]) < end]
        return issues

    async def _notify_assignees(self, issue: dict, user_ids: List[str]) -> None:
        if self.notifier is None:
            return
        for user_id in user_ids:
            await self.notifier.emit_to_user(user_id, "new_issue_assigned", {
                "user_id": user_id,
                "issue_id": issue["id"],
                "title": issue["title"],
                "message": f"Size yeni bir sorun atandı: \"{issue['title']}\"",
            })

    async def create_issue(self, data: IssueCreate, created_by: str) -> dict:
        """Yeni sorun kaydı"""
        if not data.title or not data.description or not created_by:
            raise ServiceError("Başlık, açıklama ve oluşturan kişi zorunludur")

        now = datetime.now(timezone.utc)
        issue = {
            "id": str(uuid.uuid4()),
            "title": data.title.strip(),
            "description": data.description,
            "customer": data.customer,
            "customer_name": data.customer_name,
            "status": IssueStatus.OPEN.value,
            "priority": data.priority.value,
            "category": data.category.value,
            "assigned_to": list(dict.fromkeys(data.assigned_to)),
            "created_by": created_by,
            "due_date": data.due_date,
            "resolved_at": None,
            "resolved_by": None,
            "notes": [],
            "attachments": [],
            "created_at": now,
            "updated_at": now,
        }
        await self.collection.insert_one(issue)
        issue.pop("_id", None)

        await self.activities.record(
            "Sorun Oluşturuldu",
            activity_type=ActivityType.ISSUE_CREATED,
            user=created_by,
            message=f"Yeni sorun: \"{issue['title']}\"",
            metadata={"issue_id": issue["id"], "issue_title": issue["title"]},
        )
        await self._notify_assignees(issue, issue["assigned_to"])

        logger.info(f"Sorun oluşturuldu: {issue['id']}")
        return issue

    async def update_issue(self, issue_id: str, data: IssueUpdate, actor_id: str) -> dict:
        """Sorunu güncelle; çözüldüye geçişte resolved_at/by atanır"""
        issue = await self.get_issue(issue_id)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        for field in ("status", "priority", "category"):
            if field in changes:
                changes[field] = getattr(data, field).value

        if changes.get("status") == IssueStatus.RESOLVED.value and issue["status"] != IssueStatus.RESOLVED.value:
            changes["resolved_at"] = datetime.now(timezone.utc)
            changes["resolved_by"] = actor_id

        new_assignees = []
        if "assigned_to" in changes:
            changes["assigned_to"] = list(dict.fromkeys(changes["assigned_to"]))
            new_assignees = [u for u in changes["assigned_to"] if u not in issue.get("assigned_to", [])]

        changes["updated_at"] = datetime.now(timezone.utc)
        await self.collection.update_one({"id": issue_id}, {"$set": changes})

        issue.update(changes)
        await self._notify_assignees(issue, new_assignees)
        return issue

    async def self_assign(self, issue_id: str, user_id: str, action: str) -> dict:
        """Kullanıcı kendini soruna ekler veya çıkarır"""
        issue = await self.get_issue(issue_id)
        assigned = issue.get("assigned_to", [])

        if action == "assign":
            if user_id in assigned:
                return issue
            update = {"$addToSet": {"assigned_to": user_id}}
            activity, message = "Soruna Atandı", f"Kullanıcı soruna kendini atadı: \"{issue['title']}\""
        else:
            update = {"$pull": {"assigned_to": user_id}}
            activity, message = "Sorundan Çıkarıldı", f"Kullanıcı sorundan kendini çıkardı: \"{issue['title']}\""

        update["$set"] = {"updated_at": datetime.now(timezone.utc)}
        await self.collection.update_one({"id": issue_id}, update)
        await self.activities.record(
            activity,
            user=user_id,
            message=message,
            metadata={"issue_id": issue_id, "issue_title": issue["title"]},
        )
        return await self.get_issue(issue_id)

    async def add_note(self, issue_id: str, user_id: str, data: IssueNoteCreate) -> dict:
        await self.get_issue(issue_id)
        if not data.text or not data.text.strip():
            raise ServiceError("Not metni gereklidir")

        now = datetime.now(timezone.utc)
        await self.collection.update_one(
            {"id": issue_id},
            {
                "$push": {"notes": {"user": user_id, "text": data.text.strip(), "created_at": now}},
                "$set": {"updated_at": now},
            }
        )
        return await self.get_issue(issue_id)

    async def add_attachment(self, issue_id: str, user_id: str, data: IssueAttachmentCreate) -> dict:
        await self.get_issue(issue_id)
        if not data.name or not data.path:
            raise ServiceError("Dosya adı ve yolu gereklidir")

        now = datetime.now(timezone.utc)
        attachment = {"name": data.name, "path": data.path, "uploaded_by": user_id, "uploaded_at": now}
        await self.collection.update_one(
            {"id": issue_id},
            {"$push": {"attachments": attachment}, "$set": {"updated_at": now}}
        )
        return await self.get_issue(issue_id)

    async def remove_attachment(self, issue_id: str, index: int) -> dict:
        """Eki sıra numarasıyla kaldır"""
        issue = await self.get_issue(issue_id)
        attachments = issue.get("attachments", [])
        if index < 0 or index >= len(attachments):
            raise NotFoundError("Ek bulunamadı")

        del attachments[index]
        await self.collection.update_one(
            {"id": issue_id},
            {"$set": {"attachments": attachments, "updated_at": datetime.now(timezone.utc)}}
        )
        return await self.get_issue(issue_id)

    async def delete_issue(self, issue_id: str) -> None:
        result = await self.collection.delete_one({"id": issue_id})
        if result.deleted_count == 0:
            raise NotFoundError("Sorun bulunamadı")

    async def stats(self) -> dict:
        """Durum sayıları, son 7/30 gün, ortalama çözüm süresi"""
        issues = await self.collection.find({}, {"_id": 0, "notes": 0, "attachments": 0}).to_list(length=None)
        now = datetime.now(timezone.utc)
        last_7, last_30 = now - timedelta(days=7), now - timedelta(days=30)

        def count_status(value: str) -> int:
            return sum(1 for i in issues if i.get("status") == value)

        resolved_times = [
            (as_utc(i["resolved_at"]) - as_utc(i["created_at"])).total_seconds() / 3600
            for i in issues
            if i.get("status") == IssueStatus.RESOLVED.value and i.get("resolved_at")
        ]

        category_stats, priority_stats = {}, {}
        for issue in issues:
            category_stats[issue.get("category")] = category_stats.get(issue.get("category"), 0) + 1
            priority_stats[issue.get("priority")] = priority_stats.get(issue.get("priority"), 0) + 1

        return {
            "total": len(issues),
            "open": count_status(IssueStatus.OPEN.value),
            "in_progress": count_status(IssueStatus.IN_PROGRESS.value),
            "resolved": count_status(IssueStatus.RESOLVED.value),
            "closed": count_status(IssueStatus.CLOSED.value),
            "last_7_days": sum(1 for i in issues if as_utc(i["created_at"]) >= last_7),
            "last_30_days": sum(1 for i in issues if as_utc(i["created_at"]) >= last_30),
            "resolved_last_7_days": sum(
                1 for i in issues if i.get("resolved_at") and as_utc(i["resolved_at"]) >= last_7
            ),
            "avg_resolution_time_hours": round(sum(resolved_times) / len(resolved_times), 1) if resolved_times else 0,
            "category_stats": category_stats,
            "priority_stats": priority_stats,
        }

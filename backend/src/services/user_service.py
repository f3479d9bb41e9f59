"""
Kullanıcı Servisi
Kullanıcı yönetimi, şifre, avatar, dürtme, performans analizi ve başarılar
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone, timedelta
from pathlib import Path
import random
import uuid
import logging

import aiofiles

from core.config import settings, get_file_size_mb, is_allowed_file, validate_password
from core.errors import NotFoundError, ServiceError
from core.security import hash_password, verify_password
from core.utils import as_utc
from db.mongo import Collections
from models.activity import ActivityType
from models.task import TaskStatus
from models.user import (
    NotificationSound, NudgeRequest, PasswordChange, UserCreate, UserRole, UserUpdate
)
from services.activity_service import ActivityService
from services.realtime import RealtimeNotifier

logger = logging.getLogger(__name__)

MOTIVATIONAL_MESSAGES = [
    "💪 Hadi, bu işi bitirelim!",
    "🚀 Harikasın! Devam et!",
    "⚡ Hızlı ol, başarı yakın!",
    "🎯 Odaklan, tamamlayabilirsin!",
    "🔥 Sen yaparsın, inanıyorum!",
    "⭐ Mükemmel bir iş çıkarıyorsun!",
    "💯 Biraz daha, neredeyse bitti!",
    "🏆 Şampiyon gibi çalış!",
]

TR_MONTHS = ["Oca", "Şub", "Mar", "Nis", "May", "Haz", "Tem", "Ağu", "Eyl", "Eki", "Kas", "Ara"]

# (id, başlık, açıklama, ikon, hedef)
COMPLETION_ACHIEVEMENTS = [
    ("first_task", "İlk Adım", "İlk görevini tamamladın!", "star", 1),
    ("task_master_5", "Başlangıç Seviyesi", "5 görev tamamla", "medal", 5),
    ("task_master_10", "Görev Ustası", "10 görev tamamla", "trophy", 10),
    ("task_master_25", "Profesyonel", "25 görev tamamla", "award", 25),
    ("task_master_50", "Efsane", "50 görev tamamla", "trophy", 50),
]

USER_PROJECTION = {"_id": 0, "password": 0}


class UserService:
    """Kullanıcı iş mantığı servisi"""

    def __init__(self, db: AsyncIOMotorDatabase, notifier: Optional[RealtimeNotifier] = None):
        self.db = db
        self.users = db[Collections.USERS]
        self.tasks = db[Collections.TASKS]
        self.activities = ActivityService(db)
        self.notifier = notifier

    # ========================================================================
    # CRUD
    # ========================================================================

    async def list_users(self) -> List[dict]:
        return await self.users.find({}, USER_PROJECTION).sort("created_at", -1).to_list(length=None)

    async def get_user(self, user_id: str) -> dict:
        user = await self.users.find_one({"id": user_id}, USER_PROJECTION)
        if not user:
            raise NotFoundError("Kullanıcı bulunamadı")
        return user

    async def create_user(self, data: UserCreate, created_by: Optional[str] = None) -> dict:
        """Yeni kullanıcı oluştur"""
        if not data.name or not data.email or not data.password or not data.phone or not data.role:
            raise ServiceError("Tüm alanlar zorunludur")

        is_valid, error = validate_password(data.password)
        if not is_valid:
            raise ServiceError(error)

        email = data.email.lower()
        existing = await self.users.find_one(
            {"$or": [{"email": email}, {"username": email}]}, {"_id": 1}
        )
        if existing:
            raise ServiceError("Bu e-posta zaten kayıtlı")

        now = datetime.now(timezone.utc)
        user = {
            "id": str(uuid.uuid4()),
            "name": data.name.strip(),
            "username": data.username or email,
            "email": email,
            "password": hash_password(data.password),
            "phone": data.phone,
            "role": data.role.value,
            "avatar": data.avatar,
            "status_message": "Selam!",
            "notification_sound": NotificationSound.HAMZA.value,
            "is_online": False,
            "is_active": True,
            "last_seen": None,
            "last_login": None,
            "created_at": now,
            "updated_at": now,
        }
        await self.users.insert_one(user)

        await self.activities.record(
            f"Yeni kullanıcı oluşturuldu: {user['name']}",
            activity_type=ActivityType.USER_CREATED,
            user=created_by,
            related_user=user["id"],
        )

        logger.info(f"Kullanıcı oluşturuldu: {email} ({user['role']})")
        return await self.get_user(user["id"])

    async def update_user(self, user_id: str, data: UserUpdate) -> dict:
        """Profil bilgilerini güncelle"""
        user = await self.get_user(user_id)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "email" in changes:
            email = changes["email"].lower()
            clash = await self.users.find_one({"email": email, "id": {"$ne": user_id}}, {"_id": 1})
            if clash:
                raise ServiceError("Bu e-posta zaten kayıtlı")
            changes["email"] = email
            changes["username"] = email
        if "role" in changes:
            changes["role"] = data.role.value
            if user["role"] == UserRole.ADMIN.value and data.role != UserRole.ADMIN:
                await self._ensure_not_last_admin("Son yöneticinin rolü değiştirilemez")

        changes["updated_at"] = datetime.now(timezone.utc)
        await self.users.update_one({"id": user_id}, {"$set": changes})

        await self.activities.record(
            "Profil bilgileri güncellendi",
            activity_type=ActivityType.USER_UPDATED,
            user=user_id,
        )
        return await self.get_user(user_id)

    async def _ensure_not_last_admin(self, message: str = "Son yönetici hesabı silinemez") -> None:
        admin_count = await self.users.count_documents({"role": UserRole.ADMIN.value})
        if admin_count <= 1:
            raise ServiceError(message)

    async def delete_user(self, user_id: str) -> None:
        """Kullanıcıyı sil; son yönetici silinemez"""
        user = await self.get_user(user_id)
        if user["role"] == UserRole.ADMIN.value:
            await self._ensure_not_last_admin()

        await self.users.delete_one({"id": user_id})
        logger.info(f"Kullanıcı silindi: {user['email']}")

    # ========================================================================
    # ŞİFRE / AVATAR
    # ========================================================================

    async def change_password(self, user_id: str, data: PasswordChange) -> None:
        """Mevcut şifreyi doğrulayıp yenisini kaydet"""
        if not data.current_password or not data.new_password:
            raise ServiceError("Mevcut şifre ve yeni şifre gereklidir")

        is_valid, error = validate_password(data.new_password)
        if not is_valid:
            raise ServiceError(error)

        user = await self.users.find_one({"id": user_id}, {"_id": 0})
        if not user:
            raise NotFoundError("Kullanıcı bulunamadı")

        if not verify_password(data.current_password, user.get("password")):
            raise ServiceError("Mevcut şifre yanlış")
        if verify_password(data.new_password, user.get("password")):
            raise ServiceError("Yeni şifre mevcut şifreden farklı olmalıdır")

        await self.users.update_one(
            {"id": user_id},
            {"$set": {"password": hash_password(data.new_password), "updated_at": datetime.now(timezone.utc)}}
        )
        await self.activities.record("Şifre değiştirildi", activity_type=ActivityType.USER_UPDATED, user=user_id)

    async def update_avatar(self, user_id: str, filename: Optional[str], content: bytes) -> dict:
        """Avatar görselini kaydet"""
        await self.get_user(user_id)

        if not filename or not is_allowed_file(filename, settings.AVATAR_ALLOWED_EXTENSIONS):
            raise ServiceError("Sadece resim dosyaları yüklenebilir")
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise ServiceError(f"Dosya boyutu {get_file_size_mb(settings.MAX_UPLOAD_SIZE):.0f}MB'ı aşamaz")

        avatar_dir = Path(settings.AVATAR_DIR)
        avatar_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}"

        async with aiofiles.open(avatar_dir / stored_name, "wb") as f:
            await f.write(content)

        avatar_url = f"/avatars/{stored_name}"
        await self.users.update_one(
            {"id": user_id},
            {"$set": {"avatar": avatar_url, "updated_at": datetime.now(timezone.utc)}}
        )
        return await self.get_user(user_id)

    # ========================================================================
    # DÜRTME
    # ========================================================================

    async def nudge(self, target_id: str, sender: dict, data: NudgeRequest) -> dict:
        """Personeli dürt: aktivite kaydı + nudge_notification"""
        target = await self.get_user(target_id)

        sender_name = sender.get("name") or sender.get("email")
        motivational = data.motivational_message or random.choice(MOTIVATIONAL_MESSAGES)
        activity_message = (
            f"{sender_name} tarafından dürtüldü (Görev: {data.task_title})"
            if data.task_title else f"{sender_name} tarafından dürtüldü"
        )

        await self.activities.record(
            "Dürtüldü",
            activity_type=ActivityType.NUDGE,
            user=sender["id"],
            related_user=target_id,
            related_task=data.task_id,
            message=activity_message,
            details=data.message,
            metadata={"motivational_message": motivational, "task_title": data.task_title},
        )

        if self.notifier is not None:
            await self.notifier.emit_to_user(target_id, "nudge_notification", {
                "user_id": target_id,
                "message": data.message or f"{sender_name} sizi dürtüyor!",
                "sender_name": sender_name,
                "sender_id": sender["id"],
                "task_id": data.task_id,
                "task_title": data.task_title,
                "motivational_message": motivational,
                "target_user_sound": target.get("notification_sound"),
                "timestamp": datetime.now(timezone.utc),
            })

        logger.info(f"Dürtme gönderildi: {sender['id']} -> {target_id}")
        return {"msg": "Dürt başarıyla gönderildi", "target_user": target.get("name") or target["email"]}

    # ========================================================================
    # ANALİZ
    # ========================================================================

    async def _task_snapshot(self, user_id: str):
        tasks = await self.tasks.find({"assigned_to": user_id}, {"_id": 0}).to_list(length=None)
        for task in tasks:
            task["created_at"] = as_utc(task.get("created_at"))
            task["completed_at"] = as_utc(task.get("completed_at"))
            task["due_date"] = as_utc(task.get("due_date"))

        completed = [t for t in tasks if t["status"] == TaskStatus.COMPLETED.value]
        completed.sort(key=lambda t: t["completed_at"] or t["created_at"])
        on_time = [
            t for t in completed
            if t["due_date"] and t["completed_at"] and t["completed_at"] <= t["due_date"]
        ]
        nudge_count = await self.db[Collections.ACTIVITIES].count_documents(
            {"related_user": user_id, "activity_type": ActivityType.NUDGE.value}
        )
        return tasks, completed, on_time, nudge_count

    async def analytics(self, user_id: str) -> dict:
        """Görev performans analizi"""
        await self.get_user(user_id)
        tasks, completed, on_time, nudge_count = await self._task_snapshot(user_id)
        now = datetime.now(timezone.utc)

        closed = (TaskStatus.COMPLETED.value, TaskStatus.CANCELLED.value)
        overdue = [t for t in tasks if t["due_date"] and t["status"] not in closed and t["due_date"] < now]
        late = [
            t for t in completed
            if t["due_date"] and t["completed_at"] and t["completed_at"] > t["due_date"]
        ]

        priority_stats = {
            priority: {
                "total": sum(1 for t in tasks if t.get("priority") == priority),
                "completed": sum(1 for t in completed if t.get("priority") == priority),
            }
            for priority in ("urgent", "high", "medium", "low")
        }

        # ortalama tamamlanma süresi: saat / gün / hafta
        hours = [
            (t["completed_at"] - t["created_at"]).total_seconds() / 3600
            for t in completed if t["completed_at"] and t["created_at"]
        ]
        avg_time, avg_unit = 0.0, "gün"
        if hours:
            avg_hours = sum(hours) / len(hours)
            if avg_hours < 24:
                avg_time, avg_unit = round(avg_hours, 1), "saat"
            elif avg_hours < 168:
                avg_time, avg_unit = round(avg_hours / 24, 1), "gün"
            else:
                avg_time, avg_unit = round(avg_hours / 168, 1), "hafta"

        monthly = []
        for offset in range(5, -1, -1):
            month_index = now.month - 1 - offset
            year = now.year + month_index // 12
            month = month_index % 12 + 1
            month_tasks = [
                t for t in tasks
                if t["created_at"] and t["created_at"].year == year and t["created_at"].month == month
            ]
            month_completed = sum(1 for t in month_tasks if t["status"] == TaskStatus.COMPLETED.value)
            monthly.append({
                "month": TR_MONTHS[month - 1],
                "total": len(month_tasks),
                "completed": month_completed,
                "completion_rate": round(month_completed / len(month_tasks) * 100) if month_tasks else 0,
            })

        weekly = []
        for offset in range(3, -1, -1):
            week_end = now - timedelta(days=offset * 7)
            week_start = week_end - timedelta(days=7)
            week_tasks = [t for t in tasks if t["created_at"] and week_start <= t["created_at"] <= week_end]
            weekly.append({
                "week": f"Hafta {4 - offset}",
                "tasks_created": len(week_tasks),
                "tasks_completed": sum(1 for t in week_tasks if t["status"] == TaskStatus.COMPLETED.value),
            })

        completion_rate = len(completed) / len(tasks) * 100 if tasks else 0
        on_time_rate = len(on_time) / len(completed) * 100 if completed else 0
        overdue_rate = len(overdue) / len(tasks) * 100 if tasks else 0
        performance_score = round(completion_rate * 0.4 + on_time_rate * 0.4 + (100 - overdue_rate) * 0.2)

        strengths, improvements = [], []
        if on_time_rate >= 80:
            strengths.append("Görevleri zamanında tamamlama oranı çok yüksek")
        if completion_rate >= 75:
            strengths.append("Görev tamamlama oranı mükemmel seviyede")
        if nudge_count == 0:
            strengths.append("Hiç dürtülmeden görevleri tamamlıyor")
        urgent = priority_stats["urgent"]
        if urgent["total"] > 0 and urgent["completed"] / urgent["total"] >= 0.9:
            strengths.append("Acil görevlerde yüksek başarı oranı")
        if len(overdue) > 3:
            improvements.append("Geciken görev sayısını azaltmaya çalışın")
        if nudge_count > 5:
            improvements.append("Dürtülme sayısını azaltmak için proaktif olun")
        if on_time_rate < 50:
            improvements.append("Görevleri belirlenen sürede tamamlamaya odaklanın")
        if avg_unit != "saat" and avg_time > 7:
            improvements.append("Görev tamamlanma süresini kısaltmayı deneyin")

        return {
            "summary": {
                "total_tasks": len(tasks),
                "completed_tasks": len(completed),
                "in_progress_tasks": sum(1 for t in tasks if t["status"] == TaskStatus.IN_PROGRESS.value),
                "pending_tasks": sum(1 for t in tasks if t["status"] == TaskStatus.PENDING.value),
                "overdue_tasks": len(overdue),
                "completion_rate": round(completion_rate),
                "on_time_tasks": len(on_time),
                "late_tasks": len(late),
                "on_time_rate": round(on_time_rate),
                "nudge_count": nudge_count,
                "avg_completion_time": avg_time,
                "avg_completion_time_unit": avg_unit,
                "performance_score": performance_score,
            },
            "priority_stats": priority_stats,
            "monthly_performance": monthly,
            "weekly_activity": weekly,
            "insights": {"strengths": strengths, "improvements": improvements},
        }

    async def achievements(self, user_id: str) -> List[dict]:
        """Tamamlanan görev eşiklerine göre başarı rozetleri"""
        await self.get_user(user_id)
        tasks, completed, on_time, nudge_count = await self._task_snapshot(user_id)
        now = datetime.now(timezone.utc)

        def badge(badge_id, title, description, icon, items, target, unlocked=None):
            reached = len(items) >= target if unlocked is None else unlocked
            return {
                "id": badge_id,
                "title": title,
                "description": description,
                "icon": icon,
                "unlocked": reached,
                "unlocked_at": (items[target - 1]["completed_at"] if len(items) >= target else now) if reached else None,
                "progress": min(len(items), target),
                "target": target,
            }

        result = [
            badge(badge_id, title, description, icon, completed, target)
            for badge_id, title, description, icon, target in COMPLETION_ACHIEVEMENTS
        ]

        result.append(badge(
            "perfect_week", "Mükemmel Hafta", "Bir hafta içinde tüm görevleri zamanında tamamla",
            "flame", on_time, 5, unlocked=len(on_time) >= 5 and len(completed) >= 5,
        ))
        result.append(badge(
            "on_time_master", "Zamanlama Şampiyonu", "10 görevi zamanında tamamla", "zap", on_time, 10,
        ))

        no_nudge = badge(
            "no_nudge", "Proaktif", "Hiç dürtülmeden 10 görev tamamla", "target", completed, 10,
            unlocked=nudge_count == 0 and len(completed) >= 10,
        )
        if nudge_count:
            no_nudge["progress"] = 0
        result.append(no_nudge)

        fast = [
            t for t in completed
            if t["completed_at"] and t["created_at"] and t["completed_at"] - t["created_at"] < timedelta(hours=24)
        ]
        result.append(badge("speed_demon", "Hız Canavarı", "Bir görevi 24 saat içinde tamamla", "zap", fast, 1))

        urgent = [t for t in completed if t.get("priority") == "urgent"]
        result.append(badge("urgent_master", "Acil Durum Kahramanı", "5 acil görevi başarıyla tamamla", "flame", urgent, 5))

        return result

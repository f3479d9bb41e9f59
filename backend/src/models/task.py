"""
Görev Modelleri
Görev atama ve onay akışı
"""
from pydantic import BaseModel
from typing import Dict, FrozenSet, Optional
from datetime import datetime
from enum import Enum


# ============================================================================
# ENUM'LAR
# ============================================================================

class TaskStatus(str, Enum):
    """Görev durumları"""
    PENDING = "pending"                      # Beklemede
    IN_PROGRESS = "in-progress"              # Devam ediyor
    PENDING_APPROVAL = "pending-approval"    # Onay bekliyor
    COMPLETED = "completed"                  # Tamamlandı
    CANCELLED = "cancelled"                  # İptal edildi
    REJECTED = "rejected"                    # Reddedildi


class TaskPriority(str, Enum):
    """Görev öncelikleri"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


STATUS_TEXT: Dict[TaskStatus, str] = {
    TaskStatus.PENDING: "Beklemede",
    TaskStatus.IN_PROGRESS: "Devam Ediyor",
    TaskStatus.PENDING_APPROVAL: "Onay Bekliyor",
    TaskStatus.COMPLETED: "Tamamlandı",
    TaskStatus.CANCELLED: "İptal Edildi",
    TaskStatus.REJECTED: "Reddedildi",
}

# Durum geçiş tablosu
ALLOWED_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({
        TaskStatus.IN_PROGRESS, TaskStatus.PENDING_APPROVAL,
        TaskStatus.COMPLETED, TaskStatus.CANCELLED,
    }),
    TaskStatus.IN_PROGRESS: frozenset({
        TaskStatus.PENDING, TaskStatus.PENDING_APPROVAL,
        TaskStatus.COMPLETED, TaskStatus.CANCELLED,
    }),
    TaskStatus.PENDING_APPROVAL: frozenset({
        TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED,
        TaskStatus.REJECTED, TaskStatus.CANCELLED,
    }),
    TaskStatus.REJECTED: frozenset({
        TaskStatus.PENDING, TaskStatus.IN_PROGRESS,
        TaskStatus.PENDING_APPROVAL, TaskStatus.CANCELLED,
    }),
    TaskStatus.COMPLETED: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.CANCELLED: frozenset({TaskStatus.PENDING}),
}


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """Geçiş izinli mi"""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


# ============================================================================
# İSTEK / ÇIKTI
# ============================================================================

class TaskCreate(BaseModel):
    """Yeni görev"""
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """Görev güncelleme"""
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None


class TaskStatusUpdate(BaseModel):
    """Durum değişikliği"""
    status: Optional[TaskStatus] = None


class TaskApproval(BaseModel):
    """Onay / red"""
    approved: bool
    rejection_reason: Optional[str] = None


class TaskUserInfo(BaseModel):
    """Görevde gösterilen kullanıcı özeti"""
    id: str
    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None


class TaskOut(BaseModel):
    """Görev çıktısı"""
    id: str
    title: str
    description: str
    assigned_to: str
    assigned_by: str
    assigned_to_user: Optional[TaskUserInfo] = None
    assigned_by_user: Optional[TaskUserInfo] = None
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

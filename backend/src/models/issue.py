"""
Sorun Kaydı Modelleri
"""
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime
from enum import Enum


class IssueStatus(str, Enum):
    """Sorun durumları"""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class IssuePriority(str, Enum):
    """Sorun öncelikleri"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueCategory(str, Enum):
    """Sorun kategorileri"""
    TECHNICAL = "technical"
    BILLING = "billing"
    SUPPORT = "support"
    COMPLAINT = "complaint"
    OTHER = "other"


class IssueNote(BaseModel):
    """Sorun notu"""
    user: str
    text: str
    created_at: datetime


class IssueAttachment(BaseModel):
    """Sorun eki"""
    name: str
    path: str
    uploaded_by: str
    uploaded_at: datetime


class IssueCreate(BaseModel):
    """Yeni sorun"""
    title: Optional[str] = None
    description: Optional[str] = None
    customer: Optional[str] = None
    customer_name: Optional[str] = None
    priority: IssuePriority = IssuePriority.MEDIUM
    category: IssueCategory = IssueCategory.OTHER
    assigned_to: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None


class IssueUpdate(BaseModel):
    """Sorun güncelleme"""
    title: Optional[str] = None
    description: Optional[str] = None
    customer: Optional[str] = None
    customer_name: Optional[str] = None
    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    category: Optional[IssueCategory] = None
    assigned_to: Optional[List[str]] = None
    due_date: Optional[datetime] = None


class IssueNoteCreate(BaseModel):
    """Not ekleme"""
    text: Optional[str] = None


class IssueAttachmentCreate(BaseModel):
    """Ek ekleme"""
    name: Optional[str] = None
    path: Optional[str] = None


class SelfAssign(BaseModel):
    """Kendini atama / çıkarma"""
    action: Literal["assign", "unassign"] = "assign"


class IssueOut(BaseModel):
    """Sorun çıktısı"""
    id: str
    title: str
    description: str
    customer: Optional[str] = None
    customer_name: Optional[str] = None
    status: IssueStatus
    priority: IssuePriority
    category: IssueCategory
    assigned_to: List[str] = Field(default_factory=list)
    created_by: str
    due_date: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    notes: List[IssueNote] = Field(default_factory=list)
    attachments: List[IssueAttachment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

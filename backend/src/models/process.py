"""
Süreç Modelleri
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class ProcessStatus(str, Enum):
    """Süreç durumları"""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"
    CANCELLED = "cancelled"


class ProcessPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProcessCreate(BaseModel):
    """Yeni süreç"""
    title: Optional[str] = None
    description: Optional[str] = None
    priority: ProcessPriority = ProcessPriority.MEDIUM
    assigned_team: List[str] = Field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    budget: Optional[float] = None
    estimated_duration: Optional[int] = None
    notes: Optional[str] = None


class ProcessUpdate(BaseModel):
    """Süreç güncelleme"""
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[ProcessPriority] = None
    assigned_team: Optional[List[str]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    budget: Optional[float] = None
    estimated_duration: Optional[int] = None
    notes: Optional[str] = None


class ProcessStatusUpdate(BaseModel):
    status: Optional[ProcessStatus] = None


class ProcessProgressUpdate(BaseModel):
    progress: Optional[int] = None


class ProcessOut(BaseModel):
    """Süreç çıktısı"""
    id: str
    title: str
    description: str
    status: ProcessStatus
    priority: ProcessPriority
    assigned_team: List[str] = Field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    progress: int = 0
    created_by: str
    tags: List[str] = Field(default_factory=list)
    budget: Optional[float] = None
    estimated_duration: Optional[int] = None
    actual_duration: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

"""
Takvim Etkinliği Modelleri
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class EventType(str, Enum):
    MAINTENANCE = "maintenance"
    SERVICE = "service"
    MEETING = "meeting"
    INSTALLATION = "installation"
    SUPPORT = "support"
    OTHER = "other"


class EventStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class EventPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class EventLocation(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None


class CalendarEventCreate(BaseModel):
    """Yeni etkinlik"""
    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    event_time: Optional[str] = None
    assigned_personnel: Optional[str] = None
    customer: Optional[str] = None
    location: EventLocation = Field(default_factory=EventLocation)
    event_type: Optional[EventType] = None
    priority: EventPriority = EventPriority.MEDIUM
    estimated_duration: int = 60
    notes: Optional[str] = None


class CalendarEventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    event_time: Optional[str] = None
    assigned_personnel: Optional[str] = None
    customer: Optional[str] = None
    location: Optional[EventLocation] = None
    event_type: Optional[EventType] = None
    status: Optional[EventStatus] = None
    priority: Optional[EventPriority] = None
    estimated_duration: Optional[int] = None
    notes: Optional[str] = None
    completion_notes: Optional[str] = None


class CalendarEventOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    event_date: datetime
    event_time: str
    assigned_personnel: str
    customer: Optional[str] = None
    location: EventLocation = Field(default_factory=EventLocation)
    event_type: EventType
    status: EventStatus
    priority: EventPriority
    estimated_duration: int = 60
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    completion_notes: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: datetime

"""
Servis İşi Modelleri
Kurulum, bakım, onarım saha işleri
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class ServiceType(str, Enum):
    """Servis tipleri"""
    INSTALLATION = "installation"
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    UPGRADE = "upgrade"
    CONSULTATION = "consultation"


class ServiceJobStatus(str, Enum):
    """Servis işi durumları"""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on-hold"


class TicketPriority(str, Enum):
    """Saha kayıtları için ortak öncelik"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Coordinates(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class JobLocation(BaseModel):
    """İş adresi"""
    address: str
    city: str
    coordinates: Optional[Coordinates] = None


class JobCost(BaseModel):
    """Maliyet"""
    estimated: float
    actual: Optional[float] = None
    currency: str = "TRY"


class ServiceJobCreate(BaseModel):
    """Yeni servis işi"""
    customer: Optional[str] = None
    service_type: Optional[ServiceType] = None
    priority: TicketPriority = TicketPriority.MEDIUM
    assigned_technician: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    estimated_duration: Optional[float] = None
    description: Optional[str] = None
    location: Optional[JobLocation] = None
    equipment: List[str] = Field(default_factory=list)
    cost: Optional[JobCost] = None
    notes: Optional[str] = None


class ServiceJobUpdate(BaseModel):
    """Servis işi güncelleme"""
    service_type: Optional[ServiceType] = None
    priority: Optional[TicketPriority] = None
    assigned_technician: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    estimated_duration: Optional[float] = None
    actual_duration: Optional[float] = None
    description: Optional[str] = None
    location: Optional[JobLocation] = None
    equipment: Optional[List[str]] = None
    cost: Optional[JobCost] = None
    notes: Optional[str] = None
    customer_signature: Optional[str] = None


class ServiceJobStatusUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None
    actual_duration: Optional[float] = None


class ServiceJobOut(BaseModel):
    """Servis işi çıktısı"""
    id: str
    job_number: str
    customer: str
    service_type: ServiceType
    priority: TicketPriority
    status: ServiceJobStatus
    assigned_technician: Optional[str] = None
    scheduled_date: datetime
    estimated_duration: float
    actual_duration: Optional[float] = None
    description: str
    location: JobLocation
    equipment: List[str] = Field(default_factory=list)
    cost: JobCost
    notes: Optional[str] = None
    photos: List[str] = Field(default_factory=list)
    customer_signature: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_by: str
    created_at: datetime
    updated_at: datetime

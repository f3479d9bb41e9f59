"""
Teknisyen Modelleri
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class Specialization(str, Enum):
    """Uzmanlık alanları"""
    NETWORK_INSTALLATION = "network-installation"
    HARDWARE_REPAIR = "hardware-repair"
    SOFTWARE_INSTALLATION = "software-installation"
    SYSTEM_MAINTENANCE = "system-maintenance"
    SECURITY_SYSTEMS = "security-systems"
    TELECOMMUNICATIONS = "telecommunications"
    SERVER_MANAGEMENT = "server-management"
    DATABASE_ADMINISTRATION = "database-administration"
    CLOUD_SERVICES = "cloud-services"
    MOBILE_DEVICE_SUPPORT = "mobile-device-support"


class AvailabilityStatus(str, Enum):
    """Müsaitlik"""
    AVAILABLE = "available"
    BUSY = "busy"
    ON_LEAVE = "on-leave"
    OFF_DUTY = "off-duty"


class WorkingHours(BaseModel):
    start: str = "09:00"
    end: str = "17:00"


class Availability(BaseModel):
    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    working_hours: WorkingHours = Field(default_factory=WorkingHours)
    working_days: List[str] = Field(
        default_factory=lambda: ["monday", "tuesday", "wednesday", "thursday", "friday"]
    )


class Certification(BaseModel):
    name: str
    issuer: Optional[str] = None
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    certificate_number: Optional[str] = None


class Performance(BaseModel):
    rating: float = Field(3, ge=1, le=5)
    completed_jobs: int = 0
    average_completion_time: float = 0
    customer_satisfaction_score: float = Field(3, ge=1, le=5)


class TechnicianCreate(BaseModel):
    """Yeni teknisyen"""
    user_id: Optional[str] = None
    employee_id: Optional[str] = None
    specialization: List[Specialization] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    experience_years: int = 0
    availability: Availability = Field(default_factory=Availability)
    max_concurrent_jobs: int = Field(3, ge=1)
    city: Optional[str] = None
    region: Optional[str] = None
    emergency_phone: Optional[str] = None
    work_phone: Optional[str] = None


class TechnicianUpdate(BaseModel):
    """Teknisyen güncelleme"""
    specialization: Optional[List[Specialization]] = None
    certifications: Optional[List[Certification]] = None
    experience_years: Optional[int] = None
    max_concurrent_jobs: Optional[int] = Field(None, ge=1)
    performance: Optional[Performance] = None
    city: Optional[str] = None
    region: Optional[str] = None
    emergency_phone: Optional[str] = None
    work_phone: Optional[str] = None


class AvailabilityUpdate(BaseModel):
    status: Optional[AvailabilityStatus] = None
    working_hours: Optional[WorkingHours] = None
    working_days: Optional[List[str]] = None


class TechnicianOut(BaseModel):
    """Teknisyen çıktısı"""
    id: str
    user: str
    user_details: Optional[dict] = None
    employee_id: str
    specialization: List[Specialization] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    experience_years: int = 0
    performance: Performance = Field(default_factory=Performance)
    availability: Availability = Field(default_factory=Availability)
    current_jobs: int = 0
    max_concurrent_jobs: int = 3
    city: Optional[str] = None
    region: Optional[str] = None
    emergency_phone: Optional[str] = None
    work_phone: Optional[str] = None
    is_active: bool = True
    active_jobs: Optional[List[dict]] = None
    created_at: datetime
    updated_at: datetime

"""
Destek Modelleri
Destek talepleri ile yerinde, uzaktan ve bakım destek kayıtları
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum

from models.service_job import TicketPriority


# ============================================================================
# DESTEK TALEBİ
# ============================================================================

class RequestType(str, Enum):
    TECHNICAL = "technical"
    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    STRATEGIC = "strategic"


class EvaluationStatus(str, Enum):
    """Değerlendirme durumları"""
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under-review"
    PENDING_APPROVAL = "pending-approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BusinessImpact(str, Enum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    CRITICAL = "critical"


class SupportRequestCreate(BaseModel):
    """Yeni destek talebi"""
    customer: Optional[str] = None
    request_type: Optional[RequestType] = None
    priority: TicketPriority = TicketPriority.MEDIUM
    description: Optional[str] = None
    estimated_value: Optional[float] = None
    required_resources: List[str] = Field(default_factory=list)
    assigned_evaluator: Optional[str] = None
    risk_assessment: Optional[RiskLevel] = None
    business_impact: Optional[BusinessImpact] = None
    decision_deadline: Optional[datetime] = None


class SupportDecision(BaseModel):
    """Onay / red notu"""
    notes: Optional[str] = None


class SupportRequestOut(BaseModel):
    """Destek talebi çıktısı"""
    id: str
    request_number: str
    customer: str
    request_type: RequestType
    priority: TicketPriority
    description: str
    estimated_value: float
    required_resources: List[str] = Field(default_factory=list)
    submitted_date: datetime
    evaluation_status: EvaluationStatus
    assigned_evaluator: Optional[str] = None
    evaluation_notes: Optional[str] = None
    risk_assessment: Optional[RiskLevel] = None
    business_impact: Optional[BusinessImpact] = None
    decision_deadline: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ============================================================================
# SAHA DESTEK KAYITLARI
# ============================================================================

class SupportCategory(str, Enum):
    """Destek kaydı türü"""
    ONSITE = "onsite"
    REMOTE = "remote"
    MAINTENANCE = "maintenance"


class OnsiteSupportType(str, Enum):
    INSTALLATION = "installation"
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    TRAINING = "training"
    CONSULTATION = "consultation"


class RemoteSupportType(str, Enum):
    REMOTE_ACCESS = "remote-access"
    PHONE_SUPPORT = "phone-support"
    EMAIL_SUPPORT = "email-support"
    VIDEO_CALL = "video-call"
    SCREEN_SHARING = "screen-sharing"


class MaintenanceType(str, Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    PREDICTIVE = "predictive"
    EMERGENCY = "emergency"
    SCHEDULED = "scheduled"


# Her kategori için geçerli durumlar
SUPPORT_STATUSES: Dict[SupportCategory, List[str]] = {
    SupportCategory.ONSITE: ["requested", "scheduled", "in-progress", "completed", "cancelled"],
    SupportCategory.REMOTE: ["requested", "in-progress", "completed", "cancelled", "waiting-customer"],
    SupportCategory.MAINTENANCE: ["scheduled", "in-progress", "completed", "cancelled", "rescheduled"],
}

# Numara önekleri
SUPPORT_PREFIXES: Dict[SupportCategory, str] = {
    SupportCategory.ONSITE: "OS",
    SupportCategory.REMOTE: "RS",
    SupportCategory.MAINTENANCE: "MS",
}


class SupportCost(BaseModel):
    estimated: float
    actual: Optional[float] = None
    travel_cost: Optional[float] = None
    parts: Optional[float] = None
    currency: str = "TRY"


class OnsiteLocation(BaseModel):
    address: str
    city: str
    floor: Optional[str] = None
    room: Optional[str] = None
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None


class SupportTicketBase(BaseModel):
    """Saha kayıtlarının ortak alanları"""
    customer: Optional[str] = None
    priority: TicketPriority = TicketPriority.MEDIUM
    assigned_technician: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    estimated_duration: Optional[float] = None
    description: Optional[str] = None
    cost: Optional[SupportCost] = None
    notes: Optional[str] = None


class OnsiteSupportCreate(SupportTicketBase):
    support_type: OnsiteSupportType = OnsiteSupportType.MAINTENANCE
    location: Optional[OnsiteLocation] = None
    equipment: List[str] = Field(default_factory=list)
    travel_info: Dict[str, Any] = Field(default_factory=dict)


class RemoteSupportCreate(SupportTicketBase):
    support_type: RemoteSupportType = RemoteSupportType.REMOTE_ACCESS
    remote_access_info: Dict[str, Any] = Field(default_factory=dict)
    communication_channel: str = "phone"


class MaintenanceSupportCreate(SupportTicketBase):
    maintenance_type: MaintenanceType = MaintenanceType.PREVENTIVE
    maintenance_items: List[Dict[str, Any]] = Field(default_factory=list)
    next_maintenance_date: Optional[datetime] = None


class SupportStatusUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None

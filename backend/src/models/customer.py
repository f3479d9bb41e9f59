"""
Müşteri Modelleri
Cari hesap bilgileri, VKN doğrulaması ve bakım anlaşmaları
"""
from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum
import re

VKN_PATTERN = re.compile(r"^\d{10}$")


def validate_vkn(value: Optional[str]) -> Optional[str]:
    """VKN 10 haneli rakam olmalı"""
    if value is None:
        return None
    value = value.strip()
    if value == "":
        return None
    if not VKN_PATTERN.match(value):
        raise ValueError("VKN 10 haneli bir sayı olmalıdır")
    return value


def normalize_email(value):
    """Boş e-postayı None yap, küçük harfe çevir"""
    if isinstance(value, str):
        value = value.strip().lower()
        return value or None
    return value


class MaintenancePlan(str, Enum):
    """Bakım anlaşması paketleri"""
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


# Yıllık baz fiyatlar (TRY)
PLAN_BASE_PRICES = {
    MaintenancePlan.BASIC: 15000,
    MaintenancePlan.STANDARD: 25000,
    MaintenancePlan.PREMIUM: 40000,
    MaintenancePlan.ENTERPRISE: 60000,
}

# Süre (ay) çarpanları
DURATION_MULTIPLIERS = {
    6: 0.6,
    12: 1.0,
    24: 1.8,
    36: 2.5,
}


class CustomerFields(BaseModel):
    """Müşteri ortak alanları"""
    cari_kod: Optional[str] = None
    cari_unvan1: Optional[str] = None
    cari_unvan2: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    vkn: Optional[str] = None
    tax_office: Optional[str] = None


class CustomerBase(CustomerFields):
    """Doğrulamalı müşteri girdisi"""
    email: Optional[EmailStr] = None

    @field_validator("vkn")
    @classmethod
    def check_vkn(cls, value):
        return validate_vkn(value)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value):
        return normalize_email(value)


class CustomerCreate(CustomerBase):
    """Yeni müşteri"""
    is_active: bool = True
    has_maintenance_contract: bool = False
    has_service_contract: bool = False
    maintenance_start_date: Optional[datetime] = None
    maintenance_end_date: Optional[datetime] = None
    maintenance_value: Optional[float] = None
    service_start_date: Optional[datetime] = None
    service_end_date: Optional[datetime] = None


class CustomerUpdate(CustomerBase):
    """Müşteri güncelleme (kısmi)"""
    is_active: Optional[bool] = None
    has_maintenance_contract: Optional[bool] = None
    has_service_contract: Optional[bool] = None
    maintenance_start_date: Optional[datetime] = None
    maintenance_end_date: Optional[datetime] = None
    maintenance_value: Optional[float] = None
    service_start_date: Optional[datetime] = None
    service_end_date: Optional[datetime] = None


class CustomerOut(CustomerFields):
    """Müşteri çıktısı"""
    id: str
    is_active: bool = True
    has_maintenance_contract: bool = False
    has_service_contract: bool = False
    maintenance_plan: Optional[MaintenancePlan] = None
    maintenance_start_date: Optional[datetime] = None
    maintenance_end_date: Optional[datetime] = None
    maintenance_value: Optional[float] = None
    service_start_date: Optional[datetime] = None
    service_end_date: Optional[datetime] = None
    notes: Optional[str] = None
    renewal_notes: Optional[str] = None
    reactivation_notes: Optional[str] = None
    reactivated_at: Optional[datetime] = None
    contract_cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancellation_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MaintenanceContractCreate(BaseModel):
    """Bakım anlaşması oluşturma"""
    customer_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    value: Optional[float] = None
    plan: MaintenancePlan = MaintenancePlan.STANDARD
    notes: Optional[str] = None


class MaintenanceContractUpdate(BaseModel):
    """Bakım anlaşması güncelleme"""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    value: Optional[float] = None
    plan: Optional[MaintenancePlan] = None
    notes: Optional[str] = None


class RenewalStart(BaseModel):
    """Yenileme süreci"""
    notes: Optional[str] = None
    new_value: Optional[float] = None
    new_end_date: Optional[datetime] = None


class Reactivation(BaseModel):
    """Pasif anlaşmayı yeniden aktifleştirme"""
    notes: Optional[str] = None
    new_start_date: Optional[datetime] = None
    new_end_date: Optional[datetime] = None


class ContractCancellation(BaseModel):
    """Bakım anlaşması iptali"""
    reason: Optional[str] = None
    notes: Optional[str] = None

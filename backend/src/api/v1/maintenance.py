"""
Bakım API
Bakım anlaşmaları (/maintenance-contracts) ve anlaşma görünümleri (/maintenance)
"""
from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from api.v1.deps import get_current_user, get_db
from models.customer import (
    ContractCancellation, CustomerOut, MaintenanceContractCreate, MaintenanceContractUpdate,
    Reactivation, RenewalStart
)
from services.maintenance_service import MaintenanceService, pricing_suggestions


contracts_router = APIRouter(prefix="/maintenance-contracts", tags=["Maintenance Contracts"])
router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


def get_maintenance_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> MaintenanceService:
    return MaintenanceService(db)


# ============================================================================
# ANLAŞMALAR
# ============================================================================

@contracts_router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_contract(
    contract_data: MaintenanceContractCreate,
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    result = await service.create_contract(contract_data)
    return {"msg": "Bakım anlaşması başarıyla oluşturuldu", **result}


@contracts_router.get("/pricing-suggestions")
async def get_pricing_suggestions(
    duration: Optional[int] = None,
    current_user: dict = Depends(get_current_user)
):
    """
    Paket fiyat önerileri (süre: 6, 12, 24, 36 ay)
    """
    return pricing_suggestions(duration)


@contracts_router.put("/{customer_id}", response_model=CustomerOut)
async def update_contract(
    customer_id: str,
    contract_data: MaintenanceContractUpdate,
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    return await service.update_contract(customer_id, contract_data)


@contracts_router.post("/{customer_id}/cancel")
async def cancel_contract(
    customer_id: str,
    cancellation: ContractCancellation,
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    customer = await service.cancel_contract(customer_id, cancellation)
    return {"msg": "Bakım anlaşması iptal edildi", "customer": CustomerOut(**customer)}


# ============================================================================
# GÖRÜNÜMLER
# ============================================================================

@router.get("/active")
async def list_active(
    search: Optional[str] = None,
    city: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    return await service.active(search=search, city=city)


@router.get("/inactive")
async def list_inactive(
    search: Optional[str] = None,
    reason: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    return await service.inactive(search=search, reason=reason)


@router.get("/renewal")
async def list_renewal(
    search: Optional[str] = None,
    urgency: Optional[str] = None,
    probability: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    return await service.renewal(search=search, urgency=urgency, probability=probability)


@router.post("/renewal/{customer_id}/start")
async def start_renewal(
    customer_id: str,
    data: RenewalStart,
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    customer = await service.start_renewal(customer_id, data)
    return {"msg": "Yenileme süreci başlatıldı", "customer": CustomerOut(**customer)}


@router.post("/inactive/{customer_id}/reactivate")
async def reactivate(
    customer_id: str,
    data: Reactivation,
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    customer = await service.reactivate(customer_id, data)
    return {"msg": "Bakım anlaşması yeniden aktifleştirildi", "customer": CustomerOut(**customer)}


@router.get("/stats/overview")
async def get_stats(
    current_user: dict = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    return await service.stats()

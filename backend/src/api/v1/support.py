"""
Destek API
Destek talebi değerlendirme ve yerinde/uzaktan/bakım destek kayıtları
"""
from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from api.v1.deps import get_current_user, get_db
from models.support import (
    MaintenanceSupportCreate, OnsiteSupportCreate, RemoteSupportCreate, SupportCategory,
    SupportDecision, SupportRequestCreate, SupportRequestOut, SupportStatusUpdate
)
from services.support_service import SupportService


router = APIRouter(prefix="/support", tags=["Support"])


def get_support_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> SupportService:
    return SupportService(db)


# ============================================================================
# DESTEK TALEPLERİ
# ============================================================================

@router.get("/pending")
async def list_pending_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = None,
    request_type: Optional[str] = None,
    evaluator: Optional[str] = None,
    customer: Optional[str] = None,
    search: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.list_pending(
        status=status_filter,
        priority=priority,
        request_type=request_type,
        evaluator=evaluator,
        customer=customer,
        search=search,
    )


@router.get("/active")
async def list_active_customers(
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.active_customers()


@router.get("/inactive")
async def list_inactive_customers(
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.inactive_customers()


@router.post("/request", response_model=SupportRequestOut, status_code=status.HTTP_201_CREATED)
async def create_support_request(
    request_data: SupportRequestCreate,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.create_request(request_data)


@router.post("/pending/{request_id}/approve")
async def approve_request(
    request_id: str,
    decision: SupportDecision,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    request = await service.approve(request_id, decision.notes, current_user["id"])
    return {"msg": "Destek talebi onaylandı", "request": SupportRequestOut(**request)}


@router.post("/pending/{request_id}/reject")
async def reject_request(
    request_id: str,
    decision: SupportDecision,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    """
    Talebi reddet; gerekçe zorunlu
    """
    request = await service.reject(request_id, decision.notes, current_user["id"])
    return {"msg": "Destek talebi reddedildi", "request": SupportRequestOut(**request)}


@router.get("/stats/overview")
async def get_support_stats(
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.stats()


# ============================================================================
# SAHA DESTEK KAYITLARI
# ============================================================================

@router.get("/onsite")
async def list_onsite(
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.list_tickets(SupportCategory.ONSITE)


@router.post("/onsite", status_code=status.HTTP_201_CREATED)
async def create_onsite(
    data: OnsiteSupportCreate,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    """
    Yerinde destek; müşterinin servis anlaşması yoksa 403
    """
    return await service.create_onsite(data)


@router.patch("/onsite/{ticket_id}/status")
async def update_onsite_status(
    ticket_id: str,
    data: SupportStatusUpdate,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.update_ticket_status(SupportCategory.ONSITE, ticket_id, data)


@router.get("/remote")
async def list_remote(
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.list_tickets(SupportCategory.REMOTE)


@router.post("/remote", status_code=status.HTTP_201_CREATED)
async def create_remote(
    data: RemoteSupportCreate,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.create_remote(data)


@router.patch("/remote/{ticket_id}/status")
async def update_remote_status(
    ticket_id: str,
    data: SupportStatusUpdate,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.update_ticket_status(SupportCategory.REMOTE, ticket_id, data)


@router.get("/maintenance-support")
async def list_maintenance_support(
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.list_tickets(SupportCategory.MAINTENANCE)


@router.post("/maintenance-support", status_code=status.HTTP_201_CREATED)
async def create_maintenance_support(
    data: MaintenanceSupportCreate,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.create_maintenance(data)


@router.patch("/maintenance-support/{ticket_id}/status")
async def update_maintenance_support_status(
    ticket_id: str,
    data: SupportStatusUpdate,
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.update_ticket_status(SupportCategory.MAINTENANCE, ticket_id, data)


@router.get("/all-requests")
async def list_all_tickets(
    current_user: dict = Depends(get_current_user),
    service: SupportService = Depends(get_support_service)
):
    return await service.all_tickets()

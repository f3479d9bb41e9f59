"""
Teknisyen API
"""
from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List

from api.v1.deps import get_current_user, get_db, require_admin
from models.technician import AvailabilityUpdate, TechnicianCreate, TechnicianOut, TechnicianUpdate
from services.technician_service import TechnicianService


router = APIRouter(prefix="/technicians", tags=["Technicians"])


def get_technician_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> TechnicianService:
    return TechnicianService(db)


@router.get("/", response_model=List[TechnicianOut])
async def list_technicians(
    current_user: dict = Depends(get_current_user),
    service: TechnicianService = Depends(get_technician_service)
):
    """
    Aktif teknisyenler (puana göre)
    """
    return await service.list_technicians()


@router.get("/stats/overview")
async def get_technician_overview(
    current_user: dict = Depends(get_current_user),
    service: TechnicianService = Depends(get_technician_service)
):
    return await service.overview()


@router.get("/{technician_id}", response_model=TechnicianOut)
async def get_technician(
    technician_id: str,
    current_user: dict = Depends(get_current_user),
    service: TechnicianService = Depends(get_technician_service)
):
    return await service.get_technician(technician_id)


@router.get("/{technician_id}/stats")
async def get_technician_stats(
    technician_id: str,
    current_user: dict = Depends(get_current_user),
    service: TechnicianService = Depends(get_technician_service)
):
    return await service.stats(technician_id)


@router.post("/", response_model=TechnicianOut, status_code=status.HTTP_201_CREATED)
async def create_technician(
    technician_data: TechnicianCreate,
    current_user: dict = Depends(require_admin),
    service: TechnicianService = Depends(get_technician_service)
):
    return await service.create_technician(technician_data)


@router.put("/{technician_id}", response_model=TechnicianOut)
async def update_technician(
    technician_id: str,
    technician_data: TechnicianUpdate,
    current_user: dict = Depends(require_admin),
    service: TechnicianService = Depends(get_technician_service)
):
    return await service.update_technician(technician_id, technician_data)


@router.patch("/{technician_id}/availability", response_model=TechnicianOut)
async def update_availability(
    technician_id: str,
    data: AvailabilityUpdate,
    current_user: dict = Depends(get_current_user),
    service: TechnicianService = Depends(get_technician_service)
):
    return await service.update_availability(technician_id, data)


@router.delete("/{technician_id}")
async def deactivate_technician(
    technician_id: str,
    current_user: dict = Depends(require_admin),
    service: TechnicianService = Depends(get_technician_service)
):
    """
    Teknisyeni pasifleştir (kayıt silinmez)
    """
    return await service.deactivate(technician_id)

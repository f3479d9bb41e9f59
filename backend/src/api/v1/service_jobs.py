"""
Servis İşi API
"""
from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional
from datetime import datetime

from api.v1.deps import get_current_user, get_db
from models.service_job import ServiceJobCreate, ServiceJobOut, ServiceJobStatusUpdate, ServiceJobUpdate
from services.service_job_service import ServiceJobService


router = APIRouter(prefix="/service-jobs", tags=["Service Jobs"])


def get_service_job_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> ServiceJobService:
    return ServiceJobService(db)


@router.get("/", response_model=List[ServiceJobOut])
async def list_service_jobs(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = None,
    service_type: Optional[str] = None,
    technician: Optional[str] = None,
    customer: Optional[str] = None,
    city: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    service: ServiceJobService = Depends(get_service_job_service)
):
    return await service.list_jobs(
        status=status_filter,
        priority=priority,
        service_type=service_type,
        technician=technician,
        customer=customer,
        city=city,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )


@router.get("/stats/overview")
async def get_service_job_stats(
    current_user: dict = Depends(get_current_user),
    service: ServiceJobService = Depends(get_service_job_service)
):
    return await service.stats()


@router.get("/{job_id}", response_model=ServiceJobOut)
async def get_service_job(
    job_id: str,
    current_user: dict = Depends(get_current_user),
    service: ServiceJobService = Depends(get_service_job_service)
):
    return await service.get_job(job_id)


@router.post("/", response_model=ServiceJobOut, status_code=status.HTTP_201_CREATED)
async def create_service_job(
    job_data: ServiceJobCreate,
    current_user: dict = Depends(get_current_user),
    service: ServiceJobService = Depends(get_service_job_service)
):
    return await service.create_job(job_data, created_by=current_user["id"])


@router.patch("/{job_id}/status", response_model=ServiceJobOut)
async def update_service_job_status(
    job_id: str,
    data: ServiceJobStatusUpdate,
    current_user: dict = Depends(get_current_user),
    service: ServiceJobService = Depends(get_service_job_service)
):
    return await service.update_status(job_id, data)


@router.put("/{job_id}", response_model=ServiceJobOut)
async def update_service_job(
    job_id: str,
    job_data: ServiceJobUpdate,
    current_user: dict = Depends(get_current_user),
    service: ServiceJobService = Depends(get_service_job_service)
):
    return await service.update_job(job_id, job_data)


@router.delete("/{job_id}")
async def delete_service_job(
    job_id: str,
    current_user: dict = Depends(get_current_user),
    service: ServiceJobService = Depends(get_service_job_service)
):
    await service.delete_job(job_id)
    return {"msg": "Servis işi silindi"}

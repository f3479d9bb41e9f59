"""
Süreç API
"""
from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional

from api.v1.deps import get_current_user, get_db
from models.process import (
    ProcessCreate, ProcessOut, ProcessProgressUpdate, ProcessStatus, ProcessStatusUpdate, ProcessUpdate
)
from services.process_service import ProcessService


router = APIRouter(prefix="/processes", tags=["Processes"])


def get_process_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> ProcessService:
    return ProcessService(db)


@router.get("/", response_model=List[ProcessOut])
async def list_processes(
    status_filter: Optional[ProcessStatus] = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
    service: ProcessService = Depends(get_process_service)
):
    return await service.list_processes(status_filter)


@router.get("/{process_id}", response_model=ProcessOut)
async def get_process(
    process_id: str,
    current_user: dict = Depends(get_current_user),
    service: ProcessService = Depends(get_process_service)
):
    return await service.get_process(process_id)


@router.post("/", response_model=ProcessOut, status_code=status.HTTP_201_CREATED)
async def create_process(
    process_data: ProcessCreate,
    current_user: dict = Depends(get_current_user),
    service: ProcessService = Depends(get_process_service)
):
    return await service.create_process(process_data, created_by=current_user["id"])


@router.put("/{process_id}", response_model=ProcessOut)
async def update_process(
    process_id: str,
    process_data: ProcessUpdate,
    current_user: dict = Depends(get_current_user),
    service: ProcessService = Depends(get_process_service)
):
    return await service.update_process(process_id, process_data)


@router.put("/{process_id}/status", response_model=ProcessOut)
async def update_process_status(
    process_id: str,
    data: ProcessStatusUpdate,
    current_user: dict = Depends(get_current_user),
    service: ProcessService = Depends(get_process_service)
):
    return await service.update_status(process_id, data.status, current_user["id"])


@router.put("/{process_id}/progress", response_model=ProcessOut)
async def update_process_progress(
    process_id: str,
    data: ProcessProgressUpdate,
    current_user: dict = Depends(get_current_user),
    service: ProcessService = Depends(get_process_service)
):
    return await service.update_progress(process_id, data.progress, current_user["id"])


@router.delete("/{process_id}")
async def delete_process(
    process_id: str,
    current_user: dict = Depends(get_current_user),
    service: ProcessService = Depends(get_process_service)
):
    await service.delete_process(process_id)
    return {"msg": "Süreç silindi"}

"""
Takvim API
"""
from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional
from datetime import datetime

from api.v1.deps import get_current_user, get_db
from models.calendar_event import CalendarEventCreate, CalendarEventOut, CalendarEventUpdate
from services.calendar_service import CalendarService


router = APIRouter(prefix="/calendar-events", tags=["Calendar"])


def get_calendar_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> CalendarService:
    return CalendarService(db)


@router.get("/", response_model=List[CalendarEventOut])
async def list_events(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    assigned_personnel: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    return await service.list_events(start, end, assigned_personnel)


@router.get("/{event_id}", response_model=CalendarEventOut)
async def get_event(
    event_id: str,
    current_user: dict = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    return await service.get_event(event_id)


@router.post("/", response_model=CalendarEventOut, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: CalendarEventCreate,
    current_user: dict = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    return await service.create_event(event_data, created_by=current_user["id"])


@router.put("/{event_id}", response_model=CalendarEventOut)
async def update_event(
    event_id: str,
    event_data: CalendarEventUpdate,
    current_user: dict = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    return await service.update_event(event_id, event_data, current_user["id"])


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    current_user: dict = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    await service.delete_event(event_id)
    return {"msg": "Etkinlik silindi"}

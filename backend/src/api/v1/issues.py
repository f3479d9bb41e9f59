"""
Sorun Kaydı API
"""
from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional
from datetime import date

from api.v1.deps import get_current_user, get_db, get_notifier, RealtimeNotifier
from models.issue import (
    IssueAttachmentCreate, IssueCreate, IssueNoteCreate, IssueOut, IssueUpdate, SelfAssign
)
from services.issue_service import IssueService


router = APIRouter(prefix="/issues", tags=["Issues"])


def get_issue_service(
    db: AsyncIOMotorDatabase = Depends(get_db),
    notifier: RealtimeNotifier = Depends(get_notifier)
) -> IssueService:
    return IssueService(db, notifier)


@router.get("/", response_model=List[IssueOut])
async def list_issues(
    status_filter: Optional[str] = Query(None, alias="status"),
    assigned_to: Optional[str] = None,
    priority: Optional[str] = None,
    day: Optional[date] = Query(None, alias="date"),
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    """
    Sorun listesi
    status: resolved | unresolved | all | tam durum değeri
    """
    return await service.list_issues(status_filter, assigned_to, priority, day)


@router.get("/stats/overview")
async def get_issue_stats(
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    return await service.stats()


@router.get("/{issue_id}", response_model=IssueOut)
async def get_issue(
    issue_id: str,
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    return await service.get_issue(issue_id)


@router.post("/", response_model=IssueOut, status_code=status.HTTP_201_CREATED)
async def create_issue(
    issue_data: IssueCreate,
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    return await service.create_issue(issue_data, created_by=current_user["id"])


@router.put("/{issue_id}", response_model=IssueOut)
async def update_issue(
    issue_id: str,
    issue_data: IssueUpdate,
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    return await service.update_issue(issue_id, issue_data, current_user["id"])


@router.post("/{issue_id}/self-assign", response_model=IssueOut)
async def self_assign(
    issue_id: str,
    data: SelfAssign,
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    return await service.self_assign(issue_id, current_user["id"], data.action)


@router.post("/{issue_id}/notes", response_model=IssueOut)
async def add_note(
    issue_id: str,
    note: IssueNoteCreate,
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    return await service.add_note(issue_id, current_user["id"], note)


@router.post("/{issue_id}/attachments", response_model=IssueOut)
async def add_attachment(
    issue_id: str,
    attachment: IssueAttachmentCreate,
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    return await service.add_attachment(issue_id, current_user["id"], attachment)


@router.delete("/{issue_id}/attachments/{index}", response_model=IssueOut)
async def remove_attachment(
    issue_id: str,
    index: int,
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    return await service.remove_attachment(issue_id, index)


@router.delete("/{issue_id}")
async def delete_issue(
    issue_id: str,
    current_user: dict = Depends(get_current_user),
    service: IssueService = Depends(get_issue_service)
):
    await service.delete_issue(issue_id)
    return {"msg": "Sorun silindi"}

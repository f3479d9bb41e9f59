"""
Görev API
Görev atama, durum akışı ve onay
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional

from api.v1.deps import get_current_user, get_db, get_notifier, is_admin, RealtimeNotifier
from models.task import TaskApproval, TaskCreate, TaskOut, TaskStatus, TaskStatusUpdate, TaskUpdate
from services.task_service import TaskService


router = APIRouter(prefix="/tasks", tags=["Tasks"])


def get_task_service(
    db: AsyncIOMotorDatabase = Depends(get_db),
    notifier: RealtimeNotifier = Depends(get_notifier)
) -> TaskService:
    return TaskService(db, notifier)


@router.get("/", response_model=List[TaskOut])
async def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return await service.list_tasks(status_filter)


@router.get("/user/{user_id}", response_model=List[TaskOut])
async def list_user_tasks(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return await service.list_user_tasks(user_id)


@router.get("/pending-approval", response_model=List[TaskOut])
async def list_pending_approval(
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return await service.list_pending_approval()


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: str,
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return await service.get_task(task_id)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """
    Yeni görev ata; atayan kişi oturumdaki kullanıcıdır
    """
    task = await service.create_task(task_data, assigned_by=current_user["id"])
    return {"msg": "Görev başarıyla oluşturuldu", "task": TaskOut(**task)}


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return await service.update_task(task_id, task_data)


@router.put("/{task_id}/status", response_model=TaskOut)
async def update_task_status(
    task_id: str,
    status_data: TaskStatusUpdate,
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return await service.update_status(task_id, status_data.status, current_user)


@router.put("/{task_id}/approve", response_model=TaskOut)
async def approve_task(
    task_id: str,
    decision: TaskApproval,
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """
    Onay bekleyen görevi onayla/reddet
    Sadece görevi atayan veya yönetici
    """
    task = await service.get_raw(task_id)
    if not is_admin(current_user) and current_user["id"] != task["assigned_by"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Bu görevi onaylama yetkiniz yok"
        )
    return await service.approve(task_id, decision, current_user)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    current_user: dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    await service.delete_task(task_id)
    return {"msg": "Görev silindi"}

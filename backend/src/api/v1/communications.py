"""
Müşteri İletişim API
"""
from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional

from api.v1.deps import get_current_user, get_db
from models.communication import CommunicationOut, CommunicationSend
from services.communication_service import CommunicationService


router = APIRouter(prefix="/communications", tags=["Communications"])


def get_communication_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> CommunicationService:
    return CommunicationService(db)


@router.get("/", response_model=List[CommunicationOut])
async def list_communications(
    customer_id: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    service: CommunicationService = Depends(get_communication_service)
):
    return await service.list_communications(customer_id)


@router.post("/send", status_code=status.HTTP_201_CREATED)
async def send_communication(
    data: CommunicationSend,
    current_user: dict = Depends(get_current_user),
    service: CommunicationService = Depends(get_communication_service)
):
    """
    Müşteriye e-posta ve/veya SMS gönder
    Gönderim hatası kayıtta status=failed olarak görünür
    """
    communication = await service.send(data, sent_by=current_user["id"])
    return {"msg": "İletişim kaydedildi", "communication": CommunicationOut(**communication)}

"""
Müşteri API
"""
from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List, Optional

from api.v1.deps import get_current_user, get_db
from models.customer import CustomerCreate, CustomerOut, CustomerUpdate
from services.customer_service import CustomerService


router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> CustomerService:
    return CustomerService(db)


@router.get("/", response_model=List[CustomerOut])
async def list_customers(
    search: Optional[str] = None,
    city: Optional[str] = None,
    is_active: Optional[bool] = None,
    current_user: dict = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service)
):
    return await service.list_customers(search=search, city=city, is_active=is_active)


@router.get("/search/{query}", response_model=List[CustomerOut])
async def search_customers(
    query: str,
    current_user: dict = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service)
):
    """
    Ünvan, kod, e-posta, şehir ve VKN içinde arama
    """
    return await service.search(query)


@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer(
    customer_id: str,
    current_user: dict = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service)
):
    return await service.get_customer(customer_id)


@router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer_data: CustomerCreate,
    current_user: dict = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service)
):
    return await service.create_customer(customer_data)


@router.put("/{customer_id}", response_model=CustomerOut)
async def update_customer(
    customer_id: str,
    customer_data: CustomerUpdate,
    current_user: dict = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service)
):
    return await service.update_customer(customer_id, customer_data)


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    current_user: dict = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service)
):
    await service.delete_customer(customer_id)
    return {"msg": "Müşteri silindi"}

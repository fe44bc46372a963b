from fastapi import APIRouter, Depends, status
from typing import Dict, Any
import logging

from pawnshop.api.dependencies import get_customer_service
from pawnshop.core.auth_dependencies import get_current_user
from pawnshop.schemas.customer_schema import CustomerCreate, CustomerUpdate
from pawnshop.services.customer_service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"], dependencies=[Depends(get_current_user)])


@router.get("", status_code=status.HTTP_200_OK)
async def list_customers(service: CustomerService = Depends(get_customer_service)) -> Dict[str, Any]:
    customers = await service.list_customers()
    return {"customers": customers}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(
    payload: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
) -> Dict[str, Any]:
    customer = await service.create_customer(payload)
    return {"message": "Customer created", "customer": customer}


@router.put("/{customer_id}", status_code=status.HTTP_200_OK)
async def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
) -> Dict[str, Any]:
    customer = await service.update_customer(customer_id, payload)
    return {"message": "Customer updated", "customer": customer}


@router.delete("/{customer_id}", status_code=status.HTTP_200_OK)
async def delete_customer(
    customer_id: str,
    service: CustomerService = Depends(get_customer_service),
) -> Dict[str, Any]:
    await service.delete_customer(customer_id)
    return {"message": "Customer deleted"}

from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, Any
import logging

from pawnshop.api.dependencies import get_loan_service
from pawnshop.core.auth_dependencies import get_current_user, require_role
from pawnshop.schemas.loan_schema import LoanCreate, LoanStatusUpdate
from pawnshop.services.loan_service import LoanService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/loans", tags=["Loans"], dependencies=[Depends(get_current_user)])


@router.get("", status_code=status.HTTP_200_OK)
async def list_loans(service: LoanService = Depends(get_loan_service)) -> Dict[str, Any]:
    loans = await service.list_loans()
    return {"loans": loans}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_loan(
    payload: LoanCreate,
    service: LoanService = Depends(get_loan_service),
) -> Dict[str, Any]:
    loan = await service.create_loan(payload)
    return {"message": "Loan created", "loan": loan}


# Reconciliation sweep; declared before /{loan_id} so "status" is never read as an id
@router.put("/status", status_code=status.HTTP_200_OK)
async def sync_loan_statuses(service: LoanService = Depends(get_loan_service)) -> Dict[str, Any]:
    loans = await service.sync_loan_statuses()
    return {"message": "Loan statuses synced", "loans": loans}


@router.get("/{loan_id}", status_code=status.HTTP_200_OK)
async def get_loan(loan_id: str, service: LoanService = Depends(get_loan_service)) -> Dict[str, Any]:
    loan = await service.get_loan_by_id(loan_id)
    if loan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Loan not found")
    return {"loan": loan}


# Administrative override of the derived status
@router.patch("/{loan_id}", status_code=status.HTTP_200_OK, dependencies=[Depends(require_role("admin"))])
async def update_loan_status(
    loan_id: str,
    payload: LoanStatusUpdate,
    service: LoanService = Depends(get_loan_service),
) -> Dict[str, Any]:
    loan = await service.update_loan_status(loan_id, payload)
    return {"message": "Loan updated", "loan": loan}

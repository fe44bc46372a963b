from fastapi import APIRouter, Depends, status
from typing import Dict, Any
import logging

from pawnshop.api.dependencies import get_loan_service
from pawnshop.core.auth_dependencies import get_current_user
from pawnshop.schemas.repayment_schema import RepaymentCreate
from pawnshop.services.loan_service import LoanService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/repayments", tags=["Repayments"], dependencies=[Depends(get_current_user)])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_repayment(
    payload: RepaymentCreate,
    service: LoanService = Depends(get_loan_service),
) -> Dict[str, Any]:
    repayment, loan = await service.record_repayment(payload)
    return {"message": "Repayment recorded", "repayment": repayment, "loan": loan}


@router.get("/{loan_id}", status_code=status.HTTP_200_OK)
async def list_repayments(loan_id: str, service: LoanService = Depends(get_loan_service)) -> Dict[str, Any]:
    repayments = await service.list_repayments_by_loan(loan_id)
    return {"repayments": repayments}

"""Dict-backed repositories for local development and tests.

Every method completes without awaiting anything, so a read-check-write inside
one call is never interleaved with another coroutine on the same event loop.
"""
import uuid
from typing import Any, Dict, List, Optional

from pawnshop.core.exceptions import ConflictError, NotFoundError, StatusConflictError
from pawnshop.repositories.base import CustomerRepository, LoanRepository, RepaymentRepository, UserRepository
from pawnshop.schemas.customer_schema import CustomerRecord
from pawnshop.schemas.loan_schema import LoanRecord, LoanStatus
from pawnshop.schemas.repayment_schema import RepaymentRecord
from pawnshop.schemas.user_schemas import UserRecord
from pawnshop.utils.dates import utc_now


def _new_record_fields() -> Dict[str, Any]:
    now = utc_now()
    return {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}


class InMemoryCustomerRepository(CustomerRepository):
    def __init__(self):
        self._customers: Dict[str, CustomerRecord] = {}

    async def list(self) -> List[CustomerRecord]:
        return list(self._customers.values())

    async def create(self, data: Dict[str, Any]) -> CustomerRecord:
        record = CustomerRecord(**data, **_new_record_fields())
        self._customers[record.id] = record
        return record

    async def update(self, customer_id: str, data: Dict[str, Any]) -> CustomerRecord:
        existing = self._customers.get(customer_id)
        if existing is None:
            raise NotFoundError("Customer not found")
        changes = {k: v for k, v in data.items() if v is not None}
        updated = existing.model_copy(update={**changes, "updated_at": utc_now()})
        self._customers[customer_id] = updated
        return updated

    async def delete(self, customer_id: str) -> None:
        self._customers.pop(customer_id, None)

    async def get_by_id(self, customer_id: str) -> Optional[CustomerRecord]:
        return self._customers.get(customer_id)


class InMemoryLoanRepository(LoanRepository):
    def __init__(self):
        self._loans: Dict[str, LoanRecord] = {}

    async def list(self) -> List[LoanRecord]:
        return list(self._loans.values())

    async def create(self, data: Dict[str, Any]) -> LoanRecord:
        record = LoanRecord(**data, **_new_record_fields())
        self._loans[record.id] = record
        return record

    async def update_status(
        self,
        loan_id: str,
        status: LoanStatus,
        expected_status: Optional[LoanStatus] = None,
    ) -> LoanRecord:
        existing = self._loans.get(loan_id)
        if existing is None:
            raise NotFoundError("Loan not found")
        if expected_status is not None and existing.status != expected_status:
            raise StatusConflictError(loan_id, expected_status.value, existing.status.value)

        updated = existing.model_copy(update={"status": status, "updated_at": utc_now()})
        self._loans[loan_id] = updated
        return updated

    async def get_by_id(self, loan_id: str) -> Optional[LoanRecord]:
        return self._loans.get(loan_id)


class InMemoryRepaymentRepository(RepaymentRepository):
    def __init__(self):
        self._repayments: Dict[str, RepaymentRecord] = {}

    async def list_by_loan(self, loan_id: str) -> List[RepaymentRecord]:
        repayments = [r for r in self._repayments.values() if r.loan_id == loan_id]
        return sorted(repayments, key=lambda r: r.paid_at)

    async def list_all(self) -> List[RepaymentRecord]:
        return list(self._repayments.values())

    async def create(self, data: Dict[str, Any]) -> RepaymentRecord:
        record = RepaymentRecord(**data, **_new_record_fields())
        self._repayments[record.id] = record
        return record


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self._users: Dict[str, UserRecord] = {}

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._users.get(email.lower())

    async def create(self, user: UserRecord) -> UserRecord:
        key = user.email.lower()
        if key in self._users:
            raise ConflictError("Account already exists for this email")
        self._users[key] = user
        return user

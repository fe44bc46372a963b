"""MongoDB repositories backed by Beanie documents.

Reads go through `with_retry`; writes are attempted once so a failed insert is
never silently duplicated.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from beanie import UpdateResponse
from beanie.operators import Set
from pymongo.errors import DuplicateKeyError

from pawnshop.core.exceptions import ConflictError, NotFoundError, StatusConflictError
from pawnshop.database.models import CustomerDocument, LoanDocument, RepaymentDocument, UserDocument
from pawnshop.repositories.base import CustomerRepository, LoanRepository, RepaymentRepository, UserRepository
from pawnshop.schemas.customer_schema import CustomerRecord
from pawnshop.schemas.loan_schema import LoanRecord, LoanStatus
from pawnshop.schemas.repayment_schema import RepaymentRecord
from pawnshop.schemas.user_schemas import UserRecord
from pawnshop.utils.dates import utc_now
from pawnshop.utils.retry import with_retry

logger = logging.getLogger(__name__)


class _RetryingRepository:
    def __init__(self, retry_attempts: int = 3, retry_delay_seconds: float = 1.0):
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds

    async def _read(self, operation):
        return await with_retry(operation, self.retry_attempts, self.retry_delay_seconds)


def _new_record_fields() -> Dict[str, Any]:
    now = utc_now()
    return {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}


class MongoCustomerRepository(_RetryingRepository, CustomerRepository):
    async def list(self) -> List[CustomerRecord]:
        docs = await self._read(lambda: CustomerDocument.find_all().to_list())
        return [d.to_record() for d in docs]

    async def create(self, data: Dict[str, Any]) -> CustomerRecord:
        record = CustomerRecord(**data, **_new_record_fields())
        await CustomerDocument.from_record(record).insert()
        return record

    async def update(self, customer_id: str, data: Dict[str, Any]) -> CustomerRecord:
        doc = await self._read(lambda: CustomerDocument.find_one(CustomerDocument.customer_id == customer_id))
        if doc is None:
            raise NotFoundError("Customer not found")

        for field, value in data.items():
            if value is not None:
                setattr(doc, field, value)
        doc.updated_at = utc_now()
        await doc.save()
        return doc.to_record()

    async def delete(self, customer_id: str) -> None:
        await CustomerDocument.find(CustomerDocument.customer_id == customer_id).delete()

    async def get_by_id(self, customer_id: str) -> Optional[CustomerRecord]:
        doc = await self._read(lambda: CustomerDocument.find_one(CustomerDocument.customer_id == customer_id))
        return doc.to_record() if doc else None


class MongoLoanRepository(_RetryingRepository, LoanRepository):
    async def list(self) -> List[LoanRecord]:
        docs = await self._read(lambda: LoanDocument.find_all().to_list())
        return [d.to_record() for d in docs]

    async def create(self, data: Dict[str, Any]) -> LoanRecord:
        record = LoanRecord(**data, **_new_record_fields())
        await LoanDocument.from_record(record).insert()
        return record

    async def update_status(
        self,
        loan_id: str,
        status: LoanStatus,
        expected_status: Optional[LoanStatus] = None,
    ) -> LoanRecord:
        # Single conditional update: the status filter makes the write a compare-and-swap
        conditions = [LoanDocument.loan_id == loan_id]
        if expected_status is not None:
            conditions.append(LoanDocument.status == expected_status.value)

        doc = await LoanDocument.find_one(*conditions).update(
            Set({LoanDocument.status: status.value, LoanDocument.updated_at: utc_now()}),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
        if doc is not None:
            return doc.to_record()

        current = await LoanDocument.find_one(LoanDocument.loan_id == loan_id)
        if current is None:
            raise NotFoundError("Loan not found")
        raise StatusConflictError(loan_id, expected_status.value, current.status)

    async def get_by_id(self, loan_id: str) -> Optional[LoanRecord]:
        doc = await self._read(lambda: LoanDocument.find_one(LoanDocument.loan_id == loan_id))
        return doc.to_record() if doc else None


class MongoRepaymentRepository(_RetryingRepository, RepaymentRepository):
    async def list_by_loan(self, loan_id: str) -> List[RepaymentRecord]:
        docs = await self._read(
            lambda: RepaymentDocument.find(RepaymentDocument.loan_id == loan_id).sort("+paid_at").to_list()
        )
        return [d.to_record() for d in docs]

    async def list_all(self) -> List[RepaymentRecord]:
        docs = await self._read(lambda: RepaymentDocument.find_all().to_list())
        return [d.to_record() for d in docs]

    async def create(self, data: Dict[str, Any]) -> RepaymentRecord:
        record = RepaymentRecord(**data, **_new_record_fields())
        await RepaymentDocument.from_record(record).insert()
        return record


class MongoUserRepository(_RetryingRepository, UserRepository):
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        doc = await self._read(lambda: UserDocument.find_one(UserDocument.email == email.lower()))
        return doc.to_record() if doc else None

    async def create(self, user: UserRecord) -> UserRecord:
        try:
            await UserDocument.from_record(user).insert()
        except DuplicateKeyError:
            logger.warning("Duplicate registration attempt for %s", user.email)
            raise ConflictError("Account already exists for this email")
        return user

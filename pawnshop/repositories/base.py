"""Storage contracts shared by the in-memory and MongoDB backends."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pawnshop.schemas.customer_schema import CustomerRecord
from pawnshop.schemas.loan_schema import LoanRecord, LoanStatus
from pawnshop.schemas.repayment_schema import RepaymentRecord
from pawnshop.schemas.user_schemas import UserRecord


class CustomerRepository(ABC):
    @abstractmethod
    async def list(self) -> List[CustomerRecord]: ...

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> CustomerRecord: ...

    @abstractmethod
    async def update(self, customer_id: str, data: Dict[str, Any]) -> CustomerRecord:
        """Apply the given fields; raises NotFoundError for an unknown id."""

    @abstractmethod
    async def delete(self, customer_id: str) -> None: ...

    @abstractmethod
    async def get_by_id(self, customer_id: str) -> Optional[CustomerRecord]: ...


class LoanRepository(ABC):
    @abstractmethod
    async def list(self) -> List[LoanRecord]: ...

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> LoanRecord: ...

    @abstractmethod
    async def update_status(
        self,
        loan_id: str,
        status: LoanStatus,
        expected_status: Optional[LoanStatus] = None,
    ) -> LoanRecord:
        """Persist a new status.

        With `expected_status` the write is conditional: it only happens while the
        stored status still equals `expected_status`, otherwise StatusConflictError
        is raised. Raises NotFoundError for an unknown id.
        """

    @abstractmethod
    async def get_by_id(self, loan_id: str) -> Optional[LoanRecord]: ...


class RepaymentRepository(ABC):
    @abstractmethod
    async def list_by_loan(self, loan_id: str) -> List[RepaymentRecord]:
        """Repayments for one loan, oldest paid_at first."""

    @abstractmethod
    async def list_all(self) -> List[RepaymentRecord]: ...

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> RepaymentRecord: ...


class UserRepository(ABC):
    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]: ...

    @abstractmethod
    async def create(self, user: UserRecord) -> UserRecord:
        """Store a new user; raises ConflictError when the email is taken."""

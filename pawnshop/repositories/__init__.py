from dataclasses import dataclass

from pawnshop.core.config import Settings
from pawnshop.repositories.base import CustomerRepository, LoanRepository, RepaymentRepository, UserRepository
from pawnshop.repositories.memory import (
    InMemoryCustomerRepository,
    InMemoryLoanRepository,
    InMemoryRepaymentRepository,
    InMemoryUserRepository,
)
from pawnshop.repositories.mongo import (
    MongoCustomerRepository,
    MongoLoanRepository,
    MongoRepaymentRepository,
    MongoUserRepository,
)


@dataclass
class Repositories:
    """The storage collaborators a request works against, built once at startup."""

    customers: CustomerRepository
    loans: LoanRepository
    repayments: RepaymentRepository
    users: UserRepository


def in_memory_repositories() -> Repositories:
    return Repositories(
        customers=InMemoryCustomerRepository(),
        loans=InMemoryLoanRepository(),
        repayments=InMemoryRepaymentRepository(),
        users=InMemoryUserRepository(),
    )


def build_repositories(settings: Settings) -> Repositories:
    if settings.USE_IN_MEMORY_DB:
        return in_memory_repositories()

    retry = {
        "retry_attempts": settings.STORE_RETRY_ATTEMPTS,
        "retry_delay_seconds": settings.STORE_RETRY_DELAY_SECONDS,
    }
    return Repositories(
        customers=MongoCustomerRepository(**retry),
        loans=MongoLoanRepository(**retry),
        repayments=MongoRepaymentRepository(**retry),
        users=MongoUserRepository(**retry),
    )

import logging
from typing import Any, Dict, List, Union

from pawnshop.core.exceptions import ConflictError, ValidationFailed
from pawnshop.repositories import Repositories
from pawnshop.schemas.customer_schema import CustomerCreate, CustomerRecord, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:
    def __init__(self, repositories: Repositories):
        self.repositories = repositories

    # Newest customers first
    async def list_customers(self) -> List[CustomerRecord]:
        customers = await self.repositories.customers.list()
        return sorted(customers, key=lambda c: c.created_at, reverse=True)

    async def create_customer(self, payload: Union[CustomerCreate, Dict[str, Any]]) -> CustomerRecord:
        data = CustomerCreate.model_validate(payload)
        record = await self.repositories.customers.create(data.model_dump())
        logger.info(f"Customer {record.id} created")
        return record

    async def update_customer(self, customer_id: str, payload: Union[CustomerUpdate, Dict[str, Any]]) -> CustomerRecord:
        if not customer_id:
            raise ValidationFailed({"id": ["Customer id is required"]})
        data = CustomerUpdate.model_validate(payload)
        return await self.repositories.customers.update(customer_id, data.model_dump(exclude_none=True))

    # Loans keep referencing their customer, so a customer with any loan history cannot be removed
    async def delete_customer(self, customer_id: str) -> None:
        if not customer_id:
            raise ValidationFailed({"id": ["Customer id is required"]})

        loans = await self.repositories.loans.list()
        if any(loan.customer_id == customer_id for loan in loans):
            raise ConflictError("Customer has loans and cannot be deleted")

        await self.repositories.customers.delete(customer_id)
        logger.info(f"Customer {customer_id} deleted")

import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from pawnshop.core.exceptions import NotFoundError, StatusConflictError, ValidationFailed
from pawnshop.repositories import Repositories
from pawnshop.schemas.customer_schema import CustomerRecord, CustomerSummary
from pawnshop.schemas.loan_schema import EnrichedLoan, LoanCreate, LoanRecord, LoanStatus, LoanStatusUpdate
from pawnshop.schemas.repayment_schema import RepaymentCreate, RepaymentRecord
from pawnshop.services.loan_calculator import calculate_due_date, calculate_total_payable, days_until_due
from pawnshop.services.loan_status import determine_status
from pawnshop.services.notification_service import NotificationService
from pawnshop.utils.dates import utc_now

logger = logging.getLogger(__name__)

# Every new loan runs for one month; there is no caller-supplied duration yet
DEFAULT_DURATION_MONTHS = 1


def _customer_summary(customer: CustomerRecord) -> CustomerSummary:
    return CustomerSummary(
        id=customer.id,
        first_name=customer.first_name,
        last_name=customer.last_name,
        email=customer.email or "",
        phone=customer.phone,
    )


class LoanService:
    """Loan origination, repayment recording and status reconciliation.

    Reads always go through `enrich_loans`, which recomputes balances and status
    from the stored records; nothing derived is cached between calls.
    """

    def __init__(self, repositories: Repositories, notifier: NotificationService):
        self.repositories = repositories
        self.notifier = notifier

    # Joins loans with customers and repayments. Fails the whole batch when a customer is missing.
    async def enrich_loans(self, records: List[LoanRecord], now: Optional[datetime] = None) -> List[EnrichedLoan]:
        customers = await self.repositories.customers.list()
        customer_map = {customer.id: customer for customer in customers}

        repayments_by_loan: Dict[str, List[RepaymentRecord]] = defaultdict(list)
        for repayment in await self.repositories.repayments.list_all():
            repayments_by_loan[repayment.loan_id].append(repayment)

        now = now or utc_now()
        enriched = []
        for record in records:
            customer = customer_map.get(record.customer_id)
            if customer is None:
                raise NotFoundError(f"Customer {record.customer_id} not found")

            loan_repayments = sorted(repayments_by_loan.get(record.id, []), key=lambda r: r.paid_at)
            # Money is compared in cents so paying the displayed balance clears the loan
            total_repaid = round(sum(r.amount for r in loan_repayments), 2)
            outstanding_balance = round(max(record.total_payable - total_repaid, 0), 2)
            days = days_until_due(record.due_date, now)

            enriched.append(EnrichedLoan(
                **record.model_dump(exclude={"status"}),
                status=determine_status(record, outstanding_balance, days),
                customer=_customer_summary(customer),
                days_until_due=days,
                total_repaid=total_repaid,
                outstanding_balance=outstanding_balance,
            ))

        return sorted(enriched, key=lambda loan: loan.created_at, reverse=True)

    async def list_loans(self) -> List[EnrichedLoan]:
        records = await self.repositories.loans.list()
        return await self.enrich_loans(records)

    async def get_loan_by_id(self, loan_id: str) -> Optional[EnrichedLoan]:
        record = await self.repositories.loans.get_by_id(loan_id)
        if record is None:
            return None
        [loan] = await self.enrich_loans([record])
        return loan

    async def create_loan(self, payload: Union[LoanCreate, Dict[str, Any]]) -> EnrichedLoan:
        data = LoanCreate.model_validate(payload)

        customer = await self.repositories.customers.get_by_id(data.customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")

        start_date = data.start_date or utc_now()
        # Money is kept to the cent
        total_payable = round(calculate_total_payable(data.principal, data.interest_rate, DEFAULT_DURATION_MONTHS), 2)
        due_date = calculate_due_date(start_date, DEFAULT_DURATION_MONTHS)

        record = await self.repositories.loans.create({
            "customer_id": data.customer_id,
            "item_description": data.item_description,
            "principal": data.principal,
            "interest_rate": data.interest_rate,
            "total_payable": total_payable,
            "start_date": start_date,
            "due_date": due_date,
            "status": LoanStatus.active,
            "notes": data.notes,
        })
        logger.info(f"Loan {record.id} created for customer {customer.id} (total payable {total_payable})")

        [loan] = await self.enrich_loans([record])

        if customer.phone:
            await self._notify(
                customer.phone,
                self.notifier.loan_created_message(
                    f"{customer.first_name} {customer.last_name}",
                    data.principal,
                    start_date,
                    data.item_description,
                ),
                kind="loan",
            )

        return loan

    # Administrative override: the status is written as given, not derived
    async def update_loan_status(self, loan_id: str, payload: Union[LoanStatusUpdate, Dict[str, Any]]) -> EnrichedLoan:
        if not loan_id:
            raise ValidationFailed({"id": ["Loan id is required"]})
        data = LoanStatusUpdate.model_validate(payload)

        record = await self.repositories.loans.update_status(loan_id, data.status)
        logger.info(f"Loan {loan_id} status set to {data.status.value}")
        [loan] = await self.enrich_loans([record])
        return loan

    async def list_repayments_by_loan(self, loan_id: str) -> List[RepaymentRecord]:
        if not loan_id:
            raise ValidationFailed({"loanId": ["Loan id is required"]})
        repayments = await self.repositories.repayments.list_by_loan(loan_id)
        return sorted(repayments, key=lambda r: r.paid_at)

    async def record_repayment(
        self, payload: Union[RepaymentCreate, Dict[str, Any]]
    ) -> Tuple[RepaymentRecord, EnrichedLoan]:
        data = RepaymentCreate.model_validate(payload)

        loan = await self.repositories.loans.get_by_id(data.loan_id)
        if loan is None:
            raise NotFoundError("Loan not found")

        paid_at = data.paid_at or utc_now()
        repayment = await self.repositories.repayments.create({
            "loan_id": data.loan_id,
            "amount": data.amount,
            "method": data.method,
            "reference": data.reference,
            "paid_at": paid_at,
            "notes": data.notes,
        })
        logger.info(f"Repayment {repayment.id} of {data.amount} recorded against loan {loan.id}")

        # `loan` still carries the pre-repayment status, which is the sticky input for the derivation
        [updated_loan] = await self.enrich_loans([loan])
        derived_status = updated_loan.status
        if derived_status != loan.status:
            await self._write_back_status(loan.id, derived_status, loan.status)

        customer = updated_loan.customer
        if customer.phone:
            await self._notify(
                customer.phone,
                self.notifier.payment_recorded_message(customer.full_name, data.amount, paid_at, loan.id),
                kind="payment",
            )

        return repayment, updated_loan

    # Reconciliation sweep: persist every derived status that differs from the stored one
    async def sync_loan_statuses(self) -> List[EnrichedLoan]:
        records = await self.repositories.loans.list()
        stored_status = {record.id: record.status for record in records}
        enriched = await self.enrich_loans(records)

        stale = [loan for loan in enriched if stored_status.get(loan.id) != loan.status]
        await asyncio.gather(*(
            self._write_back_status(loan.id, loan.status, stored_status[loan.id]) for loan in stale
        ))
        if stale:
            logger.info(f"Status sync updated {len(stale)} of {len(enriched)} loans")

        return enriched

    async def _write_back_status(self, loan_id: str, status: LoanStatus, expected: LoanStatus) -> bool:
        """Best-effort conditional write; the caller keeps its computed view either way."""
        try:
            await self.repositories.loans.update_status(loan_id, status, expected_status=expected)
            return True
        except StatusConflictError as e:
            logger.warning(f"Skipped status write-back: {e.message}")
        except Exception as e:
            logger.error(f"Failed to write back status {status.value} for loan {loan_id}: {e}")
        return False

    async def _notify(self, phone: str, message: str, kind: str) -> None:
        try:
            await self.notifier.send_sms(phone, message)
        except Exception as e:
            logger.error(f"Failed to send {kind} SMS: {e}")

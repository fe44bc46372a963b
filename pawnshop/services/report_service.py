from typing import List, Optional, Tuple, Union
from datetime import datetime, timedelta
import io
import logging

from dateutil.relativedelta import relativedelta
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from pawnshop.core.exceptions import ValidationFailed
from pawnshop.schemas.loan_schema import EnrichedLoan, LoanStatus
from pawnshop.schemas.report_schema import MonthlyReport, ReportRow, ReportType
from pawnshop.services.loan_calculator import calculate_duration_months, calculate_total_payable
from pawnshop.services.loan_service import LoanService
from pawnshop.utils.dates import utc_now

logger = logging.getLogger(__name__)

# (header, row key, column width)
EXPORT_COLUMNS = [
    ("Customer ID", "customer_id", 15),
    ("Loan ID", "loan_id", 15),
    ("Start Date", "start_date", 12),
    ("Name", "name", 20),
    ("Item", "item", 25),
    ("Amount (Rs.)", "amount", 15),
    ("Phone", "phone", 15),
    ("Due Date", "due_date", 12),
    ("Interest (Rs.)", "interest_amount", 15),
    ("Total Amount (Rs.)", "total_amount", 18),
]


def parse_report_type(value: Union[str, ReportType]) -> ReportType:
    try:
        return ReportType(value)
    except ValueError:
        raise ValidationFailed({"type": ["Report type must be one of daily, monthly, yearly"]})


def report_window(report_type: ReportType, now: datetime) -> Tuple[datetime, datetime]:
    """Half-open [start, end) window around `now` for the given report type."""
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if report_type == ReportType.daily:
        return day_start, day_start + timedelta(days=1)
    if report_type == ReportType.monthly:
        start = day_start.replace(day=1)
        return start, start + relativedelta(months=1)
    start = day_start.replace(month=1, day=1)
    return start, start + relativedelta(years=1)


def build_report_row(loan: EnrichedLoan) -> ReportRow:
    months = calculate_duration_months(loan.start_date, loan.due_date)
    total_amount = calculate_total_payable(loan.principal, loan.interest_rate, months)
    interest_amount = total_amount - loan.principal

    return ReportRow(
        customer_id=loan.customer.id,
        loan_id=loan.id,
        start_date=loan.start_date.date().isoformat(),
        name=loan.customer.full_name,
        phone=loan.customer.phone,
        item=loan.item_description,
        amount=loan.principal,
        due_date=loan.due_date.date().isoformat(),
        interest_amount=round(interest_amount, 2),
        total_amount=round(total_amount, 2),
    )


class ReportService:
    """Aggregate figures and tabular exports over the enriched loan set."""

    def __init__(self, loan_service: LoanService):
        self.loan_service = loan_service

    async def get_monthly_report(self) -> MonthlyReport:
        loans = await self.loan_service.list_loans()
        active = sum(1 for loan in loans if loan.status == LoanStatus.active)
        redeemed = sum(1 for loan in loans if loan.status == LoanStatus.redeemed)

        total_principal = sum(loan.principal for loan in loans)
        total_payable = sum(loan.total_payable or 0 for loan in loans)

        return MonthlyReport(
            total_loans=len(loans),
            total_principal=total_principal,
            total_payable=total_payable,
            total_repaid=sum(loan.total_repaid for loan in loans),
            total_interest_earned=total_payable - total_principal,
            pending_loans=active,
            active_loans=active,
            redeemed_loans=redeemed,
        )

    async def get_filtered_reports(
        self, report_type: Union[str, ReportType], now: Optional[datetime] = None
    ) -> List[ReportRow]:
        report_type = parse_report_type(report_type)
        start, end = report_window(report_type, now or utc_now())
        logger.debug("Building %s report for window %s - %s", report_type.value, start, end)

        loans = await self.loan_service.list_loans()
        return [build_report_row(loan) for loan in loans if start <= loan.created_at < end]

    async def export_reports_xlsx(self, report_type: Union[str, ReportType], now: Optional[datetime] = None) -> bytes:
        rows = await self.get_filtered_reports(report_type, now=now)

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Loans Report"

        sheet.append([header for header, _, _ in EXPORT_COLUMNS])
        for row in rows:
            values = row.model_dump()
            sheet.append([values[key] for _, key, _ in EXPORT_COLUMNS])

        header_fill = PatternFill(fill_type="solid", fgColor="FFE6F3FF")
        for cell in sheet[1]:
            cell.font = Font(bold=True)
            cell.fill = header_fill
        for index, (_, _, width) in enumerate(EXPORT_COLUMNS, start=1):
            sheet.column_dimensions[get_column_letter(index)].width = width

        buffer = io.BytesIO()
        workbook.save(buffer)
        logger.info("Exported %s report with %s rows", parse_report_type(report_type).value, len(rows))
        return buffer.getvalue()

from pawnshop.schemas.customer_schema import CustomerCreate, CustomerRecord, CustomerSummary, CustomerUpdate
from pawnshop.schemas.loan_schema import EnrichedLoan, LoanCreate, LoanRecord, LoanStatus, LoanStatusUpdate
from pawnshop.schemas.repayment_schema import RepaymentCreate, RepaymentMethod, RepaymentRecord
from pawnshop.schemas.report_schema import MonthlyReport, ReportRow, ReportType
from pawnshop.schemas.user_schemas import (
    AuthResult,
    OTPRequest,
    OTPVerify,
    PublicUser,
    UserLogin,
    UserRecord,
    UserRegister,
    UserRole,
)

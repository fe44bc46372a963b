from pawnshop.database.models.customer_model import CustomerDocument
from pawnshop.database.models.loan_model import LoanDocument
from pawnshop.database.models.repayment_model import RepaymentDocument
from pawnshop.database.models.user_model import UserDocument

DOCUMENT_MODELS = [CustomerDocument, LoanDocument, RepaymentDocument, UserDocument]

from fastapi import Depends, Request

from pawnshop.core.config import Settings
from pawnshop.repositories import Repositories
from pawnshop.services.auth_service import AuthService
from pawnshop.services.customer_service import CustomerService
from pawnshop.services.loan_service import LoanService
from pawnshop.services.notification_service import NotificationService
from pawnshop.services.otp_service import OTPService
from pawnshop.services.report_service import ReportService


# Collaborators are created once in the application lifespan and kept on app.state
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repositories(request: Request) -> Repositories:
    return request.app.state.repositories


def get_notifier(request: Request) -> NotificationService:
    return request.app.state.notifier


def get_loan_service(
    repositories: Repositories = Depends(get_repositories),
    notifier: NotificationService = Depends(get_notifier),
) -> LoanService:
    return LoanService(repositories, notifier)


def get_customer_service(repositories: Repositories = Depends(get_repositories)) -> CustomerService:
    return CustomerService(repositories)


def get_report_service(loan_service: LoanService = Depends(get_loan_service)) -> ReportService:
    return ReportService(loan_service)


def get_auth_service(
    repositories: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(repositories.users, jwt_settings=settings)


def get_otp_service(
    request: Request,
    repositories: Repositories = Depends(get_repositories),
    notifier: NotificationService = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> OTPService:
    return OTPService(
        repositories.users,
        request.app.state.otp_store,
        notifier,
        ttl_seconds=settings.OTP_TTL_SECONDS,
        expose_otp=settings.EXPOSE_OTP,
        jwt_settings=settings,
    )

import pytest
from fastapi.testclient import TestClient

from pawnshop.core.auth_dependencies import get_current_user
from pawnshop.core.config import Settings
from pawnshop.main import create_app
from pawnshop.repositories import in_memory_repositories
from pawnshop.services.customer_service import CustomerService
from pawnshop.services.loan_service import LoanService
from pawnshop.services.notification_service import NotificationService
from pawnshop.services.report_service import ReportService


def make_settings(**overrides) -> Settings:
    test_settings = Settings()
    test_settings.USE_IN_MEMORY_DB = True
    test_settings.REDIS_URL = None
    test_settings.SMS_API_URL = None
    test_settings.SMS_API_TOKEN = None
    test_settings.EXPOSE_OTP = True
    test_settings.CORS_ORIGIN = "*"
    for key, value in overrides.items():
        setattr(test_settings, key, value)
    return test_settings


@pytest.fixture
def repositories():
    return in_memory_repositories()


@pytest.fixture
def notifier():
    # No token configured, so messages are only logged
    return NotificationService()


@pytest.fixture
def loan_service(repositories, notifier):
    return LoanService(repositories, notifier)


@pytest.fixture
def customer_service(repositories):
    return CustomerService(repositories)


@pytest.fixture
def report_service(loan_service):
    return ReportService(loan_service)


@pytest.fixture
def app():
    return create_app(make_settings())


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def authed_client(app):
    app.dependency_overrides[get_current_user] = lambda: {"id": "test-user", "email": "admin@example.com", "role": "admin"}
    yield TestClient(app)
    app.dependency_overrides = {}

from typing import Dict, List, Optional

from fastapi import status


class PawnshopError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(PawnshopError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, issues: Dict[str, List[str]], message: str = "Validation failed"):
        super().__init__(message)
        self.issues = issues


class NotFoundError(PawnshopError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(PawnshopError):
    status_code = status.HTTP_409_CONFLICT


class StatusConflictError(ConflictError):
    """A conditional status write found a different persisted status."""

    def __init__(self, loan_id: str, expected: str, actual: Optional[str]):
        super().__init__(f"Loan {loan_id} status changed from {expected} to {actual}")
        self.loan_id = loan_id
        self.expected = expected
        self.actual = actual

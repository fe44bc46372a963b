from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.requests import Request
from pawnshop.api.auth_routes import router as auth_router
from pawnshop.api.customer_routes import router as customer_router
from pawnshop.api.loan_routes import router as loan_router
from pawnshop.api.repayment_routes import router as repayment_router
from pawnshop.api.reports_routes import router as reports_router, dev_router
from contextlib import asynccontextmanager
from pawnshop.core.config import Settings, settings as default_settings
from pawnshop.core.exceptions import PawnshopError, ValidationFailed
from pawnshop.core.otp_store import OTPStore
from pawnshop.database.connection import init_db
from pawnshop.helpers.response_builder import error_body, flatten_validation_errors
from pawnshop.repositories import build_repositories
from pawnshop.services.notification_service import NotificationService
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from typing import Optional
import logging
import traceback


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to every API response.

    OPTIONS requests are left alone so CORSMiddleware can answer preflights
    with its own Access-Control headers.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if request.method != "OPTIONS":
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["X-XSS-Protection"] = "1; mode=block"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response


# Global exception handlers to return structured JSON and log tracebacks
logger = logging.getLogger("server_exception_handler")


async def pawnshop_error_handler(request: Request, exc: PawnshopError):
    issues = exc.issues if isinstance(exc, ValidationFailed) else None
    if exc.status_code >= 500:
        logger.error(f"Service error: {exc.message}")
    else:
        logger.warning(f"Service error handled: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, issues))


async def validation_exception_handler(request: Request, exc: Exception):
    # Request bodies and service payloads both surface as {field: [messages]}
    issues = flatten_validation_errors(exc.errors())
    logger.warning(f"Validation error: {issues}")
    return JSONResponse(status_code=422, content=error_body("Validation failed", issues))


async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTPException handled: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail) if exc.detail else "HTTP error"),
        headers=getattr(exc, "headers", None),
    )


class UnexpectedErrorMiddleware(BaseHTTPMiddleware):
    """
    Turns unhandled exceptions into a generic 500 body.

    Runs inside CORSMiddleware so error responses still carry the
    Access-Control headers; details stay in the logs, never in the response.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            tb = traceback.format_exc()
            logger.error(f"Unhandled exception: {str(exc)}\n{tb}")
            return JSONResponse(status_code=500, content=error_body("Unexpected error"))


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not app_settings.USE_IN_MEMORY_DB:
            await init_db(app_settings)
        yield

    app = FastAPI(
        title="Pawn Shop Ledger",
        description="Customers, pawn loans, repayments and reports",
        version="1.0.0",
        lifespan=lifespan
    )

    # Collaborators live on app.state; routes reach them through pawnshop.api.dependencies
    app.state.settings = app_settings
    app.state.repositories = build_repositories(app_settings)
    app.state.notifier = NotificationService.from_settings(app_settings)
    app.state.otp_store = OTPStore(app_settings.REDIS_URL)

    app.add_exception_handler(PawnshopError, pawnshop_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)

    allowed_origins = app_settings.cors_origins
    print(f"DEBUG: CORS allowed origins: {allowed_origins}")

    # Middleware runs LIFO: CORSMiddleware is added last so it sees preflights first
    app.add_middleware(UnexpectedErrorMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        # Browsers reject credentials with a wildcard origin
        allow_credentials="*" not in allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
        expose_headers=["Content-Type", "Content-Disposition"],
        max_age=3600,
    )

    app.include_router(auth_router)
    app.include_router(customer_router)
    app.include_router(loan_router)
    app.include_router(repayment_router)
    app.include_router(reports_router)
    app.include_router(dev_router)

    @app.get("/")
    async def root():
        return {"message": "Pawn Shop Ledger API is running!"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "message": "API is running"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("pawnshop.main:app", host="0.0.0.0", port=8000, reload=True)

"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_export import __version__
from payroll_export.api.routes import (
    artifacts_router,
    exports_router,
    health_router,
    mappings_router,
    pay_periods_router,
    shifts_router,
    timesheets_router,
)
from payroll_export.config import configure_logging
from payroll_export.database import dispose_db, init_db
from payroll_export.services.artifact_store import (
    ArtifactNotFoundError,
    ArtifactWriteError,
    InvalidSignatureError,
)
from payroll_export.services.award_service import AwardRateNotFoundError
from payroll_export.services.export_service import (
    EmptyExportError,
    ExportBlockedError,
    ExportNotFoundError,
    ReasonRequiredError,
)
from payroll_export.services.locking_service import (
    TimesheetLockConflictError,
    TimesheetNotFoundError,
)
from payroll_export.services.mapping_service import DuplicateMappingError, MappingNotFoundError
from payroll_export.services.pay_period_service import PayPeriodNotFoundError
from payroll_export.services.state_machine import InvalidTransitionError

logger = logging.getLogger(__name__)

# Domain exception -> (HTTP status, error code)
ERROR_RESPONSES: dict[type[Exception], tuple[int, str]] = {
    PayPeriodNotFoundError: (status.HTTP_404_NOT_FOUND, "PAY_PERIOD_NOT_FOUND"),
    ExportNotFoundError: (status.HTTP_404_NOT_FOUND, "EXPORT_NOT_FOUND"),
    TimesheetNotFoundError: (status.HTTP_404_NOT_FOUND, "TIMESHEET_NOT_FOUND"),
    MappingNotFoundError: (status.HTTP_404_NOT_FOUND, "MAPPING_NOT_FOUND"),
    AwardRateNotFoundError: (status.HTTP_404_NOT_FOUND, "AWARD_RATE_NOT_FOUND"),
    ArtifactNotFoundError: (status.HTTP_404_NOT_FOUND, "ARTIFACT_NOT_FOUND"),
    ReasonRequiredError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "REASON_REQUIRED"),
    EmptyExportError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "EMPTY_EXPORT"),
    InvalidTransitionError: (status.HTTP_409_CONFLICT, "INVALID_TRANSITION"),
    TimesheetLockConflictError: (status.HTTP_409_CONFLICT, "LOCK_CONFLICT"),
    DuplicateMappingError: (status.HTTP_409_CONFLICT, "DUPLICATE_MAPPING"),
    ArtifactWriteError: (status.HTTP_502_BAD_GATEWAY, "ARTIFACT_WRITE_FAILED"),
    InvalidSignatureError: (status.HTTP_403_FORBIDDEN, "INVALID_SIGNATURE"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    init_db()
    logger.info("Payroll export API started")
    yield
    await dispose_db()


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a domain exception as a JSON error body."""
    status_code, code = ERROR_RESPONSES[type(exc)]
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code},
    )


async def export_blocked_handler(request: Request, exc: ExportBlockedError) -> JSONResponse:
    """Return the blocking validation result alongside the error."""
    body = exc.result.to_dict()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": exc.reason,
            "code": "EXPORT_BLOCKED",
            "errors": body["errors"],
            "warnings": body["warnings"],
        },
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Payroll Export API",
        description="Shift pay calculation and payroll provider exports",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    for exc_class in ERROR_RESPONSES:
        app.add_exception_handler(exc_class, domain_exception_handler)
    app.add_exception_handler(ExportBlockedError, export_blocked_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    for router in (
        shifts_router,
        pay_periods_router,
        exports_router,
        artifacts_router,
        timesheets_router,
        mappings_router,
    ):
        app.include_router(router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()

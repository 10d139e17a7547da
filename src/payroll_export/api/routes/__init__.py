"""API routes."""

from payroll_export.api.routes.artifacts import router as artifacts_router
from payroll_export.api.routes.exports import router as exports_router
from payroll_export.api.routes.health import router as health_router
from payroll_export.api.routes.mappings import router as mappings_router
from payroll_export.api.routes.pay_periods import router as pay_periods_router
from payroll_export.api.routes.shifts import router as shifts_router
from payroll_export.api.routes.timesheets import router as timesheets_router

__all__ = [
    "artifacts_router",
    "exports_router",
    "health_router",
    "mappings_router",
    "pay_periods_router",
    "shifts_router",
    "timesheets_router",
]

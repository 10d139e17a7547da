"""ORM models for the payroll export engine."""

from payroll_export.models.base import Base, TimestampMixin
from payroll_export.models.employee import Employee, Timesheet, TimesheetUnlockLog
from payroll_export.models.payroll import (
    AuditEvent,
    AwardRate,
    PayPeriod,
    PayrollExport,
    PayrollMapping,
)

__all__ = [
    "AuditEvent",
    "AwardRate",
    "Base",
    "Employee",
    "PayPeriod",
    "PayrollExport",
    "PayrollMapping",
    "TimestampMixin",
    "Timesheet",
    "TimesheetUnlockLog",
]

"""Pre-export validation of timesheets in a pay period."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_export.models import Employee, PayPeriod, Timesheet
from payroll_export.services.serializer import DEFAULT_SHIFT_TYPE

LONG_SHIFT_HOURS = Decimal("12")
UNKNOWN_EMPLOYEE = "Unknown"


class ValidationErrorType(str, Enum):
    """Problems that block an export."""

    MISSING_MAPPING = "missing_mapping"
    MISSING_IDENTIFIER = "missing_identifier"
    UNAPPROVED = "unapproved"
    INVALID_DATES = "invalid_dates"


class ValidationWarningType(str, Enum):
    """Problems worth confirming that do not block an export."""

    DUPLICATE = "duplicate"
    OVERLAP = "overlap"
    LONG_SHIFT = "long_shift"


@dataclass(frozen=True)
class ValidationError:
    """Blocking validation problem."""

    type: ValidationErrorType
    message: str
    employee_id: UUID | None = None
    employee_name: str | None = None
    shift_type: str | None = None


@dataclass(frozen=True)
class ValidationWarning:
    """Non-blocking validation problem."""

    type: ValidationWarningType
    message: str
    employee_id: UUID | None = None
    employee_name: str | None = None
    work_date: date | None = None


@dataclass(frozen=True)
class TimesheetForExport:
    """Read-only projection of a timesheet used for validation and export."""

    timesheet_id: UUID
    employee_id: UUID
    employee_name: str
    employee_email: str | None
    work_date: date
    clock_in: time
    clock_out: time | None
    break_minutes: int
    total_hours: Decimal | None
    status: str
    notes: str | None
    shift_type: str
    is_locked: bool
    exported_at: datetime | None


@dataclass
class ValidationResult:
    """Outcome of validating a pay period for export."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)
    timesheets: list[TimesheetForExport] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [{"type": e.type.value, "message": e.message} for e in self.errors],
            "warnings": [{"type": w.type.value, "message": w.message} for w in self.warnings],
            "timesheet_count": len(self.timesheets),
        }


class ExportValidator:
    """Classifies the timesheets of a pay period before export.

    Per row, in order:
    - not approved: error ``unapproved``, row excluded
    - locked and previously exported: warning ``duplicate``, row excluded
    - employee has no email: error ``missing_identifier``, row kept
    - no mapping for the shift type: error ``missing_mapping`` (once per
      shift type), row kept
    - second or later row for the same employee and date: warning ``overlap``
    - more than the long-shift threshold: warning ``long_shift``

    Rows kept with an error stay visible so the operator can see what to fix.
    """

    def __init__(self, session: AsyncSession, long_shift_hours: Decimal | int = LONG_SHIFT_HOURS):
        self.session = session
        self.long_shift_hours = Decimal(long_shift_hours)

    async def validate(
        self,
        organisation_id: UUID,
        pay_period_id: UUID,
        mappings: Iterable[Any],
    ) -> ValidationResult:
        """Validate all timesheets of a pay period for export."""
        result = ValidationResult()

        pay_period = await self.session.get(PayPeriod, pay_period_id)
        if pay_period is None or pay_period.organisation_id != organisation_id:
            result.errors.append(
                ValidationError(
                    type=ValidationErrorType.INVALID_DATES,
                    message="Pay period not found",
                )
            )
            return result

        timesheets = await self._fetch_timesheets(
            organisation_id, pay_period.start_date, pay_period.end_date
        )
        employees = await self._fetch_employees({ts.employee_id for ts in timesheets})
        mapped_shift_types = {m.shift_type for m in mappings}

        reported_shift_types: set[str] = set()
        seen_employee_dates: dict[tuple[UUID, date], list[UUID]] = defaultdict(list)

        for ts in timesheets:
            employee = employees.get(ts.employee_id)
            employee_name = employee.display_name if employee else UNKNOWN_EMPLOYEE
            employee_email = employee.email if employee else None

            if ts.status != "approved":
                result.errors.append(
                    ValidationError(
                        type=ValidationErrorType.UNAPPROVED,
                        message=(
                            f"Timesheet for {employee_name} on {ts.work_date} is not approved "
                            f"(status: {ts.status})"
                        ),
                        employee_id=ts.employee_id,
                        employee_name=employee_name,
                    )
                )
                continue

            if ts.is_locked and ts.exported_at is not None:
                result.warnings.append(
                    ValidationWarning(
                        type=ValidationWarningType.DUPLICATE,
                        message=f"Timesheet for {employee_name} on {ts.work_date} was already exported",
                        employee_id=ts.employee_id,
                        employee_name=employee_name,
                        work_date=ts.work_date,
                    )
                )
                continue

            if not employee_email:
                result.errors.append(
                    ValidationError(
                        type=ValidationErrorType.MISSING_IDENTIFIER,
                        message=f"Employee {employee_name} has no email address for payroll export",
                        employee_id=ts.employee_id,
                        employee_name=employee_name,
                    )
                )

            shift_type = ts.shift_type or DEFAULT_SHIFT_TYPE
            if shift_type not in mapped_shift_types and shift_type not in reported_shift_types:
                reported_shift_types.add(shift_type)
                result.errors.append(
                    ValidationError(
                        type=ValidationErrorType.MISSING_MAPPING,
                        message=f"No payroll mapping found for shift type: {shift_type}",
                        shift_type=shift_type,
                    )
                )

            same_day = seen_employee_dates[(ts.employee_id, ts.work_date)]
            if same_day:
                result.warnings.append(
                    ValidationWarning(
                        type=ValidationWarningType.OVERLAP,
                        message=f"Multiple timesheets for {employee_name} on {ts.work_date}",
                        employee_id=ts.employee_id,
                        employee_name=employee_name,
                        work_date=ts.work_date,
                    )
                )
            same_day.append(ts.timesheet_id)

            if ts.total_hours is not None and ts.total_hours > self.long_shift_hours:
                result.warnings.append(
                    ValidationWarning(
                        type=ValidationWarningType.LONG_SHIFT,
                        message=(
                            f"Long shift ({ts.total_hours:.1f}h) for {employee_name} "
                            f"on {ts.work_date}"
                        ),
                        employee_id=ts.employee_id,
                        employee_name=employee_name,
                        work_date=ts.work_date,
                    )
                )

            result.timesheets.append(
                TimesheetForExport(
                    timesheet_id=ts.timesheet_id,
                    employee_id=ts.employee_id,
                    employee_name=employee_name,
                    employee_email=employee_email,
                    work_date=ts.work_date,
                    clock_in=ts.clock_in,
                    clock_out=ts.clock_out,
                    break_minutes=ts.break_minutes or 0,
                    total_hours=ts.total_hours,
                    status=ts.status,
                    notes=ts.notes,
                    shift_type=shift_type,
                    is_locked=bool(ts.is_locked),
                    exported_at=ts.exported_at,
                )
            )

        return result

    async def _fetch_timesheets(
        self,
        organisation_id: UUID,
        start_date: date,
        end_date: date,
    ) -> list[Timesheet]:
        """Timesheets dated inside the period, inclusive, oldest first."""
        result = await self.session.execute(
            select(Timesheet)
            .where(
                Timesheet.organisation_id == organisation_id,
                Timesheet.work_date >= start_date,
                Timesheet.work_date <= end_date,
            )
            .order_by(Timesheet.work_date, Timesheet.clock_in)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _fetch_employees(self, employee_ids: set[UUID]) -> dict[UUID, Employee]:
        if not employee_ids:
            return {}
        result = await self.session.execute(
            select(Employee).where(Employee.employee_id.in_(employee_ids))
        )
        return {e.employee_id: e for e in result.scalars().all()}

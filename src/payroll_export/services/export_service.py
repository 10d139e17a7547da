"""Payroll export lifecycle: generate, void, unlock."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_export.calculators.shift_calculator import ShiftPayCalculator
from payroll_export.calculators.types import ZERO, AwardRates, ShiftEntry
from payroll_export.models import PayPeriod, PayrollExport
from payroll_export.models.base import utcnow
from payroll_export.services.artifact_store import ArtifactStore
from payroll_export.services.audit_service import AuditService, AuditSink
from payroll_export.services.locking_service import (
    TimesheetLockConflictError,
    TimesheetLockingService,
)
from payroll_export.services.mapping_service import MappingService
from payroll_export.services.pay_period_service import PayPeriodService
from payroll_export.services.serializer import ExportSerializer, PayrollProvider
from payroll_export.services.state_machine import (
    ExportStateMachine,
    ExportStatus,
    InvalidTransitionError,
    PayPeriodStateMachine,
    PayPeriodStatus,
)
from payroll_export.services.types import Actor, Notifier, null_notifier
from payroll_export.services.validation_service import (
    LONG_SHIFT_HOURS,
    ExportValidator,
    TimesheetForExport,
    ValidationResult,
)

logger = logging.getLogger(__name__)

SIGNED_URL_TTL_SECONDS = 3600


class ExportNotFoundError(Exception):
    """Raised when a payroll export does not exist."""

    def __init__(self, export_id: UUID):
        self.export_id = export_id
        super().__init__(f"Payroll export {export_id} not found")


class ReasonRequiredError(Exception):
    """Raised when a void or unlock is attempted without a reason."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"{action} requires a reason")


class ExportBlockedError(Exception):
    """Raised when validation does not allow an export to proceed."""

    def __init__(self, result: ValidationResult, reason: str):
        self.result = result
        self.reason = reason
        super().__init__(reason)


class EmptyExportError(Exception):
    """Raised when an export is requested with no timesheets."""

    def __init__(self, pay_period_id: UUID):
        self.pay_period_id = pay_period_id
        super().__init__(f"No timesheets to export for pay period {pay_period_id}")


@dataclass(frozen=True)
class GenerateExportInput:
    """Request to generate an export for a pay period."""

    pay_period_id: UUID
    provider: PayrollProvider


@dataclass(frozen=True)
class ExportSummary:
    """Totals recorded on an export."""

    total_hours: Decimal
    employees_count: int
    lines_count: int
    total_earnings: Decimal | None = None

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "totalHours": float(self.total_hours),
            "employeesCount": self.employees_count,
            "linesCount": self.lines_count,
        }
        if self.total_earnings is not None:
            data["totalEarnings"] = float(self.total_earnings)
        return data

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> ExportSummary:
        data = data or {}
        earnings = data.get("totalEarnings")
        return cls(
            total_hours=Decimal(str(data.get("totalHours", 0))),
            employees_count=int(data.get("employeesCount", 0)),
            lines_count=int(data.get("linesCount", 0)),
            total_earnings=Decimal(str(earnings)) if earnings is not None else None,
        )


def artifact_path(organisation_id: UUID, pay_period_id: UUID, provider: PayrollProvider, millis: int) -> str:
    """Storage path for an export file."""
    return f"{organisation_id}/export_{pay_period_id}_{provider.value}_{millis}.csv"


def summarize_timesheets(
    timesheets: Sequence[TimesheetForExport],
    award: AwardRates | None = None,
) -> ExportSummary:
    """Total hours, distinct employees and line count, plus earnings when rates are known."""
    total_hours = sum((ts.total_hours or ZERO for ts in timesheets), ZERO)
    total_earnings = None
    if award is not None:
        total_earnings = ZERO
        for ts in timesheets:
            calculation = ShiftPayCalculator.calculate(shift_entry_for(ts), award)
            if calculation is not None:
                total_earnings += calculation.total_pay
        total_earnings = ShiftPayCalculator.round_to_cents(total_earnings)

    return ExportSummary(
        total_hours=total_hours,
        employees_count=len({ts.employee_id for ts in timesheets}),
        lines_count=len(timesheets),
        total_earnings=total_earnings,
    )


def shift_entry_for(ts: TimesheetForExport) -> ShiftEntry:
    """Calculator input for an exported timesheet."""
    return ShiftEntry(
        work_date=ts.work_date,
        start_time=ts.clock_in,
        # An open shift has no span
        end_time=ts.clock_out if ts.clock_out is not None else ts.clock_in,
        break_minutes=ts.break_minutes,
        is_public_holiday=ts.shift_type == "public_holiday",
        is_overtime=ts.shift_type == "overtime",
        shift_id=ts.timesheet_id,
    )


class ExportLifecycleService:
    """Orchestrates validation, serialization, persistence and locking.

    Operations:
    - validate: classify the period's timesheets
    - export_pay_period: validate, then generate only when nothing blocks
    - generate_export: write the artifact, record the export, lock rows,
      move the period to exported, audit
    - void_export: mark an export voided (rows stay locked, period unchanged)
    - unlock_timesheet: audited escape hatch for one locked row

    Every step runs in the caller's unit of work. A failure raises before the
    session commits, so no export record survives without its locks.
    """

    def __init__(
        self,
        session: AsyncSession,
        artifact_store: ArtifactStore,
        audit: AuditSink | None = None,
        notify: Notifier = null_notifier,
        signed_url_ttl_seconds: int = SIGNED_URL_TTL_SECONDS,
        long_shift_hours: Decimal | int = LONG_SHIFT_HOURS,
    ):
        self.session = session
        self.artifact_store = artifact_store
        self.audit = audit or AuditService(session)
        self.notify = notify
        self.signed_url_ttl_seconds = signed_url_ttl_seconds
        self.locking_service = TimesheetLockingService(session)
        self.pay_periods = PayPeriodService(session, self.audit)
        self.mappings = MappingService(session)
        self.validator = ExportValidator(session, long_shift_hours)

    async def validate(
        self,
        organisation_id: UUID,
        pay_period_id: UUID,
        mappings: Sequence[Any] | None = None,
    ) -> ValidationResult:
        """Validate a pay period, loading the organisation's mappings if not given."""
        if mappings is None:
            mappings = await self.mappings.fetch_mappings(organisation_id)
        return await self.validator.validate(organisation_id, pay_period_id, mappings)

    async def export_pay_period(
        self,
        organisation_id: UUID,
        pay_period_id: UUID,
        provider: PayrollProvider,
        actor: Actor,
        confirm_warnings: bool = False,
        award: AwardRates | None = None,
    ) -> PayrollExport:
        """Validate and, when nothing blocks, generate the export.

        Blocking errors (or warnings without confirmation) raise
        ExportBlockedError before anything is written or locked.
        """
        mappings = await self.mappings.fetch_mappings(organisation_id)
        result = await self.validator.validate(organisation_id, pay_period_id, mappings)

        if not result.is_valid:
            raise ExportBlockedError(
                result, f"Export blocked by {len(result.errors)} validation error(s)"
            )
        if result.has_warnings and not confirm_warnings:
            raise ExportBlockedError(
                result, f"{len(result.warnings)} warning(s) must be confirmed before export"
            )

        return await self.generate_export(
            organisation_id,
            GenerateExportInput(pay_period_id=pay_period_id, provider=PayrollProvider(provider)),
            mappings,
            result.timesheets,
            actor,
            award=award,
        )

    async def generate_export(
        self,
        organisation_id: UUID,
        request: GenerateExportInput,
        mappings: Sequence[Any],
        timesheets: Sequence[TimesheetForExport],
        actor: Actor,
        award: AwardRates | None = None,
    ) -> PayrollExport:
        """Generate one export from already validated timesheets."""
        provider = PayrollProvider(request.provider)
        pay_period = await self.pay_periods.get_pay_period(organisation_id, request.pay_period_id)
        if not PayPeriodStateMachine.can_export(pay_period.status):
            raise InvalidTransitionError(
                pay_period.status,
                PayPeriodStatus.EXPORTED,
                "Pay period is closed",
            )
        if not timesheets:
            raise EmptyExportError(request.pay_period_id)

        # 1-2. Serialize and persist the immutable artifact
        document = ExportSerializer.serialize(provider, timesheets, mappings)
        path = artifact_path(
            organisation_id, request.pay_period_id, provider, int(time.time() * 1000)
        )
        stored_path = await self.artifact_store.write_artifact(path, document)

        # 3-4. Summary and export record
        summary = summarize_timesheets(timesheets, award)
        export = PayrollExport(
            organisation_id=organisation_id,
            pay_period_id=request.pay_period_id,
            provider=provider.value,
            file_paths=[stored_path],
            totals_summary=summary.to_json(),
            created_by_user_id=actor.user_id,
            created_by_name=actor.display_name,
            created_by_email=actor.email,
            status=ExportStatus.GENERATED.value,
        )
        self.session.add(export)
        await self.session.flush()

        # 5. Atomic lock claim over the full set
        timesheet_ids = [ts.timesheet_id for ts in timesheets]
        lock_result = await self.locking_service.lock_for_export(timesheet_ids, request.pay_period_id)
        if not lock_result.complete:
            logger.warning(
                "Export of pay period %s aborted; artifact %s is left unreferenced",
                request.pay_period_id,
                stored_path,
            )
            raise TimesheetLockConflictError(request.pay_period_id, lock_result.rejected_ids)

        # 6. Period transition
        await self.pay_periods.update_status(pay_period, PayPeriodStatus.EXPORTED, actor)

        # 7. Audit
        await self.audit.record(
            action="payroll_export.generate",
            entity_type="payroll_export",
            entity_id=export.payroll_export_id,
            organisation_id=organisation_id,
            actor=actor,
            after_state={
                "provider": provider.value,
                "timesheets_count": len(timesheet_ids),
                "total_hours": float(summary.total_hours),
                "employees_count": summary.employees_count,
            },
        )

        logger.info(
            "Generated %s export %s for pay period %s (%d lines)",
            provider.value,
            export.payroll_export_id,
            request.pay_period_id,
            summary.lines_count,
        )
        self.notify("success", f"Export generated: {summary.lines_count} timesheet(s) exported")
        return export

    async def void_export(
        self,
        organisation_id: UUID,
        export_id: UUID,
        reason: str,
        actor: Actor,
    ) -> PayrollExport:
        """Void an export. Timesheets stay locked and the period keeps its status."""
        if not reason or not reason.strip():
            raise ReasonRequiredError("Voiding an export")

        export = await self.get_export(organisation_id, export_id)
        ExportStateMachine.validate_transition(export.status, ExportStatus.VOIDED)

        export.status = ExportStatus.VOIDED.value
        export.voided_at = utcnow()
        export.voided_by_user_id = actor.user_id
        export.voided_by_name = actor.display_name
        export.voided_reason = reason.strip()
        await self.session.flush()

        await self.audit.record(
            action="payroll_export.void",
            entity_type="payroll_export",
            entity_id=export_id,
            organisation_id=organisation_id,
            actor=actor,
            before_state={"status": ExportStatus.GENERATED.value},
            after_state={"reason": export.voided_reason, "voided_at": export.voided_at.isoformat()},
        )
        logger.info("Voided export %s", export_id)
        self.notify("success", "Export voided")
        return export

    async def unlock_timesheet(
        self,
        timesheet_id: UUID,
        reason: str,
        actor: Actor,
        organisation_id: UUID | None = None,
    ) -> bool:
        """Clear the export lock on one timesheet, outside the normal lifecycle."""
        if not reason or not reason.strip():
            raise ReasonRequiredError("Unlocking a timesheet")

        entry = await self.locking_service.unlock(
            timesheet_id, actor, reason.strip(), organisation_id=organisation_id
        )

        await self.audit.record(
            action="timesheet.unlock",
            entity_type="timesheet",
            entity_id=timesheet_id,
            organisation_id=entry.organisation_id,
            actor=actor,
            after_state={"reason": entry.reason, "unlocked_at": entry.unlocked_at.isoformat()},
        )
        logger.info("Unlocked timesheet %s", timesheet_id)
        self.notify("success", "Timesheet unlocked")
        return True

    async def close_pay_period(
        self,
        organisation_id: UUID,
        pay_period_id: UUID,
        actor: Actor,
    ) -> PayPeriod:
        """Close a pay period; no further exports can be generated for it."""
        pay_period = await self.pay_periods.close_pay_period(organisation_id, pay_period_id, actor)
        self.notify("success", "Pay period closed")
        return pay_period

    async def get_export(self, organisation_id: UUID, export_id: UUID) -> PayrollExport:
        """Load an export, raising ExportNotFoundError if absent."""
        export = await self.session.scalar(
            select(PayrollExport).where(
                PayrollExport.payroll_export_id == export_id,
                PayrollExport.organisation_id == organisation_id,
            )
        )
        if export is None:
            raise ExportNotFoundError(export_id)
        return export

    async def list_exports(
        self,
        organisation_id: UUID,
        pay_period_id: UUID | None = None,
    ) -> list[PayrollExport]:
        """Exports of an organisation, newest first."""
        query = select(PayrollExport).where(PayrollExport.organisation_id == organisation_id)
        if pay_period_id is not None:
            query = query.where(PayrollExport.pay_period_id == pay_period_id)
        result = await self.session.execute(query.order_by(PayrollExport.created_at.desc()))
        return list(result.scalars().all())

    async def get_download_urls(self, organisation_id: UUID, export_id: UUID) -> list[str]:
        """Signed URLs for every file of an export."""
        export = await self.get_export(organisation_id, export_id)
        return [
            self.artifact_store.signed_url(path, self.signed_url_ttl_seconds)
            for path in export.file_paths
        ]

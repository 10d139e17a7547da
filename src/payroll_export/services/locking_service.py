"""Timesheet locking for payroll export."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_export.models import Timesheet, TimesheetUnlockLog
from payroll_export.models.base import utcnow
from payroll_export.services.types import Actor

logger = logging.getLogger(__name__)

LOCKED_REASON = "Exported in pay period"


class TimesheetLockConflictError(Exception):
    """Raised when some requested timesheets could not be claimed by a lock."""

    def __init__(self, pay_period_id: UUID, rejected_ids: Sequence[UUID]):
        self.pay_period_id = pay_period_id
        self.rejected_ids = list(rejected_ids)
        super().__init__(
            f"{len(self.rejected_ids)} timesheet(s) were already locked or not approved "
            f"when exporting pay period {pay_period_id}"
        )


class TimesheetNotFoundError(Exception):
    """Raised when a timesheet does not exist."""

    def __init__(self, timesheet_id: UUID):
        self.timesheet_id = timesheet_id
        super().__init__(f"Timesheet {timesheet_id} not found")


@dataclass
class LockResult:
    """Outcome of an atomic lock claim."""

    locked_ids: list[UUID] = field(default_factory=list)
    rejected_ids: list[UUID] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.rejected_ids


class TimesheetLockingService:
    """Locks exported timesheets and unlocks them on request.

    The lock is a single conditional UPDATE: only rows that are approved and
    not yet locked are claimed, and the statement returns the ids it actually
    changed. Two exports racing for the same rows cannot both claim a row.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def lock_for_export(
        self,
        timesheet_ids: Sequence[UUID],
        pay_period_id: UUID,
    ) -> LockResult:
        """Claim every unlocked, approved timesheet among ``timesheet_ids``.

        Returns which ids were locked by this call and which were not.
        """
        requested = list(dict.fromkeys(timesheet_ids))
        if not requested:
            return LockResult()

        result = await self.session.execute(
            update(Timesheet)
            .where(
                Timesheet.timesheet_id.in_(requested),
                Timesheet.status == "approved",
                Timesheet.is_locked.is_(False),
            )
            .values(
                is_locked=True,
                locked_reason=LOCKED_REASON,
                exported_at=utcnow(),
                exported_in_pay_period_id=pay_period_id,
            )
            .returning(Timesheet.timesheet_id)
            .execution_options(synchronize_session=False)
        )
        claimed = set(result.scalars().all())

        lock_result = LockResult(
            locked_ids=[ts_id for ts_id in requested if ts_id in claimed],
            rejected_ids=[ts_id for ts_id in requested if ts_id not in claimed],
        )
        if lock_result.rejected_ids:
            logger.warning(
                "Lock for pay period %s claimed %d of %d timesheets",
                pay_period_id,
                len(lock_result.locked_ids),
                len(requested),
            )
        return lock_result

    async def unlock(
        self,
        timesheet_id: UUID,
        actor: Actor,
        reason: str,
        organisation_id: UUID | None = None,
    ) -> TimesheetUnlockLog:
        """Clear the lock on one timesheet and log who did it and why.

        ``exported_at`` is kept as history; once unlocked the row is
        exportable again.
        """
        query = select(Timesheet).where(Timesheet.timesheet_id == timesheet_id)
        if organisation_id is not None:
            query = query.where(Timesheet.organisation_id == organisation_id)
        timesheet = await self.session.scalar(query)
        if timesheet is None:
            raise TimesheetNotFoundError(timesheet_id)

        unlocked_at = utcnow()
        entry = TimesheetUnlockLog(
            organisation_id=timesheet.organisation_id,
            timesheet_id=timesheet_id,
            unlocked_by_user_id=actor.user_id,
            unlocked_by_name=actor.display_name,
            unlocked_by_email=actor.email,
            reason=reason,
            unlocked_at=unlocked_at,
        )
        self.session.add(entry)

        await self.session.execute(
            update(Timesheet)
            .where(Timesheet.timesheet_id == timesheet_id)
            .values(
                is_locked=False,
                unlocked_at=unlocked_at,
                unlocked_by_user_id=actor.user_id,
                unlocked_reason=reason,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        return entry

    async def get_locked_timesheet_ids(self, pay_period_id: UUID) -> list[UUID]:
        """Ids of timesheets currently locked by exports of a pay period."""
        result = await self.session.execute(
            select(Timesheet.timesheet_id).where(
                Timesheet.exported_in_pay_period_id == pay_period_id,
                Timesheet.is_locked.is_(True),
            )
        )
        return list(result.scalars().all())

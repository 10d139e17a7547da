"""Pay period store and status transitions."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_export.models import PayPeriod
from payroll_export.models.base import utcnow
from payroll_export.services.audit_service import AuditService, AuditSink
from payroll_export.services.state_machine import (
    InvalidTransitionError,
    PayPeriodStateMachine,
    PayPeriodStatus,
)
from payroll_export.services.types import Actor

logger = logging.getLogger(__name__)


class PayPeriodNotFoundError(Exception):
    """Raised when a pay period does not exist for the organisation."""

    def __init__(self, pay_period_id: UUID):
        self.pay_period_id = pay_period_id
        super().__init__(f"Pay period {pay_period_id} not found")


class PayPeriodService:
    """Creates pay periods and moves them through their lifecycle."""

    def __init__(self, session: AsyncSession, audit: AuditSink | None = None):
        self.session = session
        self.audit = audit or AuditService(session)

    async def create_pay_period(
        self,
        organisation_id: UUID,
        start_date: date,
        end_date: date,
        actor: Actor,
    ) -> PayPeriod:
        """Create an open pay period."""
        if end_date < start_date:
            raise ValueError("Pay period end_date must not be before start_date")

        pay_period = PayPeriod(
            organisation_id=organisation_id,
            start_date=start_date,
            end_date=end_date,
            status=PayPeriodStatus.OPEN.value,
            created_by_user_id=actor.user_id,
            created_by_name=actor.display_name,
            created_by_email=actor.email,
        )
        self.session.add(pay_period)
        await self.session.flush()

        await self.audit.record(
            action="pay_period.create",
            entity_type="pay_period",
            entity_id=pay_period.pay_period_id,
            organisation_id=organisation_id,
            actor=actor,
            after_state={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )
        return pay_period

    async def get_pay_period(self, organisation_id: UUID, pay_period_id: UUID) -> PayPeriod:
        """Load a pay period, raising PayPeriodNotFoundError if absent."""
        pay_period = await self.session.scalar(
            select(PayPeriod)
            .where(
                PayPeriod.pay_period_id == pay_period_id,
                PayPeriod.organisation_id == organisation_id,
            )
            .execution_options(populate_existing=True)
        )
        if pay_period is None:
            raise PayPeriodNotFoundError(pay_period_id)
        return pay_period

    async def list_pay_periods(self, organisation_id: UUID) -> list[PayPeriod]:
        """All pay periods of an organisation, newest first."""
        result = await self.session.execute(
            select(PayPeriod)
            .where(PayPeriod.organisation_id == organisation_id)
            .order_by(PayPeriod.start_date.desc())
        )
        return list(result.scalars().all())

    async def update_status(
        self,
        pay_period: PayPeriod,
        to_status: PayPeriodStatus,
        actor: Actor | None = None,
    ) -> PayPeriod:
        """Move a pay period to ``to_status``.

        Uses a conditional update so a concurrent transition (e.g. a close)
        is never overwritten.
        """
        from_status = pay_period.status
        PayPeriodStateMachine.validate_transition(from_status, to_status)

        values: dict[str, object] = {"status": to_status.value}
        if to_status == PayPeriodStatus.CLOSED:
            values["closed_at"] = utcnow()
            values["closed_by_user_id"] = actor.user_id if actor else None

        allowed_from = [s.value for s in PayPeriodStateMachine.allowed_from(to_status)]
        result = await self.session.execute(
            update(PayPeriod)
            .where(
                PayPeriod.pay_period_id == pay_period.pay_period_id,
                PayPeriod.status.in_(allowed_from),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = await self.get_pay_period(pay_period.organisation_id, pay_period.pay_period_id)
            raise InvalidTransitionError(
                current.status,
                to_status,
                "Pay period status changed concurrently",
            )

        for key, value in values.items():
            setattr(pay_period, key, value)

        await self.audit.record(
            action="pay_period.close" if to_status == PayPeriodStatus.CLOSED else "pay_period.update",
            entity_type="pay_period",
            entity_id=pay_period.pay_period_id,
            organisation_id=pay_period.organisation_id,
            actor=actor,
            before_state={"status": str(from_status)},
            after_state={"status": to_status.value},
        )
        return pay_period

    async def close_pay_period(
        self,
        organisation_id: UUID,
        pay_period_id: UUID,
        actor: Actor,
    ) -> PayPeriod:
        """Close a pay period; no further exports are possible."""
        pay_period = await self.get_pay_period(organisation_id, pay_period_id)
        pay_period = await self.update_status(pay_period, PayPeriodStatus.CLOSED, actor)
        logger.info("Closed pay period %s", pay_period_id)
        return pay_period

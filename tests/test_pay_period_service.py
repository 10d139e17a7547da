"""Tests for the pay period store and transitions."""

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import select

from payroll_export.models import AuditEvent, PayPeriod
from payroll_export.services.pay_period_service import PayPeriodNotFoundError, PayPeriodService
from payroll_export.services.state_machine import InvalidTransitionError, PayPeriodStatus
from tests.conftest import ORGANISATION_ID, OTHER_ORGANISATION_ID, PayrollData


async def audit_actions(session, entity_id):
    result = await session.execute(
        select(AuditEvent.action)
        .where(AuditEvent.entity_id == entity_id)
        .order_by(AuditEvent.created_at)
    )
    return list(result.scalars().all())


class TestCreateAndRead:
    """Test pay period creation and lookup."""

    async def test_create_pay_period(self, session, actor):
        """A new period is open and its creation is audited."""
        service = PayPeriodService(session)

        pay_period = await service.create_pay_period(
            ORGANISATION_ID, date(2024, 8, 1), date(2024, 8, 14), actor
        )

        assert pay_period.status == "open"
        assert pay_period.created_by_user_id == actor.user_id
        assert pay_period.created_by_name == "Pat Manager"
        assert await audit_actions(session, pay_period.pay_period_id) == ["pay_period.create"]

    async def test_single_day_period(self, session, actor):
        pay_period = await PayPeriodService(session).create_pay_period(
            ORGANISATION_ID, date(2024, 8, 1), date(2024, 8, 1), actor
        )
        assert pay_period.start_date == pay_period.end_date

    async def test_end_before_start_is_rejected(self, session, actor):
        with pytest.raises(ValueError):
            await PayPeriodService(session).create_pay_period(
                ORGANISATION_ID, date(2024, 8, 14), date(2024, 8, 1), actor
            )

    async def test_get_unknown_pay_period(self, session):
        with pytest.raises(PayPeriodNotFoundError):
            await PayPeriodService(session).get_pay_period(ORGANISATION_ID, uuid4())

    async def test_get_other_organisations_pay_period(self, session, payroll_data: PayrollData):
        with pytest.raises(PayPeriodNotFoundError):
            await PayPeriodService(session).get_pay_period(
                OTHER_ORGANISATION_ID, payroll_data.pay_period_id
            )

    async def test_list_newest_first(self, session, payroll_data: PayrollData, actor):
        service = PayPeriodService(session)
        later = await service.create_pay_period(ORGANISATION_ID, date(2024, 7, 15), date(2024, 7, 28), actor)

        periods = await service.list_pay_periods(ORGANISATION_ID)

        assert [p.pay_period_id for p in periods] == [later.pay_period_id, payroll_data.pay_period_id]
        assert await service.list_pay_periods(OTHER_ORGANISATION_ID) == []


class TestTransitions:
    """Test status changes through the state machine."""

    async def test_close_pay_period(self, session, payroll_data: PayrollData, actor):
        service = PayPeriodService(session)

        pay_period = await service.close_pay_period(ORGANISATION_ID, payroll_data.pay_period_id, actor)

        assert pay_period.status == "closed"
        assert pay_period.closed_at is not None
        assert pay_period.closed_by_user_id == actor.user_id
        assert await audit_actions(session, payroll_data.pay_period_id) == ["pay_period.close"]

    async def test_closed_is_terminal(self, session, payroll_data: PayrollData, actor):
        service = PayPeriodService(session)
        await service.close_pay_period(ORGANISATION_ID, payroll_data.pay_period_id, actor)

        with pytest.raises(InvalidTransitionError):
            await service.close_pay_period(ORGANISATION_ID, payroll_data.pay_period_id, actor)

    async def test_export_transition_is_audited_as_update(
        self, session, payroll_data: PayrollData, actor
    ):
        service = PayPeriodService(session)
        pay_period = await service.get_pay_period(ORGANISATION_ID, payroll_data.pay_period_id)

        await service.update_status(pay_period, PayPeriodStatus.EXPORTED, actor)
        await service.update_status(pay_period, PayPeriodStatus.EXPORTED, actor)

        status = await session.scalar(
            select(PayPeriod.status).where(PayPeriod.pay_period_id == payroll_data.pay_period_id)
        )
        assert status == "exported"
        assert await audit_actions(session, payroll_data.pay_period_id) == [
            "pay_period.update",
            "pay_period.update",
        ]

    async def test_concurrent_close_is_not_overwritten(
        self, session, session_factory, payroll_data: PayrollData, actor
    ):
        """A transition based on a stale read fails instead of reopening a closed period."""
        service = PayPeriodService(session)
        stale = await service.get_pay_period(ORGANISATION_ID, payroll_data.pay_period_id)
        await session.commit()

        async with session_factory() as other:
            await PayPeriodService(other).close_pay_period(
                ORGANISATION_ID, payroll_data.pay_period_id, actor
            )
            await other.commit()

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.update_status(stale, PayPeriodStatus.EXPORTED, actor)

        assert exc_info.value.from_status == "closed"
        status = await session.scalar(
            select(PayPeriod.status).where(PayPeriod.pay_period_id == payroll_data.pay_period_id)
        )
        assert status == "closed"

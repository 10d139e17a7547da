"""Award rate store."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_export.calculators.types import AwardRates
from payroll_export.models import AwardRate
from payroll_export.models.base import utcnow
from payroll_export.services.audit_service import AuditService, AuditSink
from payroll_export.services.types import Actor

RATE_FIELDS = (
    "base_hourly_rate",
    "evening_multiplier",
    "night_multiplier",
    "saturday_multiplier",
    "sunday_multiplier",
    "public_holiday_multiplier",
    "overtime_multiplier",
)


class AwardRateNotFoundError(Exception):
    """Raised when no current award rate exists."""

    def __init__(self, organisation_id: UUID, award_rate_id: UUID | None = None):
        self.organisation_id = organisation_id
        self.award_rate_id = award_rate_id
        target = f"award rate {award_rate_id}" if award_rate_id else "current award rate"
        super().__init__(f"No {target} for organisation {organisation_id}")


class AwardRateService:
    """Award rates are created and superseded, never edited in place or deleted."""

    def __init__(self, session: AsyncSession, audit: AuditSink | None = None):
        self.session = session
        self.audit = audit or AuditService(session)

    async def create_award_rate(
        self,
        organisation_id: UUID,
        name: str,
        rates: AwardRates,
    ) -> AwardRate:
        award = AwardRate(
            organisation_id=organisation_id,
            name=name,
            **{field: getattr(rates, field) for field in RATE_FIELDS},
        )
        self.session.add(award)
        await self.session.flush()
        return award

    async def get_current(self, organisation_id: UUID, name: str | None = None) -> AwardRate | None:
        """Most recent award rate that has not been superseded."""
        query = select(AwardRate).where(
            AwardRate.organisation_id == organisation_id,
            AwardRate.superseded_at.is_(None),
        )
        if name is not None:
            query = query.where(AwardRate.name == name)
        result = await self.session.execute(query.order_by(AwardRate.created_at.desc()).limit(1))
        return result.scalar_one_or_none()

    async def get_rates(self, organisation_id: UUID, award_rate_id: UUID | None = None) -> AwardRates | None:
        """Award rates as calculator input; None when nothing is configured."""
        if award_rate_id is None:
            award = await self.get_current(organisation_id)
        else:
            award = await self.session.get(AwardRate, award_rate_id)
            if award is not None and award.organisation_id != organisation_id:
                award = None
        return AwardRates.from_record(award) if award is not None else None

    async def supersede(
        self,
        organisation_id: UUID,
        award_rate_id: UUID,
        rates: AwardRates,
        actor: Actor,
    ) -> AwardRate:
        """Replace an award rate with a new row and mark the old one superseded."""
        current = await self.session.get(AwardRate, award_rate_id)
        if current is None or current.organisation_id != organisation_id:
            raise AwardRateNotFoundError(organisation_id, award_rate_id)
        if current.superseded_at is not None:
            raise ValueError(f"Award rate {award_rate_id} is already superseded")

        replacement = await self.create_award_rate(organisation_id, current.name, rates)
        current.superseded_at = utcnow()
        current.superseded_by_id = replacement.award_rate_id
        await self.session.flush()

        await self.audit.record(
            action="award_rate.supersede",
            entity_type="award_rate",
            entity_id=current.award_rate_id,
            organisation_id=organisation_id,
            actor=actor,
            before_state={field: str(getattr(current, field)) for field in RATE_FIELDS},
            after_state={field: str(getattr(rates, field)) for field in RATE_FIELDS},
        )
        return replacement

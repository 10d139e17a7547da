"""Award rate, pay period, mapping, export, and audit models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_export.models.base import Base, JSONType, TimestampMixin


# ===== Award Rates =====


class AwardRate(Base, TimestampMixin):
    """Organisation base rate and penalty multipliers.

    Rows are never deleted. A change creates a new row and marks the old one
    superseded.
    """

    __tablename__ = "award_rate"

    award_rate_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organisation_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    base_hourly_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    evening_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=Decimal("1"))
    night_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=Decimal("1"))
    saturday_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=Decimal("1"))
    sunday_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=Decimal("1"))
    public_holiday_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=Decimal("1"))
    overtime_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=Decimal("1"))
    superseded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    superseded_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("award_rate.award_rate_id"),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("base_hourly_rate >= 0", name="award_rate_base_check"),
        CheckConstraint(
            "evening_multiplier >= 0 AND night_multiplier >= 0 AND "
            "saturday_multiplier >= 0 AND sunday_multiplier >= 0 AND "
            "public_holiday_multiplier >= 0 AND overtime_multiplier >= 0",
            name="award_rate_multiplier_check",
        ),
    )

    @property
    def is_current(self) -> bool:
        return self.superseded_at is None


# ===== Pay Periods =====


class PayPeriod(Base, TimestampMixin):
    """Pay period window for one export cycle."""

    __tablename__ = "pay_period"

    pay_period_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organisation_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="open")
    created_by_user_id: Mapped[UUID] = mapped_column(nullable=False)
    created_by_name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_by_email: Mapped[str | None] = mapped_column(String, nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('open', 'exported', 'closed')",
            name="pay_period_status_check",
        ),
        CheckConstraint("end_date >= start_date", name="pay_period_dates_check"),
    )

    # Relationships
    exports: Mapped[list[PayrollExport]] = relationship(back_populates="pay_period")


# ===== Payroll Mappings =====


class PayrollMapping(Base, TimestampMixin):
    """Shift type to provider earning code mapping."""

    __tablename__ = "payroll_mapping"

    payroll_mapping_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organisation_id: Mapped[UUID] = mapped_column(nullable=False)
    shift_type: Mapped[str] = mapped_column(String, nullable=False)
    earning_code: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=Decimal("1.0"))
    applies_when: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint(
            "organisation_id",
            "shift_type",
            name="payroll_mapping_org_shift_type_unique",
        ),
    )


# ===== Payroll Exports =====


class PayrollExport(Base, TimestampMixin):
    """Generated payroll export artifact record."""

    __tablename__ = "payroll_export"

    payroll_export_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organisation_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    pay_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("pay_period.pay_period_id"),
        nullable=False,
    )
    provider: Mapped[str] = mapped_column(String, nullable=False)
    file_paths: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    totals_summary: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    created_by_user_id: Mapped[UUID] = mapped_column(nullable=False)
    created_by_name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_by_email: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="generated")
    voided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    voided_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)
    voided_by_name: Mapped[str | None] = mapped_column(String, nullable=True)
    voided_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "provider IN ('generic_csv', 'keypay', 'xero', 'myob')",
            name="payroll_export_provider_check",
        ),
        CheckConstraint(
            "status IN ('generated', 'voided')",
            name="payroll_export_status_check",
        ),
    )

    # Relationships
    pay_period: Mapped[PayPeriod] = relationship(back_populates="exports")


# ===== Audit =====


class AuditEvent(Base, TimestampMixin):
    """Audit trail entry."""

    __tablename__ = "audit_event"

    audit_event_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organisation_id: Mapped[UUID | None] = mapped_column(nullable=True, index=True)
    actor_user_id: Mapped[UUID | None] = mapped_column(nullable=True)
    actor_name: Mapped[str | None] = mapped_column(String, nullable=True)
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[UUID] = mapped_column(nullable=False)
    action: Mapped[str] = mapped_column(String, nullable=False)
    before_json: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    after_json: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)

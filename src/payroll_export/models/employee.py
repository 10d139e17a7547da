"""Employee and timesheet models."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_export.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from payroll_export.models.payroll import PayPeriod


class Employee(Base, TimestampMixin):
    """Employee identity as needed by payroll export."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organisation_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    timesheets: Mapped[list[Timesheet]] = relationship(back_populates="employee")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Timesheet(Base, TimestampMixin):
    """Worked shift recorded against an employee."""

    __tablename__ = "timesheet"

    timesheet_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organisation_id: Mapped[UUID] = mapped_column(nullable=False)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    clock_in: Mapped[time] = mapped_column(Time, nullable=False)
    clock_out: Mapped[time | None] = mapped_column(Time, nullable=True)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_hours: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    shift_type: Mapped[str | None] = mapped_column(String, nullable=True)

    # Export locking
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    locked_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    exported_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    exported_in_pay_period_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("pay_period.pay_period_id"),
        nullable=True,
    )
    unlocked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    unlocked_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)
    unlocked_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="timesheet_status_check",
        ),
        CheckConstraint("break_minutes >= 0", name="timesheet_break_check"),
        Index("timesheet_org_date_idx", "organisation_id", "work_date"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="timesheets")
    exported_in_pay_period: Mapped[PayPeriod | None] = relationship()


class TimesheetUnlockLog(Base):
    """Record of a timesheet unlocked after export."""

    __tablename__ = "timesheet_unlock_log"

    timesheet_unlock_log_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organisation_id: Mapped[UUID] = mapped_column(nullable=False)
    timesheet_id: Mapped[UUID] = mapped_column(
        ForeignKey("timesheet.timesheet_id"),
        nullable=False,
    )
    unlocked_by_user_id: Mapped[UUID] = mapped_column(nullable=False)
    unlocked_by_name: Mapped[str | None] = mapped_column(String, nullable=True)
    unlocked_by_email: Mapped[str | None] = mapped_column(String, nullable=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

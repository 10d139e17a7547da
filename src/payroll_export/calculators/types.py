"""Type definitions for shift pay calculation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

ZERO = Decimal("0")


class HourCategory(str, Enum):
    """Mutually exclusive buckets that worked hours are partitioned into."""

    BASE = "base"
    EVENING = "evening"
    NIGHT = "night"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    PUBLIC_HOLIDAY = "public_holiday"
    OVERTIME = "overtime"


@dataclass(frozen=True)
class AwardRates:
    """Base hourly rate and penalty multipliers for an organisation."""

    base_hourly_rate: Decimal
    evening_multiplier: Decimal = Decimal("1")
    night_multiplier: Decimal = Decimal("1")
    saturday_multiplier: Decimal = Decimal("1")
    sunday_multiplier: Decimal = Decimal("1")
    public_holiday_multiplier: Decimal = Decimal("1")
    overtime_multiplier: Decimal = Decimal("1")

    def __post_init__(self) -> None:
        for name in (
            "base_hourly_rate",
            "evening_multiplier",
            "night_multiplier",
            "saturday_multiplier",
            "sunday_multiplier",
            "public_holiday_multiplier",
            "overtime_multiplier",
        ):
            value = Decimal(str(getattr(self, name)))
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
            object.__setattr__(self, name, value)

    def multiplier_for(self, category: HourCategory) -> Decimal:
        """Multiplier applied to the base rate for a category."""
        if category is HourCategory.BASE:
            return Decimal("1")
        return getattr(self, f"{category.value}_multiplier")

    @classmethod
    def from_record(cls, record: Any) -> AwardRates:
        """Build from any object carrying the award rate attributes (e.g. AwardRate)."""
        return cls(
            base_hourly_rate=record.base_hourly_rate,
            evening_multiplier=record.evening_multiplier,
            night_multiplier=record.night_multiplier,
            saturday_multiplier=record.saturday_multiplier,
            sunday_multiplier=record.sunday_multiplier,
            public_holiday_multiplier=record.public_holiday_multiplier,
            overtime_multiplier=record.overtime_multiplier,
        )


@dataclass(frozen=True)
class ShiftEntry:
    """A worked shift as entered on the wall clock."""

    work_date: date
    start_time: str | time
    end_time: str | time
    break_minutes: int = 0
    is_public_holiday: bool = False
    is_overtime: bool = False
    shift_id: UUID | None = None

    @property
    def is_saturday(self) -> bool:
        return self.work_date.weekday() == 5

    @property
    def is_sunday(self) -> bool:
        return self.work_date.weekday() == 6


@dataclass(frozen=True)
class ShiftCalculation:
    """Hour partition and pay breakdown for one shift.

    ``hours`` and ``pay`` hold every HourCategory; categories that do not
    apply to the shift are zero.
    """

    work_date: date
    total_hours: Decimal
    break_hours: Decimal
    worked_hours: Decimal
    hours: dict[HourCategory, Decimal]
    pay: dict[HourCategory, Decimal]
    total_pay: Decimal
    shift_id: UUID | None = None

    @property
    def base_hours(self) -> Decimal:
        return self.hours[HourCategory.BASE]

    @property
    def evening_hours(self) -> Decimal:
        return self.hours[HourCategory.EVENING]

    @property
    def night_hours(self) -> Decimal:
        return self.hours[HourCategory.NIGHT]

    @property
    def saturday_hours(self) -> Decimal:
        return self.hours[HourCategory.SATURDAY]

    @property
    def sunday_hours(self) -> Decimal:
        return self.hours[HourCategory.SUNDAY]

    @property
    def public_holiday_hours(self) -> Decimal:
        return self.hours[HourCategory.PUBLIC_HOLIDAY]

    @property
    def overtime_hours(self) -> Decimal:
        return self.hours[HourCategory.OVERTIME]

    @property
    def penalty_hours(self) -> Decimal:
        return self.worked_hours - self.base_hours

    @property
    def penalty_pay(self) -> Decimal:
        return self.total_pay - self.pay[HourCategory.BASE]


@dataclass
class PayrollSummary:
    """Totals across a set of shift calculations."""

    shift_count: int = 0
    total_hours: Decimal = ZERO
    worked_hours: Decimal = ZERO
    base_hours: Decimal = ZERO
    penalty_hours: Decimal = ZERO
    pay: dict[HourCategory, Decimal] = field(
        default_factory=lambda: {category: ZERO for category in HourCategory}
    )
    penalty_pay: Decimal = ZERO
    gross_pay: Decimal = ZERO

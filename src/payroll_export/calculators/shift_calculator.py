"""Shift pay calculator: partitions worked time into penalty-rate buckets."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from payroll_export.calculators.intervals import (
    MINUTES_PER_DAY,
    overlap_in_window,
    parse_clock,
    shift_span_minutes,
)
from payroll_export.calculators.types import (
    ZERO,
    AwardRates,
    HourCategory,
    PayrollSummary,
    ShiftCalculation,
    ShiftEntry,
)

# Penalty windows as minutes of day
EVENING_WINDOW = (18 * 60, 23 * 60)
NIGHT_WINDOW = (23 * 60, 6 * 60)

MINUTES_PER_HOUR = Decimal("60")


def _hours(minutes: int | Decimal) -> Decimal:
    return Decimal(minutes) / MINUTES_PER_HOUR


class ShiftPayCalculator:
    """Pure shift pay calculation.

    Category priority for a shift:
    1. Overtime flag: every worked hour is overtime
    2. Public holiday flag: every worked hour is public holiday
    3. Saturday, then Sunday: every worked hour takes the weekend rate
    4. Weekday: evening (18:00-23:00) and night (23:00-06:00) overlap is
       measured on the clock, the remainder is base

    All interval arithmetic is done in whole minutes so the partition is
    exact; hours are derived at the end.
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def calculate(shift: ShiftEntry, award: AwardRates | None) -> ShiftCalculation | None:
        """Calculate the hour partition and pay for a single shift.

        Returns None when no award rates are configured; the caller must
        report that as a configuration gap.
        """
        if award is None:
            return None

        start = parse_clock(shift.start_time)
        end = parse_clock(shift.end_time)
        if shift.break_minutes < 0:
            raise ValueError("break_minutes must be >= 0")

        total_minutes = shift_span_minutes(start, end)
        worked_minutes = max(0, total_minutes - shift.break_minutes)

        minutes = ShiftPayCalculator.partition_minutes(shift, start, end, worked_minutes)
        hours = {category: _hours(value) for category, value in minutes.items()}

        pay = {
            category: hours[category] * award.base_hourly_rate * award.multiplier_for(category)
            for category in HourCategory
        }
        total_pay = sum(pay.values(), ZERO)

        return ShiftCalculation(
            work_date=shift.work_date,
            total_hours=_hours(total_minutes),
            break_hours=_hours(shift.break_minutes),
            worked_hours=_hours(worked_minutes),
            hours=hours,
            pay=pay,
            total_pay=total_pay,
            shift_id=shift.shift_id,
        )

    @staticmethod
    def partition_minutes(
        shift: ShiftEntry,
        start: int,
        end: int,
        worked_minutes: int,
    ) -> dict[HourCategory, int | Decimal]:
        """Split worked minutes into exactly one category per minute."""
        minutes: dict[HourCategory, int | Decimal] = {category: 0 for category in HourCategory}

        if shift.is_overtime:
            minutes[HourCategory.OVERTIME] = worked_minutes
        elif shift.is_public_holiday:
            minutes[HourCategory.PUBLIC_HOLIDAY] = worked_minutes
        elif shift.is_saturday:
            minutes[HourCategory.SATURDAY] = worked_minutes
        elif shift.is_sunday:
            minutes[HourCategory.SUNDAY] = worked_minutes
        else:
            evening = overlap_in_window(start, end, *EVENING_WINDOW, period=MINUTES_PER_DAY)
            night = overlap_in_window(start, end, *NIGHT_WINDOW, period=MINUTES_PER_DAY)
            penalty = evening + night

            if penalty <= worked_minutes:
                minutes[HourCategory.EVENING] = evening
                minutes[HourCategory.NIGHT] = night
                minutes[HourCategory.BASE] = worked_minutes - penalty
            else:
                # Break exceeds the base portion: scale penalty time down
                scaled_evening = Decimal(evening) * worked_minutes / penalty
                minutes[HourCategory.EVENING] = scaled_evening
                minutes[HourCategory.NIGHT] = worked_minutes - scaled_evening

        return minutes

    @staticmethod
    def summarize(calculations: Iterable[ShiftCalculation]) -> PayrollSummary:
        """Aggregate hours and pay across shifts."""
        summary = PayrollSummary()
        for calc in calculations:
            summary.shift_count += 1
            summary.total_hours += calc.total_hours
            summary.worked_hours += calc.worked_hours
            summary.base_hours += calc.base_hours
            summary.penalty_hours += calc.penalty_hours
            for category, amount in calc.pay.items():
                summary.pay[category] += amount
            summary.penalty_pay += calc.penalty_pay
            summary.gross_pay += calc.total_pay
        return summary

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(ShiftPayCalculator.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

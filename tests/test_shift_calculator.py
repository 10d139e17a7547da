"""Tests for the shift pay calculator."""

from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from payroll_export.calculators import (
    AwardRates,
    HourCategory,
    ShiftEntry,
    ShiftPayCalculator,
)

MONDAY = date(2024, 7, 1)
TUESDAY = date(2024, 7, 2)
WEDNESDAY = date(2024, 7, 3)
SATURDAY = date(2024, 7, 6)
SUNDAY = date(2024, 7, 7)

AWARD = AwardRates(
    base_hourly_rate=Decimal("30.00"),
    evening_multiplier=Decimal("1.25"),
    night_multiplier=Decimal("1.5"),
    saturday_multiplier=Decimal("1.5"),
    sunday_multiplier=Decimal("2.0"),
    public_holiday_multiplier=Decimal("2.5"),
    overtime_multiplier=Decimal("1.75"),
)

FLAT_AWARD = AwardRates(base_hourly_rate=Decimal("30.00"))


def shift(work_date, start, end, break_minutes=0, **flags):
    return ShiftEntry(
        work_date=work_date,
        start_time=start,
        end_time=end,
        break_minutes=break_minutes,
        **flags,
    )


class TestWeekdayShifts:
    """Test weekday partition into base, evening and night hours."""

    def test_day_shift_is_base(self):
        """09:00-17:00 with a 30 minute break is 7.5 base hours."""
        calc = ShiftPayCalculator.calculate(shift(MONDAY, "09:00", "17:00", 30), AWARD)

        assert calc.total_hours == Decimal("8")
        assert calc.break_hours == Decimal("0.5")
        assert calc.worked_hours == Decimal("7.5")
        assert calc.base_hours == Decimal("7.5")
        assert calc.penalty_hours == 0
        assert calc.total_pay == Decimal("225.00")

    def test_evening_shift(self):
        """18:00-23:00 is entirely evening time."""
        calc = ShiftPayCalculator.calculate(shift(TUESDAY, "18:00", "23:00"), AWARD)

        assert calc.evening_hours == Decimal("5")
        assert calc.base_hours == 0
        assert calc.total_pay == Decimal("187.5")

    def test_overnight_shift_splits_evening_and_night(self):
        """22:00-02:00 is one evening hour and three night hours."""
        calc = ShiftPayCalculator.calculate(shift(WEDNESDAY, "22:00", "02:00"), AWARD)

        assert calc.total_hours == Decimal("4")
        assert calc.evening_hours == Decimal("1")
        assert calc.night_hours == Decimal("3")
        assert calc.base_hours == 0
        # 1 * 30 * 1.25 + 3 * 30 * 1.5
        assert calc.total_pay == Decimal("172.5")

    def test_early_morning_shift(self):
        """04:00-10:00 has two night hours before 06:00."""
        calc = ShiftPayCalculator.calculate(shift(WEDNESDAY, time(4, 0), time(10, 0)), AWARD)

        assert calc.night_hours == Decimal("2")
        assert calc.base_hours == Decimal("4")

    def test_break_comes_out_of_base_first(self):
        """A break is deducted from base time while base time remains."""
        calc = ShiftPayCalculator.calculate(shift(MONDAY, "15:00", "21:00", 60), AWARD)

        assert calc.evening_hours == Decimal("3")
        assert calc.base_hours == Decimal("2")
        assert calc.worked_hours == Decimal("5")

    def test_break_larger_than_base_scales_penalty_hours(self):
        """Penalty hours shrink proportionally so the partition sums to worked hours."""
        calc = ShiftPayCalculator.calculate(shift(WEDNESDAY, "22:00", "02:00", 60), AWARD)

        assert calc.worked_hours == Decimal("3")
        assert calc.evening_hours == Decimal("0.75")
        assert calc.night_hours == Decimal("2.25")
        assert calc.base_hours == 0

    def test_negative_break_is_rejected(self):
        with pytest.raises(ValueError):
            ShiftPayCalculator.calculate(shift(MONDAY, "09:00", "17:00", -5), AWARD)


class TestFlaggedAndWeekendShifts:
    """Test whole-shift categories and their priority."""

    def test_saturday_shift(self):
        """8 Saturday hours at 1.5x of $30 pay $360."""
        calc = ShiftPayCalculator.calculate(shift(SATURDAY, "08:00", "16:00"), AWARD)

        assert calc.saturday_hours == Decimal("8")
        assert calc.total_pay == Decimal("360.00")

    def test_saturday_evening_stays_saturday(self):
        """Weekend rates replace evening rates."""
        calc = ShiftPayCalculator.calculate(shift(SATURDAY, "16:00", "22:00"), AWARD)

        assert calc.saturday_hours == Decimal("6")
        assert calc.evening_hours == 0

    def test_sunday_shift(self):
        calc = ShiftPayCalculator.calculate(shift(SUNDAY, "10:00", "14:00"), AWARD)

        assert calc.sunday_hours == Decimal("4")
        assert calc.total_pay == Decimal("240.0")

    def test_public_holiday_beats_weekend(self):
        calc = ShiftPayCalculator.calculate(
            shift(SATURDAY, "08:00", "12:00", is_public_holiday=True), AWARD
        )

        assert calc.public_holiday_hours == Decimal("4")
        assert calc.saturday_hours == 0

    def test_overtime_beats_public_holiday(self):
        calc = ShiftPayCalculator.calculate(
            shift(MONDAY, "18:00", "22:00", is_public_holiday=True, is_overtime=True), AWARD
        )

        assert calc.overtime_hours == Decimal("4")
        assert calc.public_holiday_hours == 0
        assert calc.evening_hours == 0


class TestCalculatorApi:
    """Test the calculator's supporting operations."""

    def test_no_award_returns_none(self):
        assert ShiftPayCalculator.calculate(shift(MONDAY, "09:00", "17:00"), None) is None

    def test_negative_rates_are_rejected(self):
        with pytest.raises(ValueError):
            AwardRates(base_hourly_rate=Decimal("-1"))
        with pytest.raises(ValueError):
            AwardRates(base_hourly_rate=Decimal("30"), night_multiplier=Decimal("-0.5"))

    def test_rates_are_coerced_to_decimal(self):
        award = AwardRates(base_hourly_rate=30, evening_multiplier=1.25)
        assert award.base_hourly_rate == Decimal("30")
        assert award.evening_multiplier == Decimal("1.25")

    def test_summarize(self):
        """Summary totals add up across shifts."""
        calcs = [
            ShiftPayCalculator.calculate(shift(MONDAY, "09:00", "17:00", 30), AWARD),
            ShiftPayCalculator.calculate(shift(SATURDAY, "08:00", "16:00"), AWARD),
        ]
        summary = ShiftPayCalculator.summarize(calcs)

        assert summary.shift_count == 2
        assert summary.worked_hours == Decimal("15.5")
        assert summary.base_hours == Decimal("7.5")
        assert summary.penalty_hours == Decimal("8")
        assert summary.pay[HourCategory.SATURDAY] == Decimal("360.00")
        assert summary.penalty_pay == Decimal("360.00")
        assert summary.gross_pay == Decimal("585.00")

    def test_summarize_empty(self):
        summary = ShiftPayCalculator.summarize([])
        assert summary.shift_count == 0
        assert summary.gross_pay == 0

    def test_round_to_cents(self):
        assert ShiftPayCalculator.round_to_cents(Decimal("10.005")) == Decimal("10.01")
        assert ShiftPayCalculator.round_to_cents(Decimal("10.004")) == Decimal("10.00")


clock_times = st.builds(time, st.integers(0, 23), st.integers(0, 59))
work_dates = st.dates(min_value=date(2024, 1, 1), max_value=date(2025, 12, 31))
shifts = st.builds(
    ShiftEntry,
    work_date=work_dates,
    start_time=clock_times,
    end_time=clock_times,
    break_minutes=st.integers(0, 600),
    is_public_holiday=st.booleans(),
    is_overtime=st.booleans(),
)

TOLERANCE = Decimal("1e-20")


class TestCalculatorInvariants:
    """Property tests over arbitrary shifts."""

    @given(shifts)
    def test_partition_sums_to_worked_hours(self, entry):
        calc = ShiftPayCalculator.calculate(entry, AWARD)

        assert all(hours >= 0 for hours in calc.hours.values())
        assert abs(sum(calc.hours.values()) - calc.worked_hours) < TOLERANCE

    @given(shifts)
    def test_worked_hours_never_exceed_span(self, entry):
        calc = ShiftPayCalculator.calculate(entry, AWARD)

        assert 0 <= calc.worked_hours <= calc.total_hours
        assert calc.total_hours < 24

    @given(shifts)
    def test_flat_rates_pay_worked_hours_times_base(self, entry):
        """With every multiplier at 1 the category split does not change pay."""
        calc = ShiftPayCalculator.calculate(entry, FLAT_AWARD)

        expected = calc.worked_hours * FLAT_AWARD.base_hourly_rate
        assert abs(calc.total_pay - expected) < TOLERANCE * 100

    @given(shifts)
    def test_total_pay_is_sum_of_category_pay(self, entry):
        calc = ShiftPayCalculator.calculate(entry, AWARD)

        assert calc.total_pay == sum(calc.pay.values())
        assert calc.penalty_pay == calc.total_pay - calc.pay[HourCategory.BASE]

    @given(shifts.filter(lambda s: s.is_overtime or s.is_public_holiday or s.work_date.weekday() >= 5))
    def test_whole_shift_categories_use_one_bucket(self, entry):
        calc = ShiftPayCalculator.calculate(entry, AWARD)

        non_zero = [category for category, hours in calc.hours.items() if hours]
        assert len(non_zero) <= 1
        assert calc.evening_hours == 0
        assert calc.night_hours == 0

    @given(work_dates, clock_times, st.integers(1, 16 * 60))
    def test_weekday_hours_depend_only_on_clock(self, work_date, start, minutes):
        """Moving a weekday shift to another weekday does not change its split."""
        if work_date.weekday() >= 4:
            work_date -= timedelta(days=3)
        end_minutes = (start.hour * 60 + start.minute + minutes) % (24 * 60)
        end = time(end_minutes // 60, end_minutes % 60)

        first = ShiftPayCalculator.calculate(shift(work_date, start, end), AWARD)
        second = ShiftPayCalculator.calculate(shift(work_date + timedelta(days=1), start, end), AWARD)

        assert first.hours == second.hours

"""Shift pay calculation."""

from payroll_export.calculators.intervals import overlap_in_window, parse_clock
from payroll_export.calculators.shift_calculator import ShiftPayCalculator
from payroll_export.calculators.types import (
    AwardRates,
    HourCategory,
    PayrollSummary,
    ShiftCalculation,
    ShiftEntry,
)

__all__ = [
    "AwardRates",
    "HourCategory",
    "PayrollSummary",
    "ShiftCalculation",
    "ShiftEntry",
    "ShiftPayCalculator",
    "overlap_in_window",
    "parse_clock",
]

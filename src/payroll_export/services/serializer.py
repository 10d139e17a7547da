"""Payroll provider CSV serialization."""

from __future__ import annotations

import csv
import io
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from payroll_export.services.validation_service import TimesheetForExport

DEFAULT_SHIFT_TYPE = "standard"


class PayrollProvider(str, Enum):
    """Supported export dialects."""

    GENERIC_CSV = "generic_csv"
    KEYPAY = "keypay"
    XERO = "xero"
    MYOB = "myob"

    @property
    def label(self) -> str:
        return PROVIDER_LABELS[self]


PROVIDER_LABELS: dict[PayrollProvider, str] = {
    PayrollProvider.GENERIC_CSV: "Generic Payroll CSV",
    PayrollProvider.KEYPAY: "KeyPay Import",
    PayrollProvider.XERO: "Xero Payroll",
    PayrollProvider.MYOB: "MYOB Payroll",
}


def format_hours(hours: Decimal | float | None) -> str:
    """Render hours with exactly two decimal places ("" when unknown)."""
    if hours is None:
        return ""
    return str(Decimal(str(hours)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _clock(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M")
    return str(value)


RowBuilder = Callable[["TimesheetForExport", str], list[Any]]


@dataclass(frozen=True)
class Dialect:
    """Column layout and fallback earning label for one provider."""

    headers: tuple[str, ...]
    default_code: str
    build_row: RowBuilder


def _generic_row(ts: TimesheetForExport, code: str) -> list[Any]:
    return [
        ts.employee_email,
        ts.employee_name,
        ts.work_date.isoformat(),
        _clock(ts.clock_in),
        _clock(ts.clock_out),
        ts.break_minutes,
        format_hours(ts.total_hours),
        code,
        "",  # cost_center
        ts.notes,
    ]


def _keypay_row(ts: TimesheetForExport, code: str) -> list[Any]:
    return [
        ts.employee_email,
        "",  # Location
        ts.work_date.isoformat(),
        code,
        format_hours(ts.total_hours),
        ts.notes,
    ]


def _xero_row(ts: TimesheetForExport, code: str) -> list[Any]:
    return [
        ts.employee_email,
        code,
        format_hours(ts.total_hours),
        ts.work_date.isoformat(),
    ]


def _myob_row(ts: TimesheetForExport, code: str) -> list[Any]:
    return [
        ts.employee_email,
        code,
        format_hours(ts.total_hours),
        ts.work_date.isoformat(),
    ]


DIALECTS: dict[PayrollProvider, Dialect] = {
    PayrollProvider.GENERIC_CSV: Dialect(
        headers=(
            "employee_email",
            "employee_name",
            "date",
            "start_time",
            "end_time",
            "break_minutes",
            "hours",
            "earning_code",
            "cost_center",
            "notes",
        ),
        default_code="ORD",
        build_row=_generic_row,
    ),
    PayrollProvider.KEYPAY: Dialect(
        headers=("Employee Email", "Location", "Date", "Earnings Category", "Units", "Notes"),
        default_code="Ordinary Hours",
        build_row=_keypay_row,
    ),
    PayrollProvider.XERO: Dialect(
        headers=("Employee Email", "Earnings Rate Code", "Units", "Date"),
        default_code="ORD",
        build_row=_xero_row,
    ),
    PayrollProvider.MYOB: Dialect(
        headers=("Employee Email", "Payroll Category", "Units", "Date"),
        default_code="Base Hourly",
        build_row=_myob_row,
    ),
}


class ExportSerializer:
    """Renders validated timesheets into a provider CSV document.

    Serialization never fails on a missing mapping: the dialect's default
    earning label is used instead. Fields containing a comma, quote or
    newline are quoted with embedded quotes doubled.
    """

    ENCODING = "utf-8"

    @staticmethod
    def build_mapping_lookup(mappings: Iterable[Any]) -> dict[str, str]:
        """Map shift type to earning code from mapping records."""
        return {m.shift_type: m.earning_code for m in mappings}

    @staticmethod
    def render(
        provider: PayrollProvider | str,
        timesheets: Sequence[TimesheetForExport],
        mapping_lookup: dict[str, str],
    ) -> str:
        """Render the CSV document as text."""
        dialect = DIALECTS[PayrollProvider(provider)]

        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(dialect.headers)

        for ts in timesheets:
            code = mapping_lookup.get(ts.shift_type or DEFAULT_SHIFT_TYPE) or dialect.default_code
            writer.writerow(dialect.build_row(ts, code))

        return output.getvalue()

    @staticmethod
    def serialize(
        provider: PayrollProvider | str,
        timesheets: Sequence[TimesheetForExport],
        mappings: Iterable[Any],
    ) -> bytes:
        """Render the CSV document as UTF-8 bytes."""
        lookup = ExportSerializer.build_mapping_lookup(mappings)
        return ExportSerializer.render(provider, timesheets, lookup).encode(ExportSerializer.ENCODING)

"""Tests for payroll provider CSV serialization."""

import csv
import io
from datetime import date, time
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from payroll_export.services.serializer import (
    DIALECTS,
    ExportSerializer,
    PayrollProvider,
    format_hours,
)
from payroll_export.services.validation_service import TimesheetForExport


def make_timesheet(
    email="alice@example.com",
    name="Alice Walker",
    work_date=date(2024, 7, 1),
    clock_in=time(9, 0),
    clock_out=time(17, 0),
    break_minutes=30,
    total_hours=Decimal("7.5"),
    shift_type="standard",
    notes=None,
):
    return TimesheetForExport(
        timesheet_id=uuid4(),
        employee_id=uuid4(),
        employee_name=name,
        employee_email=email,
        work_date=work_date,
        clock_in=clock_in,
        clock_out=clock_out,
        break_minutes=break_minutes,
        total_hours=total_hours,
        status="approved",
        notes=notes,
        shift_type=shift_type,
        is_locked=False,
        exported_at=None,
    )


MAPPINGS = [
    SimpleNamespace(shift_type="standard", earning_code="ORD-MAPPED"),
    SimpleNamespace(shift_type="weekend", earning_code="SAT"),
]


def parse(document: bytes) -> list[list[str]]:
    return list(csv.reader(io.StringIO(document.decode("utf-8"))))


class TestDialects:
    """Test each provider's column layout."""

    @pytest.mark.parametrize("provider", list(PayrollProvider))
    def test_header_plus_one_row_per_timesheet(self, provider):
        """A document has exactly one header and one row per timesheet."""
        timesheets = [make_timesheet(), make_timesheet(work_date=date(2024, 7, 2))]
        rows = parse(ExportSerializer.serialize(provider, timesheets, MAPPINGS))

        assert len(rows) == 3
        assert tuple(rows[0]) == DIALECTS[provider].headers
        assert all(len(row) == len(rows[0]) for row in rows)

    def test_generic_csv_columns(self):
        document = ExportSerializer.serialize(
            PayrollProvider.GENERIC_CSV, [make_timesheet(notes="Covered reception")], MAPPINGS
        )
        rows = parse(document)

        assert rows[0] == [
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
        ]
        assert rows[1] == [
            "alice@example.com",
            "Alice Walker",
            "2024-07-01",
            "09:00",
            "17:00",
            "30",
            "7.50",
            "ORD-MAPPED",
            "",
            "Covered reception",
        ]

    def test_keypay_columns(self):
        rows = parse(ExportSerializer.serialize(PayrollProvider.KEYPAY, [make_timesheet()], MAPPINGS))

        assert rows[0] == ["Employee Email", "Location", "Date", "Earnings Category", "Units", "Notes"]
        assert rows[1] == ["alice@example.com", "", "2024-07-01", "ORD-MAPPED", "7.50", ""]

    def test_xero_columns(self):
        rows = parse(ExportSerializer.serialize(PayrollProvider.XERO, [make_timesheet()], MAPPINGS))

        assert rows[0] == ["Employee Email", "Earnings Rate Code", "Units", "Date"]
        assert rows[1] == ["alice@example.com", "ORD-MAPPED", "7.50", "2024-07-01"]

    def test_myob_columns(self):
        rows = parse(ExportSerializer.serialize(PayrollProvider.MYOB, [make_timesheet()], MAPPINGS))

        assert rows[0] == ["Employee Email", "Payroll Category", "Units", "Date"]
        assert rows[1] == ["alice@example.com", "ORD-MAPPED", "7.50", "2024-07-01"]

    def test_provider_accepts_string_value(self):
        document = ExportSerializer.serialize("xero", [make_timesheet()], MAPPINGS)
        assert parse(document)[0][1] == "Earnings Rate Code"

    def test_unknown_provider_is_rejected(self):
        with pytest.raises(ValueError):
            ExportSerializer.serialize("quickbooks", [make_timesheet()], MAPPINGS)

    def test_provider_labels(self):
        assert PayrollProvider.KEYPAY.label == "KeyPay Import"
        assert PayrollProvider.GENERIC_CSV.label == "Generic Payroll CSV"


class TestEarningCodes:
    """Test earning code lookup and fallback."""

    @pytest.mark.parametrize(
        "provider,column,expected",
        [
            (PayrollProvider.GENERIC_CSV, 7, "ORD"),
            (PayrollProvider.KEYPAY, 3, "Ordinary Hours"),
            (PayrollProvider.XERO, 1, "ORD"),
            (PayrollProvider.MYOB, 1, "Base Hourly"),
        ],
    )
    def test_unmapped_shift_type_uses_dialect_default(self, provider, column, expected):
        """Serialization never fails on a missing mapping."""
        timesheet = make_timesheet(shift_type="on_call")
        rows = parse(ExportSerializer.serialize(provider, [timesheet], MAPPINGS))

        assert rows[1][column] == expected

    def test_mapped_shift_type(self):
        timesheet = make_timesheet(shift_type="weekend", work_date=date(2024, 7, 6))
        rows = parse(ExportSerializer.serialize(PayrollProvider.XERO, [timesheet], MAPPINGS))

        assert rows[1][1] == "SAT"

    def test_missing_shift_type_uses_standard_mapping(self):
        timesheet = make_timesheet(shift_type=None)
        rows = parse(ExportSerializer.serialize(PayrollProvider.XERO, [timesheet], MAPPINGS))

        assert rows[1][1] == "ORD-MAPPED"


class TestEscapingAndFormatting:
    """Test CSV quoting and number formatting."""

    def test_comma_in_name_is_quoted(self):
        """A comma inside a field does not split the column."""
        timesheet = make_timesheet(name="Walker, Alice")
        document = ExportSerializer.serialize(PayrollProvider.GENERIC_CSV, [timesheet], MAPPINGS)

        assert '"Walker, Alice"' in document.decode("utf-8")
        assert parse(document)[1][1] == "Walker, Alice"

    def test_quotes_and_newlines_in_notes(self):
        timesheet = make_timesheet(notes='Said "see you"\nthen left')
        document = ExportSerializer.serialize(PayrollProvider.GENERIC_CSV, [timesheet], MAPPINGS)

        assert '"Said ""see you""\nthen left"' in document.decode("utf-8")
        assert parse(document)[1][9] == 'Said "see you"\nthen left'

    def test_utf8_output(self):
        timesheet = make_timesheet(name="Zoë Ångström")
        document = ExportSerializer.serialize(PayrollProvider.GENERIC_CSV, [timesheet], MAPPINGS)

        assert "Zoë Ångström".encode("utf-8") in document

    def test_lines_end_with_newline(self):
        text = ExportSerializer.render(PayrollProvider.XERO, [make_timesheet()], {})
        assert text.endswith("\n")
        assert "\r" not in text

    def test_empty_document_has_header_only(self):
        rows = parse(ExportSerializer.serialize(PayrollProvider.MYOB, [], MAPPINGS))
        assert rows == [list(DIALECTS[PayrollProvider.MYOB].headers)]

    @pytest.mark.parametrize(
        "hours,expected",
        [
            (Decimal("7.5"), "7.50"),
            (Decimal("8"), "8.00"),
            (Decimal("0.125"), "0.13"),
            (7.333, "7.33"),
            (None, ""),
        ],
    )
    def test_format_hours(self, hours, expected):
        assert format_hours(hours) == expected

    def test_open_shift_has_blank_end_time(self):
        timesheet = make_timesheet(clock_out=None, total_hours=None)
        rows = parse(ExportSerializer.serialize(PayrollProvider.GENERIC_CSV, [timesheet], MAPPINGS))

        assert rows[1][4] == ""
        assert rows[1][6] == ""

"""Pydantic schemas for API request/response models."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from payroll_export.services.serializer import PayrollProvider


class ErrorResponse(BaseModel):
    """Error body returned by exception handlers."""

    detail: str
    code: str
    errors: list[dict[str, Any]] | None = None
    warnings: list[dict[str, Any]] | None = None


# ============================================================================
# Shift calculation schemas
# ============================================================================


class AwardRatesPayload(BaseModel):
    """Inline award rates for a calculation."""

    base_hourly_rate: Decimal = Field(ge=0)
    evening_multiplier: Decimal = Field(default=Decimal("1"), ge=0)
    night_multiplier: Decimal = Field(default=Decimal("1"), ge=0)
    saturday_multiplier: Decimal = Field(default=Decimal("1"), ge=0)
    sunday_multiplier: Decimal = Field(default=Decimal("1"), ge=0)
    public_holiday_multiplier: Decimal = Field(default=Decimal("1"), ge=0)
    overtime_multiplier: Decimal = Field(default=Decimal("1"), ge=0)


class ShiftCalculateRequest(BaseModel):
    """Schema for calculating pay for one shift.

    Without inline ``award`` the organisation's current award rate is used.
    """

    work_date: date
    start_time: time
    end_time: time
    break_minutes: int = Field(default=0, ge=0)
    is_public_holiday: bool = False
    is_overtime: bool = False
    award: AwardRatesPayload | None = None


class ShiftCalculateResponse(BaseModel):
    """Hour partition and pay for one shift; pay fields are null without rates."""

    work_date: date
    total_hours: Decimal
    break_hours: Decimal
    worked_hours: Decimal
    hours: dict[str, Decimal]
    pay: dict[str, Decimal] | None = None
    total_pay: Decimal | None = None


# ============================================================================
# Pay period schemas
# ============================================================================


class PayPeriodCreate(BaseModel):
    """Schema for creating a pay period."""

    start_date: date
    end_date: date


class PayPeriodResponse(BaseModel):
    """Schema for pay period response."""

    model_config = ConfigDict(from_attributes=True)

    pay_period_id: UUID
    organisation_id: UUID
    start_date: date
    end_date: date
    status: str
    created_by_user_id: UUID
    created_by_name: str | None = None
    closed_at: datetime | None = None
    closed_by_user_id: UUID | None = None
    created_at: datetime


class ValidationIssue(BaseModel):
    """One validation error or warning."""

    type: str
    message: str
    employee_id: UUID | None = None
    employee_name: str | None = None
    shift_type: str | None = None
    work_date: date | None = None


class ValidationResponse(BaseModel):
    """Schema for pre-export validation."""

    is_valid: bool
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]
    timesheet_count: int


# ============================================================================
# Export schemas
# ============================================================================


class ExportCreate(BaseModel):
    """Schema for generating an export."""

    provider: PayrollProvider
    confirm_warnings: bool = False


class ExportResponse(BaseModel):
    """Schema for payroll export response."""

    model_config = ConfigDict(from_attributes=True)

    payroll_export_id: UUID
    organisation_id: UUID
    pay_period_id: UUID
    provider: str
    file_paths: list[str]
    totals_summary: dict[str, Any]
    status: str
    created_by_user_id: UUID
    created_by_name: str | None = None
    created_at: datetime
    voided_at: datetime | None = None
    voided_by_name: str | None = None
    voided_reason: str | None = None


class ExportListResponse(BaseModel):
    """Schema for listing exports."""

    items: list[ExportResponse]
    total: int


class ReasonRequest(BaseModel):
    """Reason for a void or unlock."""

    reason: str = ""


class DownloadUrlsResponse(BaseModel):
    """Signed download links for an export."""

    payroll_export_id: UUID
    urls: list[str]
    expires_in: int


class UnlockResponse(BaseModel):
    """Result of unlocking a timesheet."""

    timesheet_id: UUID
    unlocked: bool


# ============================================================================
# Mapping schemas
# ============================================================================


class MappingCreate(BaseModel):
    """Schema for creating a payroll mapping."""

    shift_type: str = Field(min_length=1)
    earning_code: str = Field(min_length=1)
    description: str | None = None
    multiplier: Decimal | None = Field(default=None, ge=0)
    applies_when: dict[str, Any] | None = None


class MappingUpdate(BaseModel):
    """Schema for updating a payroll mapping; omitted fields are unchanged."""

    shift_type: str | None = Field(default=None, min_length=1)
    earning_code: str | None = Field(default=None, min_length=1)
    description: str | None = None
    multiplier: Decimal | None = Field(default=None, ge=0)
    applies_when: dict[str, Any] | None = None
    is_active: bool | None = None


class MappingResponse(BaseModel):
    """Schema for payroll mapping response."""

    model_config = ConfigDict(from_attributes=True)

    payroll_mapping_id: UUID
    organisation_id: UUID
    shift_type: str
    earning_code: str
    description: str | None = None
    multiplier: Decimal
    applies_when: dict[str, Any] | None = None
    is_active: bool

"""Pay period API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, status

from payroll_export.api.dependencies import (
    AppSettings,
    ArtifactStoreDep,
    CurrentActor,
    DbSession,
    OrganisationId,
)
from payroll_export.api.schemas import (
    ErrorResponse,
    ExportCreate,
    ExportResponse,
    PayPeriodCreate,
    PayPeriodResponse,
    ValidationIssue,
    ValidationResponse,
)
from payroll_export.services.award_service import AwardRateService
from payroll_export.services.export_service import ExportLifecycleService
from payroll_export.services.pay_period_service import PayPeriodService
from payroll_export.services.validation_service import ValidationResult

router = APIRouter(prefix="/pay-periods", tags=["pay-periods"])


def validation_response(result: ValidationResult) -> ValidationResponse:
    return ValidationResponse(
        is_valid=result.is_valid,
        errors=[
            ValidationIssue(
                type=e.type.value,
                message=e.message,
                employee_id=e.employee_id,
                employee_name=e.employee_name,
                shift_type=e.shift_type,
            )
            for e in result.errors
        ],
        warnings=[
            ValidationIssue(
                type=w.type.value,
                message=w.message,
                employee_id=w.employee_id,
                employee_name=w.employee_name,
                work_date=w.work_date,
            )
            for w in result.warnings
        ],
        timesheet_count=len(result.timesheets),
    )


# ============================================================================
# Pay Period CRUD
# ============================================================================


@router.post(
    "",
    response_model=PayPeriodResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_pay_period(
    db: DbSession,
    organisation_id: OrganisationId,
    actor: CurrentActor,
    payload: PayPeriodCreate,
) -> PayPeriodResponse:
    """Create a new pay period in open status."""
    try:
        pay_period = await PayPeriodService(db).create_pay_period(
            organisation_id, payload.start_date, payload.end_date, actor
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    await db.commit()
    return PayPeriodResponse.model_validate(pay_period)


@router.get("", response_model=list[PayPeriodResponse])
async def list_pay_periods(
    db: DbSession,
    organisation_id: OrganisationId,
) -> list[PayPeriodResponse]:
    """List pay periods for an organisation, newest first."""
    pay_periods = await PayPeriodService(db).list_pay_periods(organisation_id)
    return [PayPeriodResponse.model_validate(pp) for pp in pay_periods]


@router.get(
    "/{pay_period_id}",
    response_model=PayPeriodResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_pay_period(
    db: DbSession,
    organisation_id: OrganisationId,
    pay_period_id: Annotated[UUID, Path()],
) -> PayPeriodResponse:
    """Get a specific pay period by ID."""
    pay_period = await PayPeriodService(db).get_pay_period(organisation_id, pay_period_id)
    return PayPeriodResponse.model_validate(pay_period)


@router.post(
    "/{pay_period_id}/close",
    response_model=PayPeriodResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def close_pay_period(
    db: DbSession,
    organisation_id: OrganisationId,
    actor: CurrentActor,
    store: ArtifactStoreDep,
    pay_period_id: Annotated[UUID, Path()],
) -> PayPeriodResponse:
    """Close a pay period. Closed periods accept no further exports."""
    pay_period = await ExportLifecycleService(db, store).close_pay_period(
        organisation_id, pay_period_id, actor
    )
    await db.commit()
    return PayPeriodResponse.model_validate(pay_period)


# ============================================================================
# Validation and export
# ============================================================================


@router.get(
    "/{pay_period_id}/validation",
    response_model=ValidationResponse,
)
async def validate_pay_period(
    db: DbSession,
    organisation_id: OrganisationId,
    store: ArtifactStoreDep,
    settings: AppSettings,
    pay_period_id: Annotated[UUID, Path()],
) -> ValidationResponse:
    """Validate the pay period's timesheets for export without changing anything."""
    service = ExportLifecycleService(db, store, long_shift_hours=settings.long_shift_hours)
    result = await service.validate(organisation_id, pay_period_id)
    return validation_response(result)


@router.post(
    "/{pay_period_id}/exports",
    response_model=ExportResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def create_export(
    db: DbSession,
    organisation_id: OrganisationId,
    actor: CurrentActor,
    store: ArtifactStoreDep,
    settings: AppSettings,
    pay_period_id: Annotated[UUID, Path()],
    payload: ExportCreate,
) -> ExportResponse:
    """Validate and generate an export, locking the exported timesheets."""
    service = ExportLifecycleService(
        db,
        store,
        signed_url_ttl_seconds=settings.signed_url_ttl_seconds,
        long_shift_hours=settings.long_shift_hours,
    )
    award = await AwardRateService(db).get_rates(organisation_id)
    export = await service.export_pay_period(
        organisation_id,
        pay_period_id,
        payload.provider,
        actor,
        confirm_warnings=payload.confirm_warnings,
        award=award,
    )
    await db.commit()
    return ExportResponse.model_validate(export)

"""Shift pay calculation endpoint."""

from fastapi import APIRouter

from payroll_export.api.dependencies import DbSession, OrganisationId
from payroll_export.api.schemas import ShiftCalculateRequest, ShiftCalculateResponse
from payroll_export.calculators import AwardRates, HourCategory, ShiftEntry, ShiftPayCalculator
from payroll_export.calculators.types import ZERO
from payroll_export.services.award_service import AwardRateService

router = APIRouter(prefix="/shifts", tags=["shifts"])


@router.post("/calculate", response_model=ShiftCalculateResponse)
async def calculate_shift(
    db: DbSession,
    organisation_id: OrganisationId,
    payload: ShiftCalculateRequest,
) -> ShiftCalculateResponse:
    """Partition a shift's hours and price them with the award rates."""
    shift = ShiftEntry(
        work_date=payload.work_date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        break_minutes=payload.break_minutes,
        is_public_holiday=payload.is_public_holiday,
        is_overtime=payload.is_overtime,
    )
    if payload.award is not None:
        award = AwardRates(**payload.award.model_dump())
    else:
        award = await AwardRateService(db).get_rates(organisation_id)

    if award is None:
        # Hours only: price against a zero rate and drop the pay fields
        calculation = ShiftPayCalculator.calculate(shift, AwardRates(base_hourly_rate=ZERO))
        return ShiftCalculateResponse(
            work_date=calculation.work_date,
            total_hours=calculation.total_hours,
            break_hours=calculation.break_hours,
            worked_hours=calculation.worked_hours,
            hours={category.value: calculation.hours[category] for category in HourCategory},
        )

    calculation = ShiftPayCalculator.calculate(shift, award)
    return ShiftCalculateResponse(
        work_date=calculation.work_date,
        total_hours=calculation.total_hours,
        break_hours=calculation.break_hours,
        worked_hours=calculation.worked_hours,
        hours={category.value: calculation.hours[category] for category in HourCategory},
        pay={category.value: calculation.pay[category] for category in HourCategory},
        total_pay=ShiftPayCalculator.round_to_cents(calculation.total_pay),
    )

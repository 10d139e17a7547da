"""Timesheet lock endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from payroll_export.api.dependencies import (
    ArtifactStoreDep,
    CurrentActor,
    DbSession,
    OrganisationId,
)
from payroll_export.api.schemas import ErrorResponse, ReasonRequest, UnlockResponse
from payroll_export.services.export_service import ExportLifecycleService

router = APIRouter(prefix="/timesheets", tags=["timesheets"])


@router.post(
    "/{timesheet_id}/unlock",
    response_model=UnlockResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def unlock_timesheet(
    db: DbSession,
    organisation_id: OrganisationId,
    actor: CurrentActor,
    store: ArtifactStoreDep,
    timesheet_id: Annotated[UUID, Path()],
    payload: ReasonRequest,
) -> UnlockResponse:
    """Unlock an exported timesheet so it can be exported again."""
    unlocked = await ExportLifecycleService(db, store).unlock_timesheet(
        timesheet_id, payload.reason, actor, organisation_id=organisation_id
    )
    await db.commit()
    return UnlockResponse(timesheet_id=timesheet_id, unlocked=unlocked)

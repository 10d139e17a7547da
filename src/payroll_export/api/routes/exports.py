"""Payroll export API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from payroll_export.api.dependencies import (
    AppSettings,
    ArtifactStoreDep,
    CurrentActor,
    DbSession,
    OrganisationId,
)
from payroll_export.api.schemas import (
    DownloadUrlsResponse,
    ErrorResponse,
    ExportListResponse,
    ExportResponse,
    ReasonRequest,
)
from payroll_export.services.export_service import ExportLifecycleService

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("", response_model=ExportListResponse)
async def list_exports(
    db: DbSession,
    organisation_id: OrganisationId,
    store: ArtifactStoreDep,
    pay_period_id: Annotated[UUID | None, Query()] = None,
) -> ExportListResponse:
    """List exports, optionally for one pay period."""
    exports = await ExportLifecycleService(db, store).list_exports(organisation_id, pay_period_id)
    return ExportListResponse(
        items=[ExportResponse.model_validate(e) for e in exports],
        total=len(exports),
    )


@router.post(
    "/{export_id}/void",
    response_model=ExportResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def void_export(
    db: DbSession,
    organisation_id: OrganisationId,
    actor: CurrentActor,
    store: ArtifactStoreDep,
    export_id: Annotated[UUID, Path()],
    payload: ReasonRequest,
) -> ExportResponse:
    """Void an export. Its timesheets stay locked."""
    export = await ExportLifecycleService(db, store).void_export(
        organisation_id, export_id, payload.reason, actor
    )
    await db.commit()
    return ExportResponse.model_validate(export)


@router.get(
    "/{export_id}/download-urls",
    response_model=DownloadUrlsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_download_urls(
    db: DbSession,
    organisation_id: OrganisationId,
    store: ArtifactStoreDep,
    settings: AppSettings,
    export_id: Annotated[UUID, Path()],
) -> DownloadUrlsResponse:
    """Time-limited signed links to the export's files."""
    service = ExportLifecycleService(
        db, store, signed_url_ttl_seconds=settings.signed_url_ttl_seconds
    )
    urls = await service.get_download_urls(organisation_id, export_id)
    return DownloadUrlsResponse(
        payroll_export_id=export_id,
        urls=urls,
        expires_in=settings.signed_url_ttl_seconds,
    )

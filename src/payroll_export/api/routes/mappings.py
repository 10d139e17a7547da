"""Payroll mapping API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from payroll_export.api.dependencies import DbSession, OrganisationId
from payroll_export.api.schemas import (
    ErrorResponse,
    MappingCreate,
    MappingResponse,
    MappingUpdate,
)
from payroll_export.services.mapping_service import MappingService

router = APIRouter(prefix="/mappings", tags=["mappings"])


@router.get("", response_model=list[MappingResponse])
async def list_mappings(
    db: DbSession,
    organisation_id: OrganisationId,
    active_only: Annotated[bool, Query()] = False,
) -> list[MappingResponse]:
    """List shift type to earning code mappings."""
    mappings = await MappingService(db).fetch_mappings(organisation_id, active_only=active_only)
    return [MappingResponse.model_validate(m) for m in mappings]


@router.post(
    "",
    response_model=MappingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_mapping(
    db: DbSession,
    organisation_id: OrganisationId,
    payload: MappingCreate,
) -> MappingResponse:
    """Map a shift type to an earning code."""
    mapping = await MappingService(db).create_mapping(
        organisation_id,
        shift_type=payload.shift_type,
        earning_code=payload.earning_code,
        description=payload.description,
        multiplier=payload.multiplier,
        applies_when=payload.applies_when,
    )
    await db.commit()
    return MappingResponse.model_validate(mapping)


@router.patch(
    "/{mapping_id}",
    response_model=MappingResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_mapping(
    db: DbSession,
    organisation_id: OrganisationId,
    mapping_id: Annotated[UUID, Path()],
    payload: MappingUpdate,
) -> MappingResponse:
    """Update the given fields of a mapping."""
    mapping = await MappingService(db).update_mapping(
        organisation_id, mapping_id, **payload.model_dump(exclude_unset=True)
    )
    await db.commit()
    return MappingResponse.model_validate(mapping)


@router.delete(
    "/{mapping_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_mapping(
    db: DbSession,
    organisation_id: OrganisationId,
    mapping_id: Annotated[UUID, Path()],
) -> Response:
    """Delete a mapping."""
    await MappingService(db).delete_mapping(organisation_id, mapping_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

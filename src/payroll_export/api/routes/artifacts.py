"""Signed artifact download endpoint."""

from typing import Annotated

from fastapi import APIRouter, Query, Response

from payroll_export.api.dependencies import ArtifactStoreDep
from payroll_export.api.schemas import ErrorResponse

router = APIRouter(prefix="/artifacts", tags=["artifacts"])


@router.get(
    "/{path:path}",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def download_artifact(
    store: ArtifactStoreDep,
    path: str,
    expires: Annotated[int, Query()],
    signature: Annotated[str, Query()],
) -> Response:
    """Serve an export file to the holder of a valid signed link."""
    store.verify_signature(path, expires, signature)
    data = await store.read_artifact(path)
    filename = path.rsplit("/", 1)[-1]
    return Response(
        content=data,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

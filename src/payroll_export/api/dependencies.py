"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_export.config import Settings, get_settings
from payroll_export.database import init_db
from payroll_export.services.artifact_store import ArtifactStore, LocalArtifactStore
from payroll_export.services.types import Actor


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency.

    Routes commit explicitly; anything left uncommitted is rolled back.
    """
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def _parse_uuid(value: str | None, header: str) -> UUID:
    if not value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{header} header is required",
        )
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header} format",
        )


async def get_organisation_id(
    x_organisation_id: Annotated[str | None, Header()] = None
) -> UUID:
    """Extract organisation ID from header."""
    return _parse_uuid(x_organisation_id, "X-Organisation-ID")


async def get_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_name: Annotated[str | None, Header()] = None,
    x_user_email: Annotated[str | None, Header()] = None,
) -> Actor:
    """Build the acting user from identity headers."""
    return Actor(
        user_id=_parse_uuid(x_user_id, "X-User-ID"),
        name=x_user_name,
        email=x_user_email,
    )


def get_app_settings() -> Settings:
    return get_settings()


def get_artifact_store() -> ArtifactStore:
    """Artifact store configured from settings."""
    settings = get_settings()
    return LocalArtifactStore(
        root=settings.artifact_root,
        base_url=settings.artifact_base_url,
        signing_secret=settings.artifact_signing_secret,
    )


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
OrganisationId = Annotated[UUID, Depends(get_organisation_id)]
CurrentActor = Annotated[Actor, Depends(get_actor)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
ArtifactStoreDep = Annotated[ArtifactStore, Depends(get_artifact_store)]

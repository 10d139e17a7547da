"""Audit trail recording."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_export.models import AuditEvent
from payroll_export.services.types import Actor

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    """Destination for audit records.

    Implementations must have durably accepted the record when ``record``
    returns.
    """

    async def record(
        self,
        action: str,
        entity_type: str,
        entity_id: UUID,
        organisation_id: UUID | None = None,
        actor: Actor | None = None,
        before_state: dict[str, Any] | None = None,
        after_state: dict[str, Any] | None = None,
    ) -> None:
        ...


class AuditService:
    """Writes audit events into the current unit of work."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        action: str,
        entity_type: str,
        entity_id: UUID,
        organisation_id: UUID | None = None,
        actor: Actor | None = None,
        before_state: dict[str, Any] | None = None,
        after_state: dict[str, Any] | None = None,
    ) -> None:
        """Record an audit event and flush it to the database."""
        event = AuditEvent(
            organisation_id=organisation_id,
            actor_user_id=actor.user_id if actor else None,
            actor_name=actor.display_name if actor else None,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            before_json=before_state,
            after_json=after_state,
        )
        self.session.add(event)
        await self.session.flush()
        logger.debug("Audit %s on %s %s", action, entity_type, entity_id)

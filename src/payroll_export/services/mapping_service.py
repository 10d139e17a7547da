"""Payroll mapping store."""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_export.models import PayrollMapping

# (shift_type, earning_code, description)
DEFAULT_MAPPINGS: tuple[tuple[str, str, str], ...] = (
    ("standard", "ORD", "Ordinary Hours"),
    ("overtime", "OT1.5", "Overtime 1.5x"),
    ("weekend", "SAT", "Saturday Rate"),
    ("sunday", "SUN", "Sunday Rate"),
    ("public_holiday", "PH", "Public Holiday Rate"),
    ("evening", "EVE", "Evening Shift"),
    ("night", "NIGHT", "Night Shift"),
    ("sleepover", "SLEEP", "Sleepover Allowance"),
)

UPDATABLE_FIELDS = ("shift_type", "earning_code", "description", "multiplier", "applies_when", "is_active")


class MappingNotFoundError(Exception):
    """Raised when a payroll mapping does not exist."""

    def __init__(self, mapping_id: UUID):
        self.mapping_id = mapping_id
        super().__init__(f"Payroll mapping {mapping_id} not found")


class DuplicateMappingError(Exception):
    """Raised when a shift type is already mapped for the organisation."""

    def __init__(self, shift_type: str):
        self.shift_type = shift_type
        super().__init__(f"Shift type '{shift_type}' is already mapped")


class MappingService:
    """CRUD over shift-type to earning-code mappings."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def fetch_mappings(
        self,
        organisation_id: UUID,
        active_only: bool = True,
    ) -> list[PayrollMapping]:
        """Mappings of an organisation ordered by shift type."""
        query = select(PayrollMapping).where(PayrollMapping.organisation_id == organisation_id)
        if active_only:
            query = query.where(PayrollMapping.is_active.is_(True))
        result = await self.session.execute(query.order_by(PayrollMapping.shift_type))
        return list(result.scalars().all())

    async def create_mapping(
        self,
        organisation_id: UUID,
        shift_type: str,
        earning_code: str,
        description: str | None = None,
        multiplier: Decimal | None = None,
        applies_when: dict[str, Any] | None = None,
    ) -> PayrollMapping:
        """Create a mapping; a shift type may be mapped once per organisation."""
        await self._ensure_unmapped(organisation_id, shift_type)
        mapping = PayrollMapping(
            organisation_id=organisation_id,
            shift_type=shift_type,
            earning_code=earning_code,
            description=description,
            multiplier=multiplier if multiplier is not None else Decimal("1.0"),
            applies_when=applies_when,
        )
        self.session.add(mapping)
        await self.session.flush()
        return mapping

    async def update_mapping(
        self,
        organisation_id: UUID,
        mapping_id: UUID,
        /,
        **changes: Any,
    ) -> PayrollMapping:
        """Apply the given field changes to a mapping."""
        mapping = await self._get(organisation_id, mapping_id)
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update mapping fields: {sorted(unknown)}")

        new_shift_type = changes.get("shift_type")
        if new_shift_type is not None and new_shift_type != mapping.shift_type:
            await self._ensure_unmapped(organisation_id, new_shift_type)

        for key, value in changes.items():
            setattr(mapping, key, value)
        await self.session.flush()
        return mapping

    async def delete_mapping(self, organisation_id: UUID, mapping_id: UUID) -> None:
        """Delete a mapping."""
        mapping = await self._get(organisation_id, mapping_id)
        await self.session.delete(mapping)
        await self.session.flush()

    async def seed_defaults(self, organisation_id: UUID) -> list[PayrollMapping]:
        """Create the default mapping set, skipping shift types already mapped."""
        existing = {m.shift_type for m in await self.fetch_mappings(organisation_id, active_only=False)}
        created = []
        for shift_type, earning_code, description in DEFAULT_MAPPINGS:
            if shift_type in existing:
                continue
            mapping = PayrollMapping(
                organisation_id=organisation_id,
                shift_type=shift_type,
                earning_code=earning_code,
                description=description,
                multiplier=Decimal("1.0"),
            )
            self.session.add(mapping)
            created.append(mapping)
        await self.session.flush()
        return created

    async def _get(self, organisation_id: UUID, mapping_id: UUID) -> PayrollMapping:
        mapping = await self.session.get(PayrollMapping, mapping_id)
        if mapping is None or mapping.organisation_id != organisation_id:
            raise MappingNotFoundError(mapping_id)
        return mapping

    async def _ensure_unmapped(self, organisation_id: UUID, shift_type: str) -> None:
        existing = await self.session.scalar(
            select(PayrollMapping.payroll_mapping_id).where(
                PayrollMapping.organisation_id == organisation_id,
                PayrollMapping.shift_type == shift_type,
            )
        )
        if existing is not None:
            raise DuplicateMappingError(shift_type)

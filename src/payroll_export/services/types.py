"""Shared types for lifecycle services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True)
class Actor:
    """The user performing a lifecycle action."""

    user_id: UUID
    name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str | None:
        return self.name or self.email


class Notifier(Protocol):
    """Callback used to surface user-facing notices (e.g. UI toasts)."""

    def __call__(self, level: str, message: str) -> None:
        ...


def null_notifier(level: str, message: str) -> None:
    """Notifier that discards everything."""

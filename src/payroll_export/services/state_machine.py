"""Pay period and export state machines with transition validation."""

from __future__ import annotations

from enum import Enum


class PayPeriodStatus(str, Enum):
    """Pay period status values."""

    OPEN = "open"
    EXPORTED = "exported"
    CLOSED = "closed"


class ExportStatus(str, Enum):
    """Payroll export status values."""

    GENERATED = "generated"
    VOIDED = "voided"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = str(getattr(from_status, "value", from_status))
        self.to_status = str(getattr(to_status, "value", to_status))
        self.reason = reason
        msg = f"Invalid transition from '{self.from_status}' to '{self.to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PayPeriodStateMachine:
    """State machine for pay period status transitions.

    Allowed transitions:
    - open → exported (generate)
    - exported → exported (generate again after a void)
    - open → closed
    - exported → closed

    Closed is terminal. Voiding an export never moves the period.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayPeriodStatus.OPEN: [PayPeriodStatus.EXPORTED, PayPeriodStatus.CLOSED],
        PayPeriodStatus.EXPORTED: [PayPeriodStatus.EXPORTED, PayPeriodStatus.CLOSED],
        PayPeriodStatus.CLOSED: [],  # Terminal state
    }

    # Statuses where an export may be generated
    EXPORT_ALLOWED = {
        PayPeriodStatus.OPEN,
        PayPeriodStatus.EXPORTED,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def can_export(cls, status: str) -> bool:
        """Check if an export may be generated in this status."""
        return status in cls.EXPORT_ALLOWED

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

    @classmethod
    def allowed_from(cls, to_status: str) -> list[str]:
        """Statuses from which ``to_status`` may be reached."""
        return [
            from_status
            for from_status, targets in cls.VALID_TRANSITIONS.items()
            if to_status in targets
        ]


class ExportStateMachine:
    """State machine for payroll export records.

    generated → voided is the only transition; voided is terminal.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        ExportStatus.GENERATED: [ExportStatus.VOIDED],
        ExportStatus.VOIDED: [],
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        return to_status in cls.VALID_TRANSITIONS.get(from_status, [])

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

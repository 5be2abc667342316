"""
Typed failures raised by the lifecycle services.

The API layer maps each class to an HTTP status; nothing inside the
domain catches them.
"""

from __future__ import annotations

from typing import Any, Sequence


class LifecycleError(Exception):
    """Base class for every booking / maintenance failure."""


class ValidationError(LifecycleError):
    """Missing or malformed required fields."""


class NotFoundError(LifecycleError):
    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(LifecycleError):
    """Two claims on the same vehicle share a day.

    Either a rental window and a maintenance day, or two approved rentals.
    """

    def __init__(self, message: str, conflicts: Sequence[Any] = ()):
        super().__init__(message)
        self.conflicts = list(conflicts)


class IllegalTransitionError(LifecycleError):
    """Raised when a status change violates the state machine."""

    def __init__(self, current: Any, target: Any, message: str | None = None):
        super().__init__(
            message or f"Cannot transition from {_label(current)} to {_label(target)}"
        )
        self.current = current
        self.target = target


class MaintenanceOngoingError(IllegalTransitionError):
    """Cancelling maintenance that is already in progress is forbidden."""


def _label(status: Any) -> str:
    return getattr(status, "value", status)

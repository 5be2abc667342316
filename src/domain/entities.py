"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Rental``: enforces valid lifecycle transitions
  (AWAITING_APPROVAL -> PENDING -> ONGOING -> COMPLETED, or
  AWAITING_APPROVAL -> CANCELLED).
- ``MaintenanceRecord`` only moves by date derivation or manual
  cancellation; see ``src.domain.maintenance``.

The ORM models in ``src.infrastructure.models`` expose the same attribute
names, so every function in ``src.domain`` accepts either.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from .enums import RENTAL_TRANSITIONS, MaintenanceStatus, RentalStatus
from .errors import IllegalTransitionError


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Rental:
    id: Optional[int] = None
    vehicle_id: int = 0
    customer_id: int = 0
    rental_date: date = date.min
    return_date: date = date.min
    total_fee: Optional[Decimal] = None
    status: RentalStatus = RentalStatus.AWAITING_APPROVAL

    def transition_to(self, new_status: RentalStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        transition_rental(self, new_status)


@dataclass
class MaintenanceRecord:
    id: Optional[int] = None
    vehicle_id: int = 0
    maintenance_date: date = date.min
    description: str = ""
    cost: Decimal = Decimal("0")
    status: MaintenanceStatus = MaintenanceStatus.SCHEDULED


def transition_rental(rental, new_status: RentalStatus) -> None:
    """State-machine step shared by the dataclass and the ORM row."""
    current = RentalStatus(rental.status)
    if RentalStatus(new_status) not in RENTAL_TRANSITIONS.get(current, set()):
        raise IllegalTransitionError(current, new_status)
    rental.status = RentalStatus(new_status)

"""Domain enumerations and state-transition rules."""

import enum


class RentalStatus(str, enum.Enum):
    AWAITING_APPROVAL = "Awaiting Approval"
    PENDING = "Pending"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# State machine: maps current status -> set of valid next statuses
RENTAL_TRANSITIONS: dict[RentalStatus, set[RentalStatus]] = {
    RentalStatus.AWAITING_APPROVAL: {RentalStatus.PENDING, RentalStatus.CANCELLED},
    RentalStatus.PENDING: {RentalStatus.ONGOING},
    RentalStatus.ONGOING: {RentalStatus.COMPLETED},
    RentalStatus.COMPLETED: set(),
    RentalStatus.CANCELLED: set(),
}

# Statuses that no longer hold the vehicle's date range
RENTAL_INACTIVE: frozenset[RentalStatus] = frozenset(
    {RentalStatus.CANCELLED, RentalStatus.COMPLETED}
)

# Admin listing order
RENTAL_STATUS_PRIORITY: dict[RentalStatus, int] = {
    RentalStatus.AWAITING_APPROVAL: 1,
    RentalStatus.PENDING: 2,
    RentalStatus.ONGOING: 3,
    RentalStatus.COMPLETED: 4,
    RentalStatus.CANCELLED: 5,
}


class MaintenanceStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# Date-driven edges plus the manual cancel edge (never from ONGOING)
MAINTENANCE_TRANSITIONS: dict[MaintenanceStatus, set[MaintenanceStatus]] = {
    MaintenanceStatus.SCHEDULED: {
        MaintenanceStatus.ONGOING,
        MaintenanceStatus.COMPLETED,
        MaintenanceStatus.CANCELLED,
    },
    MaintenanceStatus.ONGOING: {MaintenanceStatus.COMPLETED},
    MaintenanceStatus.COMPLETED: {MaintenanceStatus.CANCELLED},
    MaintenanceStatus.CANCELLED: set(),
}


class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"


class VehicleType(str, enum.Enum):
    SEDAN = "Sedan"
    SUV = "SUV"
    HATCHBACK = "Hatchback"
    VAN = "Van"
    TRUCK = "Truck"


class Transmission(str, enum.Enum):
    AUTOMATIC = "Automatic"
    MANUAL = "Manual"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum *values* (the human-readable labels), not member names."""
    return [member.value for member in enum_cls]

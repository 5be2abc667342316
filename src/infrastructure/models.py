"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``users``               -- customers and admins
* ``vehicles``            -- the rentable fleet
* ``rentals``             -- bookings over an inclusive date window
* ``maintenance_records`` -- single-day out-of-service events
* ``payments``            -- simulated payment captures against a rental

Vehicles carry no availability column: availability is projected from
rentals and maintenance on read (``src.domain.availability``).

Indexes
-------
* **B-Tree** on ``(vehicle_id, status)`` for rentals and maintenance, the
  shape of every conflict check, plus ``status`` alone for the sweep.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)

from .database import Base
from src.domain.entities import MaintenanceRecord, Rental
from src.domain.enums import (
    MaintenanceStatus,
    PaymentStatus,
    RentalStatus,
    Transmission,
    VehicleType,
    enum_values,
)


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(30), nullable=True)
    role = Column(String(20), default="customer", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    brand = Column(String(60), nullable=False)
    model = Column(String(60), nullable=False)
    vehicle_type = Column(
        Enum(VehicleType, name="vehicletype", values_callable=enum_values),
        default=VehicleType.SEDAN,
        nullable=False,
    )
    color = Column(String(30), nullable=True)
    year = Column(Integer, nullable=True)
    transmission = Column(
        Enum(Transmission, name="transmission", values_callable=enum_values),
        default=Transmission.AUTOMATIC,
        nullable=False,
    )
    price_per_day = Column(Numeric(10, 2), nullable=False, default=0)
    vehicle_no_plate = Column(String(20), unique=True, nullable=True)
    image_path = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_vehicles_brand", "brand"),)


class RentalModel(Base):
    __tablename__ = "rentals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rental_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=False)
    total_fee = Column(Numeric(10, 2), nullable=True)
    status = Column(
        Enum(RentalStatus, name="rentalstatus", values_callable=enum_values),
        default=RentalStatus.AWAITING_APPROVAL,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("rental_date <= return_date", name="ck_rentals_window"),
        Index("idx_rentals_vehicle_status", "vehicle_id", "status"),
        Index("idx_rentals_status", "status"),
        Index("idx_rentals_customer", "customer_id"),
    )

    def to_entity(self) -> Rental:
        """Detached snapshot, safe to use after the session rolls back."""
        return Rental(
            id=self.id,
            vehicle_id=self.vehicle_id,
            customer_id=self.customer_id,
            rental_date=self.rental_date,
            return_date=self.return_date,
            total_fee=self.total_fee,
            status=RentalStatus(self.status),
        )


class MaintenanceRecordModel(Base):
    __tablename__ = "maintenance_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    maintenance_date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    cost = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(
        Enum(MaintenanceStatus, name="maintenancestatus", values_callable=enum_values),
        default=MaintenanceStatus.SCHEDULED,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_maintenance_vehicle_status", "vehicle_id", "status"),
        Index("idx_maintenance_status", "status"),
    )

    def to_entity(self) -> MaintenanceRecord:
        return MaintenanceRecord(
            id=self.id,
            vehicle_id=self.vehicle_id,
            maintenance_date=self.maintenance_date,
            description=self.description,
            cost=self.cost,
            status=MaintenanceStatus(self.status),
        )


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rental_id = Column(Integer, ForeignKey("rentals.id"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_status = Column(
        Enum(PaymentStatus, name="paymentstatus", values_callable=enum_values),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    payment_date = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_payments_rental", "rental_id"),)

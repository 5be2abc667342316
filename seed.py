"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 6 sample users (1 admin, 5 customers)
  - 8 sample vehicles
  - 6 sample rentals (one per lifecycle status, plus a conflicting request)
  - 4 sample maintenance records (past, today, future, cancelled)

Dates are relative to today so the sweep has something to do on the
first run.
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import text

from src.domain.enums import (
    MaintenanceStatus,
    RentalStatus,
    Transmission,
    VehicleType,
)
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.models import (
    MaintenanceRecordModel,
    RentalModel,
    UserModel,
    VehicleModel,
)


USERS = [
    {"name": "Fleet Admin", "email": "admin@example.com", "role": "admin"},
    {"name": "Aarav Sharma", "email": "aarav@example.com", "phone": "555-0101"},
    {"name": "Priya Patel", "email": "priya@example.com", "phone": "555-0102"},
    {"name": "Rohan Mehta", "email": "rohan@example.com", "phone": "555-0103"},
    {"name": "Sneha Gupta", "email": "sneha@example.com", "phone": "555-0104"},
    {"name": "Vikram Singh", "email": "vikram@example.com", "phone": "555-0105"},
]

VEHICLES = [
    {"brand": "Toyota", "model": "Corolla", "vehicle_type": VehicleType.SEDAN, "color": "White", "year": 2022, "transmission": Transmission.AUTOMATIC, "price_per_day": "45.00", "vehicle_no_plate": "FLT-101"},
    {"brand": "Honda", "model": "Civic", "vehicle_type": VehicleType.SEDAN, "color": "Blue", "year": 2021, "transmission": Transmission.MANUAL, "price_per_day": "42.00", "vehicle_no_plate": "FLT-102"},
    {"brand": "Ford", "model": "Explorer", "vehicle_type": VehicleType.SUV, "color": "Black", "year": 2023, "transmission": Transmission.AUTOMATIC, "price_per_day": "80.00", "vehicle_no_plate": "FLT-103"},
    {"brand": "Hyundai", "model": "Tucson", "vehicle_type": VehicleType.SUV, "color": "Grey", "year": 2022, "transmission": Transmission.AUTOMATIC, "price_per_day": "70.00", "vehicle_no_plate": "FLT-104"},
    {"brand": "Volkswagen", "model": "Golf", "vehicle_type": VehicleType.HATCHBACK, "color": "Red", "year": 2020, "transmission": Transmission.MANUAL, "price_per_day": "38.00", "vehicle_no_plate": "FLT-105"},
    {"brand": "Mercedes", "model": "Sprinter", "vehicle_type": VehicleType.VAN, "color": "White", "year": 2021, "transmission": Transmission.AUTOMATIC, "price_per_day": "120.00", "vehicle_no_plate": "FLT-106"},
    {"brand": "Ford", "model": "F-150", "vehicle_type": VehicleType.TRUCK, "color": "Silver", "year": 2023, "transmission": Transmission.AUTOMATIC, "price_per_day": "95.00", "vehicle_no_plate": "FLT-107"},
    {"brand": "Kia", "model": "Rio", "vehicle_type": VehicleType.HATCHBACK, "color": "Yellow", "year": 2019, "transmission": Transmission.MANUAL, "price_per_day": "30.00", "vehicle_no_plate": "FLT-108"},
]


async def seed():
    today = date.today()
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        users = [UserModel(**u) for u in USERS]
        session.add_all(users)
        await session.flush()
        customers = users[1:]
        print(f"  Created {len(users)} users")

        # ── Vehicles ──────────────────────────────────────────────────
        vehicles = [
            VehicleModel(**{**v, "price_per_day": Decimal(v["price_per_day"])})
            for v in VEHICLES
        ]
        session.add_all(vehicles)
        await session.flush()
        print(f"  Created {len(vehicles)} vehicles")

        # ── Maintenance ───────────────────────────────────────────────
        maintenance_data = [
            (vehicles[0], today - timedelta(days=10), "Oil change", "60.00", MaintenanceStatus.SCHEDULED),
            (vehicles[2], today, "Brake inspection", "150.00", MaintenanceStatus.SCHEDULED),
            (vehicles[3], today + timedelta(days=7), "Tyre rotation", "80.00", MaintenanceStatus.SCHEDULED),
            (vehicles[4], today + timedelta(days=3), "Battery check", "40.00", MaintenanceStatus.CANCELLED),
        ]
        for vehicle, day, description, cost, status in maintenance_data:
            session.add(
                MaintenanceRecordModel(
                    vehicle_id=vehicle.id,
                    maintenance_date=day,
                    description=description,
                    cost=Decimal(cost),
                    status=status,
                )
            )
        await session.flush()
        print(f"  Created {len(maintenance_data)} maintenance records")

        # ── Rentals ───────────────────────────────────────────────────
        rentals_data = [
            # Waiting for an admin
            (customers[0], vehicles[1], 2, 5, RentalStatus.AWAITING_APPROVAL),
            # Requested over vehicle 4's tyre rotation: approval will be refused
            (customers[1], vehicles[3], 5, 9, RentalStatus.AWAITING_APPROVAL),
            # Approved, awaiting payment
            (customers[2], vehicles[5], 1, 4, RentalStatus.PENDING),
            # Paid and running; due back yesterday, so the sweep completes it
            (customers[3], vehicles[6], -5, -1, RentalStatus.ONGOING),
            # Finished
            (customers[4], vehicles[7], -20, -15, RentalStatus.COMPLETED),
            # Rejected
            (customers[0], vehicles[0], 10, 12, RentalStatus.CANCELLED),
        ]
        for customer, vehicle, start, end, status in rentals_data:
            days = end - start + 1
            session.add(
                RentalModel(
                    customer_id=customer.id,
                    vehicle_id=vehicle.id,
                    rental_date=today + timedelta(days=start),
                    return_date=today + timedelta(days=end),
                    total_fee=vehicle.price_per_day * days,
                    status=status,
                )
            )
        await session.flush()
        print(f"  Created {len(rentals_data)} rentals")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())

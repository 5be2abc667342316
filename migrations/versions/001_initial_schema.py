"""Initial schema: users, vehicles, rentals, maintenance records, payments.

Revision ID: 001
Create Date: 2026-04-20
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

RENTAL_STATUSES = ("Awaiting Approval", "Pending", "Ongoing", "Completed", "Cancelled")
MAINTENANCE_STATUSES = ("Scheduled", "Ongoing", "Completed", "Cancelled")
PAYMENT_STATUSES = ("Pending", "Completed", "Failed")


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="customer"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("brand", sa.String(60), nullable=False),
        sa.Column("model", sa.String(60), nullable=False),
        sa.Column(
            "vehicle_type",
            sa.Enum("Sedan", "SUV", "Hatchback", "Van", "Truck", name="vehicletype"),
            nullable=False,
            server_default="Sedan",
        ),
        sa.Column("color", sa.String(30), nullable=True),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column(
            "transmission",
            sa.Enum("Automatic", "Manual", name="transmission"),
            nullable=False,
            server_default="Automatic",
        ),
        sa.Column("price_per_day", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("vehicle_no_plate", sa.String(20), unique=True, nullable=True),
        sa.Column("image_path", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_vehicles_brand", "vehicles", ["brand"])

    # ── rentals ───────────────────────────────────────────────────────
    op.create_table(
        "rentals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "vehicle_id", sa.Integer, sa.ForeignKey("vehicles.id"), nullable=False
        ),
        sa.Column(
            "customer_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("rental_date", sa.Date, nullable=False),
        sa.Column("return_date", sa.Date, nullable=False),
        sa.Column("total_fee", sa.Numeric(10, 2), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*RENTAL_STATUSES, name="rentalstatus"),
            nullable=False,
            server_default="Awaiting Approval",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("rental_date <= return_date", name="ck_rentals_window"),
    )
    op.create_index(
        "idx_rentals_vehicle_status", "rentals", ["vehicle_id", "status"]
    )
    op.create_index("idx_rentals_status", "rentals", ["status"])
    op.create_index("idx_rentals_customer", "rentals", ["customer_id"])

    # ── maintenance_records ───────────────────────────────────────────
    op.create_table(
        "maintenance_records",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "vehicle_id", sa.Integer, sa.ForeignKey("vehicles.id"), nullable=False
        ),
        sa.Column("maintenance_date", sa.Date, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("cost", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column(
            "status",
            sa.Enum(*MAINTENANCE_STATUSES, name="maintenancestatus"),
            nullable=False,
            server_default="Scheduled",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_maintenance_vehicle_status",
        "maintenance_records",
        ["vehicle_id", "status"],
    )
    op.create_index("idx_maintenance_status", "maintenance_records", ["status"])

    # ── payments ──────────────────────────────────────────────────────
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "rental_id", sa.Integer, sa.ForeignKey("rentals.id"), nullable=False
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "payment_status",
            sa.Enum(*PAYMENT_STATUSES, name="paymentstatus"),
            nullable=False,
            server_default="Pending",
        ),
        sa.Column(
            "payment_date",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_payments_rental", "payments", ["rental_id"])


def downgrade() -> None:
    op.drop_table("payments")
    op.drop_table("maintenance_records")
    op.drop_table("rentals")
    op.drop_table("vehicles")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS paymentstatus")
    op.execute("DROP TYPE IF EXISTS maintenancestatus")
    op.execute("DROP TYPE IF EXISTS rentalstatus")
    op.execute("DROP TYPE IF EXISTS transmission")
    op.execute("DROP TYPE IF EXISTS vehicletype")

"""Create locations, equipment stock and movement ledger tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy import func, text

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


MOVEMENT_DIRECTION_ENUM = sa.Enum(
    "in",
    "out",
    name="movement_direction",
    native_enum=False,
)


def upgrade() -> None:
    """Create stock tables, indexes and integrity constraints."""
    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=func.now()),
        sa.UniqueConstraint("code", name="uq_locations_code"),
    )

    op.create_table(
        "equipment_stock",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("equipment_key", sa.String(length=100), nullable=False),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("equipment_type", sa.String(length=100), nullable=False),
        sa.Column("supplier", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("unit_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("min_threshold", sa.Integer(), nullable=True),
        sa.Column("max_threshold", sa.Integer(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=text("0")),
        sa.Column("version", sa.BigInteger(), nullable=False, server_default=text("1")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=func.now()),
        sa.UniqueConstraint(
            "equipment_key",
            "location_id",
            name="uq_equipment_stock_key_location",
        ),
        sa.CheckConstraint("quantity >= 0", name="ck_equipment_stock_quantity_non_negative"),
        sa.CheckConstraint(
            "unit_cost IS NULL OR unit_cost >= 0",
            name="ck_equipment_stock_unit_cost_non_negative",
        ),
        sa.CheckConstraint(
            "min_threshold IS NULL OR min_threshold >= 0",
            name="ck_equipment_stock_min_threshold_non_negative",
        ),
        sa.CheckConstraint(
            "max_threshold IS NULL OR max_threshold >= 0",
            name="ck_equipment_stock_max_threshold_non_negative",
        ),
    )
    op.create_index(
        "ix_equipment_stock_location_id",
        "equipment_stock",
        ["location_id"],
    )

    op.create_table(
        "movement_ledger",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("stock_id", sa.Integer(), sa.ForeignKey("equipment_stock.id"), nullable=False),
        sa.Column("equipment_key", sa.String(length=100), nullable=False),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("direction", MOVEMENT_DIRECTION_ENUM, nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=100), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "counterparty_location_id",
            sa.Integer(),
            sa.ForeignKey("locations.id"),
            nullable=True,
        ),
        sa.Column("previous_quantity", sa.Integer(), nullable=False),
        sa.Column("new_quantity", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=func.now()),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("stock_version", sa.BigInteger(), nullable=False),
        sa.Column("transfer_group_id", sa.String(length=64), nullable=True),
        sa.CheckConstraint("quantity > 0", name="ck_movement_ledger_quantity_positive"),
        sa.CheckConstraint(
            "new_quantity >= 0 AND previous_quantity >= 0",
            name="ck_movement_ledger_quantities_non_negative",
        ),
        sa.CheckConstraint(
            "(direction = 'in' AND new_quantity - previous_quantity = quantity) OR "
            "(direction = 'out' AND previous_quantity - new_quantity = quantity)",
            name="ck_movement_ledger_signed_delta",
        ),
        sa.UniqueConstraint(
            "transfer_group_id",
            "direction",
            name="uq_movement_ledger_group_direction",
        ),
    )
    op.create_index(
        "ix_movement_ledger_key_location_timestamp",
        "movement_ledger",
        ["equipment_key", "location_id", "timestamp"],
    )
    op.create_index(
        "ix_movement_ledger_transfer_group_id",
        "movement_ledger",
        ["transfer_group_id"],
    )


def downgrade() -> None:
    """Drop stock tables."""
    op.drop_index("ix_movement_ledger_transfer_group_id", table_name="movement_ledger")
    op.drop_index("ix_movement_ledger_key_location_timestamp", table_name="movement_ledger")
    op.drop_table("movement_ledger")
    op.drop_index("ix_equipment_stock_location_id", table_name="equipment_stock")
    op.drop_table("equipment_stock")
    op.drop_table("locations")

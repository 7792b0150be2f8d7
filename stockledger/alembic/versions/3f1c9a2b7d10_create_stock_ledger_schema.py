"""create stock ledger schema

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer, "sqlite")
MOVEMENT_TYPE = sa.Enum("IN", "OUT", name="movement_type")


def upgrade() -> None:
    op.create_table(
        "warehouses",
        sa.Column("id", ID_TYPE, primary_key=True),
        sa.Column("location", sa.String(200), nullable=False, unique=True),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="0"),
        sa.CheckConstraint("capacity >= 0", name="ck_warehouse_capacity_nonneg"),
    )
    op.create_table(
        "suppliers",
        sa.Column("id", ID_TYPE, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("contact_no", sa.String(32)),
        sa.Column("email", sa.String(255)),
        sa.Column("address", sa.String(255)),
    )
    op.create_table(
        "customers",
        sa.Column("id", ID_TYPE, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("contact_no", sa.String(32)),
        sa.Column("address", sa.String(255)),
    )
    op.create_table(
        "employees",
        sa.Column("id", ID_TYPE, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(64), nullable=False, server_default="Staff"),
        sa.Column("warehouse_id", sa.Integer, sa.ForeignKey("warehouses.id", ondelete="SET NULL")),
    )
    op.create_table(
        "items",
        sa.Column("id", ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_key", sa.String(255), nullable=False, unique=True),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_items_category", "items", ["category"])

    op.create_table(
        "stock_rows",
        sa.Column("item_id", sa.Integer, sa.ForeignKey("items.id", ondelete="RESTRICT"), primary_key=True),
        sa.Column("warehouse_id", sa.Integer, sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), primary_key=True),
        sa.Column("supplier_id", sa.Integer, sa.ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("stock_quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("opening_quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("stock_quantity >= 0", name="ck_stock_row_qty_nonneg"),
        sa.CheckConstraint("opening_quantity >= 0", name="ck_stock_row_opening_nonneg"),
        sa.CheckConstraint("price >= 0", name="ck_stock_row_price_nonneg"),
    )
    op.create_index("ix_stock_rows_warehouse", "stock_rows", ["warehouse_id"])

    op.create_table(
        "ledger_entries",
        sa.Column("id", ID_TYPE, primary_key=True),
        sa.Column("movement_type", MOVEMENT_TYPE, nullable=False),
        sa.Column("item_id", sa.Integer, nullable=False),
        sa.Column("warehouse_id", sa.Integer, nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("employee_id", sa.Integer, sa.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id", ondelete="RESTRICT")),
        sa.Column("supplier_id", sa.Integer, sa.ForeignKey("suppliers.id", ondelete="RESTRICT")),
        sa.Column("transfer_id", sa.String(36)),
        sa.Column("happened_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["item_id", "warehouse_id"],
            ["stock_rows.item_id", "stock_rows.warehouse_id"],
            ondelete="RESTRICT",
            name="fk_ledger_stock_row",
        ),
        sa.CheckConstraint("quantity > 0", name="ck_ledger_qty_pos"),
        sa.CheckConstraint(
            "(movement_type = 'IN' AND supplier_id IS NOT NULL AND customer_id IS NULL)"
            " OR (movement_type = 'OUT' AND supplier_id IS NULL"
            " AND (customer_id IS NOT NULL OR transfer_id IS NOT NULL))",
            name="ck_ledger_counterparty",
        ),
    )
    op.create_index("ix_ledger_entries_transfer_id", "ledger_entries", ["transfer_id"])
    op.create_index(
        "ix_ledger_stock_row_time",
        "ledger_entries",
        ["item_id", "warehouse_id", "happened_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_ledger_stock_row_time", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_transfer_id", table_name="ledger_entries")
    op.drop_table("ledger_entries")
    op.drop_index("ix_stock_rows_warehouse", table_name="stock_rows")
    op.drop_table("stock_rows")
    op.drop_index("ix_items_category", table_name="items")
    op.drop_table("items")
    op.drop_table("employees")
    op.drop_table("customers")
    op.drop_table("suppliers")
    op.drop_table("warehouses")
    MOVEMENT_TYPE.drop(op.get_bind(), checkfirst=True)

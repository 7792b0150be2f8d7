from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Numeric,
    Enum,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockledger.app.db.base import Base
from stockledger.app.db.models.core_types import MovementType

# SQLite only honours BIGINT autoincrement through its INTEGER affinity
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_name(name: str) -> str:
    """Identity key of an item name: trimmed and case-folded."""
    return name.strip().casefold()


# ---------- MASTER DATA ----------
class Warehouse(Base):
    __tablename__ = "warehouses"
    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True)
    location: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # advisory

    __table_args__ = (CheckConstraint("capacity >= 0", name="ck_warehouse_capacity_nonneg"),)


class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    contact_no: Mapped[str | None] = mapped_column(String(32))
    email: Mapped[str | None] = mapped_column(String(255))
    address: Mapped[str | None] = mapped_column(String(255))


class Customer(Base):
    __tablename__ = "customers"
    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    contact_no: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str | None] = mapped_column(String(255))


class Employee(Base):
    __tablename__ = "employees"
    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(64), default="Staff", nullable=False)
    warehouse_id: Mapped[int | None] = mapped_column(ForeignKey("warehouses.id", ondelete="SET NULL"))

    warehouse: Mapped[Warehouse | None] = relationship()


# ---------- INVENTORY ----------
class Item(Base):
    __tablename__ = "items"
    # ids keep growing after deletions, never reused
    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    stock_rows: Mapped[list["StockRow"]] = relationship(back_populates="item")

    __table_args__ = {"sqlite_autoincrement": True}


class StockRow(Base):
    __tablename__ = "stock_rows"
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id", ondelete="RESTRICT"), primary_key=True)
    warehouse_id: Mapped[int] = mapped_column(ForeignKey("warehouses.id", ondelete="RESTRICT"), primary_key=True)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False)

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # quantity the row was created with; ledger replay starts here
    opening_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    item: Mapped[Item] = relationship(back_populates="stock_rows")
    warehouse: Mapped[Warehouse] = relationship()
    supplier: Mapped[Supplier] = relationship()

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_stock_row_qty_nonneg"),
        CheckConstraint("opening_quantity >= 0", name="ck_stock_row_opening_nonneg"),
        CheckConstraint("price >= 0", name="ck_stock_row_price_nonneg"),
        Index("ix_stock_rows_warehouse", "warehouse_id"),
    )


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"
    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True)

    movement_type: Mapped[MovementType] = mapped_column(
        Enum(
            MovementType,
            name="movement_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    warehouse_id: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False)
    customer_id: Mapped[int | None] = mapped_column(ForeignKey("customers.id", ondelete="RESTRICT"))
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"))

    # shared by both legs of a transfer
    transfer_id: Mapped[str | None] = mapped_column(String(36), index=True)

    happened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    stock_row: Mapped[StockRow] = relationship()

    __table_args__ = (
        ForeignKeyConstraint(
            ["item_id", "warehouse_id"],
            ["stock_rows.item_id", "stock_rows.warehouse_id"],
            ondelete="RESTRICT",
            name="fk_ledger_stock_row",
        ),
        CheckConstraint("quantity > 0", name="ck_ledger_qty_pos"),
        CheckConstraint(
            "(movement_type = 'IN' AND supplier_id IS NOT NULL AND customer_id IS NULL)"
            " OR (movement_type = 'OUT' AND supplier_id IS NULL"
            " AND (customer_id IS NOT NULL OR transfer_id IS NOT NULL))",
            name="ck_ledger_counterparty",
        ),
        Index("ix_ledger_stock_row_time", "item_id", "warehouse_id", "happened_at"),
    )

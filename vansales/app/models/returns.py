from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vansales.app.core.database import Base, value_enum


# ─── Enums ────────────────────────────────────────────────────────────────────


class ReturnType(str, enum.Enum):
    GOOD = "good"
    DAMAGE = "damage"


# ─── Sales Return (Header) ───────────────────────────────────────────────────


class SalesReturn(Base):
    """Goods taken back from a customer, optionally against an earlier invoice.

    ``invoice_id`` is informational only; the referenced invoice may have
    been removed or may live on another device.
    """

    __tablename__ = "sales_returns"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    return_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    van_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("vans.id"), nullable=False)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customers.id"), nullable=False
    )
    invoice_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    return_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_type: Mapped[ReturnType] = mapped_column(
        value_enum(ReturnType), nullable=False, default=ReturnType.GOOD
    )
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False, default=Decimal("0")
    )
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False, default=Decimal("0")
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False, default=Decimal("0")
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    items: Mapped[list[SalesReturnItem]] = relationship(
        back_populates="sales_return",
        cascade="all, delete-orphan",
        order_by="SalesReturnItem.line_no",
    )

    __table_args__ = (
        Index("ix_sales_returns_van", "van_id"),
        Index("ix_sales_returns_customer", "customer_id"),
        Index("ix_sales_returns_date", "return_date"),
    )


# ─── Sales Return Item (Line Item) ───────────────────────────────────────────


class SalesReturnItem(Base):
    __tablename__ = "sales_return_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sales_return_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sales_returns.id", ondelete="CASCADE"), nullable=False
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("items.id"), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False
    )
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False
    )
    discount_percent: Mapped[Decimal] = mapped_column(
        Numeric(precision=7, scale=3), nullable=False, default=Decimal("0")
    )
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False, default=Decimal("0")
    )
    tax_percent: Mapped[Decimal] = mapped_column(
        Numeric(precision=7, scale=3), nullable=False, default=Decimal("0")
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False, default=Decimal("0")
    )
    line_total: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False
    )
    batch_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    sales_return: Mapped[SalesReturn] = relationship(back_populates="items")

    __table_args__ = (
        UniqueConstraint("sales_return_id", "item_id", name="uq_sales_return_items_item"),
        Index("ix_sales_return_items_return", "sales_return_id"),
    )

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


class PaymentMode(str, enum.Enum):
    CASH = "cash"
    CREDIT = "credit"
    CARD = "card"


class PaymentStatus(str, enum.Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


# ─── Sales Invoice (Header) ──────────────────────────────────────────────────


class SalesInvoice(Base):
    """A van sale to a registered customer or a walk-in party.

    All money columns are derived from the line items by the invoice
    repository; ``payment_status`` is derived from the balance.
    """

    __tablename__ = "sales_invoices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    van_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("vans.id"), nullable=False)
    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("customers.id"), nullable=True
    )
    walk_in_customer_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
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
    payment_mode: Mapped[PaymentMode] = mapped_column(
        value_enum(PaymentMode), nullable=False, default=PaymentMode.CASH
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        value_enum(PaymentStatus), nullable=False, default=PaymentStatus.UNPAID
    )
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False, default=Decimal("0")
    )
    # Unclamped: negative means the customer overpaid
    balance_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    items: Mapped[list[SalesInvoiceItem]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="SalesInvoiceItem.line_no",
    )

    __table_args__ = (
        Index("ix_sales_invoices_van", "van_id"),
        Index("ix_sales_invoices_customer", "customer_id"),
        Index("ix_sales_invoices_date", "invoice_date"),
        Index("ix_sales_invoices_status", "payment_status"),
    )


# ─── Sales Invoice Item (Line Item) ──────────────────────────────────────────


class SalesInvoiceItem(Base):
    __tablename__ = "sales_invoice_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sales_invoice_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sales_invoices.id", ondelete="CASCADE"), nullable=False
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

    invoice: Mapped[SalesInvoice] = relationship(back_populates="items")

    __table_args__ = (
        UniqueConstraint("sales_invoice_id", "item_id", name="uq_sales_invoice_items_item"),
        Index("ix_sales_invoice_items_invoice", "sales_invoice_id"),
        Index("ix_sales_invoice_items_item", "item_id"),
    )

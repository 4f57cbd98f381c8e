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
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from vansales.app.core.database import Base, value_enum


class ReceiptPaymentMode(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"


class Receipt(Base):
    """Money collected from a customer, optionally against one invoice.

    Receipts are reconciled on their own; recording one does not change the
    invoice's ``paid_amount``.
    """

    __tablename__ = "receipts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    receipt_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    van_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("vans.id"), nullable=False)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customers.id"), nullable=False
    )
    invoice_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("sales_invoices.id"), nullable=True
    )
    receipt_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=3), nullable=False
    )
    payment_mode: Mapped[ReceiptPaymentMode] = mapped_column(
        value_enum(ReceiptPaymentMode), nullable=False, default=ReceiptPaymentMode.CASH
    )
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_receipts_van", "van_id"),
        Index("ix_receipts_customer", "customer_id"),
        Index("ix_receipts_invoice", "invoice_id"),
        Index("ix_receipts_date", "receipt_date"),
    )

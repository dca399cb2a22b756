"""Read-side ORM mappings for the invoicing store.

Rows are owned by the invoicing application; this package only reads them to
build an analytics snapshot.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from invoice_insights.db.base_class import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# Invoices reference items directly; no per-line quantity is stored.
invoice_item = Table(
    "invoice_item",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("invoice_id", ForeignKey("invoice.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("item_id", ForeignKey("item.id", ondelete="SET NULL"), nullable=True, index=True),
)


class Client(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    billing_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    invoices: Mapped[list[Invoice]] = relationship("Invoice", back_populates="client")  # type: ignore


class Item(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(scale=2))
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)


class Invoice(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    invoice_number: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("client.id"), nullable=True, index=True)
    total: Mapped[Decimal] = mapped_column(Numeric(scale=2))
    status: Mapped[str] = mapped_column(String(20), default="unpaid")
    issue_date: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True))
    due_date: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    client: Mapped[Client | None] = relationship("Client", back_populates="invoices")  # type: ignore
    items: Mapped[list[Item]] = relationship(
        "Item",
        secondary=invoice_item,
        order_by=invoice_item.c.id,
    )  # type: ignore

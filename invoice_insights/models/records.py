"""In-memory snapshot records consumed by the analytics engine.

Records are immutable views of the store, with client and line items already
resolved, so every analytics function can work without touching the database.
"""
from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field
from decimal import Decimal


class InvoiceStatus(str, enum.Enum):
    PAID = "paid"
    UNPAID = "unpaid"


class ClientStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ItemStatus(str, enum.Enum):
    IN_STOCK = "in-stock"
    OUT_OF_STOCK = "out-of-stock"


@dataclass(frozen=True)
class ClientRecord:
    id: str
    name: str
    status: ClientStatus = ClientStatus.ACTIVE
    email: str | None = None
    phone_number: str | None = None
    address: str | None = None
    billing_address: str | None = None
    created_at: dt.datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == ClientStatus.ACTIVE


@dataclass(frozen=True)
class ItemRecord:
    id: str
    name: str
    unit_price: Decimal
    quantity: int = 0
    status: ItemStatus | None = None


@dataclass(frozen=True)
class InvoiceRecord:
    id: str
    invoice_number: str
    client: ClientRecord | None
    items: tuple[ItemRecord, ...]
    total: Decimal
    status: InvoiceStatus
    issue_date: dt.datetime
    due_date: dt.datetime

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    def is_overdue(self, now: dt.datetime) -> bool:
        """Past its due date and not yet paid."""
        return self.due_date < now and not self.is_paid

    def days_overdue(self, now: dt.datetime) -> int:
        """Whole days past the due date (0 when not overdue)."""
        if not self.is_overdue(now):
            return 0
        return (now - self.due_date) // dt.timedelta(days=1)


@dataclass(frozen=True)
class Snapshot:
    """Everything one analytics request needs, fetched once."""

    invoices: tuple[InvoiceRecord, ...] = field(default_factory=tuple)
    clients: tuple[ClientRecord, ...] = field(default_factory=tuple)
    items: tuple[ItemRecord, ...] = field(default_factory=tuple)

    @property
    def data_points(self) -> int:
        return len(self.invoices) + len(self.clients) + len(self.items)

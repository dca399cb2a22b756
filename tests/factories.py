"""Record builders shared by the analytics tests."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from invoice_insights.models.records import (
    ClientRecord,
    ClientStatus,
    InvoiceRecord,
    InvoiceStatus,
    ItemRecord,
    ItemStatus,
    Snapshot,
)

NOW = dt.datetime(2025, 6, 30, 12, 0, tzinfo=dt.timezone.utc)


def days_ago(days: float) -> dt.datetime:
    return NOW - dt.timedelta(days=days)


def make_client(
    client_id: str,
    name: str | None = None,
    status: ClientStatus = ClientStatus.ACTIVE,
    created_at: dt.datetime | None = None,
) -> ClientRecord:
    return ClientRecord(id=client_id, name=name or f"Client {client_id}", status=status, created_at=created_at)


def make_item(
    item_id: str,
    name: str | None = None,
    unit_price: str | int = "10",
    quantity: int = 10,
    status: ItemStatus | None = ItemStatus.IN_STOCK,
) -> ItemRecord:
    return ItemRecord(
        id=item_id,
        name=name or f"Item {item_id}",
        unit_price=Decimal(str(unit_price)),
        quantity=quantity,
        status=status,
    )


_counter = 0


def make_invoice(
    client: ClientRecord | None,
    issued_days_ago: float,
    total: str | int = "100",
    status: InvoiceStatus = InvoiceStatus.PAID,
    items: tuple[ItemRecord, ...] = (),
    due_days_after_issue: float = 30,
    invoice_id: str | None = None,
) -> InvoiceRecord:
    global _counter
    _counter += 1
    issue_date = days_ago(issued_days_ago)
    return InvoiceRecord(
        id=invoice_id or str(_counter),
        invoice_number=f"INV-{_counter:05d}",
        client=client,
        items=tuple(items),
        total=Decimal(str(total)),
        status=status,
        issue_date=issue_date,
        due_date=issue_date + dt.timedelta(days=due_days_after_issue),
    )


def make_snapshot(invoices=(), clients=(), items=()) -> Snapshot:
    return Snapshot(invoices=tuple(invoices), clients=tuple(clients), items=tuple(items))


class FakeSummarizer:
    """Records prompts and returns a canned response without network access."""

    model = "fake-model"

    def __init__(self, response: str = ""):
        self.response = response
        self.prompts: list[str] = []

    async def summarize(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response

"""Per-item sales rollups."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from invoice_insights.models.records import InvoiceRecord, ItemRecord
from invoice_insights.models.schemas import ItemAggregate


@dataclass
class _ItemTally:
    item: ItemRecord
    units_sold: int = 0
    revenue: Decimal = Decimal("0")
    invoice_count: int = 0
    last_sold_date: dt.datetime | None = None

    def to_aggregate(self) -> ItemAggregate:
        status = self.item.status.value if self.item.status is not None else None
        return ItemAggregate(
            item_id=self.item.id,
            name=self.item.name,
            unit_price=float(self.item.unit_price),
            current_stock=self.item.quantity,
            status=status,
            total_units_sold=self.units_sold,
            total_revenue=float(self.revenue),
            invoice_count=self.invoice_count,
            average_quantity=self.units_sold / self.invoice_count if self.invoice_count else 0.0,
            last_sold_date=self.last_sold_date,
        )


def aggregate_item_performance(
    invoices: Iterable[InvoiceRecord],
    items: Iterable[ItemRecord],
) -> dict[str, ItemAggregate]:
    """Roll invoice lines up per catalogue item.

    Every catalogue item gets an entry, sold or not. Each line counts as one
    unit and is priced at the item's current catalogue price, so revenue
    drifts if prices change after the sale. Lines for items that are no longer
    in the catalogue are ignored.
    """
    tallies: dict[str, _ItemTally] = {item.id: _ItemTally(item) for item in items}

    for invoice in invoices:
        for line in invoice.items:
            tally = tallies.get(line.id)
            if tally is None:
                continue
            tally.units_sold += 1
            tally.revenue += tally.item.unit_price
            tally.invoice_count += 1
            if tally.last_sold_date is None or invoice.issue_date > tally.last_sold_date:
                tally.last_sold_date = invoice.issue_date

    return {item_id: tally.to_aggregate() for item_id, tally in tallies.items()}

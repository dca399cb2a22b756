"""Per-client purchase rollups."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from invoice_insights.models.records import InvoiceRecord
from invoice_insights.models.schemas import ClientAggregate
from .windows import RECENT_WINDOW_DAYS, window_start

logger = logging.getLogger(__name__)


@dataclass
class _ClientTally:
    client_id: str
    name: str
    total_invoices: int = 0
    total_spent: Decimal = Decimal("0")
    paid_invoices: int = 0
    unpaid_invoices: int = 0
    overdue_invoices: int = 0
    recent_invoices: int = 0
    recent_spent: Decimal = Decimal("0")
    items: set[str] = field(default_factory=set)
    last_purchase_date: dt.datetime | None = None
    max_payment_delay_days: int = 0

    def to_aggregate(self) -> ClientAggregate:
        average = self.total_spent / self.total_invoices if self.total_invoices else Decimal("0")
        return ClientAggregate(
            client_id=self.client_id,
            name=self.name,
            total_invoices=self.total_invoices,
            total_spent=float(self.total_spent),
            paid_invoices=self.paid_invoices,
            unpaid_invoices=self.unpaid_invoices,
            overdue_invoices=self.overdue_invoices,
            recent_invoices=self.recent_invoices,
            recent_spent=float(self.recent_spent),
            items=sorted(self.items),
            last_purchase_date=self.last_purchase_date,
            max_payment_delay_days=self.max_payment_delay_days,
            average_invoice_value=float(average),
        )


def aggregate_client_purchases(
    invoices: Iterable[InvoiceRecord],
    now: dt.datetime,
    recent_window_days: int = RECENT_WINDOW_DAYS,
) -> dict[str, ClientAggregate]:
    """Roll invoices up per client in a single pass.

    Invoices without a resolvable client are skipped and logged; they never
    abort the aggregation.
    """
    recent_start = window_start(now, recent_window_days)
    tallies: dict[str, _ClientTally] = {}
    skipped = 0

    for invoice in invoices:
        if invoice.client is None:
            skipped += 1
            continue

        tally = tallies.get(invoice.client.id)
        if tally is None:
            tally = tallies[invoice.client.id] = _ClientTally(invoice.client.id, invoice.client.name)

        tally.total_invoices += 1
        tally.total_spent += invoice.total

        overdue = invoice.is_overdue(now)
        if invoice.is_paid:
            tally.paid_invoices += 1
        else:
            tally.unpaid_invoices += 1
            if overdue:
                tally.overdue_invoices += 1
                tally.max_payment_delay_days = max(
                    tally.max_payment_delay_days, invoice.days_overdue(now)
                )

        if invoice.issue_date >= recent_start:
            tally.recent_invoices += 1
            tally.recent_spent += invoice.total

        tally.items.update(item.name for item in invoice.items)

        if tally.last_purchase_date is None or invoice.issue_date > tally.last_purchase_date:
            tally.last_purchase_date = invoice.issue_date

    if skipped:
        logger.warning("Skipped %d invoice(s) with unresolved client during client aggregation", skipped)

    return {client_id: tally.to_aggregate() for client_id, tally in tallies.items()}

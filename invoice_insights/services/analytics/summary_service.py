"""Snapshot-wide totals."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from invoice_insights.models.records import InvoiceRecord, Snapshot
from invoice_insights.models.schemas import DataSummary
from .windows import RECENT_WINDOW_DAYS, window_start


def summarize_snapshot(snapshot: Snapshot) -> DataSummary:
    """Calculate invoice, client and item counts plus paid and unpaid totals."""
    total_revenue = sum((inv.total for inv in snapshot.invoices if inv.is_paid), Decimal("0"))
    unpaid_amount = sum((inv.total for inv in snapshot.invoices if not inv.is_paid), Decimal("0"))
    total_invoices = len(snapshot.invoices)

    return DataSummary(
        total_invoices=total_invoices,
        total_clients=sum(1 for client in snapshot.clients if client.is_active),
        total_items=len(snapshot.items),
        total_revenue=float(total_revenue),
        unpaid_amount=float(unpaid_amount),
        # Paid revenue spread across every invoice, paid or not
        average_invoice_value=float(total_revenue / total_invoices) if total_invoices else 0.0,
    )


def count_recent_invoices(
    invoices: tuple[InvoiceRecord, ...],
    now: dt.datetime,
    days: int = RECENT_WINDOW_DAYS,
) -> int:
    start = window_start(now, days)
    return sum(1 for inv in invoices if inv.issue_date >= start)


def overdue_invoices(invoices: tuple[InvoiceRecord, ...], now: dt.datetime) -> list[InvoiceRecord]:
    return [inv for inv in invoices if inv.is_overdue(now)]

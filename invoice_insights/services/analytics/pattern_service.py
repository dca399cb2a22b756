"""Detect significant swings in a client's buying pattern between two adjacent windows."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from invoice_insights.models.records import InvoiceRecord
from invoice_insights.models.schemas import PatternChange, PatternMetrics
from .windows import percentage_change, resolve_timeframe, window_start

SIGNIFICANCE_THRESHOLD = 20.0


@dataclass
class _WindowTally:
    count: int = 0
    total: Decimal = Decimal("0")
    items: set[str] = field(default_factory=set)

    def add(self, invoice: InvoiceRecord) -> None:
        self.count += 1
        self.total += invoice.total
        self.items.update(item.name for item in invoice.items)


@dataclass
class _ClientWindows:
    client_name: str
    recent: _WindowTally = field(default_factory=_WindowTally)
    older: _WindowTally = field(default_factory=_WindowTally)


def describe_change(metric: str, change: float) -> str:
    direction = "increased" if change > 0 else "decreased"
    return f"Purchase {metric} {direction} by {abs(change):.1f}%"


def detect_pattern_changes(
    invoices: Iterable[InvoiceRecord],
    timeframe: str,
    now: dt.datetime,
) -> dict[str, PatternChange]:
    """Compare the trailing window with the equal-length window before it.

    Only clients whose spend or invoice count moved by more than 20% are
    returned.
    """
    days = resolve_timeframe(timeframe)
    recent_start = window_start(now, days)
    older_start = window_start(now, days * 2)

    groups: dict[str, _ClientWindows] = {}
    for invoice in invoices:
        if invoice.client is None or invoice.issue_date < older_start:
            continue
        group = groups.setdefault(invoice.client.id, _ClientWindows(invoice.client.name))
        if invoice.issue_date >= recent_start:
            group.recent.add(invoice)
        else:
            group.older.add(invoice)

    changes: dict[str, PatternChange] = {}
    for client_id, group in groups.items():
        volume_change = percentage_change(group.recent.total, group.older.total)
        frequency_change = percentage_change(group.recent.count, group.older.count)

        significant: list[str] = []
        if abs(volume_change) > SIGNIFICANCE_THRESHOLD:
            significant.append(describe_change("volume", volume_change))
        if abs(frequency_change) > SIGNIFICANCE_THRESHOLD:
            significant.append(describe_change("frequency", frequency_change))
        if not significant:
            continue

        changes[client_id] = PatternChange(
            client_id=client_id,
            client_name=group.client_name,
            changes=significant,
            metrics=PatternMetrics(
                volume_change=volume_change,
                frequency_change=frequency_change,
                recent_total=float(group.recent.total),
                older_total=float(group.older.total),
                recent_count=group.recent.count,
                older_count=group.older.count,
                recent_items=sorted(group.recent.items),
                older_items=sorted(group.older.items),
            ),
        )
    return changes

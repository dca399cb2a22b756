"""Heuristic churn-risk scoring.

Compares each active client's last 90 days with the 90 days before that and
adds fixed weights for every risk signal that fires. The score is capped at
100. A client with no invoices in either window carries no risk.
"""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal

from invoice_insights.models.records import ClientRecord, InvoiceRecord
from invoice_insights.models.schemas import ChurnMetrics, ChurnRiskResult
from .windows import RECENT_WINDOW_DAYS, percentage_change, window_start

MAX_RISK_SCORE = 100
EXTENDED_DELAY_DAYS = 30
DECLINE_RATIO = Decimal("0.5")


@dataclass(frozen=True)
class _WindowStats:
    recent_volume: Decimal
    older_volume: Decimal
    recent_count: int
    older_count: int
    max_payment_delay: int
    overdue_count: int


@dataclass(frozen=True)
class RiskRule:
    weight: int
    factor: str
    applies: Callable[[_WindowStats], bool]


# Evaluated in order; factor labels are reported in this order.
RISK_RULES: tuple[RiskRule, ...] = (
    RiskRule(
        30,
        "Significant decline in purchase volume",
        lambda s: s.older_volume > 0 and s.recent_volume < s.older_volume * DECLINE_RATIO,
    ),
    RiskRule(
        25,
        "Reduced purchase frequency",
        lambda s: s.older_count > 0 and s.recent_count < s.older_count * DECLINE_RATIO,
    ),
    RiskRule(
        20,
        "Extended payment delays",
        lambda s: s.max_payment_delay > EXTENDED_DELAY_DAYS,
    ),
    RiskRule(
        25,
        "No recent purchases",
        lambda s: s.older_count > 0 and s.recent_count == 0,
    ),
    RiskRule(
        15,
        "Has overdue invoices",
        lambda s: s.overdue_count > 0,
    ),
)


def score_risk(stats: _WindowStats) -> tuple[int, list[str]]:
    """Apply RISK_RULES and return the clamped score with its factor labels."""
    # No invoices in either window scores 0, even with old overdue invoices.
    if stats.recent_count == 0 and stats.older_count == 0:
        return 0, []
    fired = [rule for rule in RISK_RULES if rule.applies(stats)]
    score = min(sum(rule.weight for rule in fired), MAX_RISK_SCORE)
    return score, [rule.factor for rule in fired]


def compute_churn_risk(
    invoices: Iterable[InvoiceRecord],
    clients: Iterable[ClientRecord],
    now: dt.datetime,
    window_days: int = RECENT_WINDOW_DAYS,
) -> dict[str, ChurnRiskResult]:
    """Score every active client for churn risk."""
    by_client: dict[str, list[InvoiceRecord]] = defaultdict(list)
    for invoice in invoices:
        if invoice.client is not None:
            by_client[invoice.client.id].append(invoice)

    recent_start = window_start(now, window_days)
    older_start = window_start(now, window_days * 2)

    results: dict[str, ChurnRiskResult] = {}
    for client in clients:
        if not client.is_active:
            continue
        results[client.id] = _score_client(client, by_client.get(client.id, []), now, recent_start, older_start)
    return results


def _score_client(
    client: ClientRecord,
    invoices: list[InvoiceRecord],
    now: dt.datetime,
    recent_start: dt.datetime,
    older_start: dt.datetime,
) -> ChurnRiskResult:
    recent = [inv for inv in invoices if inv.issue_date >= recent_start]
    older = [inv for inv in invoices if older_start <= inv.issue_date < recent_start]
    delays = [inv.days_overdue(now) for inv in invoices if inv.is_overdue(now)]

    stats = _WindowStats(
        recent_volume=sum((inv.total for inv in recent), Decimal("0")),
        older_volume=sum((inv.total for inv in older), Decimal("0")),
        recent_count=len(recent),
        older_count=len(older),
        max_payment_delay=max(delays, default=0),
        overdue_count=len(delays),
    )
    score, factors = score_risk(stats)

    return ChurnRiskResult(
        client_id=client.id,
        client_name=client.name,
        risk_score=score,
        risk_factors=factors,
        metrics=ChurnMetrics(
            recent_volume=float(stats.recent_volume),
            older_volume=float(stats.older_volume),
            volume_change=percentage_change(stats.recent_volume, stats.older_volume),
            recent_count=stats.recent_count,
            older_count=stats.older_count,
            frequency_change=percentage_change(stats.recent_count, stats.older_count),
            max_payment_delay=stats.max_payment_delay,
            average_payment_delay=sum(delays) / len(delays) if delays else 0.0,
            overdue_invoices_count=stats.overdue_count,
            last_purchase_date=max((inv.issue_date for inv in invoices), default=None),
        ),
    )

"""Similarity-based product recommendations.

Clients who share purchased items with the target client vote for the items
they bought that the target has not, weighted by how much their purchase
history overlaps.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from invoice_insights.models.records import InvoiceRecord, ItemRecord
from invoice_insights.models.schemas import Recommendation

MAX_RECOMMENDATIONS = 5
UNKNOWN_ITEM_NAME = "Unknown Item"
UNKNOWN_ITEM_STATUS = "unknown"


@dataclass
class _PurchaseHistory:
    client_name: str
    item_ids: set[str] = field(default_factory=set)


@dataclass
class _Candidate:
    item_id: str
    score: float = 0.0
    reasons: list[str] = field(default_factory=list)


def similarity(target: set[str], other: set[str]) -> float:
    """Overlap of two purchased-item sets relative to the larger one."""
    if not target or not other:
        return 0.0
    return len(target & other) / max(len(target), len(other))


def _purchase_histories(invoices: Iterable[InvoiceRecord]) -> dict[str, _PurchaseHistory]:
    histories: dict[str, _PurchaseHistory] = {}
    for invoice in invoices:
        if invoice.client is None:
            continue
        history = histories.setdefault(invoice.client.id, _PurchaseHistory(invoice.client.name))
        history.item_ids.update(item.id for item in invoice.items)
    return histories


def recommend_products(
    client_id: str,
    invoices: Iterable[InvoiceRecord],
    items: Iterable[ItemRecord],
    limit: int = MAX_RECOMMENDATIONS,
) -> list[Recommendation]:
    """Rank items the client has not bought yet by summed client similarity.

    Ties are broken by item id so results are deterministic.
    """
    histories = _purchase_histories(invoices)
    target = histories.pop(client_id, None)
    if target is None or not target.item_ids:
        return []

    candidates: dict[str, _Candidate] = {}
    for other in histories.values():
        score = similarity(target.item_ids, other.item_ids)
        if score <= 0:
            continue
        for item_id in sorted(other.item_ids - target.item_ids):
            candidate = candidates.setdefault(item_id, _Candidate(item_id))
            candidate.score += score
            candidate.reasons.append(f"Similar client {other.client_name} purchased this item")

    ranked = sorted(candidates.values(), key=lambda c: (-c.score, c.item_id))[:limit]
    catalogue = {item.id: item for item in items}
    return [_to_recommendation(candidate, catalogue.get(candidate.item_id)) for candidate in ranked]


def _to_recommendation(candidate: _Candidate, item: ItemRecord | None) -> Recommendation:
    if item is None:
        return Recommendation(
            item_id=candidate.item_id,
            score=candidate.score,
            reasons=candidate.reasons,
            name=UNKNOWN_ITEM_NAME,
            unit_price=0.0,
            status=UNKNOWN_ITEM_STATUS,
        )
    return Recommendation(
        item_id=candidate.item_id,
        score=candidate.score,
        reasons=candidate.reasons,
        name=item.name,
        unit_price=float(item.unit_price),
        status=item.status.value if item.status is not None else UNKNOWN_ITEM_STATUS,
    )

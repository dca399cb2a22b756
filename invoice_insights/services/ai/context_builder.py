"""
Context assembly for the summarization collaborator.

Computes every aggregate once per request, then packs the slice that matches
the query's analysis type into a fixed-shape AnalysisContext and renders it
as a prompt.
"""
from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass
from typing import Any

from invoice_insights.core.config import settings
from invoice_insights.models.records import Snapshot
from invoice_insights.models.schemas import (
    AnalysisContext,
    AnalysisType,
    ChurnRiskResult,
    ClientAggregate,
    ClientContext,
    DataSummary,
    ItemAggregate,
    ItemContext,
    RecentActivity,
)
from invoice_insights.services.analytics import (
    DEFAULT_TIMEFRAME,
    aggregate_client_purchases,
    aggregate_item_performance,
    compute_churn_risk,
    count_recent_invoices,
    detect_pattern_changes,
    overdue_invoices,
    recommend_products,
    summarize_snapshot,
)

TOP_N = 5
FOCUS_N = 3


@dataclass(frozen=True)
class AnalyticsBundle:
    """All aggregates derived from one snapshot at one instant."""

    snapshot: Snapshot
    now: dt.datetime
    summary: DataSummary
    clients: dict[str, ClientAggregate]
    items: dict[str, ItemAggregate]
    churn: dict[str, ChurnRiskResult]

    def top_clients(self, n: int = TOP_N) -> list[ClientAggregate]:
        return sorted(self.clients.values(), key=lambda c: (-c.total_spent, c.client_id))[:n]

    def top_items(self, n: int = TOP_N) -> list[ItemAggregate]:
        return sorted(self.items.values(), key=lambda i: (-i.total_revenue, i.item_id))[:n]

    def churn_above(self, threshold: int) -> list[ChurnRiskResult]:
        """Clients scoring strictly above `threshold`, riskiest first."""
        flagged = [r for r in self.churn.values() if r.risk_score > threshold]
        return sorted(flagged, key=lambda r: (-r.risk_score, r.client_id))


def build_bundle(snapshot: Snapshot, now: dt.datetime) -> AnalyticsBundle:
    return AnalyticsBundle(
        snapshot=snapshot,
        now=now,
        summary=summarize_snapshot(snapshot),
        clients=aggregate_client_purchases(snapshot.invoices, now),
        items=aggregate_item_performance(snapshot.invoices, snapshot.items),
        churn=compute_churn_risk(snapshot.invoices, snapshot.clients, now),
    )


def _client_context(client: ClientAggregate) -> ClientContext:
    return ClientContext(
        name=client.name,
        total_invoices=client.total_invoices,
        total_spent=client.total_spent,
        average_invoice_value=client.average_invoice_value,
        recent_invoices=client.recent_invoices,
        recent_spent=client.recent_spent,
        items=client.items,
        overdue_invoices=client.overdue_invoices,
        payment_delay=client.max_payment_delay_days,
        last_purchase_date=client.last_purchase_date.date().isoformat() if client.last_purchase_date else None,
    )


def _item_context(item: ItemAggregate) -> ItemContext:
    return ItemContext(
        name=item.name,
        unit_price=item.unit_price,
        current_stock=item.current_stock,
        status=item.status,
        total_sold=item.total_units_sold,
        total_revenue=item.total_revenue,
        invoice_count=item.invoice_count,
    )


def build_focus(bundle: AnalyticsBundle, analysis_type: AnalysisType) -> dict[str, Any]:
    """Select the aggregate that answers this kind of question."""
    if analysis_type == AnalysisType.PRODUCT_RECOMMENDATION:
        return {
            "top_clients": [_client_context(c).model_dump() for c in bundle.top_clients(FOCUS_N)],
        }
    if analysis_type == AnalysisType.CROSS_SELL_UPSELL:
        return {
            "cross_sell_candidates": {
                client.name: [
                    rec.model_dump(include={"name", "score", "unit_price"})
                    for rec in recommend_products(
                        client.client_id, bundle.snapshot.invoices, bundle.snapshot.items
                    )
                ]
                for client in bundle.top_clients(FOCUS_N)
            },
        }
    if analysis_type == AnalysisType.CHURN_RISK:
        return {
            "high_risk_clients": [
                r.model_dump(mode="json") for r in bundle.churn_above(settings.CHURN_HIGH_RISK_THRESHOLD)
            ],
        }
    if analysis_type == AnalysisType.PATTERN_ANALYSIS:
        changes = detect_pattern_changes(bundle.snapshot.invoices, DEFAULT_TIMEFRAME, bundle.now)
        return {
            "timeframe": DEFAULT_TIMEFRAME,
            "pattern_changes": [change.model_dump(mode="json") for change in changes.values()],
        }
    return {}


def build_context(bundle: AnalyticsBundle, analysis_type: AnalysisType) -> AnalysisContext:
    clients = [_client_context(c) for c in bundle.clients.values()]
    items = [_item_context(i) for i in bundle.items.values()]
    return AnalysisContext(
        analysis_type=analysis_type,
        summary=bundle.summary,
        clients=clients,
        items=items,
        churn_risk=bundle.churn_above(settings.CHURN_ALERT_THRESHOLD),
        top_clients=[_client_context(c) for c in bundle.top_clients()],
        top_items=[_item_context(i) for i in bundle.top_items()],
        recent_activity=RecentActivity(
            recent_invoices=count_recent_invoices(bundle.snapshot.invoices, bundle.now),
            overdue_invoices=len(overdue_invoices(bundle.snapshot.invoices, bundle.now)),
        ),
        focus=build_focus(bundle, analysis_type),
    )


def _money(value: float) -> str:
    return f"${value:,.2f}"


def render_prompt(query: str, context: AnalysisContext) -> str:
    """Render the context as the user prompt sent to the language model."""
    summary = context.summary
    top_clients = "\n".join(
        f"- {c.name}: {_money(c.total_spent)} ({c.total_invoices} invoices)" for c in context.top_clients
    )
    top_items = "\n".join(
        f"- {i.name}: {_money(i.total_revenue)} ({i.invoice_count} sales)" for i in context.top_items
    )
    churn = "\n".join(
        f"- {r.client_name}: {r.risk_score}% risk - {', '.join(r.risk_factors)}" for r in context.churn_risk
    )

    sections = [
        "You are analyzing an invoicing system with the following data:",
        "",
        "SUMMARY:",
        f"- Total Invoices: {summary.total_invoices}",
        f"- Total Clients: {summary.total_clients}",
        f"- Total Items: {summary.total_items}",
        f"- Total Revenue: {_money(summary.total_revenue)}",
        f"- Unpaid Amount: {_money(summary.unpaid_amount)}",
        f"- Average Invoice Value: {_money(summary.average_invoice_value)}",
        "",
        "TOP CLIENTS (by total spent):",
        top_clients or "- none",
        "",
        "TOP ITEMS (by revenue):",
        top_items or "- none",
        "",
        "CHURN RISK CLIENTS:",
        churn or "- none",
        "",
        "RECENT ACTIVITY:",
        f"- Recent Invoices (3 months): {context.recent_activity.recent_invoices}",
        f"- Overdue Invoices: {context.recent_activity.overdue_invoices}",
    ]
    if context.focus:
        sections += [
            "",
            f"ANALYSIS FOCUS ({context.analysis_type.value}):",
            json.dumps(context.focus, indent=2, default=str),
        ]
    sections += [
        "",
        f'USER QUERY: "{query}"',
        "",
        "Please provide a detailed analysis with:",
        "1. Specific insights based on the data",
        "2. Actionable recommendations",
        "3. Relevant client names and specific examples",
        "4. Clear reasoning for your conclusions",
        "",
        "Format your response as structured insights with specific data points and recommendations.",
    ]
    return "\n".join(sections)

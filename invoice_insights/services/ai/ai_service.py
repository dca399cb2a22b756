"""AI query orchestration and the analysis reports built on the same snapshot."""

from __future__ import annotations

import datetime as dt
import logging
import time

from invoice_insights import metrics
from invoice_insights.core.config import settings
from invoice_insights.models.records import Snapshot
from invoice_insights.models.schemas import (
    ActionRecommendation,
    AnalysisType,
    ChurnRiskAnalysis,
    ChurnRiskSummary,
    ClientRecommendations,
    DashboardActivity,
    DashboardSummary,
    DataSummaryOut,
    InsightCard,
    InsightPriority,
    InsightsDashboard,
    PatternChangeAnalysis,
    PatternChangeSummary,
    QueryAnalysis,
    QueryMetadata,
    QueryResponse,
    QuerySuggestionGroup,
    QuerySuggestions,
)
from invoice_insights.services.analytics import (
    DEFAULT_TIMEFRAME,
    RECENT_WINDOW_DAYS,
    count_recent_invoices,
    detect_pattern_changes,
    overdue_invoices,
    recommend_products,
)
from .context_builder import FOCUS_N, AnalyticsBundle, build_bundle, build_context, render_prompt
from .query_classifier import classify_query, normalize_query
from .response_parser import extract_insights, extract_summary
from .summarizer import Summarizer

logger = logging.getLogger(__name__)

QUERY_SUGGESTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Product Recommendations",
        (
            "Given the purchase history of my clients, suggest who is the most likely to buy [Product/Service X]",
            "Which clients would be most interested in our premium services?",
            "Recommend products for clients who haven't purchased recently",
        ),
    ),
    (
        "Cross-sell & Up-sell",
        (
            "For each customer, based on their purchase history, suggest one or more products I can likely cross-sell or up-sell to them",
            "What complementary products should I recommend to my top clients?",
            "Identify upsell opportunities for clients with growing needs",
        ),
    ),
    (
        "Churn Risk Analysis",
        (
            "Which clients show signs of churn risk based on declining invoice volume or delayed payments?",
            "Identify clients who might be considering leaving our service",
            "Which clients have reduced their spending recently?",
        ),
    ),
    (
        "Pattern Analysis",
        (
            "Identify clients whose buying patterns have changed significantly in the last 3 months",
            "Which clients are increasing their purchase frequency?",
            "Find clients with unusual spending patterns",
        ),
    ),
    (
        "Revenue Optimization",
        (
            "Which clients have the highest potential for revenue growth?",
            "Identify opportunities to increase average order value",
            "Which products are most profitable and should be promoted more?",
        ),
    ),
)


class AIService:
    """Answer analytics questions over one request-local snapshot.

    Every method recomputes from the snapshot it was constructed with; nothing
    is cached between instances.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        now: dt.datetime | None = None,
        summarizer: Summarizer | None = None,
    ):
        self.snapshot = snapshot
        self.now = now or dt.datetime.now(dt.timezone.utc)
        self.summarizer = summarizer or Summarizer()
        self._bundle: AnalyticsBundle | None = None

    @property
    def bundle(self) -> AnalyticsBundle:
        if self._bundle is None:
            started = time.perf_counter()
            self._bundle = build_bundle(self.snapshot, self.now)
            metrics.analysis_duration("aggregate", time.perf_counter() - started)
        return self._bundle

    # ========================================================================
    # Natural-language query
    # ========================================================================

    async def process_query(self, query: str) -> QueryResponse:
        query = normalize_query(query)
        started = time.perf_counter()
        analysis_type = classify_query(query)
        context = build_context(self.bundle, analysis_type)
        prompt = render_prompt(query, context)

        raw_response = await self.summarizer.summarize(prompt)

        analysis = QueryAnalysis(
            type=analysis_type,
            summary=extract_summary(raw_response),
            insights=extract_insights(raw_response),
            recommendations=self.action_recommendations(analysis_type),
            raw_response=raw_response,
        )
        elapsed = time.perf_counter() - started
        metrics.ai_query_processed(analysis_type.value)
        metrics.analysis_duration("query", elapsed)
        logger.info("Processed %s query in %.0fms", analysis_type.value, elapsed * 1000)

        return QueryResponse(
            query=query,
            analysis=analysis,
            metadata=QueryMetadata(
                processing_time_ms=int(elapsed * 1000),
                data_points_analyzed=self.snapshot.data_points,
                model_used=self.summarizer.model,
            ),
        )

    def action_recommendations(self, analysis_type: AnalysisType) -> list[ActionRecommendation]:
        """Concrete follow-ups for the analysis type, independent of the model's prose."""
        bundle = self.bundle
        recommendations: list[ActionRecommendation] = []

        if analysis_type == AnalysisType.PRODUCT_RECOMMENDATION:
            for client in bundle.top_clients(FOCUS_N):
                recommendations.append(
                    ActionRecommendation(
                        type="client_recommendation",
                        client_name=client.name,
                        reasoning=f"High-value client with ${client.total_spent:,.2f} total spent",
                        action="Consider targeted marketing for new products",
                    )
                )
        elif analysis_type == AnalysisType.CROSS_SELL_UPSELL:
            for client in bundle.top_clients(FOCUS_N):
                products = recommend_products(client.client_id, self.snapshot.invoices, self.snapshot.items, limit=1)
                if not products:
                    continue
                best = products[0]
                recommendations.append(
                    ActionRecommendation(
                        type="cross_sell",
                        client_name=client.name,
                        reasoning=f"{best.name} is popular with similar clients (score {best.score:.2f})",
                        action=f"Offer {best.name} alongside their next invoice",
                    )
                )
        elif analysis_type == AnalysisType.CHURN_RISK:
            for result in bundle.churn_above(settings.CHURN_HIGH_RISK_THRESHOLD)[:FOCUS_N]:
                recommendations.append(
                    ActionRecommendation(
                        type="churn_prevention",
                        client_name=result.client_name,
                        reasoning=f"{result.risk_score}% churn risk - {', '.join(result.risk_factors)}",
                        action="Implement retention strategies and reach out proactively",
                    )
                )
        elif analysis_type == AnalysisType.PATTERN_ANALYSIS:
            changes = detect_pattern_changes(self.snapshot.invoices, DEFAULT_TIMEFRAME, self.now)
            for change in list(changes.values())[:FOCUS_N]:
                recommendations.append(
                    ActionRecommendation(
                        type="pattern_change",
                        client_name=change.client_name,
                        reasoning=f"Significant changes detected: {', '.join(change.changes)}",
                        action="Investigate reasons for change and adjust strategy accordingly",
                    )
                )
        return recommendations

    # ========================================================================
    # Reports
    # ========================================================================

    def data_summary(self) -> DataSummaryOut:
        bundle = self.bundle
        return DataSummaryOut(
            summary=bundle.summary,
            client_count=len(bundle.clients),
            item_count=len(bundle.items),
            churn_risk_count=len(bundle.churn_above(settings.CHURN_ALERT_THRESHOLD)),
        )

    def churn_risk_analysis(self) -> ChurnRiskAnalysis:
        churn = self.bundle.churn
        high_risk = self.bundle.churn_above(settings.CHURN_ALERT_THRESHOLD)
        average = sum(r.risk_score for r in churn.values()) / len(churn) if churn else 0.0
        return ChurnRiskAnalysis(
            high_risk_clients=high_risk,
            summary=ChurnRiskSummary(
                total_clients=len(churn),
                high_risk_count=len(high_risk),
                average_risk_score=average,
            ),
        )

    def pattern_change_analysis(self, timeframe: str = DEFAULT_TIMEFRAME) -> PatternChangeAnalysis:
        changes = detect_pattern_changes(self.snapshot.invoices, timeframe, self.now)
        total_clients = len(self.bundle.clients)
        return PatternChangeAnalysis(
            timeframe=timeframe,
            changes=changes,
            summary=PatternChangeSummary(
                total_clients=total_clients,
                clients_with_changes=len(changes),
                change_percentage=len(changes) / total_clients * 100 if total_clients else 0.0,
            ),
        )

    def client_recommendations(self, client_id: str) -> ClientRecommendations:
        recommendations = recommend_products(client_id, self.snapshot.invoices, self.snapshot.items)
        return ClientRecommendations(
            client_id=client_id,
            recommendations=recommendations,
            total_recommendations=len(recommendations),
        )

    def insights_dashboard(self) -> InsightsDashboard:
        bundle = self.bundle
        high_risk = bundle.churn_above(settings.CHURN_ALERT_THRESHOLD)
        changes = detect_pattern_changes(self.snapshot.invoices, DEFAULT_TIMEFRAME, self.now)
        top_clients = bundle.top_clients(FOCUS_N)
        overdue = overdue_invoices(self.snapshot.invoices, self.now)

        cards: list[InsightCard] = []
        if high_risk:
            cards.append(
                InsightCard(
                    type="churn_risk",
                    title="High Churn Risk Detected",
                    description=f"{len(high_risk)} clients show signs of churn risk",
                    priority=InsightPriority.HIGH,
                    data=[r.model_dump(mode="json") for r in high_risk[:FOCUS_N]],
                )
            )
        if changes:
            cards.append(
                InsightCard(
                    type="pattern_change",
                    title="Significant Pattern Changes",
                    description=f"{len(changes)} clients show significant changes in buying patterns",
                    priority=InsightPriority.MEDIUM,
                    data=[c.model_dump(mode="json") for c in list(changes.values())[:FOCUS_N]],
                )
            )
        if top_clients:
            cards.append(
                InsightCard(
                    type="revenue_opportunity",
                    title="Top Revenue Opportunities",
                    description="Your highest-value clients and potential upsell opportunities",
                    priority=InsightPriority.MEDIUM,
                    data=[c.model_dump(mode="json") for c in top_clients],
                )
            )
        if overdue:
            cards.append(
                InsightCard(
                    type="overdue_invoices",
                    title="Overdue Invoices Alert",
                    description=f"{len(overdue)} invoices are overdue and require attention",
                    priority=InsightPriority.HIGH,
                    data=[
                        {
                            "invoice_number": inv.invoice_number,
                            "client_name": inv.client.name if inv.client else None,
                            "total": float(inv.total),
                            "due_date": inv.due_date.isoformat(),
                            "days_overdue": inv.days_overdue(self.now),
                        }
                        for inv in overdue[:FOCUS_N]
                    ],
                )
            )
        cards.sort(key=lambda card: card.priority.rank, reverse=True)

        new_clients_since = self.now - dt.timedelta(days=RECENT_WINDOW_DAYS)
        return InsightsDashboard(
            summary=DashboardSummary(
                total_invoices=bundle.summary.total_invoices,
                total_clients=bundle.summary.total_clients,
                total_revenue=bundle.summary.total_revenue,
                unpaid_amount=bundle.summary.unpaid_amount,
                overdue_invoices=len(overdue),
                high_risk_clients=len(high_risk),
            ),
            insights=cards,
            recent_activity=DashboardActivity(
                recent_invoices=count_recent_invoices(self.snapshot.invoices, self.now),
                new_clients=sum(
                    1
                    for client in self.snapshot.clients
                    if client.created_at is not None and client.created_at >= new_clients_since
                ),
            ),
        )

    @staticmethod
    def query_suggestions() -> QuerySuggestions:
        return QuerySuggestions(
            suggestions=[
                QuerySuggestionGroup(category=category, queries=list(queries))
                for category, queries in QUERY_SUGGESTIONS
            ]
        )

"""Schemas for natural-language queries and the insights dashboard."""
from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .analytics import ChurnRiskResult, DataSummary


class AnalysisType(str, enum.Enum):
    PRODUCT_RECOMMENDATION = "product_recommendation"
    CROSS_SELL_UPSELL = "cross_sell_upsell"
    CHURN_RISK = "churn_risk"
    PATTERN_ANALYSIS = "pattern_analysis"
    GENERAL_ANALYSIS = "general_analysis"


class QueryRequest(BaseModel):
    query: str = ""


class ClientContext(BaseModel):
    """Client figures as shown to the summarizer."""
    name: str
    total_invoices: int
    total_spent: float
    average_invoice_value: float
    recent_invoices: int
    recent_spent: float
    items: list[str]
    overdue_invoices: int
    payment_delay: int
    last_purchase_date: str | None = None


class ItemContext(BaseModel):
    name: str
    unit_price: float
    current_stock: int
    status: str | None = None
    total_sold: int
    total_revenue: float
    invoice_count: int


class RecentActivity(BaseModel):
    recent_invoices: int
    overdue_invoices: int


class AnalysisContext(BaseModel):
    """Fixed-shape context object handed to the summarization collaborator."""
    analysis_type: AnalysisType
    summary: DataSummary
    clients: list[ClientContext]
    items: list[ItemContext]
    churn_risk: list[ChurnRiskResult]
    top_clients: list[ClientContext]
    top_items: list[ItemContext]
    recent_activity: RecentActivity
    focus: dict[str, Any] = Field(default_factory=dict)


class Insight(BaseModel):
    title: str
    description: str
    type: str = "insight"


class ActionRecommendation(BaseModel):
    type: str
    client_name: str
    reasoning: str
    action: str


class QueryAnalysis(BaseModel):
    type: AnalysisType
    summary: str
    insights: list[Insight]
    recommendations: list[ActionRecommendation]
    raw_response: str


class QueryMetadata(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    processing_time_ms: int
    data_points_analyzed: int
    model_used: str


class QueryResponse(BaseModel):
    query: str
    analysis: QueryAnalysis
    metadata: QueryMetadata


class InsightPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {InsightPriority.HIGH: 3, InsightPriority.MEDIUM: 2, InsightPriority.LOW: 1}[self]


class InsightCard(BaseModel):
    type: str
    title: str
    description: str
    priority: InsightPriority
    data: list[dict[str, Any]] = Field(default_factory=list)


class DashboardSummary(BaseModel):
    total_invoices: int
    total_clients: int
    total_revenue: float
    unpaid_amount: float
    overdue_invoices: int
    high_risk_clients: int


class DashboardActivity(BaseModel):
    recent_invoices: int
    new_clients: int


class InsightsDashboard(BaseModel):
    summary: DashboardSummary
    insights: list[InsightCard]
    recent_activity: DashboardActivity


class QuerySuggestionGroup(BaseModel):
    category: str
    queries: list[str]


class QuerySuggestions(BaseModel):
    suggestions: list[QuerySuggestionGroup]

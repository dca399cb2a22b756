"""Pydantic schemas for API requests and responses.

Sub-modules:
- analytics: Derived analytics aggregates
- ai: Query, context and dashboard schemas
"""
# Analytics schemas
from .analytics import (
    DataSummary,
    ClientAggregate,
    ItemAggregate,
    ChurnMetrics,
    ChurnRiskResult,
    PatternMetrics,
    PatternChange,
    Recommendation,
    ChurnRiskSummary,
    ChurnRiskAnalysis,
    PatternChangeSummary,
    PatternChangeAnalysis,
    ClientRecommendations,
    DataSummaryOut,
)

# AI schemas
from .ai import (
    AnalysisType,
    QueryRequest,
    ClientContext,
    ItemContext,
    RecentActivity,
    AnalysisContext,
    Insight,
    ActionRecommendation,
    QueryAnalysis,
    QueryMetadata,
    QueryResponse,
    InsightPriority,
    InsightCard,
    DashboardSummary,
    DashboardActivity,
    InsightsDashboard,
    QuerySuggestionGroup,
    QuerySuggestions,
)

__all__ = [
    # Analytics
    "DataSummary",
    "ClientAggregate",
    "ItemAggregate",
    "ChurnMetrics",
    "ChurnRiskResult",
    "PatternMetrics",
    "PatternChange",
    "Recommendation",
    "ChurnRiskSummary",
    "ChurnRiskAnalysis",
    "PatternChangeSummary",
    "PatternChangeAnalysis",
    "ClientRecommendations",
    "DataSummaryOut",
    # AI
    "AnalysisType",
    "QueryRequest",
    "ClientContext",
    "ItemContext",
    "RecentActivity",
    "AnalysisContext",
    "Insight",
    "ActionRecommendation",
    "QueryAnalysis",
    "QueryMetadata",
    "QueryResponse",
    "InsightPriority",
    "InsightCard",
    "DashboardSummary",
    "DashboardActivity",
    "InsightsDashboard",
    "QuerySuggestionGroup",
    "QuerySuggestions",
]

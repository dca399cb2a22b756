"""AI query and analysis endpoints.

Every request loads a fresh snapshot and recomputes its aggregates; nothing is
cached between requests.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from invoice_insights.api.rate_limit import RATE_LIMITS, limiter
from invoice_insights.db.session import get_db
from invoice_insights.models.records import Snapshot
from invoice_insights.models.schemas import (
    ChurnRiskAnalysis,
    ClientRecommendations,
    DataSummaryOut,
    InsightsDashboard,
    PatternChangeAnalysis,
    QueryRequest,
    QueryResponse,
    QuerySuggestions,
)
from invoice_insights.services.ai import AIService, Summarizer, normalize_query
from invoice_insights.services.analytics import DEFAULT_TIMEFRAME
from invoice_insights.services.snapshot_loader import SnapshotLoader

router = APIRouter()
logger = logging.getLogger(__name__)

DbDep = Annotated[Session, Depends(get_db)]


def get_snapshot(db: DbDep) -> Snapshot:
    return SnapshotLoader(db).load()


def get_summarizer() -> Summarizer:
    return Summarizer()


def get_ai_service(
    snapshot: Annotated[Snapshot, Depends(get_snapshot)],
    summarizer: Annotated[Summarizer, Depends(get_summarizer)],
) -> AIService:
    return AIService(snapshot, summarizer=summarizer)


def get_valid_query(payload: QueryRequest) -> str:
    """Reject empty or over-long queries before any snapshot is loaded."""
    return normalize_query(payload.query)


AIServiceDep = Annotated[AIService, Depends(get_ai_service)]
ValidQueryDep = Annotated[str, Depends(get_valid_query)]


@router.post("/query", response_model=QueryResponse)
@limiter.limit(RATE_LIMITS["ai_query"])
async def process_query(request: Request, query: ValidQueryDep, service: AIServiceDep) -> QueryResponse:
    """
    Answer a natural-language question about invoices, clients and items.

    Returns:
        Analysis type, summary, insights, recommendations and timing metadata
    """
    return await service.process_query(query)


@router.get("/analytics/summary", response_model=DataSummaryOut)
async def get_data_summary(service: AIServiceDep) -> DataSummaryOut:
    return service.data_summary()


@router.get("/insights/dashboard", response_model=InsightsDashboard)
async def get_insights_dashboard(service: AIServiceDep) -> InsightsDashboard:
    """Prioritized insight cards plus recent activity counts."""
    return service.insights_dashboard()


@router.get("/suggestions", response_model=QuerySuggestions)
async def get_query_suggestions() -> QuerySuggestions:
    return AIService.query_suggestions()


@router.get("/analysis/churn-risk", response_model=ChurnRiskAnalysis)
async def get_churn_risk_analysis(service: AIServiceDep) -> ChurnRiskAnalysis:
    return service.churn_risk_analysis()


@router.get("/analysis/pattern-changes", response_model=PatternChangeAnalysis)
async def get_pattern_changes(
    service: AIServiceDep,
    timeframe: str = Query(DEFAULT_TIMEFRAME),
) -> PatternChangeAnalysis:
    """
    Clients whose spend or invoice count moved by more than 20% between windows.

    Args:
        timeframe: "3months" or "6months"; anything else is rejected with 400
    """
    return service.pattern_change_analysis(timeframe)


@router.get("/recommendations/client/{client_id}", response_model=ClientRecommendations)
async def get_client_recommendations(client_id: str, service: AIServiceDep) -> ClientRecommendations:
    return service.client_recommendations(client_id)

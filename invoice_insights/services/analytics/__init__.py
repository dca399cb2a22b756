"""
Analytics Services Package.

Pure, request-local computations over an in-memory snapshot:
- client_aggregator: Per-client purchase rollups
- item_aggregator: Per-item sales rollups
- churn_service: Heuristic churn-risk scoring
- pattern_service: Buying-pattern change detection
- recommendation_service: Similarity-based product recommendations
- summary_service: Snapshot-wide totals
"""
from .churn_service import compute_churn_risk
from .client_aggregator import aggregate_client_purchases
from .item_aggregator import aggregate_item_performance
from .pattern_service import detect_pattern_changes
from .recommendation_service import recommend_products
from .summary_service import count_recent_invoices, overdue_invoices, summarize_snapshot
from .windows import DEFAULT_TIMEFRAME, RECENT_WINDOW_DAYS, TIMEFRAME_DAYS

__all__ = [
    "aggregate_client_purchases",
    "aggregate_item_performance",
    "compute_churn_risk",
    "detect_pattern_changes",
    "recommend_products",
    "summarize_snapshot",
    "count_recent_invoices",
    "overdue_invoices",
    "DEFAULT_TIMEFRAME",
    "RECENT_WINDOW_DAYS",
    "TIMEFRAME_DAYS",
]

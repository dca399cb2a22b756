"""Metrics facade.

Service code should ONLY call the semantic helpers here so the backend can change
without touching analytics code.

Metrics:
- ai_queries_total                 Natural-language queries answered, by analysis type
- summarizer_failures_total        Summarization collaborator failures, by reason
- snapshot_records_skipped_total   Malformed snapshot rows skipped, by record kind
- analysis_duration_seconds        Wall time of analytics operations, by operation
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("metrics")

_AI_QUERIES = Counter("ai_queries_total", "Natural-language queries answered", ["analysis_type"])
_SUMMARIZER_FAILURES = Counter(
    "summarizer_failures_total", "Summarization collaborator failures", ["reason"]
)
_SNAPSHOT_RECORDS_SKIPPED = Counter(
    "snapshot_records_skipped_total", "Malformed snapshot records skipped", ["kind"]
)
_ANALYSIS_DURATION = Histogram(
    "analysis_duration_seconds",
    "Wall time of analytics operations",
    ["operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)


def ai_query_processed(analysis_type: str):
    _AI_QUERIES.labels(analysis_type=analysis_type).inc()
    logger.debug("metric ai_queries_total{analysis_type=%s} += 1", analysis_type)


def summarizer_failed(reason: str):
    _SUMMARIZER_FAILURES.labels(reason=reason).inc()


def snapshot_record_skipped(kind: str, count: int = 1):
    if count <= 0:
        return
    _SNAPSHOT_RECORDS_SKIPPED.labels(kind=kind).inc(count)


def analysis_duration(operation: str, seconds: float):
    _ANALYSIS_DURATION.labels(operation=operation).observe(seconds)

import logging

from prometheus_client import Counter
from slowapi import Limiter
from slowapi.util import get_remote_address

from invoice_insights.core.config import settings

logger = logging.getLogger(__name__)

_PROM_RATE_LIMIT = Counter("rate_limit_exceeded_events", "Rate limit exceeded events (handler invocations)")

# Each process keeps its own window; the engine holds no shared state.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)

RATE_LIMITS = {
    "ai_query": settings.QUERY_RATE_LIMIT,
}


def increment_rate_limit_exceeded():
    _PROM_RATE_LIMIT.inc()

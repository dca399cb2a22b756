"""Time windows and ratio helpers shared by the analytics services."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from invoice_insights.core.exceptions import InvalidTimeframeError

RECENT_WINDOW_DAYS = 90

TIMEFRAME_DAYS: dict[str, int] = {
    "3months": 90,
    "6months": 180,
}
DEFAULT_TIMEFRAME = "3months"


def window_start(now: dt.datetime, days: int) -> dt.datetime:
    """Start of the trailing `days`-long window ending at `now`."""
    return now - dt.timedelta(days=days)


def resolve_timeframe(timeframe: str) -> int:
    """Map a timeframe selector to its window length in days."""
    try:
        return TIMEFRAME_DAYS[timeframe]
    except KeyError:
        raise InvalidTimeframeError(timeframe, list(TIMEFRAME_DAYS)) from None


def percentage_change(recent: Decimal | int, older: Decimal | int) -> float:
    """Percent change from `older` to `recent`; 0 when there is no older baseline."""
    if older <= 0:
        return 0.0
    return float((Decimal(recent) - Decimal(older)) / Decimal(older) * 100)

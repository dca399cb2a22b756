"""Custom exception hierarchy for Invoice Insights.

All errors raised by the analytics core and its adapters inherit from
InsightsException so the API layer can translate them in one place.

Error codes follow pattern: [CATEGORY][NUMBER]
- ANL: Analysis errors (001-099)
"""

from __future__ import annotations

from typing import Any


class InsightsException(Exception):
    """Base exception for all Invoice Insights application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with user-facing message and metadata.

        Args:
            message: User-facing error message
            code: Unique error code (e.g., "ANL001")
            status_code: HTTP status code (default: 400 Bad Request)
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# ANALYSIS ERRORS (ANL001-099)
# ============================================================================

class AnalysisError(InsightsException):
    """Base class for analysis-related errors."""
    pass


class AnalysisUnavailableError(AnalysisError):
    """A collaborator (storage or summarizer) failed; the analysis cannot be produced."""

    def __init__(self, collaborator: str, reason: str | None = None):
        message = "Analysis is temporarily unavailable. Please try again later."
        details: dict[str, Any] = {"collaborator": collaborator}
        if reason:
            details["reason"] = reason
        super().__init__(
            message=message,
            code="ANL001",
            status_code=503,
            details=details,
        )


class InvalidTimeframeError(AnalysisError):
    """Unsupported pattern-analysis timeframe."""

    def __init__(self, timeframe: str, allowed: list[str]):
        allowed_str = " or ".join(f'"{t}"' for t in allowed)
        super().__init__(
            message=f"Invalid timeframe '{timeframe}'. Use {allowed_str}",
            code="ANL002",
            status_code=400,
            details={"timeframe": timeframe, "allowed": allowed},
        )


class InvalidQueryError(AnalysisError):
    """Query text is empty or too long."""

    def __init__(self, reason: str, max_length: int | None = None):
        details: dict[str, Any] = {}
        if max_length is not None:
            details["max_length"] = max_length
        super().__init__(
            message=reason,
            code="ANL003",
            status_code=400,
            details=details,
        )

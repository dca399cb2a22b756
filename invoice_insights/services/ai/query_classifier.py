"""Keyword routing of free-text questions to an analysis type."""
from __future__ import annotations

from dataclasses import dataclass

from invoice_insights.core.config import settings
from invoice_insights.core.exceptions import InvalidQueryError
from invoice_insights.models.schemas import AnalysisType


@dataclass(frozen=True)
class ClassificationRule:
    keywords: tuple[str, ...]
    analysis_type: AnalysisType

    def matches(self, lowered_query: str) -> bool:
        return any(keyword in lowered_query for keyword in self.keywords)


# First match wins, so order matters: "recommend ... churn" is a product question.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(("likely to buy", "recommend", "suggest"), AnalysisType.PRODUCT_RECOMMENDATION),
    ClassificationRule(("cross-sell", "up-sell"), AnalysisType.CROSS_SELL_UPSELL),
    ClassificationRule(("churn", "risk"), AnalysisType.CHURN_RISK),
    ClassificationRule(("pattern", "change", "trend"), AnalysisType.PATTERN_ANALYSIS),
)


def normalize_query(text: str | None) -> str:
    """Strip the query and enforce the non-empty and max-length contract."""
    if text is None or not text.strip():
        raise InvalidQueryError("Query is required and must be a non-empty string")
    if len(text) > settings.QUERY_MAX_LENGTH:
        raise InvalidQueryError(
            f"Query is too long. Please keep it under {settings.QUERY_MAX_LENGTH} characters.",
            max_length=settings.QUERY_MAX_LENGTH,
        )
    return text.strip()


def classify_query(text: str) -> AnalysisType:
    """Map a free-text question to the analysis that answers it."""
    lowered = text.lower()
    for rule in CLASSIFICATION_RULES:
        if rule.matches(lowered):
            return rule.analysis_type
    return AnalysisType.GENERAL_ANALYSIS

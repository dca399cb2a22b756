"""
AI Query Services Package.

- query_classifier: Keyword routing of free-text questions
- context_builder: Aggregate bundle, analysis context and prompt rendering
- summarizer: OpenAI chat completions client
- response_parser: Summary and insight extraction from model text
- ai_service: Query orchestration and the analysis reports
"""
from .ai_service import AIService
from .query_classifier import classify_query, normalize_query
from .summarizer import Summarizer

__all__ = ["AIService", "Summarizer", "classify_query", "normalize_query"]

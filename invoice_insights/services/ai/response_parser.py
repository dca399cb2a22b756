"""Textual heuristics for splitting a model response into summary and insights."""

from __future__ import annotations

import re

from invoice_insights.models.schemas import Insight

MAX_INSIGHTS = 5
MAX_TITLE_LENGTH = 100
DEFAULT_SUMMARY = "Analysis completed successfully."

_PARAGRAPH_BREAK = "\n\n"
_SKIPPED_HEADINGS = ("SUMMARY", "RECOMMENDATIONS")
_NUMBERED_PREFIX = re.compile(r"^[0-9]+\.\s*")
_BULLET_PREFIX = re.compile(r"^[-*]\s*")
_HEADING_PREFIX = re.compile(r"^[A-Z\s]+:\s*")


def _paragraphs(text: str) -> list[str]:
    return text.split(_PARAGRAPH_BREAK)


def extract_summary(text: str) -> str:
    """First paragraph of the response."""
    first = _paragraphs(text)[0].strip() if text else ""
    return first or DEFAULT_SUMMARY


def extract_title(paragraph: str) -> str:
    first_line = paragraph.split("\n")[0].strip()
    title = _NUMBERED_PREFIX.sub("", first_line)
    title = _BULLET_PREFIX.sub("", title)
    title = _HEADING_PREFIX.sub("", title)
    return title[:MAX_TITLE_LENGTH]


def extract_insights(text: str) -> list[Insight]:
    """Up to five non-empty paragraphs, skipping summary/recommendation headings."""
    insights: list[Insight] = []
    for paragraph in _paragraphs(text):
        stripped = paragraph.strip()
        if not stripped or any(heading in paragraph for heading in _SKIPPED_HEADINGS):
            continue
        insights.append(Insight(title=extract_title(paragraph), description=stripped))
        if len(insights) == MAX_INSIGHTS:
            break
    return insights

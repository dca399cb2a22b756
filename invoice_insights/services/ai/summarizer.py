"""
Summarization collaborator backed by the OpenAI chat completions API.

The analytics core never generates prose itself: it hands a rendered prompt to
this client and receives free-form text back. Any failure (missing key, HTTP
error, timeout, unexpected payload) is raised as AnalysisUnavailableError;
retry policy belongs to the caller.
"""
from __future__ import annotations

import logging

import httpx

from invoice_insights import metrics
from invoice_insights.core.config import settings
from invoice_insights.core.exceptions import AnalysisUnavailableError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an AI assistant for an invoicing system. You analyze invoice and client data "
    "to provide actionable business insights. Always provide specific, data-driven "
    "recommendations with clear reasoning."
)


class Summarizer:
    """Turn a prompt into free-form analysis text via an external language model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        if not self.api_key:
            logger.warning("OPENAI_API_KEY not set - AI queries will be unavailable")
        self.model = model or settings.OPENAI_MODEL
        self.api_url = api_url or settings.OPENAI_API_URL
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS

    async def summarize(self, prompt: str) -> str:
        if not self.api_key:
            metrics.summarizer_failed("not_configured")
            raise AnalysisUnavailableError("summarizer", "API key not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": settings.LLM_MAX_TOKENS,
            "temperature": settings.LLM_TEMPERATURE,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
                result = response.json()
        except httpx.TimeoutException as exc:
            metrics.summarizer_failed("timeout")
            logger.warning("Summarizer timed out after %ss", self.timeout)
            raise AnalysisUnavailableError("summarizer", "timeout") from exc
        except httpx.HTTPError as exc:
            metrics.summarizer_failed("http_error")
            logger.warning("Summarizer request failed: %s", exc)
            raise AnalysisUnavailableError("summarizer", str(exc)) from exc
        except ValueError as exc:
            metrics.summarizer_failed("invalid_json")
            logger.warning("Summarizer returned non-JSON body: %s", exc)
            raise AnalysisUnavailableError("summarizer", "invalid response body") from exc

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            metrics.summarizer_failed("malformed_payload")
            logger.warning("Summarizer payload missing message content")
            raise AnalysisUnavailableError("summarizer", "malformed response payload") from exc

        logger.info("Generated analysis via %s (%d chars)", self.model, len(content or ""))
        return content or ""

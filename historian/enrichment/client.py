"""
Enrichment Client - one Gemini call per record, parsed into named sections.

Every failure (missing credential, SDK error, timeout, empty reply) comes
back as a failed EnrichmentResult; nothing raises past this boundary.
Raw SDK error text is logged only; the result carries a fixed message.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from historian.config import LLM_MAX_RETRIES, LLM_TIMEOUT_SECONDS
from historian.enrichment.parser import parse_event_reply, parse_learning_reply
from historian.enrichment.types import EnrichmentResult, RecordKind
from historian.errors import EnrichmentTransportError
from historian.llm.gemini import (
    MISSING_CREDENTIAL_MESSAGE,
    GeminiInitializationError,
    get_gemini_model,
    llm_credentials_configured,
)
from historian.llm.prompts import build_event_summary_prompt, build_history_learning_prompt
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter, log_event, time_block
from historian.utils.error_sanitizer import GENERIC_MESSAGES

logger = get_logger(__name__)

# prompt -> reply text; injected in tests instead of a real model
ModelCall = Callable[[str], str]


class EnrichmentClient:
    """Builds the prompt for a record kind, calls the model, parses the reply."""

    def __init__(
        self,
        model_call: ModelCall | None = None,
        timeout_seconds: float = LLM_TIMEOUT_SECONDS,
    ) -> None:
        """
        Args:
            model_call: Optional replacement for the Gemini call (for testing)
            timeout_seconds: Upper bound for one generation, retries included
        """
        self._model_call = model_call
        self.timeout_seconds = timeout_seconds

    async def generate_event_summary(
        self, title: str, description: str, year: int | str, era: str
    ) -> EnrichmentResult:
        prompt = build_event_summary_prompt(title, description, year, era)
        return await self._generate(prompt, RecordKind.TIMELINE)

    async def generate_learning_summary(
        self, title: str, facts: str, year_range: str
    ) -> EnrichmentResult:
        prompt = build_history_learning_prompt(title, facts, year_range)
        return await self._generate(prompt, RecordKind.LEARNING)

    async def _generate(self, prompt: str, kind: RecordKind) -> EnrichmentResult:
        """
        Side Effects:
            - Calls the Gemini API in a worker thread
            - Increments enrichment.client.* counters
        """
        if self._model_call is None and not llm_credentials_configured():
            counter("enrichment.client.missing_credential")
            return EnrichmentResult.failure(MISSING_CREDENTIAL_MESSAGE)

        counter("enrichment.client.call")
        try:
            with time_block("enrichment.client.latency"):
                reply = await asyncio.wait_for(
                    asyncio.to_thread(self._call_llm_with_retry, prompt),
                    timeout=self.timeout_seconds,
                )
        except asyncio.TimeoutError:
            counter("enrichment.client.timeout")
            logger.warning("Enrichment call timed out after %.0fs", self.timeout_seconds)
            return EnrichmentResult.failure(
                f"The AI service did not respond within {self.timeout_seconds:.0f} seconds."
            )
        except EnrichmentTransportError as e:
            counter("enrichment.client.error")
            logger.warning("Enrichment call failed: %s", e)
            return EnrichmentResult.failure(GENERIC_MESSAGES[502])
        except Exception as e:
            # SDK errors have no common base class and may echo request URLs
            counter("enrichment.client.error")
            logger.error("AI service error: %s: %s", type(e).__name__, e)
            return EnrichmentResult.failure(GENERIC_MESSAGES[502])

        text = (reply or "").strip()
        if not text:
            counter("enrichment.client.empty_reply")
            return EnrichmentResult.failure("Failed to generate summary")

        result = parse_event_reply(text) if kind is RecordKind.TIMELINE else parse_learning_reply(text)
        log_event(
            "enrichment.client.parsed",
            kind=kind.value,
            has_narrative=bool(result.narrative_text),
            has_rewritten=bool(result.rewritten_text),
        )
        return result

    @retry(
        stop=stop_after_attempt(LLM_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((TimeoutError, ConnectionError)),
        reraise=True,
    )
    def _call_llm_with_retry(self, prompt: str) -> str:
        """Call the model, retrying transient failures with exponential backoff."""
        if self._model_call is not None:
            return self._model_call(prompt)

        try:
            model = get_gemini_model()
        except GeminiInitializationError as e:
            raise EnrichmentTransportError(str(e)) from e

        from google.api_core.exceptions import DeadlineExceeded, ServiceUnavailable

        try:
            response = model.generate_content(prompt)
        except DeadlineExceeded as e:
            counter("enrichment.client.deadline_exceeded")
            raise TimeoutError(f"LLM call timed out: {e}") from e
        except ServiceUnavailable as e:
            counter("enrichment.client.service_unavailable")
            logger.warning("LLM service unavailable, will retry: %s", e)
            raise ConnectionError(f"LLM service unavailable: {e}") from e

        return response.text

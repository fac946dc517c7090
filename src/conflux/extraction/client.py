"""Mistral API client wrapper for entity extraction.

Wraps the chat completion API with:
- Async calls with JSON mode
- Roster hints injected into the prompt
- Per-entity validation (bad entities are dropped, not fatal)
- Credit exhaustion (402) and rate limit (429) exception handling
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from mistralai import Mistral
from mistralai.models.sdkerror import SDKError
from pydantic import ValidationError

from conflux.extraction.parser import parse_json_response
from conflux.extraction.prompts import build_extraction_prompt
from conflux.extraction.schemas import ExtractedEntity, ExtractionResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "mistral-small-latest"


class CreditExhaustedException(Exception):
    """Raised when Mistral API returns 402 (Payment Required)."""

    pass


class RateLimitException(Exception):
    """Raised when Mistral API returns 429 (Too Many Requests)."""

    pass


class MistralClient:
    """Async wrapper around Mistral's chat completion API for entity extraction.

    Usage:
        client = MistralClient(api_key="...")
        result = await client.extract_entities(
            "Met John from Acme about the Q4 roadmap.",
            known_people=[("John Smith", "CTO")],
            known_orgs=["Acme Corp"],
        )
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.3,
    ) -> None:
        self._client = Mistral(api_key=api_key)
        self._model = model
        self._temperature = temperature

    async def extract_entities(
        self,
        text: str,
        known_people: Iterable[tuple[str, str | None]] = (),
        known_orgs: Iterable[str] = (),
        max_tokens: int = 4000,
    ) -> ExtractionResult:
        """Extract people, organizations, and topics from text.

        Args:
            text: Transcript or notes to analyze.
            known_people: (full_name, title) pairs for partial-name hints.
            known_orgs: Known organization names.
            max_tokens: Maximum tokens in the response.

        Returns:
            ExtractionResult with validated entities and a summary.

        Raises:
            ValueError: If text is blank or the response has no JSON object.
            CreditExhaustedException: On 402 (Payment Required).
            RateLimitException: On 429 (Too Many Requests).
            SDKError: On other API errors.
        """
        if not text or not text.strip():
            raise ValueError("No text provided")

        prompt = build_extraction_prompt(text, known_people, known_orgs)
        messages = [{"role": "user", "content": prompt}]

        try:
            response = await self._client.chat.complete_async(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except SDKError as e:
            if e.status_code == 402:
                raise CreditExhaustedException(
                    f"Mistral credits exhausted (HTTP 402): {e}"
                ) from e
            if e.status_code == 429:
                raise RateLimitException(
                    f"Mistral rate limit exceeded (HTTP 429): {e}"
                ) from e
            raise

        payload = parse_json_response(response)
        return to_extraction_result(payload)


def to_extraction_result(payload: dict) -> ExtractionResult:
    """Validate a raw payload, dropping entities that fail validation."""
    entities: list[ExtractedEntity] = []
    raw_entities = payload.get("entities") or []
    if not isinstance(raw_entities, list):
        logger.warning("Ignoring non-list 'entities' field: %r", type(raw_entities).__name__)
        raw_entities = []

    for raw in raw_entities:
        try:
            entities.append(ExtractedEntity.model_validate(raw))
        except ValidationError as e:
            logger.warning("Dropping malformed entity %r: %s", raw, e.errors()[0]["msg"])

    summary = payload.get("summary")
    return ExtractionResult(
        entities=entities,
        summary=summary if isinstance(summary, str) else "",
    )

"""Flashcard synthesis as an ordered chain of degrading strategies."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from cramfast.domain.errors import (
    GenerationFailed,
    classify_provider_error,
    is_fatal_provider_error,
)
from cramfast.domain.flashcards import FlashcardSetPayload, GenerationResult
from cramfast.services.aggregator import truncate_document
from cramfast.services.fallback import FALLBACK_TOPIC, build_fallback_flashcards
from cramfast.services.filtering import FilterRules, normalize_and_filter
from cramfast.services.model_client import ModelClient

_logger = logging.getLogger(__name__)

REFUSAL_PHRASES: tuple[str, ...] = (
    "i'm sorry",
    "i am sorry",
    "i cannot assist",
    "i can't assist",
    "i can't help with",
    "i cannot help with",
    "i'm unable to",
    "i am unable to",
    "as an ai",
)

FLASHCARD_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "topic": {"type": "string"},
        "flashcards": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "front": {"type": "string"},
                    "back": {"type": "string"},
                },
                "required": ["front", "back"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["topic", "flashcards"],
    "additionalProperties": False,
}

SYNTHESIS_SYSTEM_PROMPT = (
    "You create memorizable study flashcards from handwritten notes. "
    "Every front must be a clear, specific question ending with '?'. "
    "Every back must be a direct, concise answer (1-3 sentences). "
    "Do not repeat questions and avoid generic cards such as "
    "'What is the key point?' or 'Key concept'. "
    "The notes are split into pages marked '=== PAGE n START ===' and "
    "'=== PAGE n END ==='; cover material from every page, not only the first. "
    "Set topic to a short title for the notes."
)
JSON_MODE_SYSTEM_PROMPT = (
    SYNTHESIS_SYSTEM_PROMPT
    + " Return JSON only with keys: topic, flashcards[].front, flashcards[].back."
)


def build_synthesis_prompt(document: str) -> str:
    return (
        "Create 8-15 exam-ready question-and-answer flashcards "
        "from these notes.\n\n" + document
    )


def is_refusal(text: str, phrases: tuple[str, ...] = REFUSAL_PHRASES) -> bool:
    """Return whether a raw model response is a refusal."""
    lowered = text.strip().lower()
    return any(phrase in lowered for phrase in phrases)


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[-1]
        cleaned = cleaned.removesuffix("```")
    return cleaned.strip()


@dataclass(frozen=True)
class StrategyOutcome:
    """Result of one strategy: either a result or the reason it gave up."""

    result: GenerationResult | None = None
    reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.result is not None


class SynthesisStrategy(Protocol):
    """A single way of turning a document into flashcards."""

    name: str

    async def run(self, document: str) -> StrategyOutcome:
        """Attempt synthesis for the document."""


@dataclass
class _ModelStrategy:
    client: ModelClient
    model: str
    rules: FilterRules = field(default_factory=FilterRules)
    min_cards: int = 6
    name: str = "model"

    def _evaluate(self, raw: str) -> StrategyOutcome:
        """Validate a raw response against refusal, schema and quality checks.

        Refusal phrases are only matched against bodies that are not a JSON
        object, so a well-formed card set that mentions a phrase is kept.
        Null fields in the payload are read as empty strings and left to the
        filter.
        """
        if not raw or not raw.strip():
            return StrategyOutcome(reason="empty response")
        body = _strip_code_fence(raw)
        if not body.startswith("{") and is_refusal(body):
            return StrategyOutcome(reason="refusal")
        try:
            payload = FlashcardSetPayload.model_validate_json(body)
        except ValidationError:
            return StrategyOutcome(reason="malformed json")
        cards = normalize_and_filter(payload.to_flashcards(), self.rules)
        if len(cards) < self.min_cards:
            return StrategyOutcome(
                reason=f"only {len(cards)} usable cards (need {self.min_cards})"
            )
        topic = payload.topic.strip() or FALLBACK_TOPIC
        return StrategyOutcome(result=GenerationResult(topic=topic, flashcards=cards))

    async def _attempt(
        self, call: Callable[[], Awaitable[str]], attempt_label: str
    ) -> StrategyOutcome:
        try:
            raw = await call()
        except Exception as exc:
            error = classify_provider_error(exc)
            if is_fatal_provider_error(error):
                raise error from exc
            _logger.warning("%s %s failed: %s", self.name, attempt_label, exc)
            return StrategyOutcome(reason=f"provider error: {error.message}")
        outcome = self._evaluate(raw)
        if not outcome.accepted:
            _logger.info(
                "%s %s rejected: %s", self.name, attempt_label, outcome.reason
            )
        return outcome


@dataclass
class StructuredOutputStrategy(_ModelStrategy):
    """Schema-constrained generation with bounded retries."""

    max_retries: int = 2
    name: str = "structured"

    async def run(self, document: str) -> StrategyOutcome:
        """Try schema-constrained output until the quality gate passes."""
        outcome = StrategyOutcome(reason="no attempts")
        for attempt in range(1, self.max_retries + 1):
            outcome = await self._attempt(
                lambda: self.client.complete_structured(
                    model=self.model,
                    system_prompt=SYNTHESIS_SYSTEM_PROMPT,
                    user_prompt=build_synthesis_prompt(document),
                    schema=FLASHCARD_SCHEMA,
                    schema_name="flashcards_schema",
                    temperature=0,
                ),
                f"attempt {attempt}/{self.max_retries}",
            )
            if outcome.accepted:
                return outcome
        return outcome


@dataclass
class JsonObjectStrategy(_ModelStrategy):
    """Single request in the provider's free JSON-object mode."""

    name: str = "json_object"

    async def run(self, document: str) -> StrategyOutcome:
        """Ask once for a JSON object and apply the quality gate."""
        return await self._attempt(
            lambda: self.client.complete_json(
                model=self.model,
                system_prompt=JSON_MODE_SYSTEM_PROMPT,
                user_prompt=build_synthesis_prompt(document),
                temperature=0,
            ),
            "attempt",
        )


@dataclass
class FallbackStrategy:
    """Model-free cards built from transcript sentences."""

    rules: FilterRules = field(default_factory=FilterRules)
    min_fragment_chars: int = 24
    limit: int = 8
    name: str = "fallback"

    async def run(self, document: str) -> StrategyOutcome:
        """Build placeholder cards; accept any non-empty filtered set."""
        candidate = build_fallback_flashcards(
            document, min_fragment_chars=self.min_fragment_chars, limit=self.limit
        )
        cards = normalize_and_filter(candidate.flashcards, self.rules)
        if not cards:
            return StrategyOutcome(reason="no usable fragments")
        return StrategyOutcome(
            result=GenerationResult(topic=candidate.topic, flashcards=cards)
        )


@dataclass
class SynthesisService:
    """Runs strategies in order until one yields an accepted result."""

    strategies: Sequence[SynthesisStrategy]
    max_document_chars: int = 12000

    async def synthesize(self, document: str) -> GenerationResult:
        """Return the first accepted result or raise GenerationFailed."""
        bounded = truncate_document(document, self.max_document_chars)
        reasons: list[str] = []
        for strategy in self.strategies:
            outcome = await strategy.run(bounded)
            if outcome.result is not None:
                _logger.info(
                    "Synthesis accepted from %s with %s cards",
                    strategy.name,
                    len(outcome.result.flashcards),
                )
                return outcome.result
            reasons.append(f"{strategy.name}: {outcome.reason}")
        raise GenerationFailed("; ".join(reasons) or "no synthesis strategies")

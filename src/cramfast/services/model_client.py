"""Interface for the language model provider."""

from typing import Protocol


class ModelClient(Protocol):
    """Model calls used by transcription and flashcard synthesis."""

    async def complete_text(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_url: str | None,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """Return free text for a prompt with an optional image."""

    async def complete_structured(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        schema: dict[str, object],
        schema_name: str,
        temperature: float,
    ) -> str:
        """Return schema-constrained JSON text, or the refusal text."""

    async def complete_json(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
    ) -> str:
        """Return a JSON object as text in free JSON mode."""

"""OpenAI client for transcription and flashcard synthesis."""

from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from cramfast.services.model_client import ModelClient


@dataclass
class OpenAIModelClient(ModelClient):
    """Model client backed by the OpenAI Chat Completions and Responses APIs."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float = 60.0) -> "OpenAIModelClient":
        """Create an OpenAI client with a managed httpx session."""
        http_client = httpx.AsyncClient(timeout=timeout_seconds)
        return cls(client=AsyncOpenAI(api_key=api_key, http_client=http_client))

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
        """Call Chat Completions with an optional image and return the text."""
        content: list[dict[str, object]] = [{"type": "text", "text": user_prompt}]
        if image_url:
            content.append({"type": "image_url", "image_url": {"url": image_url}})
        response = await self.client.chat.completions.create(
            model=model,
            temperature=temperature,
            max_tokens=max_output_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": content},
            ],
        )
        return _first_message_content(response)

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
        """Call the Responses API with a strict JSON schema.

        Returns the JSON text, or the refusal message when the model declines.
        """
        response = await self.client.responses.create(
            model=model,
            temperature=temperature,
            input=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            text={
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            store=False,
        )
        output_text = response.output_text
        if output_text:
            return output_text
        return _refusal_text(response)

    async def complete_json(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
    ) -> str:
        """Call Chat Completions in JSON-object mode."""
        response = await self.client.chat.completions.create(
            model=model,
            temperature=temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        return _first_message_content(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def _first_message_content(response: object) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None) or getattr(message, "refusal", None) or ""


def _refusal_text(response: object) -> str:
    """Collect refusal parts from a Responses API output."""
    parts: list[str] = []
    for item in getattr(response, "output", None) or []:
        for part in getattr(item, "content", None) or []:
            if getattr(part, "type", None) == "refusal":
                parts.append(getattr(part, "refusal", "") or "")
    return " ".join(parts).strip()

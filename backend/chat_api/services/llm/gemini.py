"""Google Gemini LLM provider."""

from typing import AsyncIterator

import httpx
from google import genai
from google.genai import errors, types

from chat_api.core.config import settings
from chat_api.core.errors import ConfigurationError
from chat_api.services.llm.base import BaseLLMProvider, Message, ProviderError


def _to_gemini(messages: list[Message]) -> tuple[str | None, list[dict]]:
    """Split out system turns; Gemini takes them as a system instruction."""
    system = "\n\n".join(m.content for m in messages if m.role == "system") or None
    contents = [
        {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
        for m in messages
        if m.role != "system"
    ]
    return system, contents


class GeminiProvider(BaseLLMProvider):
    def __init__(self):
        if not settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set")
        self.client = genai.Client(api_key=settings.gemini_api_key)

    def _config(self, system: str | None, temperature: float, max_tokens: int) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=system,
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

    async def complete(
        self, messages: list[Message], model: str, temperature: float, max_tokens: int
    ) -> str:
        system, contents = _to_gemini(messages)
        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=self._config(system, temperature, max_tokens),
            )
        except (errors.APIError, httpx.HTTPError) as e:
            raise ProviderError(str(e)) from e
        return response.text or ""

    async def stream(
        self, messages: list[Message], model: str, temperature: float, max_tokens: int
    ) -> AsyncIterator[str]:
        system, contents = _to_gemini(messages)
        try:
            response = await self.client.aio.models.generate_content_stream(
                model=model,
                contents=contents,
                config=self._config(system, temperature, max_tokens),
            )
        except (errors.APIError, httpx.HTTPError) as e:
            raise ProviderError(str(e)) from e
        return self._fragments(response)

    async def _fragments(self, response) -> AsyncIterator[str]:
        try:
            async for chunk in response:
                if chunk.text:
                    yield chunk.text
        except (errors.APIError, httpx.HTTPError) as e:
            raise ProviderError(str(e)) from e

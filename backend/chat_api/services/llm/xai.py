"""xAI Grok provider over the OpenAI-compatible chat completions API."""

import logging
from typing import AsyncIterator

import openai

from chat_api.core.config import settings
from chat_api.core.errors import ConfigurationError
from chat_api.services.llm.base import BaseLLMProvider, Message, ProviderError

logger = logging.getLogger(__name__)


def _to_openai_messages(messages: list[Message]) -> list[dict]:
    return [{"role": m.role, "content": m.content} for m in messages]


class XAIProvider(BaseLLMProvider):
    def __init__(self):
        if not settings.xai_api_key:
            raise ConfigurationError("XAI_API_KEY is not set")
        self._client = openai.AsyncOpenAI(api_key=settings.xai_api_key, base_url=settings.xai_base_url)

    async def complete(
        self, messages: list[Message], model: str, temperature: float, max_tokens: int
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=_to_openai_messages(messages),
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            raise ProviderError(str(e)) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def stream(
        self, messages: list[Message], model: str, temperature: float, max_tokens: int
    ) -> AsyncIterator[str]:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=_to_openai_messages(messages),
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
        except openai.OpenAIError as e:
            raise ProviderError(str(e)) from e
        return self._fragments(response)

    async def _fragments(self, response) -> AsyncIterator[str]:
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        except openai.OpenAIError as e:
            logger.debug(f"xAI stream interrupted: {e}")
            raise ProviderError(str(e)) from e

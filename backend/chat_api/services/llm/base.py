"""Abstract LLM provider interface. All providers must implement this."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator


class ProviderError(Exception):
    """The upstream completion API failed."""


@dataclass
class Message:
    role: str  # "user" | "assistant" | "system"
    content: str


class BaseLLMProvider(ABC):
    @abstractmethod
    async def complete(
        self, messages: list[Message], model: str, temperature: float, max_tokens: int
    ) -> str:
        """Return the full completion text for the conversation."""
        ...

    @abstractmethod
    async def stream(
        self, messages: list[Message], model: str, temperature: float, max_tokens: int
    ) -> AsyncIterator[str]:
        """Open a streaming completion and return its text fragments.

        Awaiting this opens the upstream request, so connection and
        authentication failures raise here rather than on the first fragment.
        The returned iterator is finite and can only be consumed once.
        """
        ...

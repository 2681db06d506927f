"""Abstract persistence store for chat sessions and their messages."""

from abc import ABC, abstractmethod
from typing import Any

from chat_api.services.llm.base import Message


class PersistenceError(Exception):
    pass


class PersistenceStore(ABC):
    """Sessions are owned by one user; a session exclusively owns its messages.

    Deletes always remove the messages before the session row.
    """

    @abstractmethod
    async def create_session(self, user_id: str, title: str) -> str:
        """Create a session and return its identifier."""
        ...

    @abstractmethod
    async def get_session(self, session_id: str, user_id: str) -> dict[str, Any] | None:
        """Return the session if it exists and belongs to ``user_id``."""
        ...

    @abstractmethod
    async def insert_messages(self, session_id: str, messages: list[Message]) -> None:
        """Append messages to a session, preserving their order."""
        ...

    @abstractmethod
    async def list_sessions(self, user_id: str) -> list[dict[str, Any]]:
        """Sessions of a user, newest first, each with its messages oldest first."""
        ...

    @abstractmethod
    async def delete_session(self, session_id: str, user_id: str) -> bool:
        """Delete one owned session. Returns False if it was not found."""
        ...

    @abstractmethod
    async def delete_all_sessions(self, user_id: str) -> None:
        ...

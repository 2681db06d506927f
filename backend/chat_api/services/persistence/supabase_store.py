"""Supabase-backed persistence store (tables ``chats`` and ``messages``)."""

import logging
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from chat_api.services.llm.base import Message
from chat_api.services.persistence.base import PersistenceError, PersistenceStore

logger = logging.getLogger(__name__)

_ERRORS = (APIError, httpx.HTTPError)


class SupabasePersistenceStore(PersistenceStore):
    CHATS = "chats"
    MESSAGES = "messages"

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def create_session(self, user_id: str, title: str) -> str:
        try:
            result = await (
                self._client.table(self.CHATS)
                .insert({"user_id": user_id, "title": title})
                .execute()
            )
        except _ERRORS as e:
            raise PersistenceError(f"Failed to create chat: {e}") from e
        if not result.data:
            raise PersistenceError("Failed to create chat: no row returned")
        return result.data[0]["id"]

    async def get_session(self, session_id: str, user_id: str) -> dict[str, Any] | None:
        try:
            result = await (
                self._client.table(self.CHATS)
                .select("id, title, created_at")
                .eq("id", session_id)
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        except _ERRORS as e:
            raise PersistenceError(f"Failed to fetch chat: {e}") from e
        return result.data[0] if result.data else None

    async def insert_messages(self, session_id: str, messages: list[Message]) -> None:
        rows = [{"chat_id": session_id, "role": m.role, "content": m.content} for m in messages]
        try:
            await self._client.table(self.MESSAGES).insert(rows).execute()
        except _ERRORS as e:
            raise PersistenceError(f"Failed to save messages: {e}") from e

    async def list_sessions(self, user_id: str) -> list[dict[str, Any]]:
        try:
            result = await (
                self._client.table(self.CHATS)
                .select("id, title, created_at, messages(id, role, content, created_at)")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except _ERRORS as e:
            raise PersistenceError(f"Failed to fetch chat history: {e}") from e

        sessions = result.data or []
        for chat in sessions:
            chat["messages"] = sorted(chat.get("messages") or [], key=lambda m: (m["created_at"], m["id"]))
        return sessions

    async def delete_session(self, session_id: str, user_id: str) -> bool:
        if await self.get_session(session_id, user_id) is None:
            return False
        try:
            await self._client.table(self.MESSAGES).delete().eq("chat_id", session_id).execute()
            await self._client.table(self.CHATS).delete().eq("id", session_id).execute()
        except _ERRORS as e:
            raise PersistenceError(f"Failed to delete chat: {e}") from e
        logger.debug(f"Deleted chat {session_id}")
        return True

    async def delete_all_sessions(self, user_id: str) -> None:
        try:
            result = await (
                self._client.table(self.CHATS).select("id").eq("user_id", user_id).execute()
            )
            chat_ids = [row["id"] for row in result.data or []]
            if not chat_ids:
                return
            await self._client.table(self.MESSAGES).delete().in_("chat_id", chat_ids).execute()
            await self._client.table(self.CHATS).delete().eq("user_id", user_id).execute()
        except _ERRORS as e:
            raise PersistenceError(f"Failed to delete chats: {e}") from e
        logger.debug(f"Deleted {len(chat_ids)} chats for user {user_id}")

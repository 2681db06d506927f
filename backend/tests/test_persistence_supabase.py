"""Unit tests for SupabasePersistenceStore against a mocked client."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, call

import pytest
from postgrest.exceptions import APIError

from chat_api.services.llm.base import Message
from chat_api.services.persistence.base import PersistenceError
from chat_api.services.persistence.supabase_store import SupabasePersistenceStore


def _result(data):
    result = MagicMock()
    result.data = data
    return result


@pytest.fixture
def mock_supabase_client():
    return MagicMock()


@pytest.fixture
def supabase_store(mock_supabase_client):
    return SupabasePersistenceStore(mock_supabase_client)


def _owned_chat(mock_client, data):
    """Set up the select chain used by get_session."""
    chain = mock_client.table.return_value.select.return_value.eq.return_value.eq.return_value.limit.return_value
    chain.execute = AsyncMock(return_value=_result(data))
    return chain


class TestCreateSession:
    def test_inserts_owner_and_title(self, supabase_store, mock_supabase_client):
        insert = mock_supabase_client.table.return_value.insert
        insert.return_value.execute = AsyncMock(return_value=_result([{"id": "chat-1"}]))

        chat_id = asyncio.run(supabase_store.create_session("alice", "Tides"))

        assert chat_id == "chat-1"
        mock_supabase_client.table.assert_called_once_with("chats")
        insert.assert_called_once_with({"user_id": "alice", "title": "Tides"})

    def test_api_error_becomes_persistence_error(self, supabase_store, mock_supabase_client):
        insert = mock_supabase_client.table.return_value.insert
        insert.return_value.execute = AsyncMock(side_effect=APIError({"message": "boom", "code": "500"}))

        with pytest.raises(PersistenceError):
            asyncio.run(supabase_store.create_session("alice", "Tides"))

    def test_empty_result_is_an_error(self, supabase_store, mock_supabase_client):
        insert = mock_supabase_client.table.return_value.insert
        insert.return_value.execute = AsyncMock(return_value=_result([]))

        with pytest.raises(PersistenceError):
            asyncio.run(supabase_store.create_session("alice", "Tides"))


class TestInsertMessages:
    def test_rows_are_tagged_with_chat_id(self, supabase_store, mock_supabase_client):
        insert = mock_supabase_client.table.return_value.insert
        insert.return_value.execute = AsyncMock(return_value=_result([]))

        asyncio.run(supabase_store.insert_messages("chat-1", [
            Message(role="user", content="hi there"),
            Message(role="assistant", content="hello"),
        ]))

        mock_supabase_client.table.assert_called_once_with("messages")
        insert.assert_called_once_with([
            {"chat_id": "chat-1", "role": "user", "content": "hi there"},
            {"chat_id": "chat-1", "role": "assistant", "content": "hello"},
        ])


class TestGetSession:
    def test_filters_by_id_and_owner(self, supabase_store, mock_supabase_client):
        _owned_chat(mock_supabase_client, [{"id": "chat-1", "title": "T", "created_at": "2026-01-01"}])

        chat = asyncio.run(supabase_store.get_session("chat-1", "alice"))

        assert chat["id"] == "chat-1"
        select = mock_supabase_client.table.return_value.select
        select.return_value.eq.assert_called_once_with("id", "chat-1")
        select.return_value.eq.return_value.eq.assert_called_once_with("user_id", "alice")

    def test_missing_returns_none(self, supabase_store, mock_supabase_client):
        _owned_chat(mock_supabase_client, [])
        assert asyncio.run(supabase_store.get_session("chat-1", "bob")) is None


class TestListSessions:
    def test_messages_sorted_oldest_first(self, supabase_store, mock_supabase_client):
        chain = mock_supabase_client.table.return_value.select.return_value.eq.return_value.order.return_value
        chain.execute = AsyncMock(return_value=_result([
            {
                "id": "chat-1",
                "title": "T",
                "created_at": "2026-01-01T00:00:00",
                "messages": [
                    {"id": 2, "role": "assistant", "content": "b", "created_at": "2026-01-01T00:00:02"},
                    {"id": 1, "role": "user", "content": "a", "created_at": "2026-01-01T00:00:01"},
                ],
            },
        ]))

        sessions = asyncio.run(supabase_store.list_sessions("alice"))

        assert [m["content"] for m in sessions[0]["messages"]] == ["a", "b"]
        mock_supabase_client.table.return_value.select.return_value.eq.assert_called_once_with(
            "user_id", "alice"
        )
        mock_supabase_client.table.return_value.select.return_value.eq.return_value.order.assert_called_once_with(
            "created_at", desc=True
        )

    def test_same_timestamp_keeps_insertion_order(self, supabase_store, mock_supabase_client):
        chain = mock_supabase_client.table.return_value.select.return_value.eq.return_value.order.return_value
        chain.execute = AsyncMock(return_value=_result([
            {
                "id": "chat-1",
                "title": "T",
                "created_at": "2026-01-01T00:00:00",
                "messages": [
                    {"id": 2, "role": "assistant", "content": "reply", "created_at": "2026-01-01T00:00:01"},
                    {"id": 1, "role": "user", "content": "question", "created_at": "2026-01-01T00:00:01"},
                ],
            },
        ]))

        sessions = asyncio.run(supabase_store.list_sessions("alice"))

        assert [m["content"] for m in sessions[0]["messages"]] == ["question", "reply"]


class TestDeleteSession:
    def test_deletes_messages_before_chat(self, supabase_store, mock_supabase_client):
        _owned_chat(mock_supabase_client, [{"id": "chat-1"}])
        delete = mock_supabase_client.table.return_value.delete
        delete.return_value.eq.return_value.execute = AsyncMock(return_value=_result([]))

        assert asyncio.run(supabase_store.delete_session("chat-1", "alice")) is True

        assert mock_supabase_client.table.call_args_list == [
            call("chats"),
            call("messages"),
            call("chats"),
        ]
        assert delete.return_value.eq.call_args_list == [
            call("chat_id", "chat-1"),
            call("id", "chat-1"),
        ]

    def test_not_owned_is_not_deleted(self, supabase_store, mock_supabase_client):
        _owned_chat(mock_supabase_client, [])

        assert asyncio.run(supabase_store.delete_session("chat-1", "bob")) is False
        mock_supabase_client.table.return_value.delete.assert_not_called()


class TestDeleteAllSessions:
    def test_deletes_messages_of_every_chat_first(self, supabase_store, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        table.select.return_value.eq.return_value.execute = AsyncMock(
            return_value=_result([{"id": "c1"}, {"id": "c2"}])
        )
        table.delete.return_value.in_.return_value.execute = AsyncMock(return_value=_result([]))
        table.delete.return_value.eq.return_value.execute = AsyncMock(return_value=_result([]))

        asyncio.run(supabase_store.delete_all_sessions("alice"))

        table.delete.return_value.in_.assert_called_once_with("chat_id", ["c1", "c2"])
        table.delete.return_value.eq.assert_called_once_with("user_id", "alice")
        assert mock_supabase_client.table.call_args_list == [
            call("chats"),
            call("messages"),
            call("chats"),
        ]

    def test_no_chats_means_no_deletes(self, supabase_store, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        table.select.return_value.eq.return_value.execute = AsyncMock(return_value=_result([]))

        asyncio.run(supabase_store.delete_all_sessions("alice"))

        table.delete.assert_not_called()

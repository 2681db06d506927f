"""Relay a completion to the caller and save the exchange to chat history.

Streams are framed as server-sent events::

    data: {"choices": [{"delta": {"content": "<fragment>"}}]}

    data: [DONE]

A provider failure after the stream has started is reported inline as
``data: {"error": "Stream failed: ..."}`` because the status line is already
sent. Saving happens only for authenticated callers and never changes what
the caller receives.
"""

import json
import logging
from typing import AsyncIterator

from chat_api.services.llm.base import Message
from chat_api.services.persistence.base import PersistenceError, PersistenceStore
from chat_api.services.titles import title_for_messages

logger = logging.getLogger(__name__)

DONE_EVENT = "data: [DONE]\n\n"


def sse_event(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


async def persist_exchange(
    store: PersistenceStore,
    user_id: str,
    messages: list[Message],
    reply: str,
    session_id: str | None,
) -> tuple[str, str | None]:
    """Save one request/reply exchange and return ``(session_id, new_title)``.

    Without a session id a new session is created, titled from the first user
    message, holding every request message plus the reply. With one, only the
    last request message and the reply are appended and the title is left
    alone.
    """
    assistant = Message(role="assistant", content=reply)

    if not session_id:
        title = title_for_messages(messages)
        new_id = await store.create_session(user_id, title)
        await store.insert_messages(new_id, [*messages, assistant])
        logger.debug(f"Created chat {new_id} ({len(messages) + 1} messages)")
        return new_id, title

    if await store.get_session(session_id, user_id) is None:
        raise PersistenceError(f"Chat {session_id} not found for user {user_id}")
    await store.insert_messages(session_id, [messages[-1], assistant])
    return session_id, None


async def save_exchange(
    store: PersistenceStore,
    user_id: str,
    messages: list[Message],
    reply: str,
    session_id: str | None,
) -> tuple[str | None, str | None]:
    """Like persist_exchange, but failures are logged and the input id returned."""
    try:
        return await persist_exchange(store, user_id, messages, reply, session_id)
    except PersistenceError as e:
        logger.error(f"Error saving chat: {e}")
    except Exception:
        logger.exception("Unexpected error saving chat")
    return session_id, None


class StreamRelay:
    """Forward provider fragments as events while accumulating the full text."""

    def __init__(self, fragments: AsyncIterator[str]):
        self._fragments = fragments
        self._parts: list[str] = []
        self.completed = False

    @property
    def text(self) -> str:
        return "".join(self._parts)

    async def events(self) -> AsyncIterator[str]:
        try:
            async for fragment in self._fragments:
                if not fragment:
                    continue
                self._parts.append(fragment)
                yield sse_event({"choices": [{"delta": {"content": fragment}}]})
        except Exception as e:
            logger.error(f"Stream error: {e}")
            yield sse_event({"error": f"Stream failed: {e}"})
            return

        self.completed = True
        yield DONE_EVENT


async def save_after_stream(
    relay: StreamRelay,
    store: PersistenceStore,
    user_id: str,
    messages: list[Message],
    session_id: str | None,
) -> None:
    """Background save run once the stream is closed; failures only get logged."""
    if not relay.completed:
        logger.info("Stream did not reach [DONE]; not saving")
        return
    try:
        new_id, _ = await persist_exchange(store, user_id, messages, relay.text, session_id)
        logger.debug(f"Saved streamed exchange to chat {new_id}")
    except Exception:
        logger.exception("Error saving streamed chat")

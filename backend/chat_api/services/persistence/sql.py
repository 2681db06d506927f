"""SQLModel-backed persistence store."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from chat_api.models.chat import ChatMessage, ChatSession
from chat_api.services.llm.base import Message
from chat_api.services.persistence.base import PersistenceError, PersistenceStore

logger = logging.getLogger(__name__)


def _session_dict(chat: ChatSession) -> dict[str, Any]:
    return {
        "id": chat.id,
        "title": chat.title,
        "created_at": chat.created_at.isoformat(),
    }


def _message_dict(msg: ChatMessage) -> dict[str, Any]:
    return {
        "id": msg.id,
        "role": msg.role,
        "content": msg.content,
        "created_at": msg.created_at.isoformat(),
    }


class SQLPersistenceStore(PersistenceStore):
    def __init__(self, engine):
        self._engine = engine

    async def create_session(self, user_id: str, title: str) -> str:
        try:
            with Session(self._engine) as session:
                chat = ChatSession(user_id=user_id, title=title)
                session.add(chat)
                session.commit()
                session.refresh(chat)
                return chat.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create chat: {e}") from e

    async def get_session(self, session_id: str, user_id: str) -> dict[str, Any] | None:
        try:
            with Session(self._engine) as session:
                chat = session.exec(
                    select(ChatSession)
                    .where(ChatSession.id == session_id)
                    .where(ChatSession.user_id == user_id)
                ).first()
                return _session_dict(chat) if chat else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch chat: {e}") from e

    async def insert_messages(self, session_id: str, messages: list[Message]) -> None:
        try:
            with Session(self._engine) as session:
                for m in messages:
                    session.add(ChatMessage(chat_id=session_id, role=m.role, content=m.content))
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save messages: {e}") from e

    async def list_sessions(self, user_id: str) -> list[dict[str, Any]]:
        try:
            with Session(self._engine) as session:
                chats = session.exec(
                    select(ChatSession)
                    .where(ChatSession.user_id == user_id)
                    .order_by(ChatSession.created_at.desc())  # type: ignore
                ).all()
                result = []
                for chat in chats:
                    messages = session.exec(
                        select(ChatMessage)
                        .where(ChatMessage.chat_id == chat.id)
                        .order_by(ChatMessage.created_at, ChatMessage.id)  # type: ignore
                    ).all()
                    result.append({**_session_dict(chat), "messages": [_message_dict(m) for m in messages]})
                return result
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch chat history: {e}") from e

    async def delete_session(self, session_id: str, user_id: str) -> bool:
        try:
            with Session(self._engine) as session:
                chat = session.exec(
                    select(ChatSession)
                    .where(ChatSession.id == session_id)
                    .where(ChatSession.user_id == user_id)
                ).first()
                if not chat:
                    return False
                self._delete_chats(session, [chat])
                session.commit()
                logger.debug(f"Deleted chat {session_id}")
                return True
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete chat: {e}") from e

    async def delete_all_sessions(self, user_id: str) -> None:
        try:
            with Session(self._engine) as session:
                chats = session.exec(select(ChatSession).where(ChatSession.user_id == user_id)).all()
                self._delete_chats(session, list(chats))
                session.commit()
                logger.debug(f"Deleted {len(chats)} chats for user {user_id}")
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete chats: {e}") from e

    def _delete_chats(self, session: Session, chats: list[ChatSession]) -> None:
        if not chats:
            return
        ids = [chat.id for chat in chats]
        messages = session.exec(
            select(ChatMessage).where(ChatMessage.chat_id.in_(ids))  # type: ignore
        ).all()
        for msg in messages:
            session.delete(msg)
        # Messages must be gone before their chat
        session.flush()
        for chat in chats:
            session.delete(chat)

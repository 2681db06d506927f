"""REST API for the caller's chat history."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from chat_api.api.deps import get_current_identity
from chat_api.services.identity.base import Identity
from chat_api.services.persistence import get_persistence_store
from chat_api.services.persistence.base import PersistenceError, PersistenceStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def list_history(
    identity: Identity = Depends(get_current_identity),
    store: PersistenceStore = Depends(get_persistence_store),
):
    try:
        sessions = await store.list_sessions(identity.uid)
    except PersistenceError as e:
        logger.error(f"Error fetching chats: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch chat history")
    return {"sessions": sessions}


@router.delete("")
async def delete_history(
    session_id: str | None = Query(None, alias="sessionId"),
    identity: Identity = Depends(get_current_identity),
    store: PersistenceStore = Depends(get_persistence_store),
):
    """Delete one chat (``?sessionId=``) or every chat of the caller."""
    if session_id:
        try:
            deleted = await store.delete_session(session_id, identity.uid)
        except PersistenceError as e:
            logger.error(f"Error deleting chat {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete chat")
        if not deleted:
            logger.debug(f"Delete: chat {session_id} not found for {identity.uid}")
            raise HTTPException(status_code=404, detail="Chat not found")
        return {"success": True}

    try:
        await store.delete_all_sessions(identity.uid)
    except PersistenceError as e:
        logger.error(f"Error deleting chats: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete chats")
    return {"success": True}

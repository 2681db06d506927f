"""Chat completion relay: buffered JSON or server-sent event stream."""

import logging
from typing import Callable

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError
from starlette.background import BackgroundTask

from chat_api.api.deps import authenticate
from chat_api.core.config import settings
from chat_api.services.identity import get_identity_verifier
from chat_api.services.identity.base import IdentityVerifier
from chat_api.services.llm import get_provider_factory
from chat_api.services.llm.base import BaseLLMProvider, Message, ProviderError
from chat_api.services.llm.models import DEFAULT_MODEL, LANGUAGE_MODELS, resolve_model
from chat_api.services.persistence import get_persistence_store
from chat_api.services.persistence.base import PersistenceStore
from chat_api.services.relay import StreamRelay, save_after_stream, save_exchange
from chat_api.services.titles import generate_chat_title

logger = logging.getLogger(__name__)

router = APIRouter()

ROLES = ("system", "user", "assistant")

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class InputMessage(BaseModel):
    role: str = Field(default=None, validate_default=True)
    content: str = Field(default=None, validate_default=True)

    @field_validator("role", mode="before")
    @classmethod
    def _check_role(cls, v):
        if v not in ROLES:
            raise PydanticCustomError("chat_role", "Invalid message role: {role}", {"role": v})
        return v

    @field_validator("content", mode="before")
    @classmethod
    def _check_content(cls, v):
        if not isinstance(v, str) or not v:
            raise PydanticCustomError("chat_content", "Message content must be non-empty text")
        return v


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[InputMessage] = Field(default=None, validate_default=True)
    model: str = DEFAULT_MODEL
    stream: bool = True
    user_id: str | None = Field(default=None, alias="userId")
    session_id: str | None = Field(default=None, alias="sessionId")

    @field_validator("messages", mode="before")
    @classmethod
    def _check_messages(cls, v):
        if not isinstance(v, list) or not v:
            raise PydanticCustomError("chat_messages", "Messages are required and must be an array")
        return v

    @field_validator("model")
    @classmethod
    def _check_model(cls, v):
        if resolve_model(v) is None:
            raise PydanticCustomError("chat_model", "Invalid model: {model}", {"model": v})
        return v


class TitleRequest(BaseModel):
    content: str


@router.post("")
async def chat_completion(
    body: ChatRequest,
    authorization: str | None = Header(None),
    verifier: IdentityVerifier | None = Depends(get_identity_verifier),
    store: PersistenceStore = Depends(get_persistence_store),
    provider_factory: Callable[[str], BaseLLMProvider] = Depends(get_provider_factory),
):
    verified_user_id: str | None = None
    if body.user_id:
        identity = await authenticate(
            authorization, verifier, invalid_detail="Invalid or unauthorized token"
        )
        if identity.uid != body.user_id:
            logger.warning(f"Token subject {identity.uid} does not match userId {body.user_id}")
            raise HTTPException(status_code=401, detail="Invalid or unauthorized token")
        verified_user_id = identity.uid

    model_spec = LANGUAGE_MODELS[body.model]
    provider = provider_factory(model_spec.provider)
    messages = [Message(role=m.role, content=m.content) for m in body.messages]

    if body.stream:
        try:
            fragments = await provider.stream(
                messages, model_spec.upstream_id, settings.temperature, settings.max_tokens
            )
        except ProviderError as e:
            logger.error(f"Model initialization error: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to initialize AI model: {e}")

        relay = StreamRelay(fragments)
        background = None
        if verified_user_id:
            background = BackgroundTask(
                save_after_stream, relay, store, verified_user_id, messages, body.session_id
            )
        return StreamingResponse(
            relay.events(),
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
            background=background,
        )

    try:
        text = await provider.complete(
            messages, model_spec.upstream_id, settings.temperature, settings.max_tokens
        )
    except ProviderError as e:
        logger.error(f"Text generation error: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to generate response: {e}")

    session_id, session_title = body.session_id, None
    if verified_user_id:
        session_id, session_title = await save_exchange(
            store, verified_user_id, messages, text, body.session_id
        )

    return {
        "choices": [{"message": {"content": text}}],
        "sessionId": session_id,
        "sessionTitle": session_title,
    }


@router.post("/title")
async def preview_title(body: TitleRequest):
    """Preview the title a new chat starting with ``content`` would get."""
    return {"title": generate_chat_title(body.content)}

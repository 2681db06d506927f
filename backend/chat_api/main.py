import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_api.core.config import settings
from chat_api.core.database import init_db
from chat_api.core.errors import ConfigurationError, install_error_handlers
from chat_api.api import chat, history, verify_token
from chat_api.services.identity import init_identity_verifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configure logging based on debug setting
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s" if settings.debug
        else "%(levelname)-8s %(name)s: %(message)s",
    )

    if settings.persistence_backend == "sql":
        init_db()

    try:
        await init_identity_verifier()
    except ConfigurationError as e:
        # Anonymous chat keeps working; authenticated routes answer 500
        logger.warning(f"Identity verifier not configured: {e}")

    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(history.router, prefix="/api/chat-history", tags=["history"])
app.include_router(verify_token.router, prefix="/api/verify-token", tags=["auth"])


@app.get("/api/health")
async def health():
    return {"status": "ok", "app": settings.app_name}

"""Process-wide async Supabase client shared by the store and the verifier."""

import asyncio

from supabase import AsyncClient, create_async_client

from chat_api.core.config import settings
from chat_api.core.errors import ConfigurationError

_client: AsyncClient | None = None
_lock = asyncio.Lock()


async def get_supabase_client() -> AsyncClient:
    global _client

    if _client is not None:
        return _client

    async with _lock:
        # Another coroutine may have created it while we waited
        if _client is not None:
            return _client

        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        _client = await create_async_client(settings.supabase_url, settings.supabase_service_role_key)
        return _client

"""Persistence store factory."""

from chat_api.core.config import settings
from chat_api.services.persistence.base import PersistenceStore


async def get_persistence_store() -> PersistenceStore:
    """FastAPI dependency returning the configured store."""
    if settings.persistence_backend == "sql":
        from chat_api.core import database
        from chat_api.services.persistence.sql import SQLPersistenceStore
        return SQLPersistenceStore(database.engine)
    elif settings.persistence_backend == "supabase":
        from chat_api.core.supabase import get_supabase_client
        from chat_api.services.persistence.supabase_store import SupabasePersistenceStore
        return SupabasePersistenceStore(await get_supabase_client())
    else:
        raise ValueError(f"Unknown persistence backend: {settings.persistence_backend}")

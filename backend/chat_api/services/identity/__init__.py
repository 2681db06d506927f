"""Identity verifier, initialised once per process at startup."""

import logging

from chat_api.core.config import settings
from chat_api.services.identity.base import IdentityVerifier
from chat_api.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_verifier: IdentityVerifier | None = None


async def init_identity_verifier() -> IdentityVerifier:
    """Build the configured verifier. Repeated calls return the same instance."""
    global _verifier
    if _verifier is not None:
        return _verifier

    if settings.identity_provider == "firebase":
        if not settings.firebase_project_id:
            raise ConfigurationError("FIREBASE_PROJECT_ID is not set")
        from chat_api.services.identity.firebase import FirebaseIdentityVerifier
        _verifier = FirebaseIdentityVerifier(settings.firebase_project_id)
    elif settings.identity_provider == "supabase":
        from chat_api.core.supabase import get_supabase_client
        from chat_api.services.identity.supabase_auth import SupabaseIdentityVerifier
        _verifier = SupabaseIdentityVerifier(await get_supabase_client())
    else:
        raise ValueError(f"Unknown identity provider: {settings.identity_provider}")

    logger.info(f"Identity verifier ready ({settings.identity_provider})")
    return _verifier


def get_identity_verifier() -> IdentityVerifier | None:
    """FastAPI dependency returning the verifier built at startup, if any."""
    return _verifier

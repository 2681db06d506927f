"""Supabase Auth token verification."""

import logging

from supabase import AsyncClient

from chat_api.services.identity.base import AuthenticationError, Identity, IdentityVerifier

logger = logging.getLogger(__name__)


class SupabaseIdentityVerifier(IdentityVerifier):
    def __init__(self, client: AsyncClient):
        self._client = client

    async def verify(self, token: str) -> Identity:
        if not token:
            raise AuthenticationError("No token provided")

        try:
            response = await self._client.auth.get_user(token)
        except Exception as e:
            logger.debug(f"Supabase token rejected: {e}")
            raise AuthenticationError(str(e)) from e

        user = response.user if response else None
        if user is None:
            raise AuthenticationError("Invalid token")

        metadata = user.user_metadata or {}
        return Identity(
            uid=user.id,
            email=user.email,
            email_verified=user.email_confirmed_at is not None,
            display_name=metadata.get("full_name") or metadata.get("name"),
            photo_url=metadata.get("avatar_url"),
        )

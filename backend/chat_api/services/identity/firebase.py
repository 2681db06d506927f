"""Firebase ID token verification against Google's published signing keys."""

import logging
import time
from typing import Any

import httpx
from jose import JWTError, jwt

from chat_api.services.identity.base import AuthenticationError, Identity, IdentityVerifier

logger = logging.getLogger(__name__)

GOOGLE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)


class FirebaseIdentityVerifier(IdentityVerifier):
    def __init__(self, project_id: str, jwks_ttl_seconds: int = 3600):
        self._project_id = project_id
        self._issuer = f"https://securetoken.google.com/{project_id}"
        self._jwks_ttl_seconds = jwks_ttl_seconds
        self._jwks_cache: dict[str, Any] | None = None
        self._jwks_cache_expiry: float = 0.0

    async def _get_jwks(self) -> dict[str, Any]:
        now = time.time()
        if self._jwks_cache and now < self._jwks_cache_expiry:
            return self._jwks_cache

        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(GOOGLE_JWKS_URL)
            response.raise_for_status()
            jwks = response.json()

        self._jwks_cache = jwks
        self._jwks_cache_expiry = now + self._jwks_ttl_seconds
        return jwks

    async def _decode_token(self, token: str) -> dict[str, Any]:
        header = jwt.get_unverified_header(token)
        jwks = await self._get_jwks()
        key = None
        for candidate in jwks.get("keys", []):
            if candidate.get("kid") == header.get("kid"):
                key = candidate
                break
        if not key:
            raise JWTError("Signing key not found")

        return jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            audience=self._project_id,
            issuer=self._issuer,
        )

    async def verify(self, token: str) -> Identity:
        if not token:
            raise AuthenticationError("No token provided")

        try:
            claims = await self._decode_token(token)
        except (JWTError, httpx.HTTPError, ValueError) as e:
            logger.debug(f"Firebase token rejected: {e}")
            raise AuthenticationError(str(e)) from e

        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Token has no subject")

        return Identity(
            uid=subject,
            email=claims.get("email"),
            email_verified=bool(claims.get("email_verified", False)),
            display_name=claims.get("name"),
            photo_url=claims.get("picture"),
        )

"""Shared request dependencies: bearer authentication."""

import logging

from fastapi import Depends, Header, HTTPException

from chat_api.services.identity import get_identity_verifier
from chat_api.services.identity.base import AuthenticationError, Identity, IdentityVerifier, bearer_token

logger = logging.getLogger(__name__)


async def authenticate(
    authorization: str | None,
    verifier: IdentityVerifier | None,
    missing_detail: str = "Authentication token required",
    invalid_detail: str = "Invalid token",
) -> Identity:
    """Verify the bearer token of a request. Raises 401 on any failure."""
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail=missing_detail)
    if verifier is None:
        raise HTTPException(status_code=500, detail="Server configuration missing")

    try:
        return await verifier.verify(token)
    except AuthenticationError as e:
        logger.warning(f"Token verification failed: {e}")
        raise HTTPException(status_code=401, detail=invalid_detail)


async def get_current_identity(
    authorization: str | None = Header(None),
    verifier: IdentityVerifier | None = Depends(get_identity_verifier),
) -> Identity:
    return await authenticate(authorization, verifier)

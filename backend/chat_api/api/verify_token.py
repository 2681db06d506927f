from fastapi import APIRouter, Depends, Header

from chat_api.api.deps import authenticate
from chat_api.services.identity import get_identity_verifier
from chat_api.services.identity.base import IdentityVerifier

router = APIRouter()


@router.post("")
async def verify_token(
    authorization: str | None = Header(None),
    verifier: IdentityVerifier | None = Depends(get_identity_verifier),
):
    identity = await authenticate(authorization, verifier, missing_detail="No token provided")
    return {
        "uid": identity.uid,
        "email": identity.email,
        "emailVerified": identity.email_verified,
        "displayName": identity.display_name,
        "photoURL": identity.photo_url,
    }

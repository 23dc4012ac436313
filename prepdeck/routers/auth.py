import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Response

from prepdeck.config import SESSION_COOKIE_NAME, SESSION_EXPIRES_DAYS
from prepdeck.dependencies import get_current_identity, get_identity_provider
from prepdeck.errors import Unauthenticated
from prepdeck.schemas.requests import SessionCreateRequest
from prepdeck.services.auth import Identity
from prepdeck.services.identity import IdentityProvider, InvalidCredential

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/session")
async def create_session(
    request: SessionCreateRequest,
    response: Response,
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """Exchange a fresh ID token for an HttpOnly session cookie."""
    expires_in = timedelta(days=SESSION_EXPIRES_DAYS)
    try:
        claims = await provider.verify_id_token(request.id_token)
        cookie = await provider.create_session_cookie(request.id_token, expires_in)
    except InvalidCredential as e:
        logger.info("Session creation refused: %s", e)
        raise Unauthenticated("Failed to create session cookie") from e

    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=cookie,
        max_age=int(expires_in.total_seconds()),
        httponly=True,
        secure=True,
        samesite="strict",
        path="/",
    )
    return {
        "success": True,
        "message": "Session cookie created successfully",
        "userId": claims["uid"],
    }


@router.delete("/session")
async def clear_session(response: Response):
    """Clear the session cookie."""
    response.delete_cookie(SESSION_COOKIE_NAME, path="/", secure=True, httponly=True, samesite="strict")
    return {"success": True, "message": "Session cookie cleared successfully"}


@router.get("/me")
async def get_current_identity_info(identity: Identity = Depends(get_current_identity)):
    """Get current authenticated identity."""
    return {"uid": identity.uid, "role": identity.role}

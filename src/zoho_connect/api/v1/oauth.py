"""OAuth endpoints: connection status, authorization URL, redirect callback.

The callback is the redirect URI registered with Zoho. A denied consent
arrives as ``?error=...`` and a successful one as ``?code=...``; only the
latter touches the token endpoint.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from src.zoho_connect.api.deps import get_token_manager
from src.zoho_connect.oauth.token_manager import TokenManager

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/oauth", tags=["oauth"])


class OAuthStatusResponse(BaseModel):
    connected: bool
    configured: bool
    api_domain: str
    expires_at: int | None = None


class AuthorizeResponse(BaseModel):
    authorization_url: str


class CallbackResponse(BaseModel):
    connected: bool
    api_domain: str | None = None
    expires_in: int | None = None


@router.get("/status", response_model=OAuthStatusResponse)
async def oauth_status(
    token_manager: TokenManager = Depends(get_token_manager),
) -> OAuthStatusResponse:
    """Whether a credential is stored and when its access token expires."""
    credential = await token_manager.get_credential()
    return OAuthStatusResponse(
        connected=bool(credential.access_token),
        configured=token_manager.is_configured(),
        api_domain=await token_manager.get_api_domain(),
        expires_at=credential.expires_at,
    )


@router.get("/authorize", response_model=AuthorizeResponse)
async def authorize(
    token_manager: TokenManager = Depends(get_token_manager),
) -> AuthorizeResponse:
    """Zoho consent URL to open in a browser."""
    url = token_manager.build_authorization_url()
    if not url:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Zoho client id and redirect uri must be configured",
        )
    return AuthorizeResponse(authorization_url=url)


@router.get("/callback", response_model=CallbackResponse)
async def callback(
    code: str | None = Query(default=None),
    error: str | None = Query(default=None),
    error_description: str | None = Query(default=None),
    token_manager: TokenManager = Depends(get_token_manager),
) -> CallbackResponse:
    """Exchange the authorization code for tokens and store them."""
    if error:
        logger.warning("oauth.callback_denied", error=error, description=error_description)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Zoho authorization failed: {error_description or error}",
        )
    if not code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing authorization code",
        )

    payload = await token_manager.exchange_code_for_token(code)
    return CallbackResponse(
        connected=True,
        api_domain=payload.get("api_domain"),
        expires_in=payload.get("expires_in"),
    )

"""FastAPI dependencies resolving shared components from app.state.

Components are created once in the application lifespan. A component that
failed to initialize is stored as None and its endpoints answer 503.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request, status

from src.zoho_connect.companies.repository import CompanyRepository
from src.zoho_connect.companies.sync import AccountSyncer
from src.zoho_connect.oauth.token_manager import TokenManager
from src.zoho_connect.zoho.campaigns import CampaignsClient
from src.zoho_connect.zoho.crm import CrmClient


def _get_state(request: Request, name: str, detail: str) -> Any:
    component = getattr(request.app.state, name, None)
    if component is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    return component


def get_token_manager(request: Request) -> TokenManager:
    return _get_state(request, "token_manager", "OAuth not initialized")


def get_crm_client(request: Request) -> CrmClient:
    return _get_state(request, "crm_client", "Zoho CRM client not initialized")


def get_campaigns_client(request: Request) -> CampaignsClient:
    return _get_state(request, "campaigns_client", "Zoho Campaigns client not initialized")


def get_company_repository(request: Request) -> CompanyRepository:
    return _get_state(request, "company_repository", "Company storage not initialized")


def get_account_syncer(request: Request) -> AccountSyncer:
    return _get_state(request, "account_syncer", "Account sync not initialized")


async def require_connection(request: Request) -> TokenManager:
    """Token manager of a connected account; 409 until the OAuth flow has completed."""
    token_manager = get_token_manager(request)
    if not await token_manager.is_connected():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Zoho is not connected; complete the OAuth flow first",
        )
    return token_manager

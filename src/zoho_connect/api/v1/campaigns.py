"""Zoho Campaigns endpoints: recent campaigns, create, send."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.zoho_connect.api.deps import get_campaigns_client, require_connection
from src.zoho_connect.zoho.campaigns import CampaignsClient
from src.zoho_connect.zoho.schemas import Campaign, CampaignCreate

router = APIRouter(
    prefix="/campaigns",
    tags=["campaigns"],
    dependencies=[Depends(require_connection)],
)


class CampaignResponse(BaseModel):
    campaign_key: str
    campaign_name: str
    campaign_status: str
    created_date_string: str
    is_draft: bool


class CampaignCreatedResponse(BaseModel):
    campaign_key: str


def _campaign_to_response(campaign: Campaign) -> CampaignResponse:
    return CampaignResponse(
        campaign_key=campaign.campaign_key,
        campaign_name=campaign.campaign_name,
        campaign_status=campaign.campaign_status,
        created_date_string=campaign.created_date_string,
        is_draft=campaign.is_draft,
    )


@router.get("", response_model=list[CampaignResponse])
async def list_campaigns(
    limit: int = Query(default=20, ge=1, le=100),
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> list[CampaignResponse]:
    return [_campaign_to_response(c) for c in await campaigns.get_recent_campaigns(limit)]


@router.post("", response_model=CampaignCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    body: CampaignCreate,
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> CampaignCreatedResponse:
    """Create a draft campaign addressed to one mailing list."""
    return CampaignCreatedResponse(campaign_key=await campaigns.create_campaign(body))


@router.post("/{campaign_key}/send")
async def send_campaign(
    campaign_key: str,
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> dict[str, Any]:
    return await campaigns.send_campaign(campaign_key)

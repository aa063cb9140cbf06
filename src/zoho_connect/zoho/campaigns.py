"""Zoho Campaigns API client -- mailing lists, subscribers and campaigns.

Every call appends ``resfmt=JSON``. Zoho Campaigns does not report errors the
same way on every endpoint, so each method checks its own discriminant:

- getmailinglists, getlistsubscribers, listsubscribe, listunsubscribe,
  recentcampaigns: ``status == "error"``
- createCampaign: top-level ``code`` other than 200
- sendcampaign: ``response.code`` (falling back to top-level ``code``) other than 200
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from src.zoho_connect.errors import NotFoundError, ProviderError, TransportError
from src.zoho_connect.zoho.client import ZohoClient
from src.zoho_connect.zoho.schemas import (
    Campaign,
    CampaignCreate,
    Contact,
    ContactInfo,
    MailingList,
)

logger = structlog.get_logger(__name__)

DEFAULT_CAMPAIGNS_URL = "https://campaigns.zoho.com"
LIST_RANGE = 1000


def _raise_if_status_error(body: dict[str, Any], operation: str) -> None:
    if body.get("status") == "error":
        logger.error(
            "zoho_campaigns.api_error",
            operation=operation,
            code=body.get("code"),
            message=body.get("message"),
        )
        raise ProviderError(
            f"Zoho Campaigns {operation} failed: {body.get('message', 'unknown error')}",
            code=str(body.get("code")) if body.get("code") is not None else None,
            payload=body,
        )


def _raise_if_code_not_200(code: Any, body: dict[str, Any], operation: str) -> None:
    if str(code) != "200":
        logger.error(
            "zoho_campaigns.api_error",
            operation=operation,
            code=code,
            message=body.get("message"),
        )
        raise ProviderError(
            f"Zoho Campaigns {operation} failed: {body.get('message', 'unknown error')}",
            code=str(code) if code is not None else None,
            payload=body,
        )


class CampaignsClient:
    """Async client for the Zoho Campaigns v1.1 API.

    Args:
        client: Authenticated Zoho HTTP client.
        base_url: Zoho Campaigns host for the account's data centre.
    """

    def __init__(self, client: ZohoClient, base_url: str = DEFAULT_CAMPAIGNS_URL) -> None:
        self._client = client
        self._api = f"{base_url.rstrip('/')}/api/v1.1"

    async def _get(self, path: str, **params: Any) -> dict[str, Any]:
        return await self._client.get(f"{self._api}/{path}", params={"resfmt": "JSON", **params})

    async def _post(self, path: str, **params: Any) -> dict[str, Any]:
        return await self._client.post(f"{self._api}/{path}", params={"resfmt": "JSON", **params})

    # ── Mailing lists & subscribers ─────────────────────────────────────────

    async def get_mailing_lists(self) -> list[MailingList]:
        """All mailing lists of the account."""
        body = await self._get("getmailinglists", sort="asc", fromindex=1, range=LIST_RANGE)
        _raise_if_status_error(body, "get_mailing_lists")
        return [
            MailingList.model_validate(item)
            for item in body.get("list_of_details") or []
            if item.get("listkey")
        ]

    async def get_list_subscribers(self, list_key: str, list_name: str = "") -> list[Contact]:
        """Active subscribers of one list, annotated with the list key and name."""
        body = await self._get(
            "getlistsubscribers",
            listkey=list_key,
            sort="asc",
            fromindex=1,
            range=LIST_RANGE,
            status="active",
        )
        _raise_if_status_error(body, "get_list_subscribers")
        return [
            Contact(list_key=list_key, list_name=list_name, fields=item)
            for item in body.get("list_of_details") or []
        ]

    async def get_all_contacts(self) -> list[Contact]:
        """Subscribers of every mailing list.

        Lists are read one after another. A list that fails is logged and
        skipped so one broken list does not hide the others.
        """
        contacts: list[Contact] = []
        for mailing_list in await self.get_mailing_lists():
            try:
                contacts.extend(
                    await self.get_list_subscribers(mailing_list.listkey, mailing_list.listname)
                )
            except (ProviderError, TransportError) as exc:
                logger.warning(
                    "zoho_campaigns.list_subscribers_failed",
                    list_key=mailing_list.listkey,
                    error=str(exc),
                )
        logger.info("zoho_campaigns.contacts_fetched", count=len(contacts))
        return contacts

    async def find_contact(self, list_key: str, email: str) -> Contact:
        """Find one subscriber by list key and exact email.

        Raises:
            NotFoundError: No such subscriber.
        """
        for contact in await self.get_all_contacts():
            if contact.list_key == list_key and contact.email == email:
                return contact
        raise NotFoundError(f"Contact {email} not found in list {list_key}")

    async def add_contact(self, list_key: str, contact: ContactInfo) -> dict[str, Any]:
        """Subscribe a contact to a list; an existing subscriber is updated in place."""
        body = await self._post(
            "json/listsubscribe",
            listkey=list_key,
            contactinfo=json.dumps(contact.to_zoho()),
        )
        _raise_if_status_error(body, "add_contact")
        logger.info("zoho_campaigns.contact_subscribed", list_key=list_key)
        return body

    async def delete_contact(self, list_key: str, email: str) -> dict[str, Any]:
        """Unsubscribe a contact from a list."""
        body = await self._post(
            "json/listunsubscribe",
            listkey=list_key,
            contactinfo=json.dumps({"Contact Email": email}),
        )
        _raise_if_status_error(body, "delete_contact")
        logger.info("zoho_campaigns.contact_unsubscribed", list_key=list_key)
        return body

    # ── Campaigns ───────────────────────────────────────────────────────────

    async def get_recent_campaigns(self, limit: int = 20) -> list[Campaign]:
        """Most recent campaigns, newest first."""
        body = await self._get("recentcampaigns", fromindex=1, range=limit)
        _raise_if_status_error(body, "get_recent_campaigns")
        return [Campaign.model_validate(item) for item in body.get("recent_campaigns") or []]

    async def create_campaign(self, data: CampaignCreate) -> str:
        """Create a draft campaign and return its campaign key."""
        params: dict[str, Any] = {
            "campaignname": data.campaignname,
            "from_email": data.from_email,
            "subject": data.subject,
            "list_details": json.dumps({data.listkey: []}),
        }
        if data.content_url:
            params["content_url"] = data.content_url

        body = await self._post("createCampaign", **params)
        _raise_if_code_not_200(body.get("code"), body, "create_campaign")

        campaign_key = body.get("campaignKey") or body.get("campaign_key")
        if not campaign_key:
            logger.error("zoho_campaigns.campaign_key_missing", response=body)
            raise ProviderError("createCampaign response has no campaign key", payload=body)

        logger.info("zoho_campaigns.campaign_created", campaign_key=campaign_key)
        return str(campaign_key)

    async def send_campaign(self, campaign_key: str) -> dict[str, Any]:
        """Send a draft campaign to its mailing list. Cannot be undone."""
        body = await self._post("sendcampaign", campaignkey=campaign_key)
        nested = body.get("response")
        code = nested.get("code") if isinstance(nested, dict) else body.get("code")
        _raise_if_code_not_200(code, body, "send_campaign")
        logger.info("zoho_campaigns.campaign_sent", campaign_key=campaign_key)
        return body

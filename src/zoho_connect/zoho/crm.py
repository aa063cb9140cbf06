"""Zoho CRM Accounts listing.

GET {api_domain}/crm/v2/Accounts?page=&per_page= with the Zoho-oauthtoken
header. Zoho answers 204 with no body when a page is empty; otherwise the
body carries a ``data`` array and an ``info.more_records`` flag. Error bodies
carry ``status: "error"`` and a ``code`` other than SUCCESS.
"""

from __future__ import annotations

from typing import Any

import structlog

from src.zoho_connect.errors import ProviderError
from src.zoho_connect.zoho.client import ZohoClient

logger = structlog.get_logger(__name__)

MAX_PER_PAGE = 200


def _check_crm_response(body: dict[str, Any], operation: str) -> list[dict[str, Any]]:
    """Return the data array of a CRM response or raise ProviderError."""
    data = body.get("data")
    failed = body.get("status") == "error" or (
        data is None and body.get("code") not in (None, "SUCCESS")
    )
    if failed or (data is not None and not isinstance(data, list)):
        logger.error(
            "zoho_crm.api_error",
            operation=operation,
            code=body.get("code"),
            message=body.get("message"),
        )
        raise ProviderError(
            f"Zoho CRM {operation} failed: {body.get('message', 'unexpected response')}",
            code=body.get("code"),
            payload=body,
        )
    return data or []


class CrmClient:
    """Reads Account records from Zoho CRM.

    Args:
        client: Authenticated Zoho HTTP client.
    """

    def __init__(self, client: ZohoClient) -> None:
        self._client = client

    async def list_accounts(
        self, page: int = 1, per_page: int = MAX_PER_PAGE
    ) -> tuple[list[dict[str, Any]], bool]:
        """Fetch one page of accounts.

        Returns:
            (records, more_records) for the requested page.
        """
        api_domain = await self._client.token_manager.get_api_domain()
        body = await self._client.get(
            f"{api_domain}/crm/v2/Accounts",
            params={"page": page, "per_page": min(per_page, MAX_PER_PAGE)},
        )
        if not body:
            return [], False

        records = _check_crm_response(body, "list_accounts")
        more_records = bool((body.get("info") or {}).get("more_records"))
        logger.debug(
            "zoho_crm.accounts_page",
            page=page,
            count=len(records),
            more_records=more_records,
        )
        return records, more_records

    async def get_all_accounts(
        self, per_page: int = MAX_PER_PAGE, max_pages: int | None = None
    ) -> list[dict[str, Any]]:
        """Fetch every account, one page after another."""
        accounts: list[dict[str, Any]] = []
        page = 1
        while True:
            records, more_records = await self.list_accounts(page=page, per_page=per_page)
            accounts.extend(records)
            if not more_records or (max_pages is not None and page >= max_pages):
                break
            page += 1

        logger.info("zoho_crm.accounts_fetched", count=len(accounts), pages=page)
        return accounts

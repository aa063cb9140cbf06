#!/usr/bin/env python3
"""CLI script to sync Zoho CRM Accounts into local companies.

Usage:
    uv run python scripts/sync_accounts.py
    uv run python scripts/sync_accounts.py --max-pages 2 --owner-id 7

Reads DATABASE_URL, REDIS_URL and the ZOHO_* settings from the environment
or .env file. The OAuth flow must have been completed once (through
/v1/oauth/authorize) so a refresh token is stored in Redis.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.zoho_connect
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def sync(max_pages: int | None, owner_id: int | None) -> int:
    """Run one CRM -> company sync and print the report. Returns the exit code."""
    import httpx

    from src.zoho_connect.api.middleware.logging import configure_structlog
    from src.zoho_connect.companies import AccountSyncer, CompanyRepository
    from src.zoho_connect.config import get_settings
    from src.zoho_connect.core.database import close_db, get_session, init_db
    from src.zoho_connect.core.redis import close_redis, get_redis_pool
    from src.zoho_connect.errors import ZohoConnectError
    from src.zoho_connect.oauth import RedisCredentialStore, TokenManager
    from src.zoho_connect.zoho import CrmClient, ZohoClient

    settings = get_settings()
    configure_structlog()
    await init_db()

    try:
        async with httpx.AsyncClient(timeout=settings.ZOHO_HTTP_TIMEOUT) as http_client:
            store = RedisCredentialStore(get_redis_pool(), prefix=settings.CREDENTIAL_KEY_PREFIX)
            token_manager = TokenManager.from_settings(settings, http_client, store)
            if not await token_manager.is_connected():
                print("Zoho is not connected; complete the OAuth flow first.", file=sys.stderr)
                return 2

            crm = CrmClient(ZohoClient(http_client, token_manager))
            syncer = AccountSyncer(
                CompanyRepository(session_factory=get_session),
                owner_id=owner_id if owner_id is not None else settings.COMPANY_OWNER_ID,
            )
            try:
                report = await syncer.sync_from_crm(crm, max_pages=max_pages)
            except ZohoConnectError as exc:
                print(f"Sync failed: {exc}", file=sys.stderr)
                return 1
    finally:
        await close_db()
        await close_redis()

    print("Sync complete:")
    print(f"  Created: {report.created}")
    print(f"  Updated: {report.updated}")
    print(f"  Skipped: {report.skipped}")
    print(f"  Errors:  {report.errors}")
    for failure in report.failures:
        print(f"    - {failure}")
    return 1 if report.errors else 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Sync Zoho CRM Accounts into local companies")
    parser.add_argument("--max-pages", type=int, default=None, help="Stop after this many CRM pages")
    parser.add_argument("--owner-id", type=int, default=None, help="Owner of newly created companies")
    args = parser.parse_args()

    sys.exit(asyncio.run(sync(args.max_pages, args.owner_id)))


if __name__ == "__main__":
    main()

"""FastAPI application factory.

Creates the app with logging middleware, error mapping, the v1 API router
and a lifespan that wires the Zoho components onto app.state.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import httpx
import structlog
from fastapi import FastAPI

from src.zoho_connect.api.errors import register_exception_handlers
from src.zoho_connect.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.zoho_connect.api.v1.router import router as v1_router
from src.zoho_connect.config import get_settings
from src.zoho_connect.core.database import close_db, get_session, init_db
from src.zoho_connect.core.redis import close_redis, get_redis_pool


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build shared clients on startup and close them on shutdown.

    Each component group is initialized in its own try/except; a failure
    leaves the matching app.state attributes as None so only the endpoints
    that need them answer 503.
    """
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    http_client = httpx.AsyncClient(timeout=settings.ZOHO_HTTP_TIMEOUT)
    app.state.http_client = http_client

    # ── OAuth + Zoho API clients ────────────────────────────────────────
    try:
        from src.zoho_connect.oauth import RedisCredentialStore, TokenManager
        from src.zoho_connect.zoho import CampaignsClient, CrmClient, ZohoClient

        store = RedisCredentialStore(get_redis_pool(), prefix=settings.CREDENTIAL_KEY_PREFIX)
        token_manager = TokenManager.from_settings(settings, http_client, store)
        zoho_client = ZohoClient(http_client, token_manager)

        app.state.token_manager = token_manager
        app.state.crm_client = CrmClient(zoho_client)
        app.state.campaigns_client = CampaignsClient(zoho_client, settings.ZOHO_CAMPAIGNS_URL)
        log.info(
            "startup.zoho_clients_initialized",
            oauth_configured=settings.is_oauth_configured(),
        )
    except Exception as exc:
        log.warning("startup.zoho_clients_init_failed", error=str(exc))
        app.state.token_manager = None
        app.state.crm_client = None
        app.state.campaigns_client = None

    # ── Company storage + sync ──────────────────────────────────────────
    try:
        from src.zoho_connect.companies import AccountSyncer, CompanyRepository

        await init_db()
        repository = CompanyRepository(session_factory=get_session)
        app.state.company_repository = repository
        app.state.account_syncer = AccountSyncer(
            repository, owner_id=settings.COMPANY_OWNER_ID
        )
        log.info("startup.company_sync_initialized")
    except Exception as exc:
        log.warning("startup.company_sync_init_failed", error=str(exc))
        app.state.company_repository = None
        app.state.account_syncer = None

    yield

    await http_client.aclose()
    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Zoho Connect API",
        version="0.1.0",
        description="Zoho OAuth, CRM account sync and Zoho Campaigns administration",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)
    app.include_router(v1_router)

    return app


# Module-level app for uvicorn
app = create_app()

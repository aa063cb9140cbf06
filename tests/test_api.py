"""Integration tests for the v1 HTTP API.

Builds a minimal FastAPI app with the v1 router and error handlers, puts
test doubles on app.state and drives it through httpx ASGITransport. The
TokenManager is real (in-memory store, MockTransport token endpoint); the
CRM and Campaigns clients are AsyncMocks.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.zoho_connect.api.v1 import health
from src.zoho_connect.companies.sync import AccountSyncer
from src.zoho_connect.errors import MissingRefreshTokenError, NotFoundError, ProviderError
from src.zoho_connect.zoho.schemas import Campaign, Contact, ContactInfo, MailingList
from tests.conftest import (
    InMemoryCompanyRepository,
    InMemoryCredentialStore,
    connected_store,
    make_token_manager,
)


def _make_app():
    """Create a minimal FastAPI app with the v1 router and error mapping."""
    from fastapi import FastAPI

    from src.zoho_connect.api.errors import register_exception_handlers
    from src.zoho_connect.api.v1.router import router

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(router)
    return app


class TokenEndpoint:
    """MockTransport handler for the Zoho Accounts token endpoint."""

    def __init__(self, payload: dict | None = None, status_code: int = 200) -> None:
        self.payload = payload or {
            "access_token": "new-access",
            "refresh_token": "new-refresh",
            "expires_in": 3600,
            "api_domain": "https://www.zohoapis.eu",
        }
        self.status_code = status_code
        self.calls: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return httpx.Response(self.status_code, json=self.payload)


def _client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def api():
    """App with a connected credential and mocked Zoho clients."""
    app = _make_app()
    token_endpoint = TokenEndpoint()
    store = connected_store()
    token_manager, _ = make_token_manager(token_endpoint, store)
    repository = InMemoryCompanyRepository()

    app.state.token_manager = token_manager
    app.state.crm_client = AsyncMock()
    app.state.campaigns_client = AsyncMock()
    app.state.company_repository = repository
    app.state.account_syncer = AccountSyncer(repository)

    async with _client_for(app) as client:
        yield client, app


# ── Health ───────────────────────────────────────────────────────────────────


async def test_health():
    async with _client_for(_make_app()) as client:
        response = await client.get("/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class _FakeEngine:
    """Async engine double whose connections run any statement."""

    def __init__(self) -> None:
        self.conn = AsyncMock()

    @asynccontextmanager
    async def connect(self):
        yield self.conn


def _broken_engine():
    raise RuntimeError("connection refused")


class TestReadiness:
    async def test_ready_when_database_and_redis_answer(self, monkeypatch):
        engine = _FakeEngine()
        redis = AsyncMock()
        redis.ping.return_value = True
        monkeypatch.setattr(health, "get_engine", lambda: engine)
        monkeypatch.setattr(health, "get_redis_pool", lambda: redis)

        async with _client_for(_make_app()) as client:
            response = await client.get("/v1/health/ready")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "checks": {"database": "ok", "redis": "ok"},
        }
        engine.conn.execute.assert_awaited_once()

    async def test_degraded_when_database_unreachable(self, monkeypatch):
        redis = AsyncMock()
        redis.ping.return_value = True
        monkeypatch.setattr(health, "get_engine", _broken_engine)
        monkeypatch.setattr(health, "get_redis_pool", lambda: redis)

        async with _client_for(_make_app()) as client:
            response = await client.get("/v1/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["database"] == "error"
        assert body["checks"]["database_error"] == "connection refused"
        assert body["checks"]["redis"] == "ok"

    async def test_degraded_when_redis_does_not_pong(self, monkeypatch):
        redis = AsyncMock()
        redis.ping.return_value = False
        monkeypatch.setattr(health, "get_engine", lambda: _FakeEngine())
        monkeypatch.setattr(health, "get_redis_pool", lambda: redis)

        async with _client_for(_make_app()) as client:
            response = await client.get("/v1/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["redis"] == "error"


# ── OAuth ────────────────────────────────────────────────────────────────────


class TestOAuthRoutes:
    async def test_status_when_not_connected(self):
        app = _make_app()
        app.state.token_manager, _ = make_token_manager(TokenEndpoint())

        async with _client_for(app) as client:
            response = await client.get("/v1/oauth/status")

        assert response.status_code == 200
        assert response.json() == {
            "connected": False,
            "configured": True,
            "api_domain": "https://www.zohoapis.com",
            "expires_at": None,
        }

    async def test_status_when_connected(self, api):
        client, _ = api
        body = (await client.get("/v1/oauth/status")).json()
        assert body["connected"] is True
        assert body["api_domain"] == "https://www.zohoapis.eu"
        assert body["expires_at"] is not None

    async def test_authorize_returns_consent_url(self, api):
        client, _ = api
        response = await client.get("/v1/oauth/authorize")

        assert response.status_code == 200
        url = response.json()["authorization_url"]
        assert "response_type=code" in url
        assert "access_type=offline" in url

    async def test_authorize_unconfigured_is_503(self):
        app = _make_app()
        app.state.token_manager, _ = make_token_manager(TokenEndpoint(), client_id="")

        async with _client_for(app) as client:
            response = await client.get("/v1/oauth/authorize")
        assert response.status_code == 503

    async def test_callback_exchanges_code(self):
        app = _make_app()
        token_endpoint = TokenEndpoint()
        store = InMemoryCredentialStore()
        app.state.token_manager, _ = make_token_manager(token_endpoint, store)

        async with _client_for(app) as client:
            response = await client.get("/v1/oauth/callback", params={"code": "abc"})

        assert response.status_code == 200
        assert response.json()["connected"] is True
        assert "access_token" not in response.json()
        assert store.values["access_token"] == "new-access"
        assert len(token_endpoint.calls) == 1

    @pytest.mark.parametrize(
        "params",
        [{}, {"error": "access_denied", "error_description": "User denied"}],
    )
    async def test_callback_without_code_is_400(self, params):
        app = _make_app()
        token_endpoint = TokenEndpoint()
        store = InMemoryCredentialStore()
        app.state.token_manager, _ = make_token_manager(token_endpoint, store)

        async with _client_for(app) as client:
            response = await client.get("/v1/oauth/callback", params=params)

        assert response.status_code == 400
        assert token_endpoint.calls == []
        assert store.writes == []

    async def test_callback_denied_reports_description(self):
        app = _make_app()
        app.state.token_manager, _ = make_token_manager(TokenEndpoint())

        async with _client_for(app) as client:
            response = await client.get(
                "/v1/oauth/callback",
                params={"error": "access_denied", "error_description": "User denied"},
            )
        assert "User denied" in response.json()["detail"]

    async def test_callback_provider_error_is_502(self):
        app = _make_app()
        store = InMemoryCredentialStore()
        app.state.token_manager, _ = make_token_manager(
            TokenEndpoint({"error": "invalid_code"}), store
        )

        async with _client_for(app) as client:
            response = await client.get("/v1/oauth/callback", params={"code": "stale"})

        assert response.status_code == 502
        assert response.json()["code"] == "invalid_code"
        assert store.writes == []


# ── Accounts & Companies ─────────────────────────────────────────────────────


class TestAccountRoutes:
    async def test_accounts_require_connection(self):
        app = _make_app()
        app.state.token_manager, _ = make_token_manager(TokenEndpoint())
        app.state.crm_client = AsyncMock()

        async with _client_for(app) as client:
            response = await client.get("/v1/accounts")

        assert response.status_code == 409
        app.state.crm_client.list_accounts.assert_not_called()

    async def test_list_accounts(self, api):
        client, app = api
        app.state.crm_client.list_accounts.return_value = ([{"id": "Z1"}], True)

        response = await client.get("/v1/accounts", params={"page": 2, "per_page": 50})

        assert response.status_code == 200
        assert response.json() == {
            "page": 2,
            "per_page": 50,
            "more_records": True,
            "accounts": [{"id": "Z1"}],
        }
        app.state.crm_client.list_accounts.assert_awaited_once_with(page=2, per_page=50)

    async def test_sync_accounts_returns_report(self, api):
        client, app = api
        app.state.crm_client.get_all_accounts.return_value = [
            {"id": "Z1", "Account_Name": "Acme"},
            {"id": "Z2", "Account_Name": ""},
        ]

        response = await client.post("/v1/accounts/sync")

        assert response.status_code == 200
        body = response.json()
        assert (body["created"], body["updated"], body["skipped"], body["errors"]) == (1, 0, 1, 0)
        assert body["outcomes"] == ["created", "skipped"]

    async def test_sync_missing_refresh_token_is_401(self, api):
        client, app = api
        app.state.crm_client.get_all_accounts.side_effect = MissingRefreshTokenError("gone")

        response = await client.post("/v1/accounts/sync")
        assert response.status_code == 401

    async def test_list_companies(self, api):
        client, app = api
        app.state.crm_client.get_all_accounts.return_value = [
            {"id": "Z1", "Account_Name": "Acme", "Website": "acme.example"},
        ]
        await client.post("/v1/accounts/sync")

        response = await client.get("/v1/companies")

        assert response.status_code == 200
        [company] = response.json()
        assert company["title"] == "Acme"
        assert company["website"] == {"uri": "http://acme.example"}
        assert company["type"] == "company"

    async def test_companies_503_when_storage_missing(self):
        app = _make_app()
        app.state.company_repository = None

        async with _client_for(app) as client:
            response = await client.get("/v1/companies")

        assert response.status_code == 503
        assert "not initialized" in response.json()["detail"]


# ── Contacts ─────────────────────────────────────────────────────────────────


class TestContactRoutes:
    async def test_list_mailing_lists(self, api):
        client, app = api
        app.state.campaigns_client.get_mailing_lists.return_value = [
            MailingList(listkey="L1", listname="Customers")
        ]

        response = await client.get("/v1/contacts/lists")

        assert response.status_code == 200
        assert response.json()[0]["listkey"] == "L1"

    async def test_list_contacts(self, api):
        client, app = api
        app.state.campaigns_client.get_all_contacts.return_value = [
            Contact(
                list_key="L1",
                list_name="Customers",
                fields={"Contact Email": "ann@example.com", "First Name": "Ann"},
            )
        ]

        body = (await client.get("/v1/contacts")).json()

        assert body[0]["email"] == "ann@example.com"
        assert body[0]["first_name"] == "Ann"

    async def test_get_unknown_contact_is_404(self, api):
        client, app = api
        app.state.campaigns_client.find_contact.side_effect = NotFoundError("nope")

        response = await client.get("/v1/contacts/L1/ghost@example.com")
        assert response.status_code == 404

    async def test_create_contact(self, api):
        client, app = api
        app.state.campaigns_client.add_contact.return_value = {"status": "success"}

        response = await client.post(
            "/v1/contacts",
            json={"list_key": "L1", "email": "ann@example.com", "firstname": "Ann"},
        )

        assert response.status_code == 201
        app.state.campaigns_client.add_contact.assert_awaited_once_with(
            "L1", ContactInfo(email="ann@example.com", firstname="Ann")
        )

    async def test_update_contact_uses_path_email(self, api):
        client, app = api
        app.state.campaigns_client.add_contact.return_value = {"status": "success"}

        response = await client.put(
            "/v1/contacts/L1/ann@example.com", json={"lastname": "Lee"}
        )

        assert response.status_code == 200
        app.state.campaigns_client.add_contact.assert_awaited_once_with(
            "L1", ContactInfo(email="ann@example.com", lastname="Lee")
        )

    async def test_delete_contact(self, api):
        client, app = api
        app.state.campaigns_client.delete_contact.return_value = {"status": "success"}

        response = await client.delete("/v1/contacts/L1/ann@example.com")

        assert response.status_code == 204
        app.state.campaigns_client.delete_contact.assert_awaited_once_with(
            "L1", "ann@example.com"
        )


# ── Campaigns ────────────────────────────────────────────────────────────────


class TestCampaignRoutes:
    async def test_list_campaigns_flags_drafts(self, api):
        client, app = api
        app.state.campaigns_client.get_recent_campaigns.return_value = [
            Campaign(campaign_key="C1", campaign_name="Spring", campaign_status="Draft"),
            Campaign(campaign_key="C2", campaign_name="Winter", campaign_status="Sent"),
        ]

        body = (await client.get("/v1/campaigns")).json()

        assert [c["is_draft"] for c in body] == [True, False]
        app.state.campaigns_client.get_recent_campaigns.assert_awaited_once_with(20)

    async def test_create_campaign(self, api):
        client, app = api
        app.state.campaigns_client.create_campaign.return_value = "C9"

        response = await client.post(
            "/v1/campaigns",
            json={
                "campaignname": "Launch",
                "from_email": "news@example.com",
                "subject": "Hello",
                "listkey": "L1",
            },
        )

        assert response.status_code == 201
        assert response.json() == {"campaign_key": "C9"}

    async def test_send_campaign_provider_error_is_502(self, api):
        client, app = api
        app.state.campaigns_client.send_campaign.side_effect = ProviderError(
            "not a draft", code="903"
        )

        response = await client.post("/v1/campaigns/C1/send")

        assert response.status_code == 502
        assert response.json()["code"] == "903"

    async def test_campaigns_503_when_client_missing(self, api):
        client, app = api
        app.state.campaigns_client = None

        response = await client.get("/v1/campaigns")
        assert response.status_code == 503

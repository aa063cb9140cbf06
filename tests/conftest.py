"""Shared test doubles and fixtures.

Provides:
- InMemoryCredentialStore: dict-backed CredentialStore
- InMemoryCompanyRepository: list-backed CompanyRepository
- FakeClock: settable time source for TokenManager
- make_token_manager(): TokenManager over an httpx.MockTransport handler
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from src.zoho_connect.companies.schemas import CompanyAttributes, CompanyRead
from src.zoho_connect.errors import NotFoundError
from src.zoho_connect.oauth.store import CredentialStore
from src.zoho_connect.oauth.token_manager import TokenManager

NOW = 1_700_000_000
ACCOUNTS_URL = "https://accounts.zoho.test"


class InMemoryCredentialStore(CredentialStore):
    """CredentialStore keeping values in a dict; records every write."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})
        self.writes: list[tuple[str, str]] = []

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes.append((key, value))


class InMemoryCompanyRepository:
    """In-memory CompanyRepository for testing without a database."""

    def __init__(self) -> None:
        self.companies: dict[int, CompanyRead] = {}
        self._next_id = 1
        self.fail_on_title: str | None = None

    async def find_by_zoho_id(self, zoho_id: str) -> CompanyRead | None:
        for company in self.companies.values():
            if company.zoho_id == zoho_id:
                return company
        return None

    async def find_by_title(self, title: str) -> CompanyRead | None:
        for company in self.companies.values():
            if company.title == title:
                return company
        return None

    async def get(self, company_id: int) -> CompanyRead:
        if company_id not in self.companies:
            raise NotFoundError(f"Company {company_id} not found")
        return self.companies[company_id]

    async def list_companies(self, limit: int = 100, offset: int = 0) -> list[CompanyRead]:
        return list(self.companies.values())[offset : offset + limit]

    async def create(self, attrs: CompanyAttributes) -> CompanyRead:
        if self.fail_on_title is not None and attrs.title == self.fail_on_title:
            raise RuntimeError("database unavailable")
        company = CompanyRead(
            id=self._next_id,
            created_at=datetime.now(timezone.utc),
            **attrs.model_dump(),
        )
        self.companies[company.id] = company
        self._next_id += 1
        return company

    async def update(self, company_id: int, attrs: CompanyAttributes) -> CompanyRead:
        current = await self.get(company_id)
        updated = current.model_copy(
            update={
                "status": attrs.status,
                **{name: getattr(attrs, name) for name in attrs.mapped_values()},
            }
        )
        self.companies[company_id] = updated
        return updated


class FakeClock:
    """Callable clock returning a settable epoch time."""

    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_token_manager(
    handler: Callable[[httpx.Request], httpx.Response],
    store: CredentialStore | None = None,
    *,
    clock: FakeClock | None = None,
    client_id: str = "client-id",
    client_secret: str = "client-secret",
    redirect_uri: str = "https://app.test/v1/oauth/callback",
    **kwargs: Any,
) -> tuple[TokenManager, httpx.AsyncClient]:
    """TokenManager wired to a MockTransport; returns (manager, http_client)."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    manager = TokenManager(
        http_client,
        store if store is not None else InMemoryCredentialStore(),
        client_id,
        client_secret,
        redirect_uri,
        accounts_url=ACCOUNTS_URL,
        default_api_domain="https://www.zohoapis.com",
        scopes=["ZohoCRM.modules.ALL", "ZohoCampaigns.contact.READ"],
        clock=clock or FakeClock(),
        **kwargs,
    )
    return manager, http_client


def connected_store(expires_at: int = NOW + 3600, **overrides: str) -> InMemoryCredentialStore:
    """Store holding a valid credential."""
    values = {
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "expires": str(expires_at),
        "api_domain": "https://www.zohoapis.eu",
    }
    values.update(overrides)
    return InMemoryCredentialStore(values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def company_repository() -> InMemoryCompanyRepository:
    return InMemoryCompanyRepository()

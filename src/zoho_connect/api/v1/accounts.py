"""CRM Accounts and local companies endpoints.

GET /accounts proxies one page of Zoho CRM Accounts; POST /accounts/sync
pulls every Account and runs the company sync; GET /companies lists what
the sync has stored locally.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from src.zoho_connect.api.deps import (
    get_account_syncer,
    get_company_repository,
    get_crm_client,
    require_connection,
)
from src.zoho_connect.companies.repository import CompanyRepository
from src.zoho_connect.companies.schemas import CompanyRead, SyncReport
from src.zoho_connect.companies.sync import AccountSyncer
from src.zoho_connect.zoho.crm import MAX_PER_PAGE, CrmClient

router = APIRouter(tags=["accounts"])


class AccountPageResponse(BaseModel):
    page: int
    per_page: int
    more_records: bool
    accounts: list[dict[str, Any]] = Field(default_factory=list)


@router.get(
    "/accounts",
    response_model=AccountPageResponse,
    dependencies=[Depends(require_connection)],
)
async def list_accounts(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=MAX_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    crm: CrmClient = Depends(get_crm_client),
) -> AccountPageResponse:
    """One page of Zoho CRM Accounts."""
    records, more_records = await crm.list_accounts(page=page, per_page=per_page)
    return AccountPageResponse(
        page=page,
        per_page=per_page,
        more_records=more_records,
        accounts=records,
    )


@router.post(
    "/accounts/sync",
    response_model=SyncReport,
    dependencies=[Depends(require_connection)],
)
async def sync_accounts(
    max_pages: int | None = Query(default=None, ge=1),
    crm: CrmClient = Depends(get_crm_client),
    syncer: AccountSyncer = Depends(get_account_syncer),
) -> SyncReport:
    """Fetch every CRM Account and create or update local companies."""
    return await syncer.sync_from_crm(crm, max_pages=max_pages)


@router.get("/companies", response_model=list[CompanyRead])
async def list_companies(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    repository: CompanyRepository = Depends(get_company_repository),
) -> list[CompanyRead]:
    return await repository.list_companies(limit=limit, offset=offset)

"""One-way sync of Zoho CRM Accounts into local companies.

For each Account, in input order:
- no usable Account_Name -> skipped
- company with the same CRM id, else the same exact title -> updated
- otherwise -> created

A failure on one record is logged with the account name and counted; the
batch carries on. Re-running a batch with the same input updates every
record it created the first time and creates nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from src.zoho_connect.companies.field_mapping import map_account_to_company
from src.zoho_connect.companies.repository import CompanyRepository
from src.zoho_connect.companies.schemas import SyncOutcome, SyncReport
from src.zoho_connect.zoho.crm import CrmClient


class AccountSyncer:
    """Creates or updates companies from CRM Account records.

    Args:
        repository: Company persistence.
        owner_id: Owner assigned to newly created companies.
        logger: structlog-compatible logger; defaults to this module's logger.
    """

    def __init__(
        self,
        repository: CompanyRepository,
        *,
        owner_id: int = 1,
        logger: Any = None,
    ) -> None:
        self._repository = repository
        self._owner_id = owner_id
        self._log = logger if logger is not None else structlog.get_logger(__name__)

    async def sync_batch(self, accounts: Iterable[dict[str, Any]]) -> SyncReport:
        """Sync a batch of Account records.

        Raises:
            TypeError: accounts is not an iterable of records.
        """
        if isinstance(accounts, (str, bytes, Mapping)) or not isinstance(accounts, Iterable):
            raise TypeError(
                f"accounts must be an iterable of records, got {type(accounts).__name__}"
            )

        report = SyncReport()
        for account in accounts:
            name = ""
            try:
                name = str(account.get("Account_Name") or "").strip()
                if not name:
                    self._log.info("company_sync.record_skipped", zoho_id=account.get("id"))
                    report.record(SyncOutcome.SKIPPED)
                    continue
                report.record(await self._sync_one(account))
            except Exception as exc:
                report.record(SyncOutcome.ERRORED)
                report.failures.append(f"{name or '<unnamed>'}: {exc}")
                self._log.error(
                    "company_sync.record_failed",
                    account_name=name,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )

        self._log.info(
            "company_sync.batch_complete",
            created=report.created,
            updated=report.updated,
            skipped=report.skipped,
            errors=report.errors,
        )
        return report

    async def _sync_one(self, account: dict[str, Any]) -> SyncOutcome:
        attrs = map_account_to_company(account, owner_id=self._owner_id, logger=self._log)

        existing = None
        if attrs.zoho_id:
            existing = await self._repository.find_by_zoho_id(attrs.zoho_id)
        if existing is None and attrs.title:
            existing = await self._repository.find_by_title(attrs.title)

        if existing is not None:
            await self._repository.update(existing.id, attrs)
            self._log.debug("company_sync.record_updated", company_id=existing.id)
            return SyncOutcome.UPDATED

        created = await self._repository.create(attrs)
        self._log.debug("company_sync.record_created", company_id=created.id)
        return SyncOutcome.CREATED

    async def sync_from_crm(self, crm_client: CrmClient, max_pages: int | None = None) -> SyncReport:
        """Fetch every CRM Account and sync them as one batch."""
        accounts = await crm_client.get_all_accounts(max_pages=max_pages)
        return await self.sync_batch(accounts)

"""Pydantic schemas for local company records and sync reporting.

- LongText / Link: structured values for the body and website attributes
- CompanyAttributes: the result of mapping one CRM Account
- CompanyRead: a persisted company
- SyncOutcome / SyncReport: per-record result of a sync batch
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class LongText(BaseModel):
    """Formatted text body."""

    value: str
    format: str = "basic_html"


class Link(BaseModel):
    """External link."""

    uri: str


# Attributes written from CRM data; `type`, `status` and `owner_id` are fixed defaults
MAPPED_ATTRIBUTES: tuple[str, ...] = (
    "zoho_id",
    "title",
    "phone",
    "fax",
    "website",
    "billing_street",
    "billing_city",
    "billing_state",
    "billing_code",
    "billing_country",
    "shipping_street",
    "shipping_city",
    "shipping_state",
    "shipping_code",
    "shipping_country",
    "annual_revenue",
    "employees",
    "industry",
    "account_type",
    "ownership",
    "ticker_symbol",
    "sic_code",
    "body",
    "rating",
    "account_number",
)


class CompanyAttributes(BaseModel):
    """Attributes of a company derived from one CRM Account record.

    Mapped attributes default to None, meaning "absent": they are left out of
    ``mapped_values()`` and never written on create or update.
    """

    type: str = "company"
    status: bool = True
    owner_id: int = 1

    zoho_id: str | None = None
    title: str | None = None
    phone: str | None = None
    fax: str | None = None
    website: Link | None = None
    billing_street: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_code: str | None = None
    billing_country: str | None = None
    shipping_street: str | None = None
    shipping_city: str | None = None
    shipping_state: str | None = None
    shipping_code: str | None = None
    shipping_country: str | None = None
    annual_revenue: float | None = None
    employees: int | None = None
    industry: str | None = None
    account_type: str | None = None
    ownership: str | None = None
    ticker_symbol: str | None = None
    sic_code: str | None = None
    body: LongText | None = None
    rating: str | None = None
    account_number: str | None = None

    def mapped_values(self) -> dict[str, Any]:
        """Mapped attributes that are set, with structured values as dicts."""
        return {
            name: value.model_dump() if isinstance(value, BaseModel) else value
            for name in MAPPED_ATTRIBUTES
            if (value := getattr(self, name)) is not None
        }


class CompanyRead(CompanyAttributes):
    """A persisted company."""

    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SyncOutcome(str, Enum):
    """What happened to one account in a sync batch."""

    SKIPPED = "skipped"
    UPDATED = "updated"
    CREATED = "created"
    ERRORED = "errored"


class SyncReport(BaseModel):
    """Counters and per-record outcomes of one sync batch.

    ``outcomes`` follows input order; ``failures`` holds one
    "<account name>: <reason>" line per errored record.
    """

    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    failures: list[str] = Field(default_factory=list)
    outcomes: list[SyncOutcome] = Field(default_factory=list)

    def record(self, outcome: SyncOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome is SyncOutcome.CREATED:
            self.created += 1
        elif outcome is SyncOutcome.UPDATED:
            self.updated += 1
        elif outcome is SyncOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1

    @property
    def total(self) -> int:
        return len(self.outcomes)

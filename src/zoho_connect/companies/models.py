"""Company persistence model -- local copies of Zoho CRM Accounts.

Column names match CompanyAttributes so repository code can copy mapped
values onto the model by name. ``body`` and ``website`` are JSON columns
holding the LongText / Link shapes.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String, func
from sqlalchemy.dialects.postgresql import JSON
from sqlalchemy.orm import Mapped, mapped_column

from src.zoho_connect.core.database import Base


class CompanyModel(Base):
    """A company record synced one-way from a Zoho CRM Account.

    ``zoho_id`` is indexed but not unique: duplicate prevention is the
    syncer's find-before-create lookup.
    """

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="company")
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    zoho_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    fax: Mapped[str | None] = mapped_column(String(50), nullable=True)
    website: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    billing_street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    billing_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    billing_state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    billing_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    billing_country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipping_street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    shipping_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipping_state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipping_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    shipping_country: Mapped[str | None] = mapped_column(String(100), nullable=True)

    annual_revenue: Mapped[float | None] = mapped_column(Float, nullable=True)
    employees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    account_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ownership: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ticker_symbol: Mapped[str | None] = mapped_column(String(30), nullable=True)
    sic_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    body: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    rating: Mapped[str | None] = mapped_column(String(50), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )

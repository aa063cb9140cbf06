"""Company repository -- async CRUD over the companies table.

Uses the session_factory callable pattern: every method opens its own
session via ``async for session in self._session_factory()``, so the
repository holds no connection state between calls.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.zoho_connect.companies.models import CompanyModel
from src.zoho_connect.companies.schemas import (
    MAPPED_ATTRIBUTES,
    CompanyAttributes,
    CompanyRead,
    Link,
    LongText,
)
from src.zoho_connect.errors import NotFoundError

logger = structlog.get_logger(__name__)


def _model_to_company(model: CompanyModel) -> CompanyRead:
    """Convert CompanyModel to CompanyRead schema."""
    values = {name: getattr(model, name) for name in MAPPED_ATTRIBUTES}
    values["website"] = Link.model_validate(model.website) if model.website else None
    values["body"] = LongText.model_validate(model.body) if model.body else None
    return CompanyRead(
        id=model.id,
        type=model.type,
        status=model.status,
        owner_id=model.owner_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
        **values,
    )


class CompanyRepository:
    """Async CRUD for local companies.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def find_by_zoho_id(self, zoho_id: str) -> CompanyRead | None:
        """Oldest company carrying the given CRM record id, if any."""
        async for session in self._session_factory():
            stmt = (
                select(CompanyModel)
                .where(CompanyModel.zoho_id == zoho_id)
                .order_by(CompanyModel.id)
                .limit(1)
            )
            result = await session.execute(stmt)
            model = result.scalars().first()
            return _model_to_company(model) if model is not None else None

    async def find_by_title(self, title: str) -> CompanyRead | None:
        """Oldest company whose title matches exactly (case-sensitive), if any."""
        async for session in self._session_factory():
            stmt = (
                select(CompanyModel)
                .where(CompanyModel.title == title)
                .order_by(CompanyModel.id)
                .limit(1)
            )
            result = await session.execute(stmt)
            model = result.scalars().first()
            return _model_to_company(model) if model is not None else None

    async def get(self, company_id: int) -> CompanyRead:
        """Get a company by id.

        Raises:
            NotFoundError: No company with this id.
        """
        async for session in self._session_factory():
            model = await session.get(CompanyModel, company_id)
            if model is None:
                raise NotFoundError(f"Company {company_id} not found")
            return _model_to_company(model)

    async def list_companies(self, limit: int = 100, offset: int = 0) -> list[CompanyRead]:
        async for session in self._session_factory():
            stmt = select(CompanyModel).order_by(CompanyModel.id).limit(limit).offset(offset)
            result = await session.execute(stmt)
            return [_model_to_company(m) for m in result.scalars().all()]

    async def create(self, attrs: CompanyAttributes) -> CompanyRead:
        """Insert a company with its fixed defaults and every set attribute."""
        async for session in self._session_factory():
            model = CompanyModel(
                type=attrs.type,
                status=attrs.status,
                owner_id=attrs.owner_id,
                **attrs.mapped_values(),
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            logger.debug("company.created", company_id=model.id, zoho_id=model.zoho_id)
            return _model_to_company(model)

    async def update(self, company_id: int, attrs: CompanyAttributes) -> CompanyRead:
        """Overwrite status and the mapped attributes present in attrs.

        ``type`` and ``owner_id`` are left as stored.

        Raises:
            NotFoundError: No company with this id.
        """
        async for session in self._session_factory():
            model = await session.get(CompanyModel, company_id)
            if model is None:
                raise NotFoundError(f"Company {company_id} not found")
            model.status = attrs.status
            for name, value in attrs.mapped_values().items():
                setattr(model, name, value)
            await session.commit()
            await session.refresh(model)
            logger.debug("company.updated", company_id=model.id, zoho_id=model.zoho_id)
            return _model_to_company(model)

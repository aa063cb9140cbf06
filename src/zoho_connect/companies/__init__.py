"""Local companies synced one-way from Zoho CRM Accounts.

Provides the field-mapping table, the companies table and its repository,
and the AccountSyncer that ties them together.
"""

from src.zoho_connect.companies.field_mapping import (
    FIELD_MAPPINGS,
    FieldMapping,
    Transform,
    map_account_to_company,
)
from src.zoho_connect.companies.repository import CompanyRepository
from src.zoho_connect.companies.schemas import (
    CompanyAttributes,
    CompanyRead,
    Link,
    LongText,
    SyncOutcome,
    SyncReport,
)
from src.zoho_connect.companies.sync import AccountSyncer

__all__ = [
    "AccountSyncer",
    "CompanyAttributes",
    "CompanyRead",
    "CompanyRepository",
    "FIELD_MAPPINGS",
    "FieldMapping",
    "Link",
    "LongText",
    "SyncOutcome",
    "SyncReport",
    "Transform",
    "map_account_to_company",
]

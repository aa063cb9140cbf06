"""Create the companies table.

Revision ID: 001_create_companies
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSON

# revision identifiers, used by Alembic.
revision: str = "001_create_companies"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(50), nullable=False, server_default="company"),
        sa.Column("status", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("owner_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("zoho_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("fax", sa.String(50), nullable=True),
        sa.Column("website", JSON(), nullable=True),
        sa.Column("billing_street", sa.String(255), nullable=True),
        sa.Column("billing_city", sa.String(100), nullable=True),
        sa.Column("billing_state", sa.String(100), nullable=True),
        sa.Column("billing_code", sa.String(30), nullable=True),
        sa.Column("billing_country", sa.String(100), nullable=True),
        sa.Column("shipping_street", sa.String(255), nullable=True),
        sa.Column("shipping_city", sa.String(100), nullable=True),
        sa.Column("shipping_state", sa.String(100), nullable=True),
        sa.Column("shipping_code", sa.String(30), nullable=True),
        sa.Column("shipping_country", sa.String(100), nullable=True),
        sa.Column("annual_revenue", sa.Float(), nullable=True),
        sa.Column("employees", sa.Integer(), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("account_type", sa.String(100), nullable=True),
        sa.Column("ownership", sa.String(100), nullable=True),
        sa.Column("ticker_symbol", sa.String(30), nullable=True),
        sa.Column("sic_code", sa.String(30), nullable=True),
        sa.Column("body", JSON(), nullable=True),
        sa.Column("rating", sa.String(50), nullable=True),
        sa.Column("account_number", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    # Non-unique: duplicates are prevented by lookup before insert
    op.create_index("ix_companies_zoho_id", "companies", ["zoho_id"])
    op.create_index("ix_companies_title", "companies", ["title"])


def downgrade() -> None:
    op.drop_index("ix_companies_title", table_name="companies")
    op.drop_index("ix_companies_zoho_id", table_name="companies")
    op.drop_table("companies")

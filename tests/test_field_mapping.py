"""Unit tests for the CRM Account -> company field mapping."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.zoho_connect.companies.field_mapping import (
    FIELD_MAPPINGS,
    Transform,
    map_account_to_company,
    transform_decimal,
    transform_integer,
    transform_long_text,
    transform_text,
    transform_url,
)
from src.zoho_connect.companies.schemas import MAPPED_ATTRIBUTES, Link, LongText


# ── Transforms ──────────────────────────────────────────────────────────────


class TestTransforms:
    def test_text_trims_and_blanks_to_none(self):
        assert transform_text("  Acme  ", "Account_Name") == "Acme"
        assert transform_text("   ", "Account_Name") is None

    def test_long_text_wraps_basic_html(self):
        assert transform_long_text(" <p>Hi</p> ", "Description") == LongText(
            value="<p>Hi</p>", format="basic_html"
        )
        assert transform_long_text("", "Description") is None

    def test_integer(self):
        assert transform_integer(250, "Employees") == 250
        assert transform_integer(" 42 ", "Employees") == 42
        assert transform_integer("4.9", "Employees") == 4
        assert transform_integer("", "Employees") is None

    @pytest.mark.parametrize("value", ["50-100", "many", "nan", True])
    def test_non_numeric_integer_logs_warning_and_returns_none(self, value):
        logger = MagicMock()

        assert transform_integer(value, "Employees", logger) is None
        logger.warning.assert_called_once()
        assert logger.warning.call_args.args[0] == "company_mapping.invalid_number"
        assert logger.warning.call_args.kwargs["field"] == "Employees"

    def test_decimal(self):
        assert transform_decimal(1500000, "Annual_Revenue") == 1500000.0
        assert transform_decimal("99.5", "Annual_Revenue") == 99.5
        assert transform_decimal(" ", "Annual_Revenue") is None

    def test_non_numeric_decimal_logs_warning_and_returns_none(self):
        logger = MagicMock()

        assert transform_decimal("lots", "Annual_Revenue", logger) is None
        logger.warning.assert_called_once_with(
            "company_mapping.invalid_number",
            field="Annual_Revenue",
            value="lots",
            error="Annual_Revenue: expected a number, got 'lots'",
        )

    def test_url_adds_missing_scheme(self):
        assert transform_url("example.com") == Link(uri="http://example.com")

    def test_url_keeps_existing_scheme(self):
        assert transform_url(" https://example.com/about ") == Link(
            uri="https://example.com/about"
        )

    def test_invalid_url_logs_warning_and_returns_none(self):
        logger = MagicMock()

        assert transform_url("not a url###", "Website", logger) is None
        logger.warning.assert_called_once()
        assert logger.warning.call_args.args[0] == "company_mapping.invalid_url"

    @pytest.mark.parametrize("value", ["http://", "ftp://example.com", "http://exa mple.com"])
    def test_url_rejects_malformed_values(self, value):
        assert transform_url(value, "Website", MagicMock()) is None


# ── Mapping Table ───────────────────────────────────────────────────────────


class TestFieldMappings:
    def test_every_destination_is_a_mapped_attribute(self):
        assert [m.destination for m in FIELD_MAPPINGS] == list(MAPPED_ATTRIBUTES)

    def test_each_transform_resolves_to_a_function(self):
        for member in Transform:
            assert callable(member.function)

    def test_table_is_immutable(self):
        assert isinstance(FIELD_MAPPINGS, tuple)


class TestMapAccountToCompany:
    def test_full_record(self):
        account = {
            "id": "4150868000000224005",
            "Account_Name": "Acme Corp",
            "Phone": "+1 555 0100",
            "Website": "acme.example",
            "Billing_City": "Springfield",
            "Shipping_Country": "US",
            "Annual_Revenue": "2500000",
            "Employees": 120,
            "Industry": "Manufacturing",
            "Description": "Widgets",
            "Owner": {"name": "ignored"},
        }

        attrs = map_account_to_company(account, owner_id=7)

        assert attrs.type == "company"
        assert attrs.status is True
        assert attrs.owner_id == 7
        assert attrs.mapped_values() == {
            "zoho_id": "4150868000000224005",
            "title": "Acme Corp",
            "phone": "+1 555 0100",
            "website": {"uri": "http://acme.example"},
            "billing_city": "Springfield",
            "shipping_country": "US",
            "annual_revenue": 2500000.0,
            "employees": 120,
            "industry": "Manufacturing",
            "body": {"value": "Widgets", "format": "basic_html"},
        }

    def test_missing_and_empty_fields_are_omitted(self):
        attrs = map_account_to_company(
            {"Account_Name": "Acme", "Phone": "", "Fax": None, "Industry": "   "}
        )

        assert attrs.mapped_values() == {"title": "Acme"}
        assert attrs.phone is None
        assert attrs.fax is None
        assert attrs.industry is None

    def test_invalid_website_does_not_block_other_fields(self):
        logger = MagicMock()

        attrs = map_account_to_company(
            {"Account_Name": "Acme", "Website": "not a url###", "Rating": "Hot"},
            logger=logger,
        )

        assert attrs.website is None
        assert attrs.title == "Acme"
        assert attrs.rating == "Hot"
        logger.warning.assert_called_once()

    def test_non_numeric_employees_is_omitted(self):
        logger = MagicMock()

        attrs = map_account_to_company(
            {"Account_Name": "Acme", "Employees": "50-100", "Phone": "555"},
            logger=logger,
        )

        assert attrs.employees is None
        assert attrs.mapped_values() == {"title": "Acme", "phone": "555"}
        assert logger.warning.call_args.args[0] == "company_mapping.invalid_number"

    def test_unmapped_fields_are_ignored(self):
        attrs = map_account_to_company({"Account_Name": "Acme", "Tag": ["x"], "Layout": {}})
        assert attrs.mapped_values() == {"title": "Acme"}

    def test_defaults_present_for_empty_record(self):
        attrs = map_account_to_company({})
        assert attrs.mapped_values() == {}
        assert (attrs.type, attrs.status, attrs.owner_id) == ("company", True, 1)

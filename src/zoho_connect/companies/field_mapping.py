"""CRM Account -> company attribute mapping.

Defines:
- Transform: the value conversions a mapping entry can use
- FIELD_MAPPINGS: ordered (source, destination, transform) table
- map_account_to_company(): applies the table to one Account record

Each transform has the shape ``(raw, field_name, logger) -> value | None``;
None means "omit this attribute".
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from enum import Enum
from typing import Any, NamedTuple
from urllib.parse import urlsplit

import structlog

from src.zoho_connect.companies.schemas import CompanyAttributes, Link, LongText
from src.zoho_connect.errors import MappingValidationError

logger = structlog.get_logger(__name__)

# Any "scheme://" prefix; only values without one get http:// prepended
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
# Characters allowed in an absolute URL (RFC 3986 reserved + unreserved + '%')
_URL_CHARS_RE = re.compile(r"^[A-Za-z0-9\-._~:/?\[\]@!$&'()*+,;=%]+$")
_HOST_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9\-.]*[A-Za-z0-9])?$")


# ── Transforms ──────────────────────────────────────────────────────────────


def _as_text(raw: Any) -> str:
    return str(raw).strip()


def transform_text(raw: Any, field_name: str, log: Any = None) -> str | None:
    value = _as_text(raw)
    return value or None


def transform_long_text(raw: Any, field_name: str, log: Any = None) -> LongText | None:
    value = _as_text(raw)
    return LongText(value=value) if value else None


def _parse_number(raw: Any, field_name: str) -> float | None:
    if isinstance(raw, bool):
        raise MappingValidationError(f"{field_name}: expected a number, got {raw!r}")
    if isinstance(raw, (int, float)):
        number = float(raw)
        value = raw
    else:
        value = _as_text(raw)
        if not value:
            return None
        try:
            number = float(value)
        except ValueError as exc:
            raise MappingValidationError(
                f"{field_name}: expected a number, got {value!r}"
            ) from exc
    if not math.isfinite(number):
        raise MappingValidationError(f"{field_name}: expected a finite number, got {value!r}")
    return number


def _warn_invalid_number(log: Any, field_name: str, raw: Any, exc: Exception) -> None:
    (log or logger).warning(
        "company_mapping.invalid_number",
        field=field_name,
        value=raw,
        error=str(exc),
    )


def transform_integer(raw: Any, field_name: str, log: Any = None) -> int | None:
    """Convert to int, truncating any fraction.

    Blank gives None. A non-numeric value is logged and dropped.
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    try:
        number = _parse_number(raw, field_name)
    except MappingValidationError as exc:
        _warn_invalid_number(log, field_name, raw, exc)
        return None
    return None if number is None else int(number)


def transform_decimal(raw: Any, field_name: str, log: Any = None) -> float | None:
    """Convert to float; blank gives None, a non-numeric value is logged and dropped."""
    try:
        return _parse_number(raw, field_name)
    except MappingValidationError as exc:
        _warn_invalid_number(log, field_name, raw, exc)
        return None


def transform_phone(raw: Any, field_name: str, log: Any = None) -> str | None:
    value = _as_text(raw)
    return value or None


def _validate_url(uri: str) -> None:
    if not _URL_CHARS_RE.match(uri):
        raise MappingValidationError(f"illegal characters in URL {uri!r}")
    try:
        parts = urlsplit(uri)
        host = parts.hostname
    except ValueError as exc:
        raise MappingValidationError(f"malformed URL {uri!r}") from exc
    if parts.scheme.lower() not in ("http", "https") or not host:
        raise MappingValidationError(f"not an absolute http(s) URL: {uri!r}")
    if not _HOST_RE.match(host) or ".." in host:
        raise MappingValidationError(f"invalid host in URL {uri!r}")


def transform_url(raw: Any, field_name: str = "Website", log: Any = None) -> Link | None:
    """Normalise a website into a Link.

    A missing scheme gets ``http://``. A value that still does not form a
    valid absolute URL is logged and dropped; it never fails the record.
    """
    value = _as_text(raw)
    if not value:
        return None
    if not _SCHEME_RE.match(value):
        value = f"http://{value}"
    try:
        _validate_url(value)
    except MappingValidationError as exc:
        (log or logger).warning(
            "company_mapping.invalid_url",
            field=field_name,
            value=value,
            error=str(exc),
        )
        return None
    return Link(uri=value)


class Transform(Enum):
    """Conversion applied to a source value."""

    TEXT = "text"
    LONG_TEXT = "long_text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    PHONE = "phone"
    URL = "url"

    @property
    def function(self) -> Callable[..., Any]:
        return _TRANSFORM_FUNCTIONS[self]


_TRANSFORM_FUNCTIONS: dict[Transform, Callable[..., Any]] = {
    Transform.TEXT: transform_text,
    Transform.LONG_TEXT: transform_long_text,
    Transform.INTEGER: transform_integer,
    Transform.DECIMAL: transform_decimal,
    Transform.PHONE: transform_phone,
    Transform.URL: transform_url,
}


# ── Mapping Table ───────────────────────────────────────────────────────────


class FieldMapping(NamedTuple):
    source: str
    destination: str
    transform: Transform


FIELD_MAPPINGS: tuple[FieldMapping, ...] = (
    FieldMapping("id", "zoho_id", Transform.TEXT),
    FieldMapping("Account_Name", "title", Transform.TEXT),
    FieldMapping("Phone", "phone", Transform.PHONE),
    FieldMapping("Fax", "fax", Transform.PHONE),
    FieldMapping("Website", "website", Transform.URL),
    FieldMapping("Billing_Street", "billing_street", Transform.TEXT),
    FieldMapping("Billing_City", "billing_city", Transform.TEXT),
    FieldMapping("Billing_State", "billing_state", Transform.TEXT),
    FieldMapping("Billing_Code", "billing_code", Transform.TEXT),
    FieldMapping("Billing_Country", "billing_country", Transform.TEXT),
    FieldMapping("Shipping_Street", "shipping_street", Transform.TEXT),
    FieldMapping("Shipping_City", "shipping_city", Transform.TEXT),
    FieldMapping("Shipping_State", "shipping_state", Transform.TEXT),
    FieldMapping("Shipping_Code", "shipping_code", Transform.TEXT),
    FieldMapping("Shipping_Country", "shipping_country", Transform.TEXT),
    FieldMapping("Annual_Revenue", "annual_revenue", Transform.DECIMAL),
    FieldMapping("Employees", "employees", Transform.INTEGER),
    FieldMapping("Industry", "industry", Transform.TEXT),
    FieldMapping("Account_Type", "account_type", Transform.TEXT),
    FieldMapping("Ownership", "ownership", Transform.TEXT),
    FieldMapping("Ticker_Symbol", "ticker_symbol", Transform.TEXT),
    FieldMapping("SIC_Code", "sic_code", Transform.TEXT),
    FieldMapping("Description", "body", Transform.LONG_TEXT),
    FieldMapping("Rating", "rating", Transform.TEXT),
    FieldMapping("Account_Number", "account_number", Transform.TEXT),
)


# ── Mapper ──────────────────────────────────────────────────────────────────


def map_account_to_company(
    account: dict[str, Any],
    *,
    owner_id: int = 1,
    logger: Any = None,
    mappings: tuple[FieldMapping, ...] = FIELD_MAPPINGS,
) -> CompanyAttributes:
    """Convert one CRM Account record to company attributes.

    Source fields that are missing, None or blank after transformation are
    omitted. Fields not in the table are ignored.

    Values that fail their transform (a bad website or number) are logged
    and omitted; they never fail the record.
    """
    log = logger if logger is not None else structlog.get_logger(__name__)
    values: dict[str, Any] = {}
    for mapping in mappings:
        raw = account.get(mapping.source)
        if raw is None:
            continue
        value = mapping.transform.function(raw, mapping.source, log)
        if value is None or value == "":
            continue
        values[mapping.destination] = value
    return CompanyAttributes(owner_id=owner_id, **values)

"""Typed failures raised by the OAuth, Zoho API and company sync layers.

Every token and API operation converts transport or provider failures into
one of these exceptions after logging a diagnostic. Callers decide whether to
surface a message or retry; nothing here retries on its own.
"""

from __future__ import annotations

from typing import Any


class ZohoConnectError(Exception):
    """Base class for all zoho-connect failures."""


class NotConfiguredError(ZohoConnectError):
    """Client id, client secret or redirect uri is missing."""


class TransportError(ZohoConnectError):
    """Network failure or non-2xx HTTP response.

    Args:
        message: Human-readable description.
        status_code: HTTP status code, None when no response was received.
        body: Raw response body text, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InvalidTokenError(TransportError):
    """The Zoho API rejected the access token (expired or revoked)."""


class ProviderError(ZohoConnectError):
    """Zoho returned a well-formed error payload.

    Args:
        message: Human-readable description.
        code: Provider error code (e.g. ``invalid_code``, ``INVALID_DATA``).
        payload: The decoded response body.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.payload = payload or {}


class MissingRefreshTokenError(ZohoConnectError):
    """A refresh was requested but no refresh token is stored."""


class MappingValidationError(ZohoConnectError):
    """A value could not be converted to the expected shape."""


class NotFoundError(ZohoConnectError):
    """A contact or company lookup found nothing."""

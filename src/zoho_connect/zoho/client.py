"""Authenticated HTTP access to Zoho REST APIs.

ZohoClient wraps the shared httpx.AsyncClient: every call resolves a token
through TokenManager, sends it as ``Authorization: Zoho-oauthtoken <token>``
and decodes the JSON body. Success/error discrimination inside the body is
endpoint specific and left to the CRM and Campaigns clients.

When Zoho rejects the token itself, the call is repeated once after a forced
refresh (tenacity, no wait). This is the only retry in the stack.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from src.zoho_connect.errors import InvalidTokenError, TransportError
from src.zoho_connect.oauth.token_manager import TokenManager

logger = structlog.get_logger(__name__)

AUTH_SCHEME = "Zoho-oauthtoken"

# Body `code` values Zoho uses for a rejected or expired access token
INVALID_TOKEN_CODES = frozenset({"INVALID_TOKEN", "AUTHENTICATION_FAILURE", "INVALID_OAUTHTOKEN"})


class ZohoClient:
    """Generic GET/POST against Zoho APIs with bearer-style auth.

    Args:
        http_client: Shared httpx.AsyncClient (timeout configured by caller).
        token_manager: Source of access tokens.
    """

    def __init__(self, http_client: httpx.AsyncClient, token_manager: TokenManager) -> None:
        self._http = http_client
        self._tokens = token_manager

    @property
    def token_manager(self) -> TokenManager:
        return self._tokens

    async def get(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET url and return the decoded JSON object ({} for an empty body)."""
        return await self.request("GET", url, params=params)

    async def post(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """POST to url (query params and/or form body) and decode the JSON object."""
        return await self.request("POST", url, params=params, data=data)

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request, refreshing the token and repeating once if Zoho rejects it.

        Raises:
            InvalidTokenError: Token rejected again after the refresh.
            TransportError: Network failure, non-2xx response or non-JSON body.
            MissingRefreshTokenError, ProviderError: From token resolution.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(2),
            retry=retry_if_exception_type(InvalidTokenError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info("zoho_api.token_rejected_refreshing", url=url)
                    await self._tokens.refresh_access_token()
                return await self._send(method, url, params=params, data=data)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _send(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        data: dict[str, Any] | None,
    ) -> dict[str, Any]:
        token = await self._tokens.get_access_token()
        headers = {"Authorization": f"{AUTH_SCHEME} {token}"}

        try:
            response = await self._http.request(
                method, url, params=params, data=data, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error("zoho_api.request_failed", method=method, url=url, error=str(exc))
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        body = _decode(response)

        if response.status_code == 401 or body.get("code") in INVALID_TOKEN_CODES:
            logger.warning(
                "zoho_api.invalid_token",
                url=url,
                status_code=response.status_code,
                code=body.get("code"),
            )
            raise InvalidTokenError(
                "Zoho rejected the access token",
                status_code=response.status_code,
                body=response.text,
            )

        if not response.is_success:
            logger.error(
                "zoho_api.http_error",
                method=method,
                url=url,
                status_code=response.status_code,
                body=response.text,
            )
            raise TransportError(
                f"{method} {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        if response.content and not body:
            # Non-empty body that did not decode to a JSON object
            try:
                response.json()
            except ValueError as exc:
                logger.error("zoho_api.invalid_json", url=url, status_code=response.status_code)
                raise TransportError(
                    f"{method} {url} returned a non-JSON body",
                    status_code=response.status_code,
                    body=response.text,
                ) from exc

        return body


def _decode(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; empty, non-JSON or non-object bodies give {}."""
    if response.status_code == 204 or not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}

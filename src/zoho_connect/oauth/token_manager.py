"""OAuth2 credential lifecycle for the Zoho connection.

TokenManager owns the three-legged authorization-code flow against Zoho
Accounts: building the consent URL, exchanging the returned code for tokens,
persisting them through a CredentialStore, detecting expiry (with a 60-second
margin) and silently refreshing.

Failures are raised as typed exceptions from src.zoho_connect.errors after a
diagnostic log entry. Nothing here retries; a caller that wants a second
attempt calls refresh_access_token() again.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from src.zoho_connect.config import Settings
from src.zoho_connect.errors import (
    MissingRefreshTokenError,
    NotConfiguredError,
    ProviderError,
    TransportError,
)
from src.zoho_connect.oauth.schemas import Credential, TokenResponse
from src.zoho_connect.oauth.store import ACCESS_TOKEN_KEY, CredentialStore

DEFAULT_ACCOUNTS_URL = "https://accounts.zoho.com"
DEFAULT_API_DOMAIN = "https://www.zohoapis.com"


class TokenManager:
    """Manages OAuth2 bearer credentials for one Zoho connection.

    Args:
        http_client: Shared httpx.AsyncClient used for token endpoint calls.
        store: Key-value credential persistence.
        client_id: OAuth client id from the Zoho API console.
        client_secret: OAuth client secret.
        redirect_uri: Callback URL registered with the client.
        accounts_url: Zoho Accounts base URL (data-centre specific).
        default_api_domain: API base URL used until a token response names one.
        scopes: Capabilities requested on the consent screen.
        clock: Returns the current time in epoch seconds.
        logger: structlog-compatible logger; defaults to the module logger.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        store: CredentialStore,
        client_id: str = "",
        client_secret: str = "",
        redirect_uri: str = "",
        *,
        accounts_url: str = DEFAULT_ACCOUNTS_URL,
        default_api_domain: str = DEFAULT_API_DOMAIN,
        scopes: Sequence[str] = (),
        clock: Callable[[], float] = time.time,
        logger: Any = None,
    ) -> None:
        self._http = http_client
        self._store = store
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._accounts_url = accounts_url.rstrip("/")
        self._default_api_domain = default_api_domain
        self._scopes = list(scopes)
        self._clock = clock
        self._log = logger if logger is not None else structlog.get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        store: CredentialStore,
    ) -> TokenManager:
        """Build a TokenManager from application settings."""
        return cls(
            http_client=http_client,
            store=store,
            client_id=settings.ZOHO_CLIENT_ID,
            client_secret=settings.ZOHO_CLIENT_SECRET,
            redirect_uri=settings.ZOHO_REDIRECT_URI,
            accounts_url=settings.ZOHO_ACCOUNTS_URL,
            default_api_domain=settings.ZOHO_API_DOMAIN,
            scopes=settings.scope_list(),
        )

    @property
    def token_url(self) -> str:
        return f"{self._accounts_url}/oauth/v2/token"

    # ── Authorization ───────────────────────────────────────────────────────

    def build_authorization_url(
        self,
        client_id: str | None = None,
        redirect_uri: str | None = None,
        scopes: Sequence[str] | None = None,
    ) -> str:
        """Build the Zoho consent URL the administrator is sent to.

        Arguments default to the configured values. Returns an empty string
        when the client id or redirect uri is unset.
        """
        client_id = self._client_id if client_id is None else client_id
        redirect_uri = self._redirect_uri if redirect_uri is None else redirect_uri
        scopes = self._scopes if scopes is None else scopes

        if not client_id or not redirect_uri:
            return ""

        params = {
            "scope": ",".join(scopes),
            "client_id": client_id,
            "response_type": "code",
            "access_type": "offline",
            "redirect_uri": redirect_uri,
            "prompt": "consent",
        }
        return f"{self._accounts_url}/oauth/v2/auth?{urlencode(params)}"

    async def exchange_code_for_token(self, code: str) -> dict[str, Any]:
        """Exchange an authorization code for access and refresh tokens.

        On success the new credential overwrites whatever was stored and the
        raw token payload is returned.

        Raises:
            NotConfiguredError: Client id, secret or redirect uri missing.
            TransportError: Network failure or non-2xx response.
            ProviderError: 2xx response without an access token.
        """
        if not (self._client_id and self._client_secret and self._redirect_uri):
            self._log.error("oauth.exchange_not_configured")
            raise NotConfiguredError(
                "Zoho client id, client secret and redirect uri must be configured"
            )

        payload = await self._post_token(
            {
                "grant_type": "authorization_code",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "redirect_uri": self._redirect_uri,
                "code": code,
            },
            operation="exchange",
        )
        await self._store.save_token_response(payload, now=self._clock())
        self._log.info(
            "oauth.token_obtained",
            has_refresh_token=bool(payload.refresh_token),
            api_domain=payload.api_domain,
        )
        return payload.model_dump(exclude_none=True)

    # ── Refresh ─────────────────────────────────────────────────────────────

    async def refresh_access_token(self) -> dict[str, Any]:
        """Obtain a new access token with the stored refresh token.

        The refresh token itself is kept unless Zoho issues a new one. On
        failure the stored credential is left untouched.

        Raises:
            NotConfiguredError: Client id or secret missing; nothing is sent.
            MissingRefreshTokenError: No refresh token stored; nothing is sent.
            TransportError: Network failure or non-2xx response.
            ProviderError: 2xx response without an access token.
        """
        if not (self._client_id and self._client_secret):
            self._log.error("oauth.refresh_not_configured")
            raise NotConfiguredError("Zoho client id and client secret must be configured")

        credential = await self._store.load()
        if not credential.refresh_token:
            self._log.error("oauth.refresh_token_missing")
            raise MissingRefreshTokenError("No refresh token available")

        payload = await self._post_token(
            {
                "grant_type": "refresh_token",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "refresh_token": credential.refresh_token,
            },
            operation="refresh",
        )
        await self._store.save_token_response(payload, now=self._clock())
        self._log.info("oauth.token_refreshed", expires_in=payload.expires_in)
        return payload.model_dump(exclude_none=True)

    # ── Access ──────────────────────────────────────────────────────────────

    async def get_access_token(self) -> str:
        """Return a usable access token, refreshing first when expired.

        An absent or expired credential triggers exactly one refresh attempt.

        Raises:
            MissingRefreshTokenError, TransportError, ProviderError: from the
                refresh attempt.
            ProviderError: No access token could be produced.
        """
        credential = await self._store.load()
        if credential.is_expired(self._clock()):
            self._log.debug("oauth.token_expired", expires_at=credential.expires_at)
            await self.refresh_access_token()
            credential = await self._store.load()

        if not credential.access_token:
            self._log.error("oauth.no_access_token")
            raise ProviderError("No access token available")
        return credential.access_token

    async def is_connected(self) -> bool:
        """True iff a non-empty access token is stored (expired or not)."""
        return bool(await self._store.get(ACCESS_TOKEN_KEY))

    async def get_api_domain(self) -> str:
        """Stored api domain, or the default Zoho API base URL."""
        credential = await self._store.load()
        return credential.api_domain or self._default_api_domain

    async def get_credential(self) -> Credential:
        """Snapshot of the stored credential."""
        return await self._store.load()

    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret and self._redirect_uri)

    # ── Internal ────────────────────────────────────────────────────────────

    async def _post_token(self, form: dict[str, str], operation: str) -> TokenResponse:
        """POST a form to the token endpoint and return the parsed success body."""
        try:
            response = await self._http.post(self.token_url, data=form)
        except httpx.HTTPError as exc:
            self._log.error(f"oauth.{operation}_failed", error=str(exc))
            raise TransportError(f"Token {operation} request failed: {exc}") from exc

        if not response.is_success:
            self._log.error(
                f"oauth.{operation}_failed",
                status_code=response.status_code,
                body=response.text,
            )
            raise TransportError(
                f"Token {operation} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
            payload = TokenResponse.model_validate(data)
        except ValueError as exc:
            self._log.error(f"oauth.{operation}_failed", error="invalid JSON body")
            raise TransportError(
                f"Token {operation} returned an unreadable body",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        if not payload.access_token:
            self._log.error(
                f"oauth.{operation}_error",
                error=payload.error,
                response=data,
            )
            raise ProviderError(
                f"Token {operation} response has no access_token",
                code=payload.error,
                payload=data,
            )

        return payload

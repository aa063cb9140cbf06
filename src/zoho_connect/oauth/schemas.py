"""Pydantic schemas for the OAuth credential and token endpoint payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# Seconds before expiry at which a token is already treated as expired, so a
# token never lapses in the middle of a request.
EXPIRY_MARGIN_SECONDS = 60


class Credential(BaseModel):
    """Persisted OAuth2 state for the Zoho connection."""

    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = None  # epoch seconds
    api_domain: str | None = None

    def is_expired(self, now: float, margin: int = EXPIRY_MARGIN_SECONDS) -> bool:
        """Return True when the access token must be refreshed before use.

        A credential without a known expiry is always considered expired.
        """
        if not self.expires_at:
            return True
        return now >= self.expires_at - margin


class TokenResponse(BaseModel):
    """JSON body returned by the Zoho Accounts token endpoint."""

    model_config = ConfigDict(extra="allow")

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    api_domain: str | None = None
    token_type: str | None = None
    error: str | None = None

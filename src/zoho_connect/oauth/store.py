"""Key-value persistence for the OAuth credential.

Each credential attribute lives under its own key so they can be read and
written independently; there is no cross-key transaction. Concurrent
refreshes from two processes race and the last writer wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import redis.asyncio as aioredis

from src.zoho_connect.oauth.schemas import Credential, TokenResponse

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
EXPIRES_KEY = "expires"
API_DOMAIN_KEY = "api_domain"


class CredentialStore(ABC):
    """Abstract key-value store holding the credential keys.

    Implementations only provide get/set of string values; loading and
    saving whole credentials is shared.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value for key, or None."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value under key."""
        ...

    async def load(self) -> Credential:
        """Read all credential keys into a Credential snapshot."""
        expires = await self.get(EXPIRES_KEY)
        return Credential(
            access_token=await self.get(ACCESS_TOKEN_KEY) or None,
            refresh_token=await self.get(REFRESH_TOKEN_KEY) or None,
            expires_at=int(float(expires)) if expires else None,
            api_domain=await self.get(API_DOMAIN_KEY) or None,
        )

    async def save_token_response(self, token: TokenResponse, now: float) -> None:
        """Persist a successful token response.

        The access token is always written. Refresh token, expiry and api
        domain are only written when present, so a refresh response that
        does not reissue the refresh token keeps the stored one.
        """
        await self.set(ACCESS_TOKEN_KEY, token.access_token or "")
        if token.refresh_token:
            await self.set(REFRESH_TOKEN_KEY, token.refresh_token)
        if token.expires_in is not None:
            await self.set(EXPIRES_KEY, str(int(now) + int(token.expires_in)))
        if token.api_domain:
            await self.set(API_DOMAIN_KEY, token.api_domain)


class RedisCredentialStore(CredentialStore):
    """Credential store backed by plain Redis string keys.

    Keys are namespaced as ``{prefix}.{name}``, e.g.
    ``zoho_connect.access_token``.

    Args:
        redis_client: redis.asyncio client created with decode_responses=True.
        prefix: Key namespace.
    """

    def __init__(self, redis_client: aioredis.Redis, prefix: str = "zoho_connect") -> None:
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}.{key}"

    async def get(self, key: str) -> str | None:
        return await self._redis.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        await self._redis.set(self._key(key), value)

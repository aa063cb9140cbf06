"""Zoho OAuth2 credential lifecycle.

- TokenManager: authorization URL, code exchange, expiry detection, refresh
- CredentialStore / RedisCredentialStore: key-value credential persistence
- Credential / TokenResponse: pydantic schemas
"""

from src.zoho_connect.oauth.schemas import EXPIRY_MARGIN_SECONDS, Credential, TokenResponse
from src.zoho_connect.oauth.store import CredentialStore, RedisCredentialStore
from src.zoho_connect.oauth.token_manager import TokenManager

__all__ = [
    "Credential",
    "CredentialStore",
    "EXPIRY_MARGIN_SECONDS",
    "RedisCredentialStore",
    "TokenManager",
    "TokenResponse",
]

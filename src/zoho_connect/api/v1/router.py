"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.zoho_connect.api.v1 import accounts, campaigns, contacts, health, oauth

router = APIRouter(prefix="/v1")

router.include_router(health.router)
router.include_router(oauth.router)
router.include_router(accounts.router)
router.include_router(contacts.router)
router.include_router(campaigns.router)

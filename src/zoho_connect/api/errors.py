"""Maps zoho-connect exceptions to HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.zoho_connect.errors import (
    MappingValidationError,
    MissingRefreshTokenError,
    NotConfiguredError,
    NotFoundError,
    ProviderError,
    TransportError,
    ZohoConnectError,
)

logger = structlog.get_logger(__name__)

# Checked in order; subclasses before their bases
STATUS_BY_ERROR: tuple[tuple[type[ZohoConnectError], int], ...] = (
    (NotConfiguredError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (MissingRefreshTokenError, status.HTTP_401_UNAUTHORIZED),
    (TransportError, status.HTTP_502_BAD_GATEWAY),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
    (MappingValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)


def status_for(exc: ZohoConnectError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def zoho_connect_error_handler(request: Request, exc: ZohoConnectError) -> JSONResponse:
    status_code = status_for(exc)
    content: dict = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, ProviderError) and exc.code:
        content["code"] = exc.code

    logger.warning(
        "api.request_failed",
        path=request.url.path,
        status_code=status_code,
        error=type(exc).__name__,
        message=str(exc),
    )
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ZohoConnectError, zoho_connect_error_handler)

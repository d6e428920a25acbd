"""FastAPI application exposing the enrollment engine over HTTP."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from .. import __version__
from ..core.app import YubiGoblinApp, create_app_context
from ..errors import YubiGoblinError
from ..models import ErrorMessage
from .consts import API_PREFIX
from .routes import dependencies_router, users_router, yubikey_router


def create_api(context: Optional[YubiGoblinApp] = None) -> FastAPI:
    """Build the REST API around ``context``.

    Every ``YubiGoblinError`` becomes a 500 response with an ``ErrorMessage``
    body.
    """
    api = FastAPI(
        title="YubiGoblin",
        version=__version__,
        description="Manage YubiKey second factor authentication for sudo and the login screen",
    )
    api.state.context = context or create_app_context()

    @api.exception_handler(YubiGoblinError)
    async def handle_yubigoblin_error(request: Request, exc: YubiGoblinError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=500, content=ErrorMessage(message=str(exc)).model_dump())

    api.include_router(dependencies_router, prefix=API_PREFIX)
    api.include_router(yubikey_router, prefix=API_PREFIX)
    api.include_router(users_router, prefix=API_PREFIX)

    return api

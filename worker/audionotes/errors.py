from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class UpstreamStreamError(RuntimeError):
    """The recognition provider stream could not be opened or failed mid-session."""


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def _handle_http_exception(request: Request, exc: HTTPException):  # type: ignore[unused-variable]
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception):  # type: ignore[unused-variable]
        logging.getLogger("app").exception(f"unhandled error on {request.url.path}")
        return JSONResponse(status_code=500, content=ErrorResponse(error="internal error").model_dump())

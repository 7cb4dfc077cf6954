from __future__ import annotations

import json
import logging
import os
import time
import uuid
from typing import Any, Dict, MutableMapping, Optional, Tuple

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

APP_LOGGERS = ("app", "app.session", "app.analytics", "app.access")


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``session_id`` is included when the record carries one."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        data: Dict[str, Any] = {
            "level": record.levelname,
            "ts": int(time.time() * 1000),
            "logger": record.name,
            "message": record.getMessage(),
        }
        session_id = getattr(record, "session_id", None)
        if session_id:
            data["session_id"] = session_id
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


class SessionLogAdapter(logging.LoggerAdapter):
    """Tags records with the live session's current id.

    The id is read on every call since it changes once the provider names
    the session.
    """

    def __init__(self, logger: logging.Logger, session: Any) -> None:
        super().__init__(logger, {})
        self.session = session

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("session_id", self.session.session_id)
        kwargs["extra"] = extra
        return msg, kwargs


def session_logger(session: Any) -> SessionLogAdapter:
    return SessionLogAdapter(logging.getLogger("app.session"), session)


def _resolve_level(default: int = logging.INFO) -> int:
    env_level = os.getenv("AUDIONOTES_LOG_LEVEL")
    if not env_level:
        return default
    env_level = env_level.strip()
    if env_level.isdigit():
        try:
            return int(env_level)
        except ValueError:
            return default
    lvl = logging.getLevelName(env_level.upper())
    if isinstance(lvl, str):
        return default
    return int(lvl)


def setup_logging(level: Optional[int] = None) -> None:
    resolved_level = level if level is not None else _resolve_level()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(resolved_level)
    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(resolved_level)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Access log for plain HTTP requests. Websocket traffic is logged by the relay."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request.state.request_id = uuid.uuid4().hex[:12]
        start = time.perf_counter()
        response = await call_next(request)
        dur_ms = int((time.perf_counter() - start) * 1000)
        logging.getLogger("app.access").info(
            json.dumps({
                "request_id": request.state.request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": dur_ms,
            })
        )
        return response


def install_app_logging(app: FastAPI) -> None:
    app.add_middleware(RequestContextMiddleware)

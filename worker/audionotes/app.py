from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
import logging
import os
from typing import Optional

from .routers.live import router as live_router, ws_router as live_ws_router
from .routers.notes import router as notes_router
from .routers.summarize import router as summarize_router
from .config import Settings, load_settings
from .logging import setup_logging, install_app_logging
from .errors import install_error_handlers
from .services.notes import EnhanceOptions
from .services.streaming import StreamFactory
from .services.summarizer import SummaryOptions
from .state import State


def _load_env_file(env_path: Path) -> None:
    """Minimal .env loader: KEY=VALUE lines into os.environ if not set.
    - Ignores comments and blank lines
    - Strips surrounding quotes
    - Supports optional 'export ' prefix
    """
    if not env_path.exists():
        return
    try:
        raw_text = env_path.read_text(encoding="utf-8")
    except OSError as e:
        logging.getLogger("app").warning(f"could not read {env_path}: {e}")
        return
    for raw in raw_text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.lower().startswith("export "):
            line = line[7:].lstrip()
        if "=" not in line:
            continue
        k, v = line.split("=", 1)
        key = k.strip()
        val = v.strip().strip('"').strip("'")
        os.environ.setdefault(key, val)


def create_app(
    settings: Optional[Settings] = None,
    stream_factory: Optional[StreamFactory] = None,
) -> FastAPI:
    if settings is None:
        # Load environment from optional .env files (repo root and worker dir)
        pkg_dir = Path(__file__).resolve().parent
        worker_dir = pkg_dir.parent
        repo_root = worker_dir.parent
        _load_env_file(repo_root / ".env")
        _load_env_file(worker_dir / ".env")
        settings = load_settings()
    setup_logging()

    app = FastAPI(title="Audio Notes Worker", version="0.1.0")

    # Attach config/state
    app.state.settings = settings
    state = State(
        summary_options=SummaryOptions.from_settings(settings),
        enhance_options=EnhanceOptions.from_settings(settings),
    )
    if stream_factory is not None:
        state.stream_factory = stream_factory
    app.state.state = state

    # CORS
    allow = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_app_logging(app)
    install_error_handlers(app)

    # Versioned API
    app.include_router(live_router, prefix="/v1")
    app.include_router(summarize_router, prefix="/v1")
    app.include_router(notes_router, prefix="/v1")
    app.include_router(live_ws_router)

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return {"status": "ok"}

    logging.getLogger("app").info(
        f"worker ready: streaming_url={settings.streaming_url} sample_rate={settings.sample_rate}"
    )
    return app


# Convenience for `uvicorn audionotes.app:app`
app = create_app()

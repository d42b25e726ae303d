"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.config import get_settings
from app.container import ServiceContainer, build_container
from app.core.logging import setup_logging
from app.core.telemetry import instrument_engine, setup_telemetry

logger = logging.getLogger(__name__)


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Build the application, wiring services on startup unless ``container`` is given."""

    settings = container.settings if container is not None else get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.state.container = container

    # Local development origins only.
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_telemetry(app, settings)
    if container is not None:
        instrument_engine(container.engine)

    @app.on_event("startup")
    def startup() -> None:
        """Initialise the database schema and services when the service boots."""

        if app.state.container is None:
            app.state.container = build_container(settings)
            instrument_engine(app.state.container.engine)
            logger.info("Started %s", settings.app_name)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        """Return service readiness metadata."""

        return {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "reporting_currency": settings.reporting_currency,
        }

    app.include_router(api_router)
    return app


app = create_app()

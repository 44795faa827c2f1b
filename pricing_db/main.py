"""
Pricing DB Service
==================
FastAPI application entry point.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from pricing_db import __version__
from pricing_db.api import api_router
from pricing_db.config import get_settings
from pricing_db.core.defaults import must_load_engine
from pricing_db.core.logging import configure_logging
from pricing_db.core.pricing import PricingEngine

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    logger.info("Starting Pricing DB", env=settings.app_env)

    # An injected engine wins; otherwise refuse to serve without pricing data
    if getattr(app.state, "engine", None) is None:
        app.state.engine = must_load_engine(settings.config_dir)

    engine: PricingEngine = app.state.engine
    logger.info(
        "Pricing data ready",
        providers=engine.provider_count(),
        models=engine.model_count(),
    )

    yield

    logger.info("Shutting down Pricing DB")


def create_app(engine: Optional[PricingEngine] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        engine: Pre-built engine to serve; loaded from settings at startup if omitted
    """
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Pricing DB API",
        description="Cost calculation for token, credit, image and grounding billed providers",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if not settings.is_production else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount Prometheus metrics endpoint
    if settings.metrics_enabled:
        app.mount("/metrics", make_asgi_app())

    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "pricing_db.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()

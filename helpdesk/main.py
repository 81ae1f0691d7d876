"""Rental Helpdesk — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from helpdesk.adapters.llm.openrouter_adapter import OpenRouterAdapter
from helpdesk.adapters.persistence.database import Database
from helpdesk.adapters.streaming.stream_registry import StreamRegistry
from helpdesk.config import settings
from helpdesk.infrastructure.api.routes_analytics import router as analytics_router
from helpdesk.infrastructure.api.routes_customers import router as customers_router
from helpdesk.infrastructure.api.routes_health import router as health_router
from helpdesk.infrastructure.api.routes_processing import router as processing_router
from helpdesk.infrastructure.api.routes_tickets import router as tickets_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    app.state.db = Database(settings.database_url, echo=settings.debug)
    app.state.llm = OpenRouterAdapter()
    app.state.streams = StreamRegistry()
    logger.info("LLM model: %s", app.state.llm.model)

    try:
        await app.state.db.ping()
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)

    yield

    await app.state.streams.shutdown()
    await app.state.llm.aclose()
    await app.state.db.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Rental Helpdesk Support AI",
        description="Rule-based ticket triage with a streamed multi-agent resolution pipeline",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(tickets_router, prefix="/api")
    app.include_router(processing_router, prefix="/api")
    app.include_router(customers_router, prefix="/api")
    app.include_router(analytics_router, prefix="/api")

    return app


app = create_app()

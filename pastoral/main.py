"""Pastoral agent ledger — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from pastoral.adapters.persistence.database import engine
from pastoral.config import settings
from pastoral.infrastructure.api.error_handlers import register_error_handlers
from pastoral.infrastructure.api.routes_agents import router as agents_router
from pastoral.infrastructure.api.routes_assignments import router as assignments_router
from pastoral.infrastructure.api.routes_dimensions import router as dimensions_router
from pastoral.infrastructure.api.routes_health import router as health_router
from pastoral.infrastructure.api.routes_reports import router as reports_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )

    app = FastAPI(
        title="Pastoral agent ledger",
        description="Agent assignments to parish, pastoral group and function, with reports",
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

    register_error_handlers(app)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(reports_router, prefix="/api")
    app.include_router(agents_router, prefix="/api")
    app.include_router(assignments_router, prefix="/api")
    app.include_router(dimensions_router, prefix="/api")

    return app


app = create_app()

"""FastAPI application factory.

Main entry point for the pre-primary record system Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from preprimary import __version__
from preprimary.config.app_config import load_app_config
from preprimary.db.database import init_db
from preprimary.db.seed import seed_default_users
from preprimary.web.routes import (
    auth_router,
    health_router,
    plans_alias_router,
    plans_router,
    progress_router,
    reports_router,
    stats_router,
    students_router,
    suggestions_router,
    teachers_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the schema and default accounts on startup."""
    config = load_app_config()
    init_db(config.database_path)
    seeded = seed_default_users()
    logger.info(
        "api_startup",
        database=str(config.database_path.absolute()),
        seeded_users=seeded,
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Pre-Primary Record System API",
        description="Students, progress, teaching plans and reports for a pre-primary school",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Browser front end is served from another origin; auth is a bearer header
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(teachers_router)
    app.include_router(students_router)
    app.include_router(progress_router)
    app.include_router(plans_router)
    app.include_router(plans_alias_router)
    app.include_router(suggestions_router)
    app.include_router(stats_router)
    app.include_router(reports_router)

    return app


# Default app instance for uvicorn
app = create_app()

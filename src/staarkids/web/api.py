"""FastAPI application factory.

Main entry point for the STAAR Kids Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staarkids import __version__
from staarkids.config.app_config import load_app_config
from staarkids.db.database import init_db
from staarkids.web.routes import (
    chat_router,
    classrooms_router,
    exams_router,
    health_router,
    parents_router,
    practice_router,
    questions_router,
    users_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize the database on startup."""
    config = load_app_config()
    init_db(config.db_path)
    logger.info(
        "api_startup",
        db_path=str(config.db_path),
        llm_provider=config.llm.provider,
        llm_model=config.llm.model,
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="STAAR Kids API",
        description="STAAR practice questions, progress and tutoring for grades 3-5",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(questions_router)
    app.include_router(practice_router)
    app.include_router(exams_router)
    app.include_router(users_router)
    app.include_router(classrooms_router)
    app.include_router(chat_router)
    app.include_router(parents_router)

    return app


# Default app instance for uvicorn
app = create_app()

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from .auth import validate_jwt_secret
from .db import build_engine, build_session_factory
from .errors import StoreError
from .middleware import SecurityHeadersMiddleware
from .routers import authors, bookmarks, categories, comments, newsletter, posts, search, series, system
from .seed import ensure_seed_data
from .settings import Settings

logger = logging.getLogger(__name__)


def _alembic_config(database_url: str) -> Config:
    base_dir = Path(__file__).resolve().parent.parent
    cfg = Config(str(base_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(base_dir / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def run_migrations(engine: Engine, database_url: str) -> None:
    """Upgrade the schema to head unless it is already there."""
    logger.info("run_migrations: Starting...")
    alembic_cfg = _alembic_config(database_url)
    try:
        with engine.connect() as connection:
            context = MigrationContext.configure(connection)
            current_heads = context.get_current_heads()
            heads = ScriptDirectory.from_config(alembic_cfg).get_heads()
            if current_heads and set(current_heads) == set(heads):
                logger.info(f"Database is up to date (revision: {current_heads[0]}), skipping migrations.")
                return
            logger.info(f"Current revision(s): {current_heads}, Target revision(s): {heads}. Running migrations...")

        command.upgrade(alembic_cfg, "head")
        logger.info("run_migrations: Completed successfully.")
    except Exception as e:
        logger.error(f"run_migrations: Error occurred: {e}", exc_info=True)
        raise


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"Store error on {request.url.path}: {exc.message}")
    else:
        logger.info(f"Store rejected {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Build the API application.

    Settings come from the environment unless given; an engine can be passed
    in to run against an existing database (tests do this).
    """
    if settings is None:
        load_dotenv()
        settings = Settings.from_env()
    validate_jwt_secret(settings.jwt_secret_key)

    logging.basicConfig(level=settings.log_level)

    if engine is None:
        engine = build_engine(settings.database_url, echo=settings.log_level == "DEBUG")
    session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting application...")
        if settings.run_migrations:
            run_migrations(engine, settings.database_url)
        ensure_seed_data(session_factory)
        logger.info("Zaplanje API server ready")
        yield
        logger.info("Shutting down application...")

    app = FastAPI(
        title="Zaplanje API",
        version="1.0.0",
        description="Content store for the Zaplanje cultural blog",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory

    if settings.cors_origins == ["*"]:
        logger.warning(
            "CORS is configured to allow all origins. "
            "This is insecure for production. Set CORS_ORIGINS to specific domains."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(system.router)
    app.include_router(authors.router)
    app.include_router(posts.router)
    app.include_router(categories.router)
    app.include_router(comments.router)
    app.include_router(newsletter.router)
    app.include_router(series.router)
    app.include_router(bookmarks.router)
    app.include_router(search.router)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "zaplanje.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )

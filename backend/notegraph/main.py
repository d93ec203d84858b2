"""
NoteGraph — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, GraphQL mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn notegraph.main:app, or notegraph-server).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────┐ ┌─────────────────┐   │
    │  │ POST/GET /graphql        │ │ GET /health     │   │
    │  └──────────────────────────┘ └─────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log the GraphQL and explorer URLs
    Shutdown: dispose the database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notegraph import __version__
from notegraph.api.schema import build_graphql_router
from notegraph.config import settings
from notegraph.database import async_session_factory, dispose_engine
from notegraph.middleware.logging import RequestLoggingMiddleware
from notegraph.middleware.rate_limit import RateLimitMiddleware
from notegraph.middleware.request_id import RequestIDMiddleware, request_id_var
from notegraph.routes import health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Called once at server startup and by the seed script.
    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # These log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging and banner. Shutdown: dispose the engine."""
    setup_logging()
    base_url = f"http://{settings.backend_host}:{settings.backend_port}"
    logger.info("=" * 60)
    logger.info("NoteGraph %s starting up...", __version__)
    logger.info("GraphQL endpoint: %s%s", base_url, settings.graphql_path)
    if settings.graphql_ide:
        logger.info("GraphiQL explorer: %s%s (open in a browser)", base_url, settings.graphql_path)
    logger.info("=" * 60)

    yield

    logger.info("NoteGraph shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Catch-all for errors raised outside GraphQL execution.

    Errors inside resolvers never reach here: strawberry turns them into
    `errors` entries in an HTTP 200 response (see api/schema.py).
    """

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        session_factory: Where resolvers and the health check get sessions.
                         Defaults to the module-level factory bound to
                         settings.database_url; tests pass their own.
    """
    app = FastAPI(
        title="NoteGraph API",
        description="Note-taking service with a GraphQL API for CRUD and search.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.session_factory = session_factory or async_session_factory

    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(
        build_graphql_router(app.state.session_factory),
        prefix=settings.graphql_path,
    )
    app.include_router(health.router)

    return app


# uvicorn expects `notegraph.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: notegraph-server."""
    uvicorn.run(
        "notegraph.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )

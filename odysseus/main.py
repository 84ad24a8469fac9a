"""
ASGI application for the Odysseus ledger.

Users register, open checking/savings/credit accounts and post credits and
debits against them. Postings carrying an idempotency key are applied at
most once.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from odysseus import __version__
from odysseus.core.config import settings
from odysseus.core.logging import setup_logging
from odysseus.core.metrics import get_metrics, get_metrics_content_type
from odysseus.infrastructure.database import db_manager
from odysseus.presentation.api import api_router
from odysseus.presentation.middleware import (
    LoggingMiddleware,
    RequestContextMiddleware,
    error_handler_middleware,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging, open the engine and make sure the schema exists."""
    setup_logging()
    db_manager.init()
    if settings.db_auto_create:
        await db_manager.create_all()

    logger.info("ledger_started", version=__version__, debug=settings.debug)
    try:
        yield
    finally:
        await db_manager.close()
        logger.info("ledger_stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Odysseus Ledger",
        description="Accounts and idempotent credit/debit postings",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Idempotent-Replayed", RequestContextMiddleware.HEADER_NAME],
    )
    # Outermost: binds the request id before LoggingMiddleware runs.
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)

    error_handler_middleware(app)
    app.include_router(api_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=get_metrics(), media_type=get_metrics_content_type())

    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    return app


app = create_app()

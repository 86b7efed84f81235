"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quote_sentinel.api.deps import AppState, api_key_middleware
from quote_sentinel.api.routes import router
from quote_sentinel.api.schemas import ErrorResponse
from quote_sentinel.core.config import QuoteSentinelConfig, load_config
from quote_sentinel.core.exceptions import ConfigError, QuoteSentinelError
from quote_sentinel.service import QuoteService, build_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the quote service once at startup and close it at shutdown."""
    config = app.state._pending_config or load_config()
    service = app.state._pending_service or build_service(config)

    app.state.app_state = AppState(config=config, service=service)

    yield

    await service.close()


def create_app(
    config: QuoteSentinelConfig | None = None,
    service: QuoteService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``service`` overrides the HTTP-backed service built from config, which
    is how tests run the API against in-memory providers.
    """
    import quote_sentinel

    app = FastAPI(
        title="Quote Sentinel API",
        description="Stock quotes, price history windows and gains projections",
        version=quote_sentinel.__version__,
        lifespan=lifespan,
    )

    # Stash config so lifespan can retrieve it
    app.state._pending_config = config
    app.state._pending_service = service

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # No-op unless api.api_key is set in the config built by lifespan
    app.middleware("http")(api_key_middleware)

    app.include_router(router, prefix="/api")

    # Exception handlers
    @app.exception_handler(QuoteSentinelError)
    async def sentinel_exception_handler(request: Request, exc: QuoteSentinelError):
        status = 400 if isinstance(exc, ConfigError) else 500
        logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(
            status_code=status,
            content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
        )

    return app

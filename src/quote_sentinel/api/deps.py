"""Request-scoped dependencies and the optional API key guard."""

from __future__ import annotations

import hmac
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import JSONResponse

from quote_sentinel.api.schemas import ErrorResponse
from quote_sentinel.core.config import QuoteSentinelConfig
from quote_sentinel.service import QuoteService

API_KEY_HEADER = "X-API-Key"

# Reachable without a key so load balancers can probe the service.
PUBLIC_PATHS = frozenset({"/api/health"})


@dataclass
class AppState:
    """Built once in the app lifespan and stored on ``app.state``."""

    config: QuoteSentinelConfig
    service: QuoteService


def get_service(request: Request) -> QuoteService:
    return request.app.state.app_state.service


async def api_key_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests whose ``X-API-Key`` does not match ``api.api_key``."""
    expected = request.app.state.app_state.config.api.api_key
    if not expected or request.url.path in PUBLIC_PATHS:
        return await call_next(request)

    supplied = request.headers.get(API_KEY_HEADER, "")
    if not hmac.compare_digest(supplied.encode(), expected.encode()):
        return JSONResponse(
            status_code=401,
            content=ErrorResponse(
                error="Unauthorized", detail=f"Missing or invalid {API_KEY_HEADER} header"
            ).model_dump(),
        )
    return await call_next(request)

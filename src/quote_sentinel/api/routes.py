"""FastAPI route definitions for the quote-sentinel API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

import quote_sentinel
from quote_sentinel.api.deps import get_service
from quote_sentinel.api.schemas import (
    ComparisonEnvelope,
    ComparisonResponse,
    ErrorListResponse,
    GainsEnvelope,
    GainsResponse,
    HealthResponse,
    HistoryEnvelope,
    HistoryResponse,
    QuoteEnvelope,
    QuoteResponse,
)
from quote_sentinel.core.results import Failure
from quote_sentinel.service import QuoteService

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorListResponse},
    404: {"model": ErrorListResponse},
    500: {"model": ErrorListResponse},
}


def failure_response(result: Failure) -> JSONResponse:
    """Render a Failure with a status derived from its error kinds."""
    kinds = {e.kind for e in result.errors}
    if "invalid" in kinds:
        status = 400
    elif kinds == {"not_found"}:
        status = 404
    else:
        status = 500
    return JSONResponse(
        status_code=status,
        content=ErrorListResponse.from_failure(result).model_dump(),
    )


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness check."""
    return HealthResponse(status="ok", version=quote_sentinel.__version__)


# -- Quotes --


@router.get("/stock/{symbol}/quote", response_model=QuoteEnvelope, responses=_ERROR_RESPONSES)
async def get_quote(symbol: str, service: QuoteService = Depends(get_service)):
    """Latest price for one symbol."""
    result = await service.get_quote(symbol)
    if result.kind == "failure":
        return failure_response(result)
    return QuoteEnvelope(result=QuoteResponse.from_model(result.value))


@router.get(
    "/stocks/{symbol}/compare",
    response_model=ComparisonEnvelope,
    responses=_ERROR_RESPONSES,
)
async def compare_quotes(
    symbol: str,
    stocks: list[str] = Query(default=[], description="Symbols to compare against"),
    service: QuoteService = Depends(get_service),
):
    """Latest prices for ``symbol`` and every symbol in ``stocks``, in that order."""
    result = await service.compare_quotes([symbol, *stocks])
    if result.kind == "failure":
        return failure_response(result)
    return ComparisonEnvelope(result=ComparisonResponse.from_model(result.value))


# -- History --


@router.get(
    "/stocks/{symbol}/history",
    response_model=HistoryEnvelope,
    responses=_ERROR_RESPONSES,
)
async def get_history(
    symbol: str,
    from_date: str = Query(..., alias="from", description="Earliest date, YYYY-MM-DD"),
    to_date: str = Query(..., alias="to", description="Latest date, YYYY-MM-DD"),
    service: QuoteService = Depends(get_service),
):
    """Daily prices between two dates inclusive, newest first."""
    result = await service.get_history_window(symbol, from_date, to_date)
    if result.kind == "failure":
        return failure_response(result)
    return HistoryEnvelope(result=HistoryResponse.from_model(result.value))


# -- Gains --


@router.get("/stock/{symbol}/gains", response_model=GainsEnvelope, responses=_ERROR_RESPONSES)
async def project_gains(
    symbol: str,
    purchased_amount: str = Query(..., description="Number of shares bought"),
    purchased_at: str = Query(..., description="Purchase date, YYYY-MM-DD"),
    service: QuoteService = Depends(get_service),
):
    """Capital gains if shares bought on ``purchased_at`` were sold at the latest price."""
    result = await service.project_gains(symbol, purchased_amount, purchased_at)
    if result.kind == "failure":
        return failure_response(result)
    return GainsEnvelope(result=GainsResponse.from_model(result.value))

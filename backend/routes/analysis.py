"""
Analysis Routes - API endpoints for the IDX signal engine.

Blocking yfinance work runs in the default executor so the event loop
stays responsive.
"""
import asyncio
import logging
from functools import partial
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from analysis.exceptions import InsufficientDataError, TickerNotFoundError, UpstreamFailureError
from analysis.models import AnalysisResult, ChartData, ComparisonVerdict, IntradayPlan, MarketStatus, ScanReport
from services.market_status import get_market_status
from services.stock_service import (
    analyze_intraday_ticker,
    analyze_ticker,
    compare_tickers,
    get_chart_data,
    get_provider,
    scan_market,
)

router = APIRouter(prefix="/api", tags=["analysis"])
logger = logging.getLogger(__name__)


class ScanRequest(BaseModel):
    tickers: Optional[List[str]] = Field(default=None, description="Tickers to scan; empty uses the default watchlist")


def _http_error(e: Exception, action: str) -> HTTPException:
    """Map engine errors onto HTTP status codes."""
    if isinstance(e, InsufficientDataError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, TickerNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, UpstreamFailureError):
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    logger.error(f"Error during {action}: {e}")
    return HTTPException(status_code=500, detail=f"Failed to {action}: {e}")


async def _run_blocking(func, *args):
    return await asyncio.get_event_loop().run_in_executor(None, partial(func, *args))


# Static routes before dynamic {ticker} routes
@router.get("/market-status", response_model=MarketStatus)
async def market_status():
    """IDX session status (OPEN / BREAK / CLOSED)."""
    try:
        return await _run_blocking(get_market_status, get_provider())
    except Exception as e:
        raise _http_error(e, "get market status")


@router.get("/compare", response_model=ComparisonVerdict)
async def compare(
    ticker_a: str = Query(..., min_length=1, description="First ticker, e.g. BBCA"),
    ticker_b: str = Query(..., min_length=1, description="Second ticker, e.g. BBRI")
):
    """Head-to-head comparison of two tickers."""
    try:
        return await _run_blocking(compare_tickers, ticker_a, ticker_b)
    except Exception as e:
        raise _http_error(e, f"compare {ticker_a} vs {ticker_b}")


@router.post("/scan", response_model=ScanReport)
async def scan(request: ScanRequest):
    """
    Batch scan. Failed tickers are reported in ``errors``.

    Returns:
        {"total": 24, "results": [...], "errors": [{"symbol": "XXXX", "error": "..."}]}
    """
    try:
        return await _run_blocking(scan_market, request.tickers)
    except Exception as e:
        raise _http_error(e, "scan market")


@router.get("/analyze/{ticker}", response_model=AnalysisResult)
async def analyze(ticker: str):
    """Daily swing analysis: signal, confidence, trend, patterns and bandar flow."""
    try:
        return await _run_blocking(analyze_ticker, ticker)
    except Exception as e:
        raise _http_error(e, f"analyze stock {ticker}")


@router.get("/intraday/{ticker}", response_model=IntradayPlan)
async def intraday(ticker: str):
    """Intraday bias, score and trading plan."""
    try:
        return await _run_blocking(analyze_intraday_ticker, ticker)
    except Exception as e:
        raise _http_error(e, f"analyze intraday for {ticker}")


@router.get("/chart/{ticker}", response_model=ChartData)
async def chart(ticker: str):
    """Closing price with VWAP overlay."""
    try:
        return await _run_blocking(get_chart_data, ticker)
    except Exception as e:
        raise _http_error(e, f"load chart for {ticker}")

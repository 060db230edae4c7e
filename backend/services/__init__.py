"""
Services Module

I/O side of the signal engine: yfinance market data, IDX session status
and the orchestration used by the API routes.

Usage:
    from services import scan_market, compare_tickers

    report = scan_market(["BBCA", "TLKM"])
"""
from .market_data import MarketDataProvider
from .market_status import get_market_status
from .stock_service import (
    analyze_intraday_ticker,
    analyze_ticker,
    compare_tickers,
    get_chart_data,
    get_provider,
    scan_market,
)

__all__ = [
    "MarketDataProvider",
    "get_market_status",
    "analyze_intraday_ticker",
    "analyze_ticker",
    "compare_tickers",
    "get_chart_data",
    "get_provider",
    "scan_market",
]

"""
Stock Service Module
Glue between the yfinance provider and the pure analysis engine.
- Single ticker swing / intraday analysis
- Two-ticker comparison (both fetched concurrently)
- Batch market scan (bounded pool, per-ticker failure isolation)
- Price + VWAP chart series
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional, Tuple

import config
from analysis.comparison import compare_analyses
from analysis.exceptions import AnalysisError
from analysis.fundamental_badges import analyze_fundamentals
from analysis.indicators import bars_to_frame, calculate_vwap
from analysis.intraday_analyzer import analyze_intraday
from analysis.models import (
    AnalysisResult,
    ChartData,
    ComparisonVerdict,
    FundamentalSnapshot,
    IntradayPlan,
    PriceVwapPoint,
    ScanError,
    ScanReport,
)
from analysis.swing_analyzer import analyze_swing
from analysis.tickers import display_symbol
from services.market_data import MarketDataProvider

logger = logging.getLogger(__name__)

_provider: Optional[MarketDataProvider] = None


def get_provider() -> MarketDataProvider:
    """Shared provider instance (created on first use)."""
    global _provider
    if _provider is None:
        _provider = MarketDataProvider()
    return _provider


def _current_price(provider: MarketDataProvider, symbol: str, fallback: float) -> float:
    try:
        return provider.fetch_quote(symbol)
    except AnalysisError as e:
        logger.info(f"Quote unavailable for {symbol}, using last close: {e}")
        return fallback


def _analyze(symbol: str, provider: MarketDataProvider) -> Tuple[AnalysisResult, FundamentalSnapshot]:
    bars = provider.fetch_history(symbol, period=config.HISTORY_PERIOD)
    price = _current_price(provider, symbol, bars[-1].close)

    snapshot = provider.fetch_fundamentals(symbol)
    badges = analyze_fundamentals(snapshot)

    result = analyze_swing(symbol, bars, current_price=price, fundamental_badges=badges)
    return result, snapshot


def analyze_ticker(symbol: str, provider: Optional[MarketDataProvider] = None) -> AnalysisResult:
    """
    Full daily analysis for one ticker.

    Raises:
        TickerNotFoundError / UpstreamFailureError: data fetch failed
        InsufficientDataError: fewer than 200 daily bars
    """
    provider = provider or get_provider()
    result, _ = _analyze(symbol, provider)
    logger.info(f"Analyzed {result.symbol}: {result.signal} ({result.confidence_score}%)")
    return result


def analyze_intraday_ticker(symbol: str, provider: Optional[MarketDataProvider] = None) -> IntradayPlan:
    provider = provider or get_provider()
    bars_5m, bars_15m = provider.fetch_intraday(symbol)
    price = _current_price(provider, symbol, bars_5m[-1].close)
    return analyze_intraday(symbol, bars_5m, bars_15m, current_price=price)


def compare_tickers(symbol_a: str, symbol_b: str, provider: Optional[MarketDataProvider] = None) -> ComparisonVerdict:
    """
    Analyze two tickers concurrently and compare them.

    Raises:
        ValueError: both symbols refer to the same ticker
    """
    provider = provider or get_provider()
    if provider.normalize_ticker(symbol_a) == provider.normalize_ticker(symbol_b):
        raise ValueError(f"Cannot compare {display_symbol(symbol_a)} with itself")

    with ThreadPoolExecutor(max_workers=2) as executor:
        future_a = executor.submit(_analyze, symbol_a, provider)
        future_b = executor.submit(_analyze, symbol_b, provider)
        result_a, snapshot_a = future_a.result()
        result_b, snapshot_b = future_b.result()

    return compare_analyses(result_a, result_b, snapshot_a, snapshot_b)


def scan_market(
    tickers: Optional[Iterable[str]] = None,
    max_workers: int = config.SCAN_CONCURRENCY,
    provider: Optional[MarketDataProvider] = None
) -> ScanReport:
    """
    Analyze many tickers with a bounded thread pool.

    A failing ticker becomes a ScanError entry; it never aborts the batch.
    Results keep the input order.
    """
    provider = provider or get_provider()
    symbols = list(tickers) if tickers else list(config.DEFAULT_TICKERS)
    logger.info(f"[Scanner] Starting scan of {len(symbols)} tickers (workers={max_workers})...")
    start = time.time()

    results = {}
    errors = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(analyze_ticker, symbol, provider): idx
            for idx, symbol in enumerate(symbols)
        }

        for future in as_completed(future_to_index):
            idx = future_to_index[future]
            symbol = symbols[idx]
            try:
                results[idx] = future.result()
            except Exception as e:
                logger.error(f"[Scanner] Failed to analyze {symbol}: {e}")
                errors[idx] = ScanError(symbol=display_symbol(symbol), error=str(e))

    elapsed = time.time() - start
    logger.info(f"[Scanner] {len(results)}/{len(symbols)} tickers succeeded in {elapsed:.1f}s")

    return ScanReport(
        total=len(symbols),
        results=[results[i] for i in sorted(results)],
        errors=[errors[i] for i in sorted(errors)],
    )


def get_chart_data(symbol: str, provider: Optional[MarketDataProvider] = None) -> ChartData:
    """Closing prices with the whole-series VWAP overlay."""
    provider = provider or get_provider()
    bars = provider.fetch_history(symbol, period=config.HISTORY_PERIOD)
    df = bars_to_frame(bars)
    vwap = calculate_vwap(df['high'], df['low'], df['close'], df['volume'])

    return ChartData(
        symbol=display_symbol(symbol),
        points=[
            PriceVwapPoint(timestamp=b.timestamp, close=b.close, vwap=float(v))
            for b, v in zip(bars, vwap)
        ],
    )

"""
Intraday Analyzer Module
Day-trading plan from a short-granularity bar series.
- Opening Range (first 3 candles of today)
- Session VWAP
- Bias, score (0-99) and ATR based entry / stop / targets
- Reasoning text
"""
import logging
from datetime import date, datetime
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import pytz

import config
from analysis.exceptions import AnalysisError, InsufficientDataError
from analysis.indicators import (
    calculate_atr,
    calculate_rsi,
    calculate_session_vwap,
    latest,
    round_half_up,
    session_date,
)
from analysis.models import Bar, IntradayPlan, VwapPoint
from analysis.tickers import display_symbol

logger = logging.getLogger(__name__)

OPENING_RANGE_CANDLES = 3
DEFAULT_ATR_PCT = 0.02
MAX_ADAPTIVE_PERIOD = 14


class TradePlan(NamedTuple):
    entry: int
    stop_loss: int
    target1: int
    target2: int


def adaptive_period(length: int) -> int:
    """Indicator period that shrinks with short history: clamp(length // 2, 2, 14)."""
    return min(MAX_ADAPTIVE_PERIOD, max(2, length // 2))


def opening_range(bars: Sequence[Bar], today: date, current_price: float, tz: Optional[str] = None) -> Tuple[float, float]:
    """
    Opening range (high, low) of today's session.

    Uses today's first 3 candles, all of today's candles when fewer exist,
    and the first 3 candles of the series when nothing matches today.
    """
    today_bars = [b for b in bars if session_date(b.timestamp, tz) == today]
    subset = today_bars[:OPENING_RANGE_CANDLES] if today_bars else list(bars[:OPENING_RANGE_CANDLES])
    if not subset:
        return current_price, current_price
    return max(b.high for b in subset), min(b.low for b in subset)


def determine_bias(price: float, vwap: float, or_high: float, or_low: float) -> str:
    if price > vwap and price > or_high:
        return "BULLISH"
    if price < vwap and price < or_low:
        return "BEARISH"
    return "SIDEWAYS"


def build_trade_plan(price: float, atr: float) -> TradePlan:
    """Entry at price, stop 2 ATR below, targets 2 and 4 ATR above."""
    return TradePlan(
        entry=round_half_up(price),
        stop_loss=round_half_up(price - 2 * atr),
        target1=round_half_up(price + 2 * atr),
        target2=round_half_up(price + 4 * atr),
    )


def _safe_rsi(closes: np.ndarray) -> float:
    period = adaptive_period(len(closes))
    try:
        return latest(calculate_rsi(closes, period), 50.0)
    except AnalysisError as e:
        logger.debug(f"Intraday RSI unavailable, using neutral 50: {e}")
        return 50.0


def _safe_atr(bars: Sequence[Bar], price: float) -> float:
    fallback = price * DEFAULT_ATR_PCT
    period = adaptive_period(len(bars))
    try:
        atr = calculate_atr(
            [b.high for b in bars],
            [b.low for b in bars],
            [b.close for b in bars],
            period,
        )
        return latest(atr, fallback)
    except AnalysisError as e:
        logger.debug(f"Intraday ATR unavailable, using 2% of price: {e}")
        return fallback


def score_setup(bias: str, rsi: float, latest_volume: float, avg_volume: float) -> int:
    score = 50
    if bias == "BULLISH":
        score += 20
    if rsi > config.RSI_OVERBOUGHT:
        score -= 10
    if rsi < config.RSI_OVERSOLD and bias == "BULLISH":
        score += 10
    if latest_volume > avg_volume:
        score += 20
    return max(0, min(99, score))


def build_reasoning(price: float, vwap: float, volume_ratio: float, or_high: float, or_low: float, bias: str) -> str:
    parts: List[str] = []

    if price > vwap:
        parts.append("Price is currently above VWAP (Bullish)")
    elif price < vwap:
        parts.append("Price is currently below VWAP (Bearish)")
    else:
        parts.append("Price is near VWAP (Neutral)")

    if volume_ratio < 0.7:
        parts.append("but Volume is low")
    elif volume_ratio > 1.3:
        parts.append("and Volume is high (Strong momentum)")

    if price > or_high:
        parts.append("Price has broken above Opening Range High")
    elif price < or_low:
        parts.append("Price has broken below Opening Range Low")
    else:
        parts.append("Price is within Opening Range")

    if bias == "BULLISH" and price > or_high:
        parts.append("Consider BUY on pullback to VWAP")
    elif bias == "BEARISH" and price < or_low:
        parts.append("Consider SELL on bounce to VWAP")
    else:
        parts.append("Wait for a breakout above Opening Range High or below Opening Range Low")

    return ". ".join(parts) + "."


def analyze_intraday(
    ticker: str,
    bars_5m: Sequence[Bar],
    bars_15m: Sequence[Bar],
    current_price: Optional[float] = None,
    today: Optional[date] = None,
    tz: Optional[str] = None
) -> IntradayPlan:
    """
    Build the intraday plan for one ticker.

    Args:
        ticker: Symbol (with or without the exchange suffix)
        bars_5m: Short-granularity series used for every calculation
        bars_15m: Companion series, must be non-empty
        current_price: Latest price; defaults to the last 5m close
        today: Session date for the opening range; defaults to now in the market timezone
        tz: Market timezone name (default config.MARKET_TIMEZONE)

    Returns:
        IntradayPlan
    """
    if not bars_5m:
        raise InsufficientDataError(f"No 5m data available for {ticker}", required=1, available=0)
    if not bars_15m:
        raise InsufficientDataError(f"No 15m data available for {ticker}", required=1, available=0)

    zone = tz or config.MARKET_TIMEZONE
    if today is None:
        today = datetime.now(pytz.timezone(zone)).date()

    price = float(current_price) if current_price is not None else float(bars_5m[-1].close)

    or_high, or_low = opening_range(bars_5m, today, price, zone)

    session_vwap = calculate_session_vwap(bars_5m, zone)
    vwap_data = [VwapPoint(timestamp=b.timestamp, vwap=float(v)) for b, v in zip(bars_5m, session_vwap)]
    current_vwap = vwap_data[-1].vwap if vwap_data else price

    bias = determine_bias(price, current_vwap, or_high, or_low)

    closes = np.array([b.close for b in bars_5m], dtype=float)
    volumes = np.array([b.volume for b in bars_5m], dtype=float)
    avg_volume = float(volumes.mean())
    latest_volume = float(volumes[-1])

    rsi = _safe_rsi(closes)
    score = score_setup(bias, rsi, latest_volume, avg_volume)

    atr = _safe_atr(bars_5m, price)
    plan = build_trade_plan(price, atr)

    volume_ratio = latest_volume / avg_volume if avg_volume > 0 else 1.0

    return IntradayPlan(
        ticker=display_symbol(ticker),
        bias=bias,
        score=score,
        entry=plan.entry,
        stop_loss=plan.stop_loss,
        target1=plan.target1,
        target2=plan.target2,
        opening_range_high=round_half_up(or_high),
        opening_range_low=round_half_up(or_low),
        current_vwap=round_half_up(current_vwap),
        vwap_data=vwap_data,
        chart_data=list(bars_5m),
        last_timestamp=bars_5m[-1].timestamp,
        reason_text=build_reasoning(price, current_vwap, volume_ratio, or_high, or_low, bias),
    )

"""Candlestick pattern detection on the most recent candles."""
from typing import List, Sequence

import config
from analysis.models import Bar, CandlePattern

BULLISH_ENGULFING = CandlePattern(name="Bullish Engulfing", label="Bullish Engulfing (Potensi Naik Kuat)")
BEARISH_ENGULFING = CandlePattern(name="Bearish Engulfing", label="Bearish Engulfing (Potensi Turun Cepat)")
HAMMER = CandlePattern(name="Hammer", label="Hammer (Palu - Sinyal Rebound)")
SHOOTING_STAR = CandlePattern(name="Shooting Star", label="Shooting Star (Sinyal Koreksi)")
DOJI = CandlePattern(name="Doji", label="Doji (Pasar Galau/Netral)")


def _is_bullish(bar: Bar) -> bool:
    return bar.close > bar.open


def _is_bearish(bar: Bar) -> bool:
    return bar.close < bar.open


def _body(bar: Bar) -> float:
    return abs(bar.close - bar.open)


def _range(bar: Bar) -> float:
    return bar.high - bar.low


def _upper_shadow(bar: Bar) -> float:
    return bar.high - max(bar.open, bar.close)


def _lower_shadow(bar: Bar) -> float:
    return min(bar.open, bar.close) - bar.low


def detect_candle_patterns(bars: Sequence[Bar]) -> List[CandlePattern]:
    """
    Detect candlestick patterns from the last few candles.

    Checks run in a fixed order and several may fire together:
    Bullish Engulfing, Bearish Engulfing, Hammer, Shooting Star, Doji.
    Single-candle checks are skipped on a zero-range candle.

    Args:
        bars: OHLCV bars, oldest first (needs at least 2)

    Returns:
        Matched patterns, possibly empty
    """
    if len(bars) < 2:
        return []

    recent = list(bars)[-config.PATTERN_LOOKBACK:]
    current = recent[-1]
    prev = recent[-2]
    patterns: List[CandlePattern] = []

    # Engulfing: current body at least 10% larger than previous body
    if _is_bearish(prev) and _is_bullish(current):
        if (
            current.open < prev.close
            and current.close > prev.open
            and _body(current) > _body(prev) * 1.1
        ):
            patterns.append(BULLISH_ENGULFING)

    if _is_bullish(prev) and _is_bearish(current):
        if (
            current.open > prev.close
            and current.close < prev.open
            and _body(current) > _body(prev) * 1.1
        ):
            patterns.append(BEARISH_ENGULFING)

    body = _body(current)
    candle_range = _range(current)
    if candle_range <= 0:
        return patterns

    upper = _upper_shadow(current)
    lower = _lower_shadow(current)

    if body < candle_range * 0.3 and lower > body * 2 and upper < body * 0.5:
        patterns.append(HAMMER)

    if body < candle_range * 0.3 and upper > body * 2 and lower < body * 0.5 and _is_bearish(current):
        patterns.append(SHOOTING_STAR)

    if body < candle_range * 0.1:
        patterns.append(DOJI)

    return patterns

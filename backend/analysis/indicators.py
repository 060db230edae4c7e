"""
Indicator Library
Internally owned technical indicators for the signal engine.
- RSI (Wilder), EMA (SMA-seeded), MACD 12/26/9
- ATR (Wilder true range average)
- VWAP (whole-series and session-anchored)
- OBV (On-Balance Volume)

Every function fails fast on a precondition violation and never truncates
silently. Output series are aligned to a suffix of the input: warm-up bars
produce no value.
"""
import math
from datetime import date
from typing import NamedTuple, Optional, Sequence

import numpy as np
import pandas as pd
import pytz

import config
from analysis.exceptions import InsufficientDataError, LengthMismatchError
from analysis.models import Bar

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9


class MACDResult(NamedTuple):
    macd: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def _check_period(period: int):
    if period < 1:
        raise ValueError(f"Indicator period must be >= 1, got {period}")


def _require_length(available: int, required: int, name: str):
    if available < required:
        raise InsufficientDataError(
            f"Insufficient data for {name} calculation. Need at least {required} data points, got {available}.",
            required=required,
            available=available,
        )


def _require_same_length(name: str, *arrays: np.ndarray):
    if len({len(a) for a in arrays}) > 1:
        raise LengthMismatchError(f"All arrays must have the same length for {name} calculation.")


def _wilder_smooth(values: np.ndarray, period: int) -> np.ndarray:
    # seed = SMA of the first `period` values, then avg = (avg * (period - 1) + x) / period
    out = np.empty(len(values) - period + 1)
    avg = values[:period].mean()
    out[0] = avg
    for i, x in enumerate(values[period:], start=1):
        avg = (avg * (period - 1) + x) / period
        out[i] = avg
    return out


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """Convert a bar sequence into an OHLCV DataFrame (one row per bar)."""
    return pd.DataFrame(
        [b.model_dump() for b in bars],
        columns=['timestamp', 'open', 'high', 'low', 'close', 'volume'],
    )


def session_date(timestamp_ms: int, tz: Optional[str] = None) -> date:
    """Calendar date of a ms-epoch timestamp in the market timezone."""
    zone = pytz.timezone(tz or config.MARKET_TIMEZONE)
    return pd.Timestamp(timestamp_ms, unit='ms', tz='UTC').tz_convert(zone).date()


def calculate_rsi(closes: Sequence[float], period: int = 14) -> np.ndarray:
    """
    Calculate Relative Strength Index using Wilder's smoothing.

    Args:
        closes: Closing prices, oldest first
        period: RSI period (default: 14)

    Returns:
        RSI values (0-100, two decimals), ``len(closes) - period`` points
    """
    _check_period(period)
    data = _as_array(closes)
    _require_length(len(data), period + 1, "RSI")

    deltas = np.diff(data)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = _wilder_smooth(gains, period)
    avg_loss = _wilder_smooth(losses, period)

    with np.errstate(divide='ignore', invalid='ignore'):
        rs = avg_gain / avg_loss
        rsi = 100.0 - 100.0 / (1.0 + rs)

    # No losses -> 100 (flat window included), no gains -> 0 via rs == 0
    rsi = np.where(avg_loss == 0, 100.0, rsi)
    return np.round(np.clip(rsi, 0.0, 100.0), 2)


def calculate_ema(values: Sequence[float], period: int = 200) -> np.ndarray:
    """
    Calculate Exponential Moving Average.

    Seeded with the simple average of the first ``period`` values, then
    ``ema[i] = value[i] * k + ema[i-1] * (1 - k)`` with ``k = 2 / (period + 1)``.

    Returns:
        EMA values, ``len(values) - period + 1`` points
    """
    _check_period(period)
    data = _as_array(values)
    _require_length(len(data), period, "EMA")

    k = 2.0 / (period + 1)
    out = np.empty(len(data) - period + 1)
    out[0] = data[:period].mean()
    for i in range(1, len(out)):
        out[i] = data[period - 1 + i] * k + out[i - 1] * (1 - k)
    return out


def calculate_macd(closes: Sequence[float]) -> MACDResult:
    """
    Calculate MACD (12/26/9, EMA based).

    Returns:
        MACDResult with MACD line, signal line and histogram, all
        ``len(closes) - 25`` points. Signal and histogram are 0 until the
        signal EMA has warmed up.
    """
    data = _as_array(closes)
    _require_length(len(data), MACD_SLOW, "MACD")

    fast = calculate_ema(data, MACD_FAST)
    slow = calculate_ema(data, MACD_SLOW)
    macd_line = fast[MACD_SLOW - MACD_FAST:] - slow

    signal = np.zeros_like(macd_line)
    histogram = np.zeros_like(macd_line)
    if len(macd_line) >= MACD_SIGNAL:
        warm = MACD_SIGNAL - 1
        signal[warm:] = calculate_ema(macd_line, MACD_SIGNAL)
        histogram[warm:] = macd_line[warm:] - signal[warm:]

    return MACDResult(macd=macd_line, signal=signal, histogram=histogram)


def calculate_atr(
    high: Sequence[float],
    low: Sequence[float],
    close: Sequence[float],
    period: int = 14
) -> np.ndarray:
    """
    Calculate Average True Range (Wilder).

    True range starts at the second bar:
    ``max(high - low, |high - prev_close|, |low - prev_close|)``.

    Returns:
        ATR values, ``len(close) - period`` points
    """
    _check_period(period)
    h, l, c = _as_array(high), _as_array(low), _as_array(close)
    _require_same_length("ATR", h, l, c)
    _require_length(len(c), period + 1, "ATR")

    prev_close = c[:-1]
    true_range = np.maximum.reduce([
        h[1:] - l[1:],
        np.abs(h[1:] - prev_close),
        np.abs(l[1:] - prev_close),
    ])
    return _wilder_smooth(true_range, period)


def calculate_vwap(
    high: Sequence[float],
    low: Sequence[float],
    close: Sequence[float],
    volume: Sequence[float]
) -> np.ndarray:
    """
    Calculate cumulative VWAP over the whole series.

    Typical price = (H + L + C) / 3. While cumulative volume is zero the
    typical price itself is emitted.
    """
    h, l, c, v = _as_array(high), _as_array(low), _as_array(close), _as_array(volume)
    _require_same_length("VWAP", h, l, c, v)

    typical = (h + l + c) / 3
    cum_pv = np.cumsum(typical * v)
    cum_vol = np.cumsum(v)
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.where(cum_vol == 0, typical, cum_pv / cum_vol)


def calculate_session_vwap(bars: Sequence[Bar], tz: Optional[str] = None) -> np.ndarray:
    """
    Calculate VWAP anchored to the trading day.

    Cumulative sums reset whenever the calendar date (market timezone)
    changes, so the first bar of each session reseeds at its typical price.
    """
    if not bars:
        return np.array([])

    zone = pytz.timezone(tz or config.MARKET_TIMEZONE)
    df = bars_to_frame(bars)
    dates = pd.to_datetime(df['timestamp'], unit='ms', utc=True).dt.tz_convert(zone).dt.date
    session_id = (dates != dates.shift()).cumsum()

    typical = (df['high'] + df['low'] + df['close']) / 3
    cum_pv = (typical * df['volume']).groupby(session_id).cumsum()
    cum_vol = df['volume'].groupby(session_id).cumsum()

    with np.errstate(divide='ignore', invalid='ignore'):
        vwap = np.where(cum_vol == 0, typical, cum_pv / cum_vol)
    return vwap.astype(float)


def calculate_obv(closes: Sequence[float], volumes: Sequence[float]) -> np.ndarray:
    """
    Calculate On-Balance Volume.

    ``obv[0] = volume[0]``; afterwards volume is added on an up close,
    subtracted on a down close and ignored on an unchanged close.
    """
    c, v = _as_array(closes), _as_array(volumes)
    if len(c) != len(v):
        raise LengthMismatchError("Closes and volumes arrays must have the same length for OBV calculation.")
    if len(c) == 0:
        return np.array([])

    direction = np.sign(np.diff(c))
    steps = np.concatenate(([v[0]], direction * v[1:]))
    return np.cumsum(steps)


def latest(series: np.ndarray, default: float) -> float:
    """Last value of an indicator series, or ``default`` when it is empty."""
    return float(series[-1]) if len(series) else default


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))

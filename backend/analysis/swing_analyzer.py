"""
Swing Analyzer Module
Daily signal engine for a single ticker.
- Trend from EMA50 / EMA200
- BUY / SELL / NEUTRAL signal with confidence score
- Volatility based next-day price projection
- Candlestick patterns and bandar flow (optional)
"""
import logging
from typing import List, Optional, Sequence

import numpy as np

import config
from analysis.bandar_flow import analyze_bandar_flow
from analysis.exceptions import AnalysisError, InsufficientDataError
from analysis.indicators import (
    bars_to_frame,
    calculate_ema,
    calculate_macd,
    calculate_rsi,
    latest,
    round_half_up,
)
from analysis.models import AnalysisResult, Bar, FundamentalBadge
from analysis.patterns import detect_candle_patterns
from analysis.tickers import display_symbol

logger = logging.getLogger(__name__)


def determine_trend(price: float, ema200: float, ema50: float) -> str:
    if price > ema200 and ema50 > ema200:
        return "Uptrend"
    if price < ema200 and ema50 < ema200:
        return "Downtrend"
    return "Sideways"


def determine_signal(rsi: float, price: float, ema200: float) -> tuple:
    """
    Signal rule.

    BUY:  RSI < 30 and price above EMA200
    SELL: RSI > 70
    NEUTRAL otherwise (confidence 30)

    Returns:
        (signal, confidence) with confidence capped at 95
    """
    if rsi < config.RSI_OVERSOLD and price > ema200:
        rsi_strength = (config.RSI_OVERSOLD - rsi) / 30
        price_strength = min((price - ema200) / ema200, 0.1) * 10
        return "BUY", min(50 + rsi_strength * 30 + price_strength * 20, 95)

    if rsi > config.RSI_OVERBOUGHT:
        rsi_strength = (rsi - config.RSI_OVERBOUGHT) / 30
        return "SELL", min(50 + rsi_strength * 30, 95)

    return "NEUTRAL", 30


def predict_price(price: float, rsi: float, macd_histogram: float, last_bar: Bar) -> int:
    """Project the next price from the latest candle's range, rounded to a whole rupiah."""
    volatility = (last_bar.high - last_bar.low) / last_bar.close if last_bar.close > 0 else 0.02

    if rsi < config.RSI_OVERSOLD:
        pred = price * (1 + volatility * 0.8)
    elif rsi > config.RSI_OVERBOUGHT:
        pred = price * (1 - volatility * 0.8)
    elif macd_histogram > 0:
        pred = price * (1 + volatility * 0.3)
    else:
        pred = price * (1 - volatility * 0.3)
    return round_half_up(pred)


def build_summary(trend: str, rsi: float, vol_ratio: float) -> str:
    """Indonesian one-paragraph summary for the dashboard."""
    parts = []

    if trend == "Uptrend":
        parts.append("Tren sedang Naik")
    elif trend == "Downtrend":
        parts.append("Tren sedang Turun")
    else:
        parts.append("Tren sedang Sideways")

    rsi_label = round_half_up(rsi)
    if rsi < config.RSI_OVERSOLD:
        parts.append(f"Harga tergolong Murah (RSI {rsi_label})")
    elif rsi > config.RSI_OVERBOUGHT:
        parts.append(f"Harga tergolong Mahal (RSI {rsi_label})")
    elif rsi <= 50:
        parts.append(f"Harga tergolong Wajar (RSI {rsi_label})")
    else:
        parts.append(f"Harga tergolong Agak Mahal (RSI {rsi_label})")

    if vol_ratio > 1.5:
        parts.append("Ada lonjakan volume transaksi hari ini")
    elif vol_ratio < 0.5:
        parts.append("Volume transaksi rendah hari ini")
    else:
        parts.append("Volume transaksi normal")

    return ". ".join(parts) + "."


def analyze_swing(
    symbol: str,
    bars: Sequence[Bar],
    current_price: Optional[float] = None,
    fundamental_badges: Optional[List[FundamentalBadge]] = None
) -> AnalysisResult:
    """
    Run the daily swing analysis for one ticker.

    Args:
        symbol: Ticker (with or without the exchange suffix)
        bars: Daily bars, oldest first, at least 200 of them
        current_price: Latest traded price; defaults to the last close
        fundamental_badges: Badges computed elsewhere, passed through as-is

    Returns:
        AnalysisResult
    """
    if len(bars) < config.MIN_SWING_BARS:
        raise InsufficientDataError(
            f"Insufficient historical data for {symbol}. "
            f"Need at least {config.MIN_SWING_BARS} days for EMA200 calculation.",
            required=config.MIN_SWING_BARS,
            available=len(bars),
        )

    df = bars_to_frame(bars)
    closes = df['close'].to_numpy(dtype=float)
    volumes = df['volume'].to_numpy(dtype=float)
    price = float(current_price) if current_price is not None else float(closes[-1])

    rsi = latest(calculate_rsi(closes, config.RSI_PERIOD), 50.0)
    macd = calculate_macd(closes)
    macd_value = latest(macd.macd, 0.0)
    macd_histogram = latest(macd.histogram, 0.0)
    ema200 = latest(calculate_ema(closes, config.EMA_LONG_PERIOD), price)
    ema50 = latest(calculate_ema(closes, config.EMA_MID_PERIOD), price)

    window_52w = df.tail(config.WEEK52_BARS)
    high_52w = float(window_52w['high'].max())
    low_52w = float(window_52w['low'].min())
    range_52w = high_52w - low_52w
    position_52w = (price - low_52w) / range_52w * 100 if range_52w > 0 else 50.0

    avg_volume = float(np.mean(volumes[-config.VOLUME_AVG_WINDOW:]))
    vol_ratio = float(volumes[-1]) / avg_volume if avg_volume > 0 else 1.0

    trend = determine_trend(price, ema200, ema50)
    signal, confidence = determine_signal(rsi, price, ema200)
    pred_price = predict_price(price, rsi, macd_histogram, bars[-1])
    pred_percent = (pred_price - price) / price * 100 if price else 0.0

    bandar_flow = None
    try:
        bandar_flow = analyze_bandar_flow(bars, config.BANDAR_FLOW_WINDOW)
    except AnalysisError as e:
        logger.warning(f"Failed to calculate bandar flow for {symbol}: {e}")

    logger.debug(f"{symbol}: signal={signal} rsi={rsi:.2f} trend={trend}")

    return AnalysisResult(
        symbol=display_symbol(symbol),
        price=price,
        rsi=round(rsi, 2),
        macd=round(macd_value, 2),
        signal=signal,
        confidence_score=round_half_up(confidence),
        pred_price=pred_price,
        pred_percent=round(pred_percent, 2),
        low_52w=round_half_up(low_52w),
        high_52w=round_half_up(high_52w),
        position_52w=round(position_52w, 2),
        vol_ratio=round(vol_ratio, 2),
        trend=trend,
        summary_text=build_summary(trend, rsi, vol_ratio),
        fundamental_badges=fundamental_badges,
        bandar_flow=bandar_flow,
        candle_patterns=detect_candle_patterns(bars),
    )

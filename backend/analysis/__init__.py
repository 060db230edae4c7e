"""
Analysis Engine Module

This module exports the pure, synchronous signal engine for IDX stocks.
Nothing here performs I/O: callers fetch bars and fundamentals and pass
them in.

Architecture:
- indicators: RSI, EMA, MACD, ATR, VWAP, session VWAP, OBV
- patterns / bandar_flow: candlestick tags and price-vs-OBV divergence
- swing_analyzer / intraday_analyzer: per-ticker daily and intraday results
- comparison / fundamental_badges: head-to-head scoring and health badges

Usage:
    from analysis import analyze_swing, compare_analyses

    result = analyze_swing("BBCA", bars)
"""
from .exceptions import (
    AnalysisError,
    InsufficientDataError,
    LengthMismatchError,
    TickerNotFoundError,
    UpstreamFailureError,
)
from .bandar_flow import analyze_bandar_flow
from .comparison import compare_analyses
from .fundamental_badges import analyze_fundamentals
from .intraday_analyzer import analyze_intraday
from .patterns import detect_candle_patterns
from .swing_analyzer import analyze_swing

__all__ = [
    "AnalysisError",
    "InsufficientDataError",
    "LengthMismatchError",
    "TickerNotFoundError",
    "UpstreamFailureError",
    "analyze_bandar_flow",
    "compare_analyses",
    "analyze_fundamentals",
    "analyze_intraday",
    "detect_candle_patterns",
    "analyze_swing",
]

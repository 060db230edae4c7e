"""
Custom exceptions for the stock analysis engine.
"""
from typing import Optional


class AnalysisError(Exception):
    """Base class for all analysis engine errors."""
    pass


class InsufficientDataError(AnalysisError):
    """Raised when a series is shorter than an indicator or analyzer needs."""

    def __init__(self, message: str, required: Optional[int] = None, available: Optional[int] = None):
        super().__init__(message)
        self.required = required
        self.available = available


class LengthMismatchError(AnalysisError):
    """Raised when parallel price/volume arrays differ in length."""
    pass


class UpstreamFailureError(AnalysisError):
    """Raised when the market data provider fails for a symbol."""

    def __init__(self, symbol: str, message: str):
        super().__init__(f"{symbol}: {message}")
        self.symbol = symbol


class TickerNotFoundError(UpstreamFailureError):
    """Raised when the provider has no data at all for a symbol."""
    pass

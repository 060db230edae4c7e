"""
Ticker Utility Module

Symbol normalization shared by the analyzers and the market data layer.

Usage:
    from analysis.tickers import normalize_ticker, display_symbol
"""
import config


def normalize_ticker(symbol: str) -> str:
    """
    Convert a user supplied symbol into the provider form.

    Example:
        >>> normalize_ticker(" bbca ")
        'BBCA.JK'
        >>> normalize_ticker("^JKSE")
        '^JKSE'
    """
    symbol = symbol.strip().upper()
    if not symbol:
        raise ValueError("Ticker symbol must not be empty")
    if symbol.startswith('^') or symbol.endswith(config.TICKER_SUFFIX):
        return symbol
    return f"{symbol}{config.TICKER_SUFFIX}"


def display_symbol(symbol: str) -> str:
    """Upper-case symbol without the exchange suffix (``bbca.jk`` -> ``BBCA``)."""
    return symbol.strip().upper().replace(config.TICKER_SUFFIX, '')

"""
Market Data Module
Responsible for fetching OHLCV bars, quotes and fundamentals.
Uses yfinance for external data; every failure is wrapped with the symbol.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, Tuple

import pandas as pd
import pytz
import yfinance as yf

import config
from analysis.exceptions import TickerNotFoundError, UpstreamFailureError
from analysis.models import Bar, FundamentalSnapshot
from analysis.tickers import normalize_ticker as _normalize_ticker

logger = logging.getLogger(__name__)

OHLCV_COLUMNS = ['open', 'high', 'low', 'close', 'volume']

# yfinance .info key -> FundamentalSnapshot field
FUNDAMENTAL_FIELDS = {
    'marketCap': 'market_cap',
    'trailingPE': 'trailing_pe',
    'priceToBook': 'price_to_book',
    'trailingEps': 'trailing_eps',
}


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) or math.isinf(number) else number


def frame_to_bars(df: pd.DataFrame, dedupe_daily: bool = True, tz: Optional[str] = None) -> List[Bar]:
    """
    Convert a yfinance history frame into ordered bars.

    Rows with a missing price are dropped, missing volume counts as 0.
    With ``dedupe_daily`` only the last row of each calendar day (market
    timezone) is kept.
    """
    if df is None or df.empty:
        return []

    df = df.rename(columns=str.lower)
    missing = [c for c in OHLCV_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"History frame is missing columns: {missing}")

    df = df[OHLCV_COLUMNS].copy()
    df = df.dropna(subset=['open', 'high', 'low', 'close'])
    df['volume'] = df['volume'].fillna(0)
    if df.empty:
        return []

    index = pd.DatetimeIndex(df.index)
    if index.tz is None:
        index = index.tz_localize('UTC')
    df['timestamp'] = (index.tz_convert('UTC') - pd.Timestamp(0, tz='UTC')) // pd.Timedelta(milliseconds=1)
    df['day'] = index.tz_convert(pytz.timezone(tz or config.MARKET_TIMEZONE)).date

    df = df.sort_values('timestamp', kind='stable')
    if dedupe_daily:
        df = df.drop_duplicates(subset='day', keep='last')

    return [
        Bar(
            timestamp=int(row.timestamp),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df.itertuples(index=False)
    ]


class MarketDataProvider:
    """
    yfinance backed data source.

    ``ticker_factory`` builds the per-symbol handle (``yf.Ticker`` by
    default); tests pass a fake.
    """

    def __init__(self, ticker_factory: Optional[Callable[[str], Any]] = None):
        self._ticker_factory = ticker_factory or yf.Ticker

    @staticmethod
    def normalize_ticker(symbol: str) -> str:
        return _normalize_ticker(symbol)

    def _ticker(self, symbol: str):
        return self._ticker_factory(self.normalize_ticker(symbol))

    def fetch_history(self, symbol: str, period: str = config.HISTORY_PERIOD, interval: str = "1d") -> List[Bar]:
        """
        Fetch OHLCV history.

        Raises:
            TickerNotFoundError: provider returned no rows
            UpstreamFailureError: network / provider error
        """
        yf_symbol = self.normalize_ticker(symbol)
        try:
            df = self._ticker(symbol).history(period=period, interval=interval, auto_adjust=False)
            bars = frame_to_bars(df, dedupe_daily=interval == "1d")
        except Exception as e:
            logger.error(f"Error fetching yfinance history for {yf_symbol}: {e}")
            raise UpstreamFailureError(yf_symbol, f"Failed to fetch historical data: {e}") from e

        if not bars:
            raise TickerNotFoundError(yf_symbol, "No data found for ticker")

        logger.debug(f"Fetched {len(bars)} bars for {yf_symbol} ({period}/{interval})")
        return bars

    def fetch_quote(self, symbol: str) -> float:
        """Latest traded price from ``fast_info``."""
        yf_symbol = self.normalize_ticker(symbol)
        try:
            price = _to_float(self._ticker(symbol).fast_info.last_price)
        except Exception as e:
            raise UpstreamFailureError(yf_symbol, f"Failed to fetch current price: {e}") from e

        if price is None:
            raise UpstreamFailureError(yf_symbol, "No price data found for ticker")
        return price

    def fetch_fundamentals(self, symbol: str) -> FundamentalSnapshot:
        """
        Fundamental fields from ``Ticker.info``.

        Never raises: on any failure an empty snapshot is returned.
        """
        try:
            info = self._ticker(symbol).info or {}
        except Exception as e:
            logger.warning(f"Failed to fetch fundamental data for {symbol}: {e}")
            return FundamentalSnapshot()

        fields = {field: _to_float(info.get(key)) for key, field in FUNDAMENTAL_FIELDS.items()}

        # trailingAnnualDividendYield is a fraction; recent yfinance reports dividendYield in percent
        dividend = _to_float(info.get('trailingAnnualDividendYield'))
        if dividend is None:
            percent = _to_float(info.get('dividendYield'))
            dividend = percent / 100 if percent is not None else None
        fields['dividend_yield'] = dividend

        return FundamentalSnapshot(**fields)

    def fetch_intraday(self, symbol: str, now: Optional[datetime] = None) -> Tuple[List[Bar], List[Bar]]:
        """
        Daily bars standing in for the intraday series.

        Returns:
            (bars_5m, bars_15m): bars of the last 5 days (or the last 10
            bars when none are that recent) and the whole lookback window
        """
        bars = self.fetch_history(symbol, period=f"{config.INTRADAY_LOOKBACK_DAYS}d", interval="1d")

        now = now or datetime.now(pytz.utc)
        cutoff_ms = int((now - timedelta(days=config.INTRADAY_RECENT_DAYS)).timestamp() * 1000)
        recent = [b for b in bars if b.timestamp >= cutoff_ms]

        bars_5m = recent or bars[-config.INTRADAY_FALLBACK_BARS:]
        return bars_5m, bars

    def fetch_market_state(self, symbol: str) -> Optional[str]:
        """yfinance ``marketState`` (REGULAR / CLOSED / PRE / POST ...), None when absent."""
        try:
            info = self._ticker(symbol).info or {}
        except Exception as e:
            raise UpstreamFailureError(symbol, f"Failed to fetch market state: {e}") from e
        state = info.get('marketState')
        return str(state).upper() if state else None

"""
Market Status Module
IDX session state (OPEN / BREAK / CLOSED).

Prefers yfinance ``marketState`` for ^JKSE (then BBCA.JK); falls back to
the IDX clock: 09:00-15:50 WIB Mon-Fri, break Mon-Thu 12:00-13:30 and
Fri 11:30-14:00.
"""
import logging
from datetime import datetime
from typing import Optional

import pytz

import config
from analysis.exceptions import UpstreamFailureError
from analysis.models import MarketStatus

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    "OPEN": "Market Open",
    "BREAK": "Istirahat Sesi 1",
    "CLOSED": "Market Closed",
}


def _local_now(now: Optional[datetime] = None) -> datetime:
    zone = pytz.timezone(config.MARKET_TIMEZONE)
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        return zone.localize(now)
    return now.astimezone(zone)


def _minutes(now: datetime) -> int:
    return now.hour * 60 + now.minute


def is_break_time(now: datetime) -> bool:
    weekday = now.weekday()  # Monday = 0
    if weekday == 4:
        start, end = config.BREAK_FRIDAY
    elif weekday <= 3:
        start, end = config.BREAK_MON_THU
    else:
        return False
    return start <= _minutes(now) < end


def status_by_time(now: datetime) -> str:
    """Clock-only session state for a market-local datetime."""
    if now.weekday() >= 5:
        return "CLOSED"
    if is_break_time(now):
        return "BREAK"
    if config.MARKET_OPEN_MINUTES <= _minutes(now) < config.MARKET_CLOSE_MINUTES:
        return "OPEN"
    return "CLOSED"


def _fetch_state(provider) -> Optional[str]:
    for symbol in config.MARKET_STATUS_SYMBOLS:
        try:
            return provider.fetch_market_state(symbol)
        except UpstreamFailureError as e:
            logger.warning(f"Market state lookup failed for {symbol}: {e}")
    raise UpstreamFailureError(",".join(config.MARKET_STATUS_SYMBOLS), "No market state source available")


def get_market_status(provider=None, now: Optional[datetime] = None) -> MarketStatus:
    """
    Current IDX session status.

    Args:
        provider: MarketDataProvider (None -> clock only)
        now: Override for the current time (naive values are WIB)
    """
    local_now = _local_now(now)

    status = None
    if provider is not None:
        try:
            state = _fetch_state(provider)
            if state == "REGULAR":
                status = "BREAK" if is_break_time(local_now) else "OPEN"
            elif state in ("CLOSED", "PRE", "POST"):
                status = "CLOSED"
        except UpstreamFailureError as e:
            logger.warning(f"Falling back to time-based market status: {e}")

    if status is None:
        status = status_by_time(local_now)

    return MarketStatus(
        status=status,
        message=STATUS_MESSAGES[status],
        timestamp=int(local_now.timestamp() * 1000),
    )

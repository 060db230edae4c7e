from datetime import datetime

import pytest
import pytz

from analysis.exceptions import UpstreamFailureError
from services.market_status import get_market_status, is_break_time, status_by_time

JAKARTA = pytz.timezone("Asia/Jakarta")


def _wib(year, month, day, hour, minute=0):
    return JAKARTA.localize(datetime(year, month, day, hour, minute))


class _StateProvider:
    def __init__(self, states):
        self.states = states
        self.calls = []

    def fetch_market_state(self, symbol):
        self.calls.append(symbol)
        state = self.states.get(symbol)
        if isinstance(state, Exception):
            raise state
        return state


@pytest.mark.parametrize("moment,expected", [
    (_wib(2024, 3, 4, 8, 59), "CLOSED"),   # Monday pre-open
    (_wib(2024, 3, 4, 9, 0), "OPEN"),
    (_wib(2024, 3, 4, 12, 0), "BREAK"),
    (_wib(2024, 3, 4, 13, 30), "OPEN"),
    (_wib(2024, 3, 4, 15, 50), "CLOSED"),
    (_wib(2024, 3, 8, 11, 45), "BREAK"),   # Friday break starts 11:30
    (_wib(2024, 3, 8, 13, 45), "BREAK"),
    (_wib(2024, 3, 8, 14, 0), "OPEN"),
    (_wib(2024, 3, 9, 10, 0), "CLOSED"),   # Saturday
])
def test_status_by_time(moment, expected):
    assert status_by_time(moment) == expected


def test_no_break_on_weekend():
    assert is_break_time(_wib(2024, 3, 10, 12, 15)) is False


def test_regular_state_respects_break_window():
    provider = _StateProvider({"^JKSE": "REGULAR"})

    status = get_market_status(provider, now=_wib(2024, 3, 4, 12, 15))

    assert status.status == "BREAK"
    assert status.message == "Istirahat Sesi 1"
    assert provider.calls == ["^JKSE"]


def test_closed_state_overrides_clock():
    status = get_market_status(_StateProvider({"^JKSE": "POST"}), now=_wib(2024, 3, 4, 10))
    assert status.status == "CLOSED"
    assert status.message == "Market Closed"


def test_falls_back_to_second_symbol():
    provider = _StateProvider({
        "^JKSE": UpstreamFailureError("^JKSE", "boom"),
        "BBCA.JK": "REGULAR",
    })

    status = get_market_status(provider, now=_wib(2024, 3, 4, 10))

    assert status.status == "OPEN"
    assert status.message == "Market Open"
    assert provider.calls == ["^JKSE", "BBCA.JK"]


def test_all_sources_failing_uses_clock():
    provider = _StateProvider({
        "^JKSE": UpstreamFailureError("^JKSE", "boom"),
        "BBCA.JK": UpstreamFailureError("BBCA.JK", "boom"),
    })

    status = get_market_status(provider, now=_wib(2024, 3, 9, 10))

    assert status.status == "CLOSED"


def test_unknown_state_uses_clock():
    status = get_market_status(_StateProvider({"^JKSE": None}), now=_wib(2024, 3, 4, 10))
    assert status.status == "OPEN"


def test_naive_now_is_market_time():
    status = get_market_status(now=datetime(2024, 3, 4, 10, 0))

    assert status.status == "OPEN"
    assert status.timestamp == int(_wib(2024, 3, 4, 10).timestamp() * 1000)

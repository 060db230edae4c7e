import threading

import numpy as np
import pytest

import config
from analysis.exceptions import InsufficientDataError, TickerNotFoundError, UpstreamFailureError
from analysis.models import FundamentalSnapshot
from services.market_data import MarketDataProvider
from services.stock_service import (
    analyze_intraday_ticker,
    analyze_ticker,
    compare_tickers,
    get_chart_data,
    scan_market,
)
from bar_builders import build_bars


class FakeProvider(MarketDataProvider):
    """In-memory provider: every symbol gets a 250-bar uptrend unless overridden."""

    def __init__(self, failing=(), short=(), quote=None, fundamentals=None):
        super().__init__(ticker_factory=lambda symbol: None)
        self.failing = {self.normalize_ticker(s) for s in failing}
        self.short = {self.normalize_ticker(s) for s in short}
        self.quote = quote
        self.fundamentals = fundamentals or {}
        self.history_calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def fetch_history(self, symbol, period=config.HISTORY_PERIOD, interval="1d"):
        yf_symbol = self.normalize_ticker(symbol)
        with self._lock:
            self.history_calls.append(yf_symbol)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if yf_symbol in self.failing:
                raise TickerNotFoundError(yf_symbol, "No data found for ticker")
            if yf_symbol in self.short:
                return build_bars(np.linspace(100, 110, 50))
            return build_bars(np.linspace(100, 150, 250))
        finally:
            with self._lock:
                self.active -= 1

    def fetch_quote(self, symbol):
        if self.quote is None:
            raise UpstreamFailureError(self.normalize_ticker(symbol), "No price data found for ticker")
        return self.quote

    def fetch_fundamentals(self, symbol):
        return self.fundamentals.get(self.normalize_ticker(symbol), FundamentalSnapshot())

    def fetch_intraday(self, symbol, now=None):
        bars = build_bars([1000] * 30, spread=1)
        return bars[-5:], bars


def test_scan_isolates_failing_ticker():
    provider = FakeProvider(failing=["GOTO"])
    tickers = ["BBCA", "BBRI", "GOTO", "TLKM", "ASII"]

    report = scan_market(tickers, provider=provider)

    assert report.total == 5
    assert [r.symbol for r in report.results] == ["BBCA", "BBRI", "TLKM", "ASII"]
    assert len(report.errors) == 1
    assert report.errors[0].symbol == "GOTO"
    assert "No data found" in report.errors[0].error


def test_scan_reports_insufficient_history_as_error():
    report = scan_market(["BBCA", "NEWIPO"], provider=FakeProvider(short=["NEWIPO"]))

    assert [r.symbol for r in report.results] == ["BBCA"]
    assert report.errors[0].symbol == "NEWIPO"
    assert "Insufficient historical data" in report.errors[0].error


def test_scan_respects_worker_bound():
    provider = FakeProvider()
    tickers = [f"T{i:03d}" for i in range(12)]

    report = scan_market(tickers, max_workers=3, provider=provider)

    assert len(report.results) == 12
    assert provider.max_active <= 3


def test_scan_defaults_to_watchlist(monkeypatch):
    monkeypatch.setattr(config, "DEFAULT_TICKERS", ["BBCA.JK", "TLKM.JK"])
    provider = FakeProvider()

    report = scan_market(None, provider=provider)

    assert report.total == 2
    assert sorted(provider.history_calls) == ["BBCA.JK", "TLKM.JK"]


def test_analyze_ticker_falls_back_to_last_close():
    result = analyze_ticker("bbca", provider=FakeProvider())

    assert result.symbol == "BBCA"
    assert result.price == pytest.approx(150.0)


def test_analyze_ticker_uses_quote_and_badges():
    fundamentals = {"BBCA.JK": FundamentalSnapshot(market_cap=1.1e15, trailing_eps=410.0)}
    provider = FakeProvider(quote=149.0, fundamentals=fundamentals)

    result = analyze_ticker("BBCA", provider=provider)

    assert result.price == 149.0
    assert [b.label for b in result.fundamental_badges] == ["Big Cap (Blue Chip)", "Perusahaan Untung"]


def test_analyze_ticker_propagates_insufficient_data():
    with pytest.raises(InsufficientDataError):
        analyze_ticker("NEWIPO", provider=FakeProvider(short=["NEWIPO"]))


def test_compare_same_ticker_rejected():
    with pytest.raises(ValueError):
        compare_tickers("bbca", "BBCA.JK", provider=FakeProvider())


def test_compare_two_tickers():
    fundamentals = {
        "BBCA.JK": FundamentalSnapshot(trailing_pe=10, trailing_eps=500),
        "BBRI.JK": FundamentalSnapshot(trailing_pe=20, trailing_eps=300),
    }
    provider = FakeProvider(fundamentals=fundamentals)

    verdict = compare_tickers("BBCA", "BBRI", provider=provider)

    assert verdict.stock_a.symbol == "BBCA"
    assert verdict.stock_b.symbol == "BBRI"
    assert verdict.winners.valuation == "A"
    assert verdict.winners.profitability == "A"
    assert verdict.stock_a.fundamentals.trailing_pe == 10
    assert "**BBCA**" in verdict.verdict


def test_compare_propagates_fetch_failure():
    with pytest.raises(TickerNotFoundError):
        compare_tickers("BBCA", "XXXX", provider=FakeProvider(failing=["XXXX"]))


def test_intraday_ticker():
    plan = analyze_intraday_ticker("BBCA", provider=FakeProvider())

    assert plan.ticker == "BBCA"
    assert plan.entry == 1000
    assert len(plan.chart_data) == 5


def test_chart_data_has_vwap_per_bar():
    chart = get_chart_data("bbca", provider=FakeProvider())

    assert chart.symbol == "BBCA"
    assert len(chart.points) == 250
    # constant volume -> VWAP is the running mean of typical prices
    assert chart.points[0].vwap == pytest.approx(100.0)
    assert chart.points[-1].close == pytest.approx(150.0)

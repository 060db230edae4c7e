"""Integration tests for the analysis API endpoints."""
import asyncio

import numpy as np
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from analysis.exceptions import InsufficientDataError, TickerNotFoundError, UpstreamFailureError
from analysis.models import MarketStatus, ScanError, ScanReport
from analysis.swing_analyzer import analyze_swing
from bar_builders import build_bars
from main import app
from routes.analysis import analyze


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def sample_result():
    return analyze_swing("BBCA.JK", build_bars(np.linspace(100, 150, 250)))


class TestAnalysisAPI:
    """Test suite for the signal engine endpoints."""

    def test_health_check_lists_features(self, client):
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "online"
        assert "scan" in data["features"]
        assert "intraday" in data["features"]

    def test_analyze_success(self, client, monkeypatch, sample_result):
        monkeypatch.setattr("routes.analysis.analyze_ticker", lambda ticker: sample_result)

        response = client.get("/api/analyze/bbca")
        assert response.status_code == 200

        data = response.json()
        assert data["symbol"] == "BBCA"
        assert data["trend"] == "Uptrend"
        assert data["bandar_flow"]["status"] in ("AKUMULASI", "MARKUP")
        assert data["fundamental_badges"] is None

    @pytest.mark.parametrize("error,status", [
        (InsufficientDataError("Need at least 200 days"), 422),
        (TickerNotFoundError("XXXX.JK", "No data found for ticker"), 404),
        (UpstreamFailureError("BBCA.JK", "timeout"), 502),
        (ValueError("bad ticker"), 400),
        (RuntimeError("boom"), 500),
    ])
    def test_analyze_error_mapping(self, client, monkeypatch, error, status):
        def _raise(ticker):
            raise error

        monkeypatch.setattr("routes.analysis.analyze_ticker", _raise)

        response = client.get("/api/analyze/XXXX")
        assert response.status_code == status
        assert response.json()["detail"]

    def test_compare_same_ticker_is_bad_request(self, client):
        response = client.get("/api/compare", params={"ticker_a": "BBCA", "ticker_b": "bbca.jk"})
        assert response.status_code == 400

    def test_compare_requires_both_tickers(self, client):
        response = client.get("/api/compare", params={"ticker_a": "BBCA"})
        assert response.status_code == 422

    def test_scan_returns_partial_results(self, client, monkeypatch, sample_result):
        captured = {}

        def _fake_scan(tickers):
            captured["tickers"] = tickers
            return ScanReport(
                total=2,
                results=[sample_result],
                errors=[ScanError(symbol="GOTO", error="GOTO.JK: No data found for ticker")],
            )

        monkeypatch.setattr("routes.analysis.scan_market", _fake_scan)

        response = client.post("/api/scan", json={"tickers": ["BBCA", "GOTO"]})
        assert response.status_code == 200

        data = response.json()
        assert captured["tickers"] == ["BBCA", "GOTO"]
        assert data["total"] == 2
        assert len(data["results"]) == 1
        assert data["errors"][0]["symbol"] == "GOTO"

    def test_scan_without_body_uses_default_watchlist(self, client, monkeypatch):
        captured = {}

        def _fake_scan(tickers):
            captured["tickers"] = tickers
            return ScanReport(total=0, results=[])

        monkeypatch.setattr("routes.analysis.scan_market", _fake_scan)

        response = client.post("/api/scan", json={})
        assert response.status_code == 200
        assert captured["tickers"] is None

    def test_market_status(self, client, monkeypatch):
        monkeypatch.setattr(
            "routes.analysis.get_market_status",
            lambda provider: MarketStatus(status="BREAK", message="Istirahat Sesi 1", timestamp=0),
        )

        response = client.get("/api/market-status")
        assert response.status_code == 200
        assert response.json()["status"] == "BREAK"


def test_analyze_endpoint_raises_http_exception(monkeypatch):
    def _raise(ticker):
        raise TickerNotFoundError("XXXX.JK", "No data found for ticker")

    monkeypatch.setattr("routes.analysis.analyze_ticker", _raise)

    with pytest.raises(HTTPException) as exc:
        asyncio.run(analyze("XXXX"))

    assert exc.value.status_code == 404

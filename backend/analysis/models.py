"""
Value objects produced and consumed by the analysis engine.

Every model is frozen: an instance is created once by a single computation
and never mutated afterwards. Optional sub-results (bandar flow, fundamental
badges) are explicit ``None`` when they could not be computed.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

Signal = Literal["BUY", "SELL", "NEUTRAL"]
Trend = Literal["Uptrend", "Downtrend", "Sideways"]
Bias = Literal["BULLISH", "BEARISH", "SIDEWAYS"]
FlowStatus = Literal["AKUMULASI", "DISTRIBUSI", "MARKUP", "MARKDOWN", "NEUTRAL"]
Winner = Literal["A", "B", "TIE"]
SessionStatus = Literal["OPEN", "BREAK", "CLOSED"]


class _ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True)


class Bar(_ValueObject):
    """One OHLCV candle. ``timestamp`` is a unix epoch in milliseconds."""
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float


class FundamentalSnapshot(_ValueObject):
    """Fundamental fields from the data provider. Any of them may be missing."""
    market_cap: Optional[float] = None
    trailing_pe: Optional[float] = None
    price_to_book: Optional[float] = None
    trailing_eps: Optional[float] = None
    dividend_yield: Optional[float] = None


class FundamentalBadge(_ValueObject):
    label: str
    tone: str  # green / red / gray / blue / orange / emerald / purple
    icon: str
    description: str
    reason: str


class ChartPoint(_ValueObject):
    timestamp: int
    value: float


class VwapPoint(_ValueObject):
    timestamp: int
    vwap: float


class BandarFlowAssessment(_ValueObject):
    """Price vs OBV divergence over the trailing window (bandarmology proxy)."""
    status: FlowStatus
    price_slope: float
    obv_slope: float
    price_data: List[ChartPoint]
    obv_data: List[ChartPoint]  # normalized to 0-100


class CandlePattern(_ValueObject):
    name: str
    label: str


class AnalysisResult(_ValueObject):
    """Daily (swing) analysis for one ticker."""
    symbol: str
    price: float
    rsi: float
    macd: float
    signal: Signal
    confidence_score: int
    pred_price: float
    pred_percent: float
    low_52w: float
    high_52w: float
    position_52w: float
    vol_ratio: float
    trend: Trend
    summary_text: str
    fundamental_badges: Optional[List[FundamentalBadge]] = None
    bandar_flow: Optional[BandarFlowAssessment] = None
    candle_patterns: List[CandlePattern] = []


class IntradayPlan(_ValueObject):
    """Intraday bias, score and entry/stop/target plan."""
    ticker: str
    bias: Bias
    score: int
    entry: float
    stop_loss: float
    target1: float
    target2: float
    opening_range_high: float
    opening_range_low: float
    current_vwap: float
    vwap_data: List[VwapPoint]
    chart_data: List[Bar]
    last_timestamp: int
    reason_text: str


class ComparedStock(_ValueObject):
    symbol: str
    analysis: AnalysisResult
    fundamentals: FundamentalSnapshot = FundamentalSnapshot()


class ComparisonWinners(_ValueObject):
    valuation: Winner      # lower PER/PBV wins
    momentum: Winner       # RSI closer to 50 + signal bonus
    profitability: Winner  # higher EPS wins
    bandarmology: Winner   # accumulation beats distribution


class ComparisonVerdict(_ValueObject):
    stock_a: ComparedStock
    stock_b: ComparedStock
    winners: ComparisonWinners
    verdict: str


class ScanError(_ValueObject):
    symbol: str
    error: str


class ScanReport(_ValueObject):
    """Batch scan outcome. Failed tickers are listed in ``errors`` only."""
    total: int
    results: List[AnalysisResult]
    errors: List[ScanError] = []


class MarketStatus(_ValueObject):
    status: SessionStatus
    message: str
    timestamp: int


class PriceVwapPoint(_ValueObject):
    timestamp: int
    close: float
    vwap: float


class ChartData(_ValueObject):
    symbol: str
    points: List[PriceVwapPoint]

"""
Comparison Engine
Head-to-head scoring of two analysed tickers.

Four independent comparators, each returning 'A', 'B' or 'TIE':
- valuation     : lower PER (PBV when PER is missing) wins
- momentum      : RSI closer to 50, plus 10 points per BUY / minus 10 per SELL
- profitability : higher EPS wins
- bandarmology  : accumulation beats distribution
"""
import logging
import math
from typing import Optional

from analysis.models import (
    AnalysisResult,
    ComparedStock,
    ComparisonVerdict,
    ComparisonWinners,
    FundamentalSnapshot,
)

logger = logging.getLogger(__name__)

SIGNAL_BONUS = {"BUY": 1, "SELL": -1, "NEUTRAL": 0}

FLOW_SCORE = {
    "AKUMULASI": 5,
    "MARKUP": 4,
    "NEUTRAL": 3,
    "MARKDOWN": 2,
    "DISTRIBUSI": 1,
}


def _pick(score_a: float, score_b: float, higher_wins: bool = True) -> str:
    if score_a == score_b:
        return "TIE"
    if higher_wins:
        return "A" if score_a > score_b else "B"
    return "A" if score_a < score_b else "B"


def _valuation_score(snapshot: FundamentalSnapshot) -> float:
    if snapshot.trailing_pe is not None:
        return snapshot.trailing_pe
    if snapshot.price_to_book is not None:
        return snapshot.price_to_book
    return math.inf


def compare_valuation(a: FundamentalSnapshot, b: FundamentalSnapshot) -> str:
    # Both missing -> inf == inf -> TIE; one missing -> the other (finite) wins
    return _pick(_valuation_score(a), _valuation_score(b), higher_wins=False)


def compare_momentum(a: AnalysisResult, b: AnalysisResult) -> str:
    score_a = -abs(a.rsi - 50) + SIGNAL_BONUS.get(a.signal, 0) * 10
    score_b = -abs(b.rsi - 50) + SIGNAL_BONUS.get(b.signal, 0) * 10
    return _pick(score_a, score_b)


def compare_profitability(a: FundamentalSnapshot, b: FundamentalSnapshot) -> str:
    eps_a = a.trailing_eps if a.trailing_eps is not None else -math.inf
    eps_b = b.trailing_eps if b.trailing_eps is not None else -math.inf
    return _pick(eps_a, eps_b)


def compare_bandarmology(a: AnalysisResult, b: AnalysisResult) -> str:
    score_a = FLOW_SCORE.get(a.bandar_flow.status, 3) if a.bandar_flow else 3
    score_b = FLOW_SCORE.get(b.bandar_flow.status, 3) if b.bandar_flow else 3
    return _pick(score_a, score_b)


def _side(winner: str) -> int:
    return {"A": 1, "B": -1}.get(winner, 0)


def build_verdict(symbol_a: str, symbol_b: str, winners: ComparisonWinners) -> str:
    """Indonesian narrative from the fundamental and technical win balance."""
    parts = []

    fundamental = _side(winners.valuation) + _side(winners.profitability)
    if fundamental:
        leader = symbol_a if fundamental > 0 else symbol_b
        parts.append(f"Secara fundamental, **{leader}** lebih unggul")

    technical = _side(winners.momentum) + _side(winners.bandarmology)
    if technical:
        leader = symbol_a if technical > 0 else symbol_b
        parts.append(f"secara teknikal, **{leader}** memiliki momentum jangka pendek yang lebih baik")

    total = fundamental + technical
    if total:
        leader = symbol_a if total > 0 else symbol_b
        parts.append(
            f"Secara keseluruhan, **{leader}** menunjukkan performa yang lebih baik "
            f"berdasarkan analisis fundamental dan teknikal"
        )
    else:
        parts.append("Kedua saham memiliki kelebihan masing-masing. Pilih sesuai dengan strategi investasi Anda")

    return ". ".join(parts) + "."


def compare_analyses(
    a: AnalysisResult,
    b: AnalysisResult,
    fundamentals_a: Optional[FundamentalSnapshot] = None,
    fundamentals_b: Optional[FundamentalSnapshot] = None
) -> ComparisonVerdict:
    """
    Compare two swing analyses and their fundamentals.

    Missing fundamentals are treated as an empty snapshot.
    """
    fundamentals_a = fundamentals_a or FundamentalSnapshot()
    fundamentals_b = fundamentals_b or FundamentalSnapshot()

    winners = ComparisonWinners(
        valuation=compare_valuation(fundamentals_a, fundamentals_b),
        momentum=compare_momentum(a, b),
        profitability=compare_profitability(fundamentals_a, fundamentals_b),
        bandarmology=compare_bandarmology(a, b),
    )
    logger.debug(f"Compare {a.symbol} vs {b.symbol}: {winners.model_dump()}")

    return ComparisonVerdict(
        stock_a=ComparedStock(symbol=a.symbol, analysis=a, fundamentals=fundamentals_a),
        stock_b=ComparedStock(symbol=b.symbol, analysis=b, fundamentals=fundamentals_b),
        winners=winners,
        verdict=build_verdict(a.symbol, b.symbol, winners),
    )

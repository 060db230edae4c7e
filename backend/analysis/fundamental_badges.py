"""
Fundamental Badges
Turns a fundamental snapshot into dashboard health badges (Indonesian text).

| Aspect        | Rule                                  | Badge                   |
|---------------|---------------------------------------|-------------------------|
| Size          | market cap > Rp 10T                   | Big Cap (Blue Chip)     |
|               | market cap < Rp 1T                    | Micro Cap (High Risk)   |
|               | otherwise                             | Mid Cap (Second Liner)  |
| Profitability | EPS > 0 / EPS < 0                     | Perusahaan Untung/Rugi  |
| Valuation     | PER < 15 or PBV < 1                   | Valuasi Murah           |
|               | PER > 25                              | Valuasi Mahal           |
| Dividend      | yield > 2%                            | Rajin Dividen           |
"""
from typing import List

from analysis.models import FundamentalBadge, FundamentalSnapshot

TRILLION = 1_000_000_000_000
BIG_CAP_TRILLION = 10
MICRO_CAP_TRILLION = 1
CHEAP_PE = 15
EXPENSIVE_PE = 25
CHEAP_PBV = 1
DIVIDEND_YIELD_MIN = 0.02


def _size_badge(market_cap: float) -> FundamentalBadge:
    cap_t = market_cap / TRILLION
    cap_text = f"Kapitalisasi pasar sebesar Rp {cap_t:.2f} Triliun."

    if cap_t > BIG_CAP_TRILLION:
        return FundamentalBadge(
            label="Big Cap (Blue Chip)",
            tone="blue",
            icon="ShieldCheck",
            description="Perusahaan raksasa, relatif aman dari manipulasi.",
            reason=f"{cap_text} Di atas Rp 10 Triliun, harga saham cenderung stabil dan sulit digerakkan pihak tertentu.",
        )
    if cap_t < MICRO_CAP_TRILLION:
        return FundamentalBadge(
            label="Micro Cap (High Risk)",
            tone="red",
            icon="AlertTriangle",
            description="Kapitalisasi kecil, rawan volatilitas tinggi/gorengan.",
            reason=f"{cap_text} Di bawah Rp 1 Triliun, harga mudah berfluktuasi tajam dan rentan digoreng.",
        )
    return FundamentalBadge(
        label="Mid Cap (Second Liner)",
        tone="gray",
        icon="Building",
        description="Perusahaan menengah, potensi pertumbuhan dengan risiko sedang.",
        reason=f"{cap_text} Rentang Rp 1-10 Triliun menawarkan ruang tumbuh dengan risiko di atas Blue Chip.",
    )


def _profit_badge(eps: float) -> FundamentalBadge:
    if eps > 0:
        return FundamentalBadge(
            label="Perusahaan Untung",
            tone="green",
            icon="TrendingUp",
            description="Perusahaan menghasilkan laba, indikator kesehatan positif.",
            reason=f"EPS (Earning Per Share) sebesar Rp {eps:.2f}. Setiap lembar saham menghasilkan laba bersih.",
        )
    return FundamentalBadge(
        label="Perusahaan Rugi",
        tone="red",
        icon="TrendingDown",
        description="Waspada, perusahaan sedang merugi.",
        reason=f"EPS (Earning Per Share) negatif sebesar Rp {eps:.2f}. Setiap lembar saham menanggung rugi Rp {abs(eps):.2f}.",
    )


def _valuation_badge(snapshot: FundamentalSnapshot):
    pe = snapshot.trailing_pe
    pbv = snapshot.price_to_book

    reasons = []
    if pe is not None and pe < CHEAP_PE:
        reasons.append(f"PER sebesar {pe:.2f} tergolong rendah (di bawah 15)")
    if pbv is not None and pbv < CHEAP_PBV:
        reasons.append(f"PBV sebesar {pbv:.2f} berarti harga di bawah nilai buku")

    if reasons:
        return FundamentalBadge(
            label="Valuasi Murah",
            tone="emerald",
            icon="Tag",
            description="Harga saham tergolong murah (Undervalued).",
            reason=" dan ".join(reasons) + ". Harga mungkin di bawah nilai intrinsiknya.",
        )
    if pe is not None and pe > EXPENSIVE_PE:
        return FundamentalBadge(
            label="Valuasi Mahal",
            tone="orange",
            icon="DollarSign",
            description="Harga saham tergolong mahal (Overvalued), hati-hati dengan bubble.",
            reason=f"PER sebesar {pe:.2f} tergolong tinggi (di atas 25). Waspadai risiko koreksi harga.",
        )
    return None


def analyze_fundamentals(snapshot: FundamentalSnapshot) -> List[FundamentalBadge]:
    """
    Build badges for every fundamental aspect that has data.

    Returns:
        Badges in size, profitability, valuation, dividend order (possibly empty)
    """
    badges = []

    if snapshot.market_cap is not None:
        badges.append(_size_badge(snapshot.market_cap))

    if snapshot.trailing_eps is not None and snapshot.trailing_eps != 0:
        badges.append(_profit_badge(snapshot.trailing_eps))

    valuation = _valuation_badge(snapshot)
    if valuation:
        badges.append(valuation)

    if snapshot.dividend_yield is not None and snapshot.dividend_yield > DIVIDEND_YIELD_MIN:
        badges.append(FundamentalBadge(
            label="Rajin Dividen",
            tone="purple",
            icon="Gift",
            description="Cocok untuk investor jangka panjang.",
            reason=f"Dividend Yield sebesar {snapshot.dividend_yield * 100:.2f}% per tahun dari nilai investasi.",
        ))

    return badges

"""
Bandar Flow Classifier

Bandarmology proxy: compares the trailing price slope with the On-Balance
Volume slope to spot accumulation / distribution by large players.

| Price (normalized)  | OBV (normalized) | Status     |
|---------------------|------------------|------------|
| flat (< 1%)         | rising > 2%      | AKUMULASI  |
| flat (< 1%)         | falling > 2%     | DISTRIBUSI |
| up                  | up               | MARKUP     |
| down                | down             | MARKDOWN   |
| anything else       |                  | NEUTRAL    |

Rules are evaluated top to bottom, first match wins.
"""
import logging
from typing import Optional, Sequence

import config
from analysis.indicators import bars_to_frame, calculate_obv
from analysis.models import BandarFlowAssessment, Bar, ChartPoint

logger = logging.getLogger(__name__)

FLAT_PRICE_THRESHOLD = 0.01
SIGNIFICANT_OBV_THRESHOLD = 0.02


def classify_flow(price_change_pct: float, obv_change_pct: float) -> str:
    """Map normalized price / OBV change onto a bandar flow status."""
    if abs(price_change_pct) < FLAT_PRICE_THRESHOLD and obv_change_pct > SIGNIFICANT_OBV_THRESHOLD:
        return "AKUMULASI"
    if abs(price_change_pct) < FLAT_PRICE_THRESHOLD and obv_change_pct < -SIGNIFICANT_OBV_THRESHOLD:
        return "DISTRIBUSI"
    if price_change_pct > 0 and obv_change_pct > 0:
        return "MARKUP"
    if price_change_pct < 0 and obv_change_pct < 0:
        return "MARKDOWN"
    return "NEUTRAL"


def analyze_bandar_flow(bars: Sequence[Bar], window: int = config.BANDAR_FLOW_WINDOW) -> Optional[BandarFlowAssessment]:
    """
    Run the price/OBV divergence analysis over the trailing ``window`` bars.

    Returns:
        BandarFlowAssessment, or None when fewer than ``window`` bars exist
    """
    if len(bars) < window:
        logger.debug(f"Bandar flow skipped: {len(bars)} bars < window {window}")
        return None

    df = bars_to_frame(list(bars)[-window:])
    closes = df['close'].to_numpy(dtype=float)
    obv = calculate_obv(closes, df['volume'].to_numpy(dtype=float))

    price_slope = (closes[-1] - closes[0]) / window
    obv_slope = (obv[-1] - obv[0]) / window

    price_change_pct = price_slope / closes[0] if closes[0] != 0 else 0.0
    obv_change_pct = obv_slope / abs(obv[0]) if obv[0] != 0 else 0.0

    status = classify_flow(price_change_pct, obv_change_pct)

    obv_min, obv_max = obv.min(), obv.max()
    obv_range = obv_max - obv_min
    timestamps = df['timestamp'].tolist()

    price_data = [ChartPoint(timestamp=ts, value=float(c)) for ts, c in zip(timestamps, closes)]
    obv_data = [
        ChartPoint(
            timestamp=ts,
            value=float((value - obv_min) / obv_range * 100) if obv_range > 0 else 50.0,
        )
        for ts, value in zip(timestamps, obv)
    ]

    return BandarFlowAssessment(
        status=status,
        price_slope=float(price_slope),
        obv_slope=float(obv_slope),
        price_data=price_data,
        obv_data=obv_data,
    )

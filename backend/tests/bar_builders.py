"""Synthetic bar series shared by the test modules."""
from datetime import datetime

import pytz

from analysis.models import Bar

JAKARTA = pytz.timezone("Asia/Jakarta")
DAY_MS = 86_400_000
START_MS = int(JAKARTA.localize(datetime(2024, 1, 2, 16, 0)).timestamp() * 1000)


def build_bars(closes, volumes=None, spread=0.5, start_ms=START_MS, step_ms=DAY_MS):
    """Daily bars around the given closes (open = previous close)."""
    closes = [float(c) for c in closes]
    volumes = volumes if volumes is not None else [1_000_000] * len(closes)
    bars = []
    for i, (close, volume) in enumerate(zip(closes, volumes)):
        open_ = closes[i - 1] if i else close
        bars.append(Bar(
            timestamp=start_ms + i * step_ms,
            open=open_,
            high=max(open_, close) + spread,
            low=min(open_, close) - spread,
            close=close,
            volume=float(volume),
        ))
    return bars

"""
Average True Range (ATR) indicator.
"""

from decimal import Decimal
from typing import List, Optional, Sequence

from ..models.ohlcv import Bar


def true_ranges(bars: Sequence[Bar]) -> List[Decimal]:
    """True range of every bar after the first (oldest -> newest)."""
    ranges = []
    for prev, cur in zip(bars, bars[1:]):
        ranges.append(max(
            cur.high - cur.low,
            abs(cur.high - prev.close),
            abs(cur.low - prev.close),
        ))
    return ranges


def compute_atr_simple(bars: Sequence[Bar], period: int = 14) -> Optional[Decimal]:
    """
    Simple-average ATR over the newest ``period`` true ranges.
    
    Returns:
        ATR value or None with fewer than ``period + 1`` bars
    """
    if period < 1 or len(bars) < period + 1:
        return None
    window = true_ranges(bars)[-period:]
    return sum(window, Decimal(0)) / Decimal(period)

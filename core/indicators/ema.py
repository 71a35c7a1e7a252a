"""
Exponential Moving Average (EMA) indicator.
"""

from decimal import Decimal
from typing import Sequence, Optional


def compute_ema(values: Sequence[Decimal], period: int) -> Optional[Decimal]:
    """
    Latest EMA of ``values`` (oldest -> newest).
    
    Seeded with the simple average of the first ``period`` values, then
    smoothed with ``k = 2 / (period + 1)``.
    
    Returns:
        EMA value or None if fewer than ``period`` values
    """
    if period < 1 or len(values) < period:
        return None
    
    k = Decimal(2) / Decimal(period + 1)
    ema = sum(values[:period], Decimal(0)) / Decimal(period)
    for price in values[period:]:
        ema = price * k + ema * (1 - k)
    return ema

"""
Relative Strength Index (RSI) indicator.
"""

from decimal import Decimal
from typing import Sequence, Optional


def compute_rsi(values: Sequence[Decimal], period: int = 14) -> Optional[Decimal]:
    """
    Wilder RSI of ``values`` (oldest -> newest), in [0, 100].
    
    Returns:
        RSI value or None if there are not more than ``period`` values
    """
    if period < 1 or len(values) <= period:
        return None
    
    gains = []
    losses = []
    for prev, curr in zip(values, values[1:]):
        diff = curr - prev
        gains.append(diff if diff > 0 else Decimal(0))
        losses.append(-diff if diff < 0 else Decimal(0))
    
    p = Decimal(period)
    avg_gain = sum(gains[:period], Decimal(0)) / p
    avg_loss = sum(losses[:period], Decimal(0)) / p
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (p - 1) + gain) / p
        avg_loss = (avg_loss * (p - 1) + loss) / p
    
    if avg_loss == 0:
        # Flat series reads as neutral
        return Decimal(50) if avg_gain == 0 else Decimal(100)
    
    rs = avg_gain / avg_loss
    return Decimal(100) - Decimal(100) / (1 + rs)

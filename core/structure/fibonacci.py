"""Fibonacci retracement levels over a bar window."""

from decimal import Decimal
from typing import Dict, Iterable

from ..errors import InsufficientDataError
from ..models.ohlcv import OHLCV
from ..utils.numeric import D


def window_range(window: OHLCV):
    """(highest high, lowest low) of the window."""
    if not window.bars:
        raise InsufficientDataError(f"Empty window for {window.symbol} {window.timeframe}", required=1, available=0)
    high = max(b.high for b in window.bars)
    low = min(b.low for b in window.bars)
    return high, low


def retracement_level(window: OHLCV, level_percent) -> Decimal:
    """
    Price at ``level_percent`` retraced down from the window high.
    
    Args:
        window: Bars to measure (order does not matter)
        level_percent: Retracement in percent, e.g. 61.8
    
    Returns:
        ``high - (high - low) * level_percent / 100``
    
    Raises:
        InsufficientDataError: If the window is empty
    """
    high, low = window_range(window)
    return high - (high - low) * D(level_percent) / Decimal(100)


def retracement_levels(window: OHLCV, levels: Iterable) -> Dict[float, Decimal]:
    """Retracement price for each level in ``levels``."""
    high, low = window_range(window)
    span = high - low
    return {float(level): high - span * D(level) / Decimal(100) for level in levels}

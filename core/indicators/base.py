"""
Indicator values computed from a market data source.
"""

import logging
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..errors import InsufficientDataError
from ..interfaces import MarketData
from .atr import compute_atr_simple
from .ema import compute_ema
from .rsi import compute_rsi

logger = logging.getLogger(__name__)


class BarIndicators:
    """
    Indicators capability backed by ``MarketData.get_bars``.
    
    EMA and RSI fetch ``warmup_factor`` times their period so the recursive
    smoothing has settled before the latest value is read.
    """

    def __init__(self, market_data: MarketData, warmup_factor: int = 3):
        self.market_data = market_data
        self.warmup_factor = max(int(warmup_factor), 1)

    def ema(self, symbol: str, timeframe: str, period: int) -> Decimal:
        bars = self.market_data.get_bars(symbol, timeframe, period * self.warmup_factor)
        return self._required(compute_ema, bars.closes, period, symbol, timeframe, "EMA", period)

    def rsi(self, symbol: str, timeframe: str, period: int) -> Decimal:
        bars = self.market_data.get_bars(symbol, timeframe, period * self.warmup_factor + 1)
        return self._required(compute_rsi, bars.closes, period, symbol, timeframe, "RSI", period + 1)

    def atr(self, symbol: str, timeframe: str, period: int) -> Decimal:
        bars = self.market_data.get_bars(symbol, timeframe, period + 1)
        return self._required(compute_atr_simple, bars.bars, period, symbol, timeframe, "ATR", period + 1)

    @staticmethod
    def _required(fn: Callable[[Sequence, int], Optional[Decimal]], values, period: int,
                  symbol: str, timeframe: str, name: str, required: int) -> Decimal:
        value = fn(values, period)
        if value is None:
            raise InsufficientDataError(
                f"{name}({period}) on {symbol} {timeframe} needs {required} bars, got {len(values)}",
                required=required,
                available=len(values),
            )
        return value

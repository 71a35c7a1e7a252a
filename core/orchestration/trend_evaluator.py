"""Multi-timeframe EMA trend evaluation."""

import logging
from typing import Sequence

from ..interfaces import Indicators
from ..models.decision import TrendBias

logger = logging.getLogger(__name__)


class TrendEvaluator:
    """Fast/slow EMA comparison on the configured trend timeframes."""

    def __init__(self, indicators: Indicators, fast_period: int = 50, slow_period: int = 200):
        if fast_period >= slow_period:
            raise ValueError("fast_period must be < slow_period")
        self.indicators = indicators
        self.fast_period = fast_period
        self.slow_period = slow_period

    def is_uptrend(self, symbol: str, timeframe: str, fast_period: int = None, slow_period: int = None) -> bool:
        """
        True when EMA(fast) > EMA(slow) on closes.
        
        Raises:
            InsufficientDataError: If fewer bars exist than the slow EMA needs
        """
        fast = self.indicators.ema(symbol, timeframe, fast_period or self.fast_period)
        slow = self.indicators.ema(symbol, timeframe, slow_period or self.slow_period)
        return fast > slow

    def bias(self, symbol: str, timeframes: Sequence[str]) -> TrendBias:
        """
        UP when every timeframe is in an uptrend, DOWN when none is.
        
        Anything in between is MIXED and selects neither path.
        """
        votes = [self.is_uptrend(symbol, tf) for tf in timeframes]
        if all(votes):
            result = TrendBias.UP
        elif not any(votes):
            result = TrendBias.DOWN
        else:
            result = TrendBias.MIXED
        logger.debug("trend_evaluated", extra={
            "symbol": symbol,
            "timeframes": list(timeframes),
            "uptrend_votes": votes,
            "bias": result.value,
        })
        return result

"""Order Block (OB) detector."""

import logging
from decimal import Decimal
from typing import Dict, Any

from ..models.decision import OrderBlockSignal
from ..models.ohlcv import OHLCV
from ..utils.numeric import D
from .detector import StructureDetector
from .fibonacci import retracement_level, retracement_levels

logger = logging.getLogger(__name__)


class OrderBlockDetector(StructureDetector):
    """
    Classifies the newest bar of a window as a bullish or bearish order block.
    
    A bar qualifies when its volume exceeds the previous bar's volume by
    ``volume_multiplier`` and it opened within ``proximity_points`` of the
    window's Fibonacci retracement level. Candle direction picks the side.

    ``secondary_fib_level_percent`` does not affect detection; its price is
    reported next to the primary level when a block is found.
    """
    
    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}
        
        # Set attributes BEFORE super().__init__()
        self.volume_multiplier = D(config.get('volume_multiplier', 1.5))
        self.fib_level_percent = D(config.get('fib_level_percent', 61.8))
        self.proximity_points = D(config.get('proximity_points', 0))
        self.secondary_fib_level_percent = D(config.get('secondary_fib_level_percent', 50.0))

        super().__init__('OrderBlockDetector', config)
    
    def detect(self, window: OHLCV, proximity_points: Decimal = None) -> OrderBlockSignal:
        """
        Classify the newest bar of ``window``.
        
        Args:
            window: Bars oldest-first; at least two are required
            proximity_points: Per-symbol override of the proximity threshold
        
        Raises:
            InsufficientDataError: If the window has fewer than two bars
        """
        self._require_bars(window, 2, "Order block detection")

        proximity = D(proximity_points) if proximity_points is not None else self.proximity_points
        cur = window.latest_bar
        prev = window.previous_bar
        fib = retracement_level(window, self.fib_level_percent)
        
        volume_surge = cur.volume > prev.volume * self.volume_multiplier
        near_fib = abs(cur.open - fib) < proximity
        
        if volume_surge and near_fib and cur.is_bullish:
            signal = OrderBlockSignal.BULLISH
        elif volume_surge and near_fib and cur.is_bearish:
            signal = OrderBlockSignal.BEARISH
        else:
            signal = OrderBlockSignal.NONE
        
        if self._record(signal is not OrderBlockSignal.NONE):
            levels = retracement_levels(window, (self.fib_level_percent, self.secondary_fib_level_percent))
            logger.debug("ob_detected", extra={
                "symbol": window.symbol,
                "timeframe": window.timeframe,
                "signal": signal.label,
                "fib_level": float(fib),
                "fib_levels": {level: float(price) for level, price in levels.items()},
                "open": float(cur.open),
                "volume": float(cur.volume),
                "prev_volume": float(prev.volume),
            })
        return signal
    
    def _validate_parameters(self) -> None:
        """Validate OB parameters."""
        if self.volume_multiplier < 0:
            raise ValueError("volume_multiplier must be >= 0")
        if not Decimal(0) <= self.fib_level_percent <= Decimal(100):
            raise ValueError("fib_level_percent must be within [0, 100]")
        if not Decimal(0) <= self.secondary_fib_level_percent <= Decimal(100):
            raise ValueError("secondary_fib_level_percent must be within [0, 100]")
        if self.proximity_points < 0:
            raise ValueError("proximity_points must be >= 0")

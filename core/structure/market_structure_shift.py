"""Market Structure Shift (MSS) check."""

import logging
from decimal import Decimal
from typing import Dict, Any

from ..models.ohlcv import OHLCV
from .detector import StructureDetector
from .fibonacci import window_range

logger = logging.getLogger(__name__)


class MarketStructureShiftDetector(StructureDetector):
    """Entry close breaking the higher-timeframe range extreme."""
    
    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}
        
        # Set attributes BEFORE super().__init__()
        self.lookback = config.get('lookback', 50)
        
        super().__init__('MarketStructureShiftDetector', config)
    
    def has_shift(self, structure_window: OHLCV, entry_close: Decimal, is_long: bool) -> bool:
        """
        Args:
            structure_window: Higher-timeframe bars; the newest ``lookback`` are used
            entry_close: Latest close on the entry timeframe
            is_long: Long checks the highest high, short the lowest low
        
        Raises:
            InsufficientDataError: If the structure window is empty
        """
        self._require_bars(structure_window, 1, "MSS check")

        pivot_high, pivot_low = window_range(structure_window.tail(self.lookback))
        shift = entry_close > pivot_high if is_long else entry_close < pivot_low

        if self._record(shift):
            logger.debug("mss_detected", extra={
                "symbol": structure_window.symbol,
                "direction": "bullish" if is_long else "bearish",
                "pivot_high": float(pivot_high),
                "pivot_low": float(pivot_low),
                "entry_close": float(entry_close),
            })
        return shift
    
    def _validate_parameters(self) -> None:
        """Validate MSS parameters."""
        if self.lookback < 1:
            raise ValueError("lookback must be >= 1")

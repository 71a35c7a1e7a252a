"""Fair Value Gap (FVG) check."""

import logging
from typing import Dict, Any

from ..models.ohlcv import OHLCV
from .detector import StructureDetector

logger = logging.getLogger(__name__)


class FairValueGapDetector(StructureDetector):
    """
    Three-bar gap check on the entry timeframe.
    
    With the newest three bars labelled by shift (0 newest, 1 middle,
    2 oldest), a long gap needs the middle low above both neighbours' highs
    and a short gap needs the middle high below both neighbours' lows.
    """
    
    BARS_REQUIRED = 3
    
    def __init__(self, config: Dict[str, Any] = None):
        super().__init__('FairValueGapDetector', config)
    
    def has_gap(self, window: OHLCV, is_long: bool) -> bool:
        """
        Raises:
            InsufficientDataError: If the window has fewer than three bars
        """
        self._require_bars(window, self.BARS_REQUIRED, "FVG check")

        newest = window.newest(0)
        mid = window.newest(1)
        oldest = window.newest(2)
        
        if is_long:
            gap = mid.low > newest.high and mid.low > oldest.high
        else:
            gap = mid.high < newest.low and mid.high < oldest.low
        
        if self._record(gap):
            logger.debug("fvg_detected", extra={
                "symbol": window.symbol,
                "direction": "bullish" if is_long else "bearish",
                "mid_high": float(mid.high),
                "mid_low": float(mid.low),
            })
        return gap

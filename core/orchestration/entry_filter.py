"""Entry confirmation: oscillator, fair value gap and market structure shift."""

import logging
from decimal import Decimal

from ..interfaces import Indicators, MarketData
from ..models.config import StrategyConfig
from ..models.decision import Direction, EntryDecision
from ..structure.fair_value_gap import FairValueGapDetector
from ..structure.market_structure_shift import MarketStructureShiftDetector
from ..utils.numeric import D

logger = logging.getLogger(__name__)


class EntryFilter:
    """Go/no-go decision for a long or short entry on one symbol."""

    def __init__(self, config: StrategyConfig, market_data: MarketData, indicators: Indicators):
        self.config = config
        self.market_data = market_data
        self.indicators = indicators
        self.oversold = D(config.rsi_oversold)
        self.overbought = D(config.rsi_overbought)
        self.fvg_detector = FairValueGapDetector()
        self.mss_detector = MarketStructureShiftDetector({'lookback': config.structure_lookback})

    def oscillator_ok(self, value: Decimal, is_long: bool) -> bool:
        return value < self.oversold if is_long else value > self.overbought

    def evaluate(self, symbol: str, is_long: bool) -> EntryDecision:
        """
        Run all three sub-checks for one direction.
        
        Raises:
            InsufficientDataError: If any check lacks bars
        """
        cfg = self.config
        rsi = self.indicators.rsi(symbol, cfg.entry_timeframe, cfg.rsi_period)
        entry_bars = self.market_data.get_bars(symbol, cfg.entry_timeframe, FairValueGapDetector.BARS_REQUIRED)
        structure_bars = self.market_data.get_bars(symbol, cfg.trend_timeframe_1, cfg.structure_lookback)

        has_gap = self.fvg_detector.has_gap(entry_bars, is_long)
        has_shift = self.mss_detector.has_shift(structure_bars, entry_bars.latest_bar.close, is_long)

        decision = EntryDecision(
            direction=Direction.LONG if is_long else Direction.SHORT,
            oscillator=rsi,
            oscillator_ok=self.oscillator_ok(rsi, is_long),
            has_gap=has_gap,
            has_shift=has_shift,
        )
        logger.debug("entry_checked", extra={
            "symbol": symbol,
            "direction": decision.direction.value,
            "rsi": float(rsi),
            "oscillator_ok": decision.oscillator_ok,
            "has_gap": has_gap,
            "has_shift": has_shift,
            "qualifies": decision.qualifies,
        })
        return decision

    def check_entry(self, symbol: str, is_long: bool) -> bool:
        return self.evaluate(symbol, is_long).qualifies

"""
OHLCV data models for price bars and bar windows.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Bar:
    """Single OHLCV bar (immutable)."""
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal
    timestamp: datetime
    
    def __post_init__(self):
        if self.high < self.low:
            raise ValueError("High must be >= Low")
        if self.high < self.open or self.high < self.close:
            raise ValueError("High must be >= Open and Close")
        if self.low > self.open or self.low > self.close:
            raise ValueError("Low must be <= Open and Close")
        if self.volume < 0:
            raise ValueError("Volume must be >= 0")
    
    @property
    def is_bullish(self) -> bool:
        return self.close > self.open
    
    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


@dataclass(frozen=True)
class OHLCV:
    """
    Window of the most recent bars for one (symbol, timeframe) pair.
    
    Bars are stored oldest-first, so the newest bar is ``bars[-1]``.
    """
    symbol: str
    bars: Tuple[Bar, ...]
    timeframe: str
    
    def __post_init__(self):
        if not isinstance(self.bars, tuple):
            object.__setattr__(self, 'bars', tuple(self.bars))
        for older, newer in zip(self.bars, self.bars[1:]):
            if newer.timestamp <= older.timestamp:
                raise ValueError("Bar timestamps must be strictly increasing")
    
    @property
    def latest_bar(self) -> Bar:
        """Get the most recent bar."""
        return self.bars[-1] if self.bars else None
    
    @property
    def previous_bar(self) -> Bar:
        """Get the bar before the most recent one."""
        return self.bars[-2] if len(self.bars) >= 2 else None
    
    def newest(self, shift: int) -> Bar:
        """Bar ``shift`` positions back from the newest (0 = newest)."""
        return self.bars[-1 - shift]
    
    def tail(self, count: int) -> "OHLCV":
        """Window restricted to the ``count`` newest bars."""
        return OHLCV(symbol=self.symbol, bars=self.bars[-count:] if count > 0 else (), timeframe=self.timeframe)
    
    @property
    def closes(self) -> Tuple[Decimal, ...]:
        return tuple(b.close for b in self.bars)
    
    @property
    def length(self) -> int:
        """Number of bars."""
        return len(self.bars)
    
    def __len__(self) -> int:
        return len(self.bars)

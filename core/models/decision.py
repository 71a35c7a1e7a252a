"""
Trading signal and decision models.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OrderBlockSignal(Enum):
    """Classification of the latest bar of a window."""
    BULLISH = "BullishOB"
    BEARISH = "BearishOB"
    NONE = "None"

    @property
    def label(self) -> str:
        """Name used in the trade log."""
        return self.value


class Direction(Enum):
    """Trade direction."""
    LONG = "long"
    SHORT = "short"
    NONE = "none"

    @property
    def order_type(self) -> str:
        """Order side as sent to the broker (BUY/SELL)."""
        if self is Direction.LONG:
            return "BUY"
        if self is Direction.SHORT:
            return "SELL"
        raise ValueError("Direction.NONE has no order type")

    @property
    def is_long(self) -> bool:
        return self is Direction.LONG


class TrendBias(Enum):
    """Combined trend across both trend timeframes."""
    UP = "up"
    DOWN = "down"
    MIXED = "mixed"


@dataclass(frozen=True)
class EntryDecision:
    """Outcome of the entry filter for one direction (immutable)."""
    direction: Direction
    oscillator: Decimal
    oscillator_ok: bool
    has_gap: bool
    has_shift: bool

    @property
    def qualifies(self) -> bool:
        """True only when all three sub-checks hold."""
        return self.direction is not Direction.NONE and self.oscillator_ok and self.has_gap and self.has_shift


@dataclass(frozen=True)
class RiskProfile:
    """Percentage of equity put at risk on one trade."""
    risk_percent: float

    def __post_init__(self):
        if not 0 < self.risk_percent <= 100:
            raise ValueError("risk_percent must be in (0, 100]")


@dataclass(frozen=True)
class TradeIntent:
    """Trade handed to the order execution collaborator (immutable)."""
    symbol: str
    direction: Direction
    order_block: OrderBlockSignal
    entry_price: Decimal
    stop_loss: Decimal
    lot_size: Decimal
    equity: Decimal
    timestamp: datetime
    comment: str = ""
    magic: int = 0
    risk_percent: Optional[float] = None

    def __post_init__(self):
        if self.direction is Direction.NONE:
            raise ValueError("TradeIntent requires a LONG or SHORT direction")
        if self.lot_size <= 0:
            raise ValueError("lot_size must be positive")
        if self.entry_price <= 0 or self.stop_loss <= 0:
            raise ValueError("Prices must be positive")
        if self.direction is Direction.LONG and self.stop_loss >= self.entry_price:
            raise ValueError("For BUY: SL < entry")
        if self.direction is Direction.SHORT and self.stop_loss <= self.entry_price:
            raise ValueError("For SELL: SL > entry")

    @property
    def order_type(self) -> str:
        return self.direction.order_type

"""Broker instrument metadata."""

from decimal import Decimal
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SymbolInfo:
    """Instrument properties needed for stops and sizing."""
    symbol: str
    point: Decimal
    tick_value: Decimal
    volume_max: Decimal
    volume_min: Decimal = Decimal("0.01")
    volume_step: Decimal = Decimal("0.01")
    bid: Optional[Decimal] = None
    ask: Optional[Decimal] = None
    digits: int = 5

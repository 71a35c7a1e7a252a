"""
Interfaces of the external collaborators the strategy core calls.

Concrete implementations live in ``infra/`` (MT5, CSV replay) and
``core/execution`` (dry-run executor); tests use in-memory fakes.
"""

from decimal import Decimal
from typing import Protocol

from .models.ohlcv import OHLCV
from .models.symbol import SymbolInfo
from .models.decision import TradeIntent


class MarketData(Protocol):
    """Historical bars and instrument metadata."""

    def get_bars(self, symbol: str, timeframe: str, count: int) -> OHLCV:
        """Up to ``count`` most recent bars, oldest-first."""
        ...

    def get_symbol_info(self, symbol: str) -> SymbolInfo:
        ...


class Indicators(Protocol):
    """EMA/RSI/ATR on closing prices of a symbol/timeframe."""

    def ema(self, symbol: str, timeframe: str, period: int) -> Decimal:
        ...

    def rsi(self, symbol: str, timeframe: str, period: int) -> Decimal:
        ...

    def atr(self, symbol: str, timeframe: str, period: int) -> Decimal:
        ...


class Account(Protocol):

    def get_equity(self) -> float:
        ...


class OrderExecutor(Protocol):

    def open_position(self, intent: TradeIntent):
        """Submit ``intent``; returns an ExecutionResult."""
        ...

"""Per-cycle memoization of market data reads."""

from typing import Dict, Set, Tuple

from ..interfaces import MarketData
from ..models.ohlcv import OHLCV
from ..models.symbol import SymbolInfo


class CycleCachedMarketData:
    """
    Wraps a MarketData source so repeated reads inside one decision cycle
    return the same data. ``clear()`` must be called when a cycle starts.
    """

    def __init__(self, source: MarketData):
        self.source = source
        self._bars: Dict[Tuple[str, str], OHLCV] = {}
        self._exhausted: Set[Tuple[str, str]] = set()
        self._symbols: Dict[str, SymbolInfo] = {}

    def clear(self) -> None:
        self._bars.clear()
        self._exhausted.clear()
        self._symbols.clear()

    def get_bars(self, symbol: str, timeframe: str, count: int) -> OHLCV:
        key = (symbol, timeframe)
        cached = self._bars.get(key)
        if cached is not None and (len(cached) >= count or key in self._exhausted):
            return cached.tail(count)
        window = self.source.get_bars(symbol, timeframe, count)
        if len(window) < count:
            # Source has no more history; longer requests cannot do better
            self._exhausted.add(key)
        if cached is None or len(window) >= len(cached):
            self._bars[key] = window
        return window.tail(count)

    def get_symbol_info(self, symbol: str) -> SymbolInfo:
        if symbol not in self._symbols:
            self._symbols[symbol] = self.source.get_symbol_info(symbol)
        return self._symbols[symbol]

"""
CSV replay data source.

Serves bar windows from per-symbol/timeframe CSV files so the strategy can
run offline. A replay clock hides bars that have not closed by ``now`` so a loop
can step through history as if bars were arriving live.
"""

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pandas as pd

from core.errors import ExternalServiceError
from core.models.ohlcv import Bar, OHLCV
from core.models.symbol import SymbolInfo
from core.utils.numeric import D

logger = logging.getLogger(__name__)

TIME_CANDIDATES = ["timestamp_utc", "timestamp", "datetime", "utc", "date", "time"]

TIMEFRAME_MINUTES = {
    "M1": 1,
    "M5": 5,
    "M15": 15,
    "M30": 30,
    "H1": 60,
    "H4": 240,
    "D1": 1440,
}

DEFAULT_SYMBOL_META = {
    "point": "0.00001",
    "tick_value": "1.0",
    "volume_min": "0.01",
    "volume_max": "100.0",
    "volume_step": "0.01",
    "digits": 5,
}


def timeframe_duration(timeframe: str) -> timedelta:
    """Length of one bar of ``timeframe``."""
    if timeframe not in TIMEFRAME_MINUTES:
        raise ValueError(f"Unsupported timeframe: {timeframe}")
    return timedelta(minutes=TIMEFRAME_MINUTES[timeframe])


def load_ohlcv_frame(csv_path: str) -> pd.DataFrame:
    """
    Read a bar CSV into a frame with columns timestamp/open/high/low/close/volume.

    Column names are matched case-insensitively; timestamps are parsed as UTC
    and rows sorted and de-duplicated by time.
    """
    df = pd.read_csv(csv_path)
    df.columns = [c.strip().lower() for c in df.columns]

    time_col = next((c for c in TIME_CANDIDATES if c in df.columns), None)
    if time_col is None:
        raise ValueError(f"No timestamp column found in {csv_path}")

    def pick(*names):
        for n in names:
            if n in df.columns:
                return n
        return None

    columns = {
        "open": pick("open", "bidopen", "askopen"),
        "high": pick("high", "bidhigh", "askhigh"),
        "low": pick("low", "bidlow", "asklow"),
        "close": pick("close", "bidclose", "askclose"),
    }
    if any(c is None for c in columns.values()):
        raise ValueError(f"Could not find open/high/low/close columns in {csv_path}")
    vol_col = pick("volume", "vol", "tickvol", "tick_volume")

    out = pd.DataFrame({
        "timestamp": pd.to_datetime(df[time_col], errors="coerce", utc=True),
        **{name: pd.to_numeric(df[col], errors="coerce") for name, col in columns.items()},
        "volume": pd.to_numeric(df[vol_col], errors="coerce").fillna(0) if vol_col else 0,
    })
    out = out.dropna(subset=["timestamp", "open", "high", "low", "close"])
    out = out.sort_values("timestamp").drop_duplicates(subset="timestamp", keep="last")
    return out.reset_index(drop=True)


class CsvMarketData:
    """
    MarketData implementation backed by ``{directory}/{SYMBOL}_{TF}.csv``.

    Args:
        directory: Folder holding the CSV files
        symbol_meta: Per-symbol instrument settings (point, tick_value, ...)
    """

    def __init__(self, directory: str, symbol_meta: Dict[str, Dict] = None):
        self.directory = directory
        self.symbol_meta = symbol_meta or {}
        self.now: Optional[datetime] = None
        self._frames: Dict[Tuple[str, str], pd.DataFrame] = {}

    def _path(self, symbol: str, timeframe: str) -> str:
        return os.path.join(self.directory, f"{symbol}_{timeframe}.csv")

    def _frame(self, symbol: str, timeframe: str) -> pd.DataFrame:
        key = (symbol, timeframe)
        if key not in self._frames:
            path = self._path(symbol, timeframe)
            if not os.path.exists(path):
                raise ExternalServiceError(f"CSV file not found: {path}")
            try:
                self._frames[key] = load_ohlcv_frame(path)
            except (ValueError, pd.errors.ParserError) as e:
                raise ExternalServiceError(f"CSV load error for {path}: {e}") from e
            logger.info("csv_data_loaded", extra={
                "symbol": symbol,
                "timeframe": timeframe,
                "bars": len(self._frames[key]),
                "path": path,
            })
        return self._frames[key]

    def advance_to(self, now: datetime) -> None:
        """Move the replay clock; bars that have not closed by ``now`` are hidden."""
        self.now = now if now.tzinfo else now.replace(tzinfo=timezone.utc)

    def replay_times(self, symbol: str, timeframe: str) -> List[datetime]:
        """Bar close times of a series, oldest-first, for driving a replay."""
        length = timeframe_duration(timeframe)
        return [ts.to_pydatetime() + length for ts in self._frame(symbol, timeframe)["timestamp"]]

    def get_bars(self, symbol: str, timeframe: str, count: int) -> OHLCV:
        """
        Most recent ``count`` closed bars, oldest-first.

        A CSV row holds a bar's final values, so a bar still forming at the
        replay clock is left out rather than served with its future close.
        """
        df = self._frame(symbol, timeframe)
        if self.now is not None:
            cutoff = pd.Timestamp(self.now) - timeframe_duration(timeframe)
            df = df[df["timestamp"] <= cutoff]
        df = df.tail(count)

        bars = tuple(
            Bar(
                open=D(float(row.open)),
                high=D(float(row.high)),
                low=D(float(row.low)),
                close=D(float(row.close)),
                volume=D(float(row.volume)),
                timestamp=row.timestamp.to_pydatetime(),
            )
            for row in df.itertuples(index=False)
        )
        return OHLCV(symbol=symbol, bars=bars, timeframe=timeframe)

    def get_symbol_info(self, symbol: str) -> SymbolInfo:
        meta = dict(DEFAULT_SYMBOL_META)
        meta.update(self.symbol_meta.get(symbol, {}))
        return SymbolInfo(
            symbol=symbol,
            point=D(str(meta["point"])),
            tick_value=D(str(meta["tick_value"])),
            volume_max=D(str(meta["volume_max"])),
            volume_min=D(str(meta["volume_min"])),
            volume_step=D(str(meta["volume_step"])),
            digits=int(meta["digits"]),
        )

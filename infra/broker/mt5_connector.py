"""
MT5 Connector: broker terminal integration

Handles MT5 login, OHLC data fetch, symbol metadata, account equity and
UTC conversion. Implements the MarketData and Account interfaces.
"""

import logging
from typing import Dict, Optional
from datetime import datetime, timezone

from core.errors import ExternalServiceError
from core.models.ohlcv import Bar, OHLCV
from core.models.symbol import SymbolInfo
from core.utils.numeric import D

logger = logging.getLogger(__name__)

TIMEFRAMES = ("M1", "M5", "M15", "M30", "H1", "H4", "D1")


class MT5Connector:
    """
    MT5 broker connection handler.

    Responsibilities:
    - Login to MT5 terminal
    - Fetch OHLCV windows
    - Symbol metadata (point, tick value, volume limits, quotes)
    - Account equity
    """

    def __init__(self, config: Dict, mt5=None):
        """
        Initialize MT5 connector.

        Args:
            config: MT5 connection config
                {
                  "server": "ICMarkets-Demo",
                  "account": 12345,
                  "password": "***",
                  "timeout_seconds": 30
                }
            mt5: Already-imported MetaTrader5 module (imported on login otherwise)
        """
        self.config = config or {}
        self.server = self.config.get("server", "")
        self.account = int(self.config.get("account", 0) or 0)
        self.password = self.config.get("password", "")
        self.timeout = int(self.config.get("timeout_seconds", 30))

        self.mt5 = mt5
        self.connected = mt5 is not None

    def login(self) -> bool:
        """
        Initialize the terminal and log in when credentials are configured.

        Returns:
            True if the terminal is ready
        """
        try:
            if self.mt5 is None:
                import MetaTrader5 as mt5
                self.mt5 = mt5
            mt5 = self.mt5

            if not mt5.initialize(timeout=self.timeout * 1000):
                logger.error("mt5_init_failed", extra={"error": mt5.last_error()})
                return False

            if self.account and not mt5.login(self.account, password=self.password, server=self.server):
                logger.error("mt5_login_failed", extra={
                    "account": self.account,
                    "server": self.server,
                    "error": mt5.last_error()
                })
                return False

            self.connected = True
            logger.info("mt5_login_successful", extra={"server": self.server, "account": self.account})
            return True

        except ImportError:
            logger.error("MetaTrader5 module not installed")
            return False

    def _require(self):
        if not self.connected or self.mt5 is None:
            raise ExternalServiceError("MT5 not connected")
        return self.mt5

    def _timeframe(self, timeframe: str):
        if timeframe not in TIMEFRAMES:
            raise ValueError(f"Unsupported timeframe: {timeframe}")
        return getattr(self.mt5, f"TIMEFRAME_{timeframe}")

    def get_bars(self, symbol: str, timeframe: str, count: int) -> OHLCV:
        """
        Most recent ``count`` bars, oldest-first, including the bar in progress.

        Raises:
            ExternalServiceError: If MT5 is unreachable or returns no data
        """
        mt5 = self._require()
        rates = mt5.copy_rates_from_pos(symbol, self._timeframe(timeframe), 0, count)
        if rates is None:
            raise ExternalServiceError(f"copy_rates_from_pos failed for {symbol} {timeframe}: {mt5.last_error()}")

        bars = []
        for rate in rates:
            bars.append(Bar(
                open=D(float(rate["open"])),
                high=D(float(rate["high"])),
                low=D(float(rate["low"])),
                close=D(float(rate["close"])),
                volume=D(int(rate["tick_volume"])),
                timestamp=self._convert_to_utc(datetime.fromtimestamp(int(rate["time"]), tz=timezone.utc)),
            ))
        return OHLCV(symbol=symbol, bars=tuple(bars), timeframe=timeframe)

    def _convert_to_utc(self, broker_time: datetime) -> datetime:
        """
        Convert broker time to UTC.

        MT5 reports bar times as seconds since epoch in server time; they are
        kept as-is and tagged UTC so bar ordering and day boundaries follow
        the server clock.
        """
        if broker_time.tzinfo is None:
            return broker_time.replace(tzinfo=timezone.utc)
        return broker_time.astimezone(timezone.utc)

    def get_symbol_info(self, symbol: str) -> SymbolInfo:
        """
        Raises:
            ExternalServiceError: If the symbol is unknown to the terminal
        """
        mt5 = self._require()
        info = mt5.symbol_info(symbol)
        if info is None:
            raise ExternalServiceError(f"symbol_info unavailable for {symbol}: {mt5.last_error()}")

        return SymbolInfo(
            symbol=info.name,
            point=D(float(info.point)),
            tick_value=D(float(info.trade_tick_value)),
            volume_max=D(float(info.volume_max)),
            volume_min=D(float(info.volume_min)),
            volume_step=D(float(info.volume_step)),
            bid=D(float(info.bid)),
            ask=D(float(info.ask)),
            digits=int(info.digits),
        )

    def get_equity(self) -> float:
        mt5 = self._require()
        account = mt5.account_info()
        if account is None:
            raise ExternalServiceError(f"account_info unavailable: {mt5.last_error()}")
        return float(account.equity)

    def logout(self) -> bool:
        """
        Shut down the terminal connection.

        Returns:
            True if a connection was closed
        """
        if not self.connected or not self.mt5:
            return False

        self.mt5.shutdown()
        self.connected = False
        logger.info("mt5_logout_successful")
        return True

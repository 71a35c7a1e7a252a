"""
Trade Log - append-only CSV record of executed trades.

One line per accepted trade:
    timestamp, symbol, BUY|SELL, BullishOB|BearishOB, lot, stop loss, equity
"""

import csv
import logging
import os
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from ..models.decision import TradeIntent

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y.%m.%d %H:%M"


def format_trade_row(intent: TradeIntent, equity=None, timestamp: datetime = None) -> List[str]:
    """Fields of one log line, formatted to the log's fixed precision."""
    ts = timestamp or intent.timestamp
    equity_value = intent.equity if equity is None else equity
    return [
        ts.strftime(TIMESTAMP_FORMAT),
        intent.symbol,
        intent.order_type,
        intent.order_block.label,
        f"{Decimal(str(intent.lot_size)):.2f}",
        f"{Decimal(str(intent.stop_loss)):.5f}",
        f"{Decimal(str(equity_value)):.2f}",
    ]


class TradeLog:
    """
    Appends executed trades to a CSV file.
    
    The file is never truncated while running. It is kept at shutdown
    unless ``delete_on_shutdown`` is set.
    
    Usage:
        log = TradeLog("logs/SmartOB_Trades.csv")
        log.record(intent)
        ...
        log.close()
    """
    
    def __init__(self, path: str, enabled: bool = True, delete_on_shutdown: bool = False):
        self.path = path
        self.enabled = enabled
        self.delete_on_shutdown = delete_on_shutdown
        self.records_written = 0
        
        if self.enabled:
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
            logger.info("trade_log_initialized", extra={
                "path": self.path,
                "delete_on_shutdown": self.delete_on_shutdown,
            })
    
    def record(self, intent: TradeIntent, equity=None, timestamp: datetime = None) -> Optional[List[str]]:
        """Append one line for ``intent``; returns the written fields."""
        if not self.enabled:
            return None
        
        row = format_trade_row(intent, equity=equity, timestamp=timestamp)
        with open(self.path, "a", encoding="utf-8", newline="") as f:
            csv.writer(f, lineterminator="\n").writerow(row)
        self.records_written += 1
        
        logger.info("trade_logged", extra={"path": self.path, "row": row})
        return row
    
    def read_rows(self) -> List[List[str]]:
        """All rows currently in the log file."""
        if not os.path.exists(self.path):
            return []
        with open(self.path, "r", encoding="utf-8", newline="") as f:
            return [row for row in csv.reader(f) if row]
    
    def close(self) -> None:
        """Shutdown hook; deletes the file only when configured to."""
        if self.enabled and self.delete_on_shutdown and os.path.exists(self.path):
            os.remove(self.path)
            logger.warning("trade_log_deleted", extra={"path": self.path, "records": self.records_written})

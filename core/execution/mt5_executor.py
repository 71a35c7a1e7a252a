"""
MT5 executor for dry-run and live trading.
"""

import logging
from datetime import datetime, timezone
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List

from ..models.decision import Direction, TradeIntent

logger = logging.getLogger(__name__)


class ExecutionMode(Enum):
    """Execution modes."""
    DRY_RUN = "dry-run"
    LIVE = "live"


@dataclass
class ExecutionResult:
    """Result of order execution."""
    success: bool
    order_id: Optional[int] = None
    error_message: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MT5Executor:
    """
    Opens positions for TradeIntents.
    
    In DRY_RUN mode payloads are recorded in ``dry_run_orders`` and accepted.
    In LIVE mode a market deal is sent through the MetaTrader5 terminal.
    """
    
    def __init__(self, mode: ExecutionMode = ExecutionMode.DRY_RUN, config: Dict[str, Any] = None, mt5=None):
        self.mode = mode
        self.config = config or {}
        self.enabled = self.config.get('enabled', True)
        self.deviation_points = int(self.config.get('deviation_points', 20))
        self.dry_run_orders: List[Dict[str, Any]] = []
        self.mt5 = mt5
        logger.info(f"MT5Executor initialized in {mode.value} mode")
    
    def open_position(self, intent: TradeIntent) -> ExecutionResult:
        """
        Execute an order (dry-run or live).
        
        Args:
            intent: Sized trade to open
        
        Returns:
            ExecutionResult with success status
        """
        if not self.enabled:
            return ExecutionResult(success=False, error_message="Executor disabled")
        
        error = self._validate_order(intent)
        if error:
            logger.warning("order_validation_failed", extra={"error": error, "symbol": intent.symbol})
            return ExecutionResult(success=False, error_message=error)
        
        payload = {
            "symbol": intent.symbol,
            "type": intent.order_type,
            "volume": float(intent.lot_size),
            "entry": float(intent.entry_price),
            "sl": float(intent.stop_loss),
            "tp": 0.0,
            "comment": intent.comment,
            "magic": intent.magic,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
        
        if self.mode == ExecutionMode.DRY_RUN:
            self.dry_run_orders.append(payload)
            logger.info("order_validation_passed", extra={"symbol": intent.symbol, "type": intent.order_type})
            return ExecutionResult(success=True, payload=payload, order_id=len(self.dry_run_orders))
        
        return self._send_live(intent, payload)
    
    def _send_live(self, intent: TradeIntent, payload: Dict[str, Any]) -> ExecutionResult:
        mt5 = self.mt5
        if mt5 is None:
            return ExecutionResult(success=False, payload=payload, error_message="MT5 not connected")
        
        request = {
            "action": mt5.TRADE_ACTION_DEAL,
            "symbol": intent.symbol,
            "volume": float(intent.lot_size),
            "type": mt5.ORDER_TYPE_BUY if intent.direction is Direction.LONG else mt5.ORDER_TYPE_SELL,
            "price": float(intent.entry_price),
            "sl": float(intent.stop_loss),
            "deviation": self.deviation_points,
            "magic": intent.magic,
            "comment": intent.comment,
            "type_time": mt5.ORDER_TIME_GTC,
            "type_filling": mt5.ORDER_FILLING_IOC,
        }
        try:
            result = mt5.order_send(request)
        except Exception as e:
            logger.exception("order_send_error", extra={"symbol": intent.symbol, "error": str(e)})
            return ExecutionResult(success=False, payload=payload, error_message=str(e))
        
        if result is None:
            return ExecutionResult(success=False, payload=payload, error_message=f"order_send returned None: {mt5.last_error()}")
        if result.retcode != mt5.TRADE_RETCODE_DONE:
            return ExecutionResult(
                success=False,
                payload=payload,
                error_message=f"retcode={result.retcode} comment={getattr(result, 'comment', '')}",
            )
        logger.info("order_sent", extra={"symbol": intent.symbol, "type": intent.order_type, "order": result.order})
        return ExecutionResult(success=True, payload=payload, order_id=result.order)
    
    def _validate_order(self, intent: TradeIntent) -> Optional[str]:
        """Validate order parameters."""
        if intent.lot_size <= 0:
            return "Volume must be positive"
        
        if intent.entry_price <= 0 or intent.stop_loss <= 0:
            return "Prices must be positive"
        
        if intent.direction is Direction.LONG and intent.stop_loss >= intent.entry_price:
            return f"For BUY: SL ({intent.stop_loss}) must be < entry ({intent.entry_price})"
        if intent.direction is Direction.SHORT and intent.stop_loss <= intent.entry_price:
            return f"For SELL: SL ({intent.stop_loss}) must be > entry ({intent.entry_price})"
        
        return None
    
    def get_dry_run_stats(self) -> Dict[str, Any]:
        """Get dry-run statistics."""
        return {
            "total_orders": len(self.dry_run_orders),
            "mode": self.mode.value,
        }
    
    def log_dry_run_summary(self) -> None:
        """Log dry-run summary."""
        stats = self.get_dry_run_stats()
        logger.info("dry_run_summary", extra=stats)


class StaticAccount:
    """Account with a fixed equity, used for dry runs."""

    def __init__(self, equity: float = 10000.0):
        self.equity = float(equity)

    def get_equity(self) -> float:
        return self.equity

"""Strategy orchestration: one decision cycle per new entry-timeframe bar."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from ..errors import ExternalServiceError, OrderRejectedError, StrategyError
from ..execution.risk_sizer import lot_size, risk_profile
from ..indicators.base import BarIndicators
from ..interfaces import Account, Indicators, MarketData, OrderExecutor
from ..models.config import StrategyConfig
from ..models.decision import Direction, OrderBlockSignal, TradeIntent, TrendBias
from ..models.symbol import SymbolInfo
from ..structure.order_block import OrderBlockDetector
from ..utils.numeric import D
from .cycle_cache import CycleCachedMarketData
from .entry_filter import EntryFilter
from .session_manager import SessionManager
from .trade_journal import TradeLog
from .trend_evaluator import TrendEvaluator

logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    SUBMITTING = "submitting"


class StrategyOrchestrator:
    """Main strategy orchestrator."""

    def __init__(
        self,
        config: StrategyConfig,
        market_data: MarketData,
        account: Account,
        executor: OrderExecutor,
        indicators: Indicators = None,
        trade_log: TradeLog = None,
        session: SessionManager = None,
    ):
        self.config = config
        self.market_data = CycleCachedMarketData(market_data)
        self.account = account
        self.executor = executor
        self.indicators = indicators or BarIndicators(self.market_data)
        self.trade_log = trade_log or TradeLog(config.trade_log_path, delete_on_shutdown=config.delete_on_shutdown)
        self.session = session or SessionManager(config.cooldown_seconds, config.max_trades_per_day)

        self.ob_detector = OrderBlockDetector({
            'volume_multiplier': config.ob_volume_multiplier,
            'fib_level_percent': config.fib_level_1,
            'secondary_fib_level_percent': config.fib_level_2,
        })
        self.trend = TrendEvaluator(self.indicators, config.ema_fast, config.ema_slow)
        self.entry_filter = EntryFilter(config, self.market_data, self.indicators)

        self.state = OrchestratorState.IDLE

        # Counters / accumulators
        self.cycles_run = 0
        self.symbols_skipped = 0
        self.orders_rejected = 0
        self.intents: List[TradeIntent] = []

    @property
    def primary_symbol(self) -> str:
        return self.config.symbols[0]

    def on_timer(self, now: datetime = None) -> bool:
        """Periodic timer hook; resets the daily counter on a new day."""
        return self.session.on_timer(now or datetime.now(timezone.utc))

    def on_tick(self, now: datetime = None) -> List[TradeIntent]:
        """
        Run a decision cycle if a new entry bar arrived and trading is allowed.

        Returns:
            TradeIntents accepted by the executor during this cycle
        """
        now = now or datetime.now(timezone.utc)
        self.market_data.clear()
        self.session.on_timer(now)

        if not self._new_bar():
            return []

        if not self.session.cooldown_elapsed(now):
            logger.debug("cooldown_active", extra={
                "remaining_seconds": self.session.cooldown_remaining(now).total_seconds(),
            })
            return []

        if self.session.daily_cap_reached():
            logger.info("daily_cap_reached", extra={
                "trades_today": self.session.trades_today,
                "max_trades_per_day": self.config.max_trades_per_day,
            })
            return []

        try:
            equity = D(self.account.get_equity())
        except StrategyError as e:
            logger.warning("equity_unavailable", extra={"error": str(e)})
            return []

        self.cycles_run += 1
        accepted: List[TradeIntent] = []
        for symbol in self.config.symbols:
            try:
                intent = self._evaluate_symbol(symbol, equity, now)
                if intent is not None:
                    accepted.append(intent)
            except OrderRejectedError as e:
                self.orders_rejected += 1
                logger.warning("order_rejected", extra={"symbol": symbol, "error": str(e)})
            except StrategyError as e:
                self.symbols_skipped += 1
                logger.warning("symbol_skipped", extra={
                    "symbol": symbol,
                    "reason": type(e).__name__,
                    "error": str(e),
                })
            except Exception as e:
                self.symbols_skipped += 1
                logger.exception("symbol_evaluation_error", extra={"symbol": symbol, "error": str(e)})
            finally:
                self.state = OrchestratorState.IDLE

        logger.info("cycle_complete", extra={
            "timestamp": now.isoformat(),
            "equity": float(equity),
            "accepted": len(accepted),
            "trades_today": self.session.trades_today,
        })
        return accepted

    def _new_bar(self) -> bool:
        symbol = self.primary_symbol
        try:
            window = self.market_data.get_bars(symbol, self.config.entry_timeframe, 1)
        except StrategyError as e:
            logger.warning("new_bar_check_failed", extra={"symbol": symbol, "error": str(e)})
            return False
        if not window.bars:
            return False
        return self.session.is_new_bar(symbol, window.latest_bar.timestamp)

    def _evaluate_symbol(self, symbol: str, equity: Decimal, now: datetime) -> Optional[TradeIntent]:
        cfg = self.config
        self.state = OrchestratorState.EVALUATING

        info = self.market_data.get_symbol_info(symbol)
        window = self.market_data.get_bars(symbol, cfg.trend_timeframe_1, cfg.ob_lookback)
        ob = self.ob_detector.detect(window, proximity_points=D(info.point) * cfg.proximity_scale)
        if ob is OrderBlockSignal.NONE:
            return None

        bias = self.trend.bias(symbol, cfg.trend_timeframes)
        if bias is TrendBias.UP and ob is OrderBlockSignal.BULLISH:
            direction = Direction.LONG
        elif bias is TrendBias.DOWN and ob is OrderBlockSignal.BEARISH:
            direction = Direction.SHORT
        else:
            logger.debug("trend_mismatch", extra={"symbol": symbol, "bias": bias.value, "ob": ob.label})
            return None

        if not self.entry_filter.check_entry(symbol, direction.is_long):
            return None

        if self.session.daily_cap_reached():
            logger.info("daily_cap_reached", extra={"symbol": symbol, "trades_today": self.session.trades_today})
            return None

        self.state = OrchestratorState.SUBMITTING
        intent = self._build_intent(symbol, info, direction, ob, equity, now)
        return self._submit(intent, now)

    def _build_intent(self, symbol: str, info: SymbolInfo, direction: Direction,
                      ob: OrderBlockSignal, equity: Decimal, now: datetime) -> TradeIntent:
        cfg = self.config
        entry_price = self._entry_price(symbol, info, direction)
        atr = self.indicators.atr(symbol, cfg.entry_timeframe, cfg.atr_period)
        offset = atr * D(cfg.atr_multiplier)
        stop_loss = entry_price - offset if direction is Direction.LONG else entry_price + offset

        profile = risk_profile(float(equity), cfg.use_dynamic_risk)
        lots = lot_size(info, profile.risk_percent, entry_price, stop_loss, equity)

        return TradeIntent(
            symbol=symbol,
            direction=direction,
            order_block=ob,
            entry_price=entry_price,
            stop_loss=stop_loss,
            lot_size=lots,
            equity=equity,
            timestamp=now,
            comment=cfg.order_comment,
            magic=cfg.magic_number,
            risk_percent=profile.risk_percent,
        )

    def _entry_price(self, symbol: str, info: SymbolInfo, direction: Direction) -> Decimal:
        quote = info.ask if direction is Direction.LONG else info.bid
        if quote:
            return D(quote)
        window = self.market_data.get_bars(symbol, self.config.entry_timeframe, 1)
        if not window.bars:
            raise ExternalServiceError(f"No quote or bars for {symbol}")
        return window.latest_bar.close

    def _submit(self, intent: TradeIntent, now: datetime) -> TradeIntent:
        logger.info("execution_sized", extra={
            "symbol": intent.symbol,
            "order_type": intent.order_type,
            "order_block": intent.order_block.label,
            "entry": float(intent.entry_price),
            "sl": float(intent.stop_loss),
            "lot": float(intent.lot_size),
            "risk_percent": intent.risk_percent,
            "equity": float(intent.equity),
        })
        result = self.executor.open_position(intent)
        if not getattr(result, "success", False):
            raise OrderRejectedError(getattr(result, "error_message", None) or "order declined")

        # Order is live at the broker from here on
        trades_today = self.session.record_trade(now)
        self.intents.append(intent)
        try:
            self.trade_log.record(intent, timestamp=now)
        except OSError as e:
            logger.error("trade_log_write_failed", extra={
                "symbol": intent.symbol,
                "path": self.trade_log.path,
                "error": str(e),
            })
        logger.info("trade_submitted", extra={
            "symbol": intent.symbol,
            "order_type": intent.order_type,
            "order_id": getattr(result, "order_id", None),
            "trades_today": trades_today,
        })
        return intent

    def shutdown(self) -> None:
        """Flush summaries and run the trade log's shutdown hook."""
        for detector in (self.ob_detector, self.entry_filter.fvg_detector, self.entry_filter.mss_detector):
            logger.info("detector_summary", extra=detector.summary())
        self.trade_log.close()

    def get_pipeline_stats(self) -> dict:
        return {
            "cycles_run": self.cycles_run,
            "intents": len(self.intents),
            "symbols_skipped": self.symbols_skipped,
            "orders_rejected": self.orders_rejected,
            "trades_today": self.session.trades_today,
        }

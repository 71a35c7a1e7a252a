"""End-to-end StrategyOrchestrator tests on in-memory collaborators."""

import os
from datetime import timedelta
from decimal import Decimal

import pytest

from core.errors import ExternalServiceError
from core.models.config import StrategyConfig
from core.models.decision import Direction, OrderBlockSignal
from core.models.symbol import SymbolInfo
from core.orchestration.pipeline import StrategyOrchestrator
from tests.unit.fakes import (
    T0, FakeAccount, FakeExecutor, FakeIndicators, FakeMarketData, window,
)

M5 = timedelta(minutes=5)
NOW = T0 + timedelta(hours=1)

BULLISH_H1 = [
    (1.0950, 1.1000, 1.0900, 1.0960, 100),
    (1.09382, 1.1000, 1.0930, 1.0990, 200),
]
BEARISH_H1 = [
    (1.0950, 1.1000, 1.0900, 1.0960, 100),
    (1.09382, 1.0945, 1.0910, 1.0920, 200),
]
LONG_M5 = [
    (1.1002, 1.1010, 1.1000, 1.1008),
    (1.1032, 1.1040, 1.1030, 1.1038),
    (1.1018, 1.1020, 1.1012, 1.1015),
]
SHORT_M5 = [
    (1.0850, 1.0860, 1.0840, 1.0845),
    (1.0815, 1.0820, 1.0810, 1.0812),
    (1.0830, 1.0835, 1.0825, 1.0828),
]


def _info(symbol, bid, ask):
    return SymbolInfo(
        symbol=symbol,
        point=Decimal("0.00001"),
        tick_value=Decimal("1"),
        volume_max=Decimal("100"),
        bid=Decimal(bid),
        ask=Decimal(ask),
    )


def _market(symbol="EURUSD", long_=True):
    md = FakeMarketData()
    md.set_window(window(BULLISH_H1 if long_ else BEARISH_H1, symbol=symbol))
    md.set_window(window(LONG_M5 if long_ else SHORT_M5, symbol=symbol, timeframe="M5", step=M5))
    md.infos[symbol] = _info(symbol, "1.1015", "1.1016") if long_ else _info(symbol, "1.0827", "1.0828")
    return md


def _indicators(up=True, rsi=25):
    fast = 1.2 if up else 1.0
    return FakeIndicators(
        ema={("H1", 50): fast, ("H1", 200): 1.1, ("M30", 50): fast, ("M30", 200): 1.1},
        rsi={("M5", 14): rsi},
        atr={("M5", 14): "0.0010"},
    )


@pytest.fixture
def config(tmp_path):
    return StrategyConfig(symbols=("EURUSD",), trade_log_path=str(tmp_path / "trades.csv"))


def _orchestrator(config, md, ind=None, executor=None, equity=10000.0):
    return StrategyOrchestrator(
        config, md, FakeAccount(equity), executor or FakeExecutor(), indicators=ind or _indicators(),
    )


def test_long_intent_sized_and_logged(config):
    orch = _orchestrator(config, _market())
    intents = orch.on_tick(NOW)

    assert len(intents) == 1
    intent = intents[0]
    assert intent.direction is Direction.LONG
    assert intent.order_block is OrderBlockSignal.BULLISH
    assert intent.entry_price == Decimal("1.1016")
    assert intent.stop_loss == Decimal("1.0996")
    assert intent.lot_size == Decimal("0.50")
    assert intent.risk_percent == 1.0
    assert intent.magic == 2023
    assert intent.comment == "AutoTrade"

    assert orch.trade_log.read_rows() == [
        ["2024.03.04 11:00", "EURUSD", "BUY", "BullishOB", "0.50", "1.09960", "10000.00"],
    ]
    assert orch.session.trades_today == 1


def test_short_intent(config):
    orch = _orchestrator(config, _market(long_=False), ind=_indicators(up=False, rsi=75))
    intents = orch.on_tick(NOW)
    assert len(intents) == 1
    assert intents[0].direction is Direction.SHORT
    assert intents[0].order_type == "SELL"
    assert intents[0].entry_price == Decimal("1.0827")
    assert intents[0].stop_loss == Decimal("1.0847")
    assert intents[0].lot_size == Decimal("0.50")


def test_mixed_trend_yields_nothing(config):
    ind = _indicators()
    ind.ema_values[("M30", 50)] = 1.0
    orch = _orchestrator(config, _market(), ind=ind)
    assert orch.on_tick(NOW) == []
    assert orch.cycles_run == 1


def test_trend_against_order_block_yields_nothing(config):
    orch = _orchestrator(config, _market(), ind=_indicators(up=False))
    assert orch.on_tick(NOW) == []


def test_same_bar_runs_once(config):
    md = _market()
    orch = _orchestrator(config, md, ind=_indicators(rsi=50))
    orch.on_tick(NOW)
    orch.on_tick(NOW + timedelta(seconds=30))
    assert orch.cycles_run == 1


def test_cooldown_blocks_then_allows(config):
    md = _market()
    orch = _orchestrator(config, md)
    assert len(orch.on_tick(NOW)) == 1

    md.roll("EURUSD", "M5", timedelta(minutes=10))
    assert orch.on_tick(NOW + timedelta(minutes=10)) == []

    md.roll("EURUSD", "M5", timedelta(minutes=40))
    assert len(orch.on_tick(NOW + timedelta(minutes=48))) == 1
    assert orch.session.trades_today == 2


def test_daily_cap_and_timer_reset(tmp_path):
    config = StrategyConfig(
        symbols=("EURUSD",),
        max_trades_per_day=1,
        cooldown_seconds=0,
        trade_log_path=str(tmp_path / "trades.csv"),
    )
    md = _market()
    orch = _orchestrator(config, md)
    orch.on_timer(NOW)
    assert len(orch.on_tick(NOW)) == 1

    md.roll("EURUSD", "M5", M5)
    assert orch.on_tick(NOW + M5) == []

    assert orch.on_timer(NOW + timedelta(days=1))
    md.roll("EURUSD", "M5", M5)
    assert len(orch.on_tick(NOW + timedelta(days=1))) == 1


def test_rejected_order_not_counted(config):
    orch = _orchestrator(config, _market(), executor=FakeExecutor(accept=False))
    assert orch.on_tick(NOW) == []
    assert orch.orders_rejected == 1
    assert orch.session.trades_today == 0
    assert orch.session.last_trade_time is None
    assert orch.trade_log.read_rows() == []


def test_failing_symbol_does_not_abort_others(tmp_path):
    config = StrategyConfig(symbols=("EURUSD", "GBPUSD"), trade_log_path=str(tmp_path / "trades.csv"))
    md = _market()
    md.failing.add("GBPUSD")
    orch = _orchestrator(config, md)
    intents = orch.on_tick(NOW)
    assert [i.symbol for i in intents] == ["EURUSD"]
    assert orch.symbols_skipped == 1


def test_missing_indicator_history_skips_symbol(config):
    ind = _indicators()
    ind.atr_values.clear()
    orch = _orchestrator(config, _market(), ind=ind)
    assert orch.on_tick(NOW) == []
    assert orch.symbols_skipped == 1


def test_tiny_account_skipped(config):
    orch = _orchestrator(config, _market(), equity=0.5)
    assert orch.on_tick(NOW) == []
    assert orch.symbols_skipped == 1


def test_market_data_read_once_per_cycle(config):
    md = _market()
    orch = _orchestrator(config, md)
    orch.on_tick(NOW)
    h1_reads = [c for c in md.calls if c[1] == "H1"]
    assert len(h1_reads) == 1


def test_shutdown_keeps_log_and_reports_stats(config):
    orch = _orchestrator(config, _market())
    orch.on_tick(NOW)
    orch.shutdown()
    stats = orch.get_pipeline_stats()
    assert stats["intents"] == 1
    assert stats["trades_today"] == 1
    assert len(orch.trade_log.read_rows()) == 1


def test_tick_on_new_day_resets_counter(tmp_path):
    config = StrategyConfig(
        symbols=("EURUSD",),
        max_trades_per_day=1,
        cooldown_seconds=0,
        trade_log_path=str(tmp_path / "trades.csv"),
    )
    md = _market()
    orch = _orchestrator(config, md)
    assert len(orch.on_tick(NOW)) == 1

    md.roll("EURUSD", "M5", timedelta(days=1))
    assert len(orch.on_tick(NOW + timedelta(days=1))) == 1
    assert orch.session.trades_today == 1


def test_accepted_trade_kept_when_log_write_fails(config, caplog):
    orch = _orchestrator(config, _market())
    os.makedirs(config.trade_log_path)

    with caplog.at_level("ERROR", logger="core.orchestration.pipeline"):
        intents = orch.on_tick(NOW)

    assert len(intents) == 1
    assert orch.intents == intents
    assert orch.session.trades_today == 1
    assert orch.symbols_skipped == 0
    assert any(r.getMessage() == "trade_log_write_failed" for r in caplog.records)


class _DownAccount:

    def __init__(self, error):
        self.error = error

    def get_equity(self):
        raise self.error


def test_unreachable_account_skips_cycle(config):
    orch = StrategyOrchestrator(
        config, _market(), _DownAccount(ExternalServiceError("terminal offline")),
        FakeExecutor(), indicators=_indicators(),
    )
    assert orch.on_tick(NOW) == []
    assert orch.cycles_run == 0


def test_account_bug_is_not_swallowed(config):
    orch = StrategyOrchestrator(
        config, _market(), _DownAccount(AttributeError("equity")),
        FakeExecutor(), indicators=_indicators(),
    )
    with pytest.raises(AttributeError):
        orch.on_tick(NOW)


def test_shutdown_logs_detector_summaries(config, caplog):
    orch = _orchestrator(config, _market())
    orch.on_tick(NOW)
    with caplog.at_level("INFO", logger="core.orchestration.pipeline"):
        orch.shutdown()

    summaries = {r.__dict__["class"]: r for r in caplog.records if r.getMessage() == "detector_summary"}
    assert set(summaries) == {"OrderBlockDetector", "FairValueGapDetector", "MarketStructureShiftDetector"}
    assert summaries["OrderBlockDetector"].seen == 1
    assert summaries["OrderBlockDetector"].fired == 1

"""Trade log formatting and file lifecycle tests."""

import os
from datetime import datetime, timezone
from decimal import Decimal

from core.models.decision import Direction, OrderBlockSignal, TradeIntent
from core.orchestration.trade_journal import TradeLog, format_trade_row
from tests.unit.fakes import T0


def _intent(direction=Direction.LONG, **overrides):
    long_ = direction is Direction.LONG
    values = dict(
        symbol="EURUSD",
        direction=direction,
        order_block=OrderBlockSignal.BULLISH if long_ else OrderBlockSignal.BEARISH,
        entry_price=Decimal("1.1016") if long_ else Decimal("1.1015"),
        stop_loss=Decimal("1.0996") if long_ else Decimal("1.1035"),
        lot_size=Decimal("0.5"),
        equity=Decimal("10000"),
        timestamp=T0,
    )
    values.update(overrides)
    return TradeIntent(**values)


def test_row_format():
    row = format_trade_row(_intent())
    assert row == ["2024.03.04 10:00", "EURUSD", "BUY", "BullishOB", "0.50", "1.09960", "10000.00"]


def test_row_for_short_with_explicit_timestamp():
    ts = datetime(2024, 12, 31, 23, 5, tzinfo=timezone.utc)
    row = format_trade_row(_intent(Direction.SHORT), equity=9876.5, timestamp=ts)
    assert row == ["2024.12.31 23:05", "EURUSD", "SELL", "BearishOB", "0.50", "1.10350", "9876.50"]


def test_record_appends_lines(tmp_path):
    path = tmp_path / "logs" / "trades.csv"
    log = TradeLog(str(path))
    assert os.path.isdir(tmp_path / "logs")

    log.record(_intent())
    log.record(_intent(Direction.SHORT))
    rows = log.read_rows()
    assert len(rows) == 2
    assert rows[0][2] == "BUY"
    assert rows[1][2] == "SELL"
    assert log.records_written == 2
    assert path.read_text(encoding="utf-8").count("\n") == 2


def test_existing_file_is_not_truncated(tmp_path):
    path = tmp_path / "trades.csv"
    path.write_text("2024.01.01 00:00,XAUUSD,BUY,BullishOB,0.01,2000.00000,100.00\n", encoding="utf-8")
    log = TradeLog(str(path))
    log.record(_intent())
    assert len(log.read_rows()) == 2


def test_kept_on_close_by_default(tmp_path):
    path = tmp_path / "trades.csv"
    log = TradeLog(str(path))
    log.record(_intent())
    log.close()
    assert path.exists()


def test_deleted_on_close_when_configured(tmp_path):
    path = tmp_path / "trades.csv"
    log = TradeLog(str(path), delete_on_shutdown=True)
    log.record(_intent())
    log.close()
    assert not path.exists()


def test_disabled_log_writes_nothing(tmp_path):
    path = tmp_path / "trades.csv"
    log = TradeLog(str(path), enabled=False)
    assert log.record(_intent()) is None
    assert log.read_rows() == []
    assert not path.exists()

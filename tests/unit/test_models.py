"""
Unit tests for core models.
"""

import unittest
from decimal import Decimal
from datetime import datetime, timezone, timedelta

from core.models.config import StrategyConfig
from core.models.decision import (
    Direction, EntryDecision, OrderBlockSignal, RiskProfile, TradeIntent,
)
from core.models.ohlcv import Bar, OHLCV


class TestBar(unittest.TestCase):
    """Test Bar model."""
    
    def test_bar_creation(self):
        """Test bar creation and validation."""
        timestamp = datetime.now(timezone.utc)
        bar = Bar(
            open=Decimal('1.1000'),
            high=Decimal('1.1010'),
            low=Decimal('1.0990'),
            close=Decimal('1.1005'),
            volume=Decimal('1000000'),
            timestamp=timestamp
        )
        
        self.assertEqual(bar.open, Decimal('1.1000'))
        self.assertTrue(bar.is_bullish)
        self.assertFalse(bar.is_bearish)
    
    def test_bar_validation(self):
        """Test bar validation."""
        timestamp = datetime.now(timezone.utc)
        
        # Invalid high/low relationship
        with self.assertRaises(ValueError):
            Bar(
                open=Decimal('1.1000'),
                high=Decimal('1.0990'),  # High < open
                low=Decimal('1.1010'),   # Low > high
                close=Decimal('1.1005'),
                volume=Decimal('1000000'),
                timestamp=timestamp
            )
        
        with self.assertRaises(ValueError):
            Bar(Decimal('1.1'), Decimal('1.2'), Decimal('1.0'), Decimal('1.1'), Decimal('-1'), timestamp)
    
    def test_doji_is_neither_bullish_nor_bearish(self):
        bar = Bar(Decimal('1.1'), Decimal('1.2'), Decimal('1.0'), Decimal('1.1'), Decimal('5'), datetime.now(timezone.utc))
        self.assertFalse(bar.is_bullish)
        self.assertFalse(bar.is_bearish)


class TestOHLCV(unittest.TestCase):
    """Test OHLCV model."""
    
    def setUp(self):
        """Set up test data."""
        self.bars = []
        timestamp = datetime(2024, 1, 2, tzinfo=timezone.utc)
        
        for i in range(5):
            bar = Bar(
                open=Decimal('1.1000') + Decimal(i) / 10000,
                high=Decimal('1.1010') + Decimal(i) / 10000,
                low=Decimal('1.0990') + Decimal(i) / 10000,
                close=Decimal('1.1005') + Decimal(i) / 10000,
                volume=Decimal('1000000'),
                timestamp=timestamp + timedelta(minutes=15 * i)
            )
            self.bars.append(bar)
    
    def test_ohlcv_creation(self):
        """Test OHLCV creation."""
        ohlcv = OHLCV(
            symbol='EURUSD',
            bars=tuple(self.bars),
            timeframe='M15'
        )
        
        self.assertEqual(ohlcv.symbol, 'EURUSD')
        self.assertEqual(ohlcv.length, 5)
        self.assertEqual(ohlcv.latest_bar, self.bars[-1])
        self.assertEqual(ohlcv.previous_bar, self.bars[-2])
        self.assertEqual(ohlcv.newest(0), self.bars[-1])
        self.assertEqual(ohlcv.newest(2), self.bars[-3])
    
    def test_tail_keeps_newest_bars(self):
        ohlcv = OHLCV('EURUSD', tuple(self.bars), 'M15')
        tail = ohlcv.tail(2)
        self.assertEqual(tail.bars, tuple(self.bars[-2:]))
        self.assertEqual(ohlcv.tail(50).length, 5)
    
    def test_timestamps_must_increase(self):
        with self.assertRaises(ValueError):
            OHLCV('EURUSD', (self.bars[1], self.bars[0]), 'M15')
        with self.assertRaises(ValueError):
            OHLCV('EURUSD', (self.bars[0], self.bars[0]), 'M15')


class TestDecisionModels(unittest.TestCase):
    """Test signal, entry and intent models."""
    
    def _intent(self, direction, entry, stop, lot='0.50'):
        return TradeIntent(
            symbol='EURUSD',
            direction=direction,
            order_block=OrderBlockSignal.BULLISH,
            entry_price=Decimal(entry),
            stop_loss=Decimal(stop),
            lot_size=Decimal(lot),
            equity=Decimal('10000'),
            timestamp=datetime.now(timezone.utc),
        )
    
    def test_order_block_labels(self):
        self.assertEqual(OrderBlockSignal.BULLISH.label, 'BullishOB')
        self.assertEqual(OrderBlockSignal.BEARISH.label, 'BearishOB')
    
    def test_direction_order_type(self):
        self.assertEqual(Direction.LONG.order_type, 'BUY')
        self.assertEqual(Direction.SHORT.order_type, 'SELL')
        with self.assertRaises(ValueError):
            Direction.NONE.order_type
    
    def test_entry_decision_requires_all_checks(self):
        full = EntryDecision(Direction.LONG, Decimal('25'), True, True, True)
        self.assertTrue(full.qualifies)
        self.assertFalse(EntryDecision(Direction.LONG, Decimal('25'), True, False, True).qualifies)
        self.assertFalse(EntryDecision(Direction.NONE, Decimal('25'), True, True, True).qualifies)
    
    def test_risk_profile_bounds(self):
        self.assertEqual(RiskProfile(20.0).risk_percent, 20.0)
        with self.assertRaises(ValueError):
            RiskProfile(0.0)
        with self.assertRaises(ValueError):
            RiskProfile(100.5)
    
    def test_trade_intent_stop_side(self):
        intent = self._intent(Direction.LONG, '1.1016', '1.0996')
        self.assertEqual(intent.order_type, 'BUY')
        with self.assertRaises(ValueError):
            self._intent(Direction.LONG, '1.1016', '1.1020')
        with self.assertRaises(ValueError):
            self._intent(Direction.SHORT, '1.1016', '1.1000')
        with self.assertRaises(ValueError):
            self._intent(Direction.LONG, '1.1016', '1.0996', lot='0')
    
    def test_trade_intent_is_immutable(self):
        intent = self._intent(Direction.SHORT, '1.1000', '1.1020')
        with self.assertRaises(Exception):
            intent.lot_size = Decimal('1')


class TestStrategyConfig(unittest.TestCase):
    
    def test_defaults_match_reference_inputs(self):
        cfg = StrategyConfig()
        self.assertEqual(cfg.max_trades_per_day, 30)
        self.assertEqual(cfg.trend_timeframes, ('H1', 'M30'))
        self.assertEqual(cfg.entry_timeframe, 'M5')
        self.assertEqual(cfg.cooldown_seconds, 2880)
        self.assertEqual(cfg.symbols, ('XAUUSD', 'EURUSD'))
        self.assertFalse(cfg.delete_on_shutdown)
    
    def test_hash_is_deterministic(self):
        a = StrategyConfig.from_dict({'symbols': ['EURUSD'], 'unknown_key': 1})
        b = StrategyConfig.from_dict({'symbols': ('EURUSD',)})
        self.assertEqual(a.config_hash.hash_value, b.config_hash.hash_value)
        c = StrategyConfig.from_dict({'symbols': ['EURUSD'], 'atr_multiplier': 3.0})
        self.assertNotEqual(a.config_hash.hash_value, c.config_hash.hash_value)
    
    def test_invalid_ema_periods_rejected(self):
        with self.assertRaises(ValueError):
            StrategyConfig(ema_fast=200, ema_slow=50)


if __name__ == '__main__':
    unittest.main()

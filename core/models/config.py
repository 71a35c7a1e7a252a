"""
Configuration models.
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Dict, Any, Optional, Tuple
from datetime import datetime, timezone
from hashlib import sha256
import json


@dataclass
class ConfigHash:
    """Configuration hash for reproducibility."""
    hash_value: str
    timestamp: str
    
    @staticmethod
    def compute(config_dict: Dict[str, Any]) -> str:
        """Compute SHA256 hash of config."""
        json_str = json.dumps(config_dict, sort_keys=True, default=str)
        return sha256(json_str.encode()).hexdigest()


@dataclass(frozen=True)
class StrategyConfig:
    """Static strategy configuration, fixed at startup."""
    magic_number: int = 2023
    max_trades_per_day: int = 30
    use_dynamic_risk: bool = True

    # Order block
    ob_lookback: int = 50
    ob_volume_multiplier: float = 1.5
    fib_level_1: float = 61.8
    fib_level_2: float = 50.0
    proximity_scale: int = 50

    # Indicators
    rsi_period: int = 14
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    ema_fast: int = 50
    ema_slow: int = 200
    atr_period: int = 14
    atr_multiplier: float = 2.0

    # Timeframes
    trend_timeframe_1: str = "H1"
    trend_timeframe_2: str = "M30"
    entry_timeframe: str = "M5"

    structure_lookback: int = 50
    cooldown_seconds: int = 2880
    timer_seconds: int = 3600
    symbols: Tuple[str, ...] = ("XAUUSD", "EURUSD")

    # Trade log
    trade_log_path: str = "logs/SmartOB_Trades.csv"
    delete_on_shutdown: bool = False
    order_comment: str = "AutoTrade"

    config_hash: Optional[ConfigHash] = field(default=None, compare=False)
    
    def __post_init__(self):
        if not isinstance(self.symbols, tuple):
            object.__setattr__(self, 'symbols', tuple(self.symbols))
        if not self.symbols:
            raise ValueError("At least one symbol must be tracked")
        if self.ema_fast >= self.ema_slow:
            raise ValueError("ema_fast must be < ema_slow")
        if self.config_hash is None:
            values = {k: v for k, v in asdict(self).items() if k != 'config_hash'}
            object.__setattr__(self, 'config_hash', ConfigHash(
                hash_value=ConfigHash.compute(values),
                timestamp=datetime.now(timezone.utc).isoformat()
            ))

    @property
    def trend_timeframes(self) -> Tuple[str, str]:
        return (self.trend_timeframe_1, self.trend_timeframe_2)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "StrategyConfig":
        """Build from a config dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)} - {'config_hash'}
        return cls(**{k: v for k, v in (values or {}).items() if k in known})

"""
Session state owned by the strategy orchestrator.
"""

from datetime import date, datetime
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class SessionState:
    """Mutable state that survives between decision cycles."""
    last_trade_time: Optional[datetime] = None
    trades_today: int = 0
    trading_day: Optional[date] = None
    last_bar_time: Dict[str, datetime] = field(default_factory=dict)

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..models.session import SessionState

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Owns the orchestrator's cross-cycle state: cool-down clock, daily trade
    counter and per-symbol last-bar watermark. All access goes through one
    lock so a timer thread may call ``on_timer`` concurrently.
    """

    def __init__(self, cooldown_seconds: int = 2880, max_trades_per_day: int = 30,
                 state: Optional[SessionState] = None):
        self.cooldown = timedelta(seconds=cooldown_seconds)
        self.max_trades_per_day = max_trades_per_day
        self.state = state or SessionState()
        self._lock = threading.Lock()

    def is_new_bar(self, symbol: str, bar_time: datetime) -> bool:
        """True once per distinct bar timestamp for ``symbol``."""
        with self._lock:
            last = self.state.last_bar_time.get(symbol)
            if last == bar_time:
                return False
            self.state.last_bar_time[symbol] = bar_time
            return True

    def cooldown_elapsed(self, now: datetime) -> bool:
        with self._lock:
            last = self.state.last_trade_time
            return last is None or now - last >= self.cooldown

    def cooldown_remaining(self, now: datetime) -> timedelta:
        with self._lock:
            last = self.state.last_trade_time
            if last is None:
                return timedelta(0)
            return max(self.cooldown - (now - last), timedelta(0))

    def daily_cap_reached(self) -> bool:
        with self._lock:
            return self.state.trades_today >= self.max_trades_per_day

    def on_timer(self, now: datetime) -> bool:
        """Zero the daily counter when the calendar day changes; True if reset."""
        day = _to_utc(now).date()
        with self._lock:
            if self.state.trading_day == day:
                return False
            previous = self.state.trades_today
            self.state.trading_day = day
            self.state.trades_today = 0
        logger.info("daily_counter_reset", extra={"day": day.isoformat(), "previous_count": previous})
        return True

    def record_trade(self, now: datetime) -> int:
        with self._lock:
            self.state.trades_today += 1
            self.state.last_trade_time = now
            return self.state.trades_today

    @property
    def trades_today(self) -> int:
        with self._lock:
            return self.state.trades_today

    @property
    def last_trade_time(self) -> Optional[datetime]:
        with self._lock:
            return self.state.last_trade_time


def _to_utc(ts: datetime) -> datetime:
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)

"""
Risk sizing: equity-dependent risk percentage and stop-based lot size.
"""

import logging
from decimal import Decimal

from ..errors import DivisionByZeroError, RiskTooSmallError
from ..models.decision import RiskProfile
from ..models.symbol import SymbolInfo
from ..utils.numeric import D, floor_to_step

logger = logging.getLogger(__name__)

FIXED_RISK_PERCENT = 2.0

# (equity ceiling, risk percent), checked in order
DYNAMIC_RISK_STEPS = (
    (10.0, 20.0),
    (200.0, 2.0),
)
DYNAMIC_RISK_FLOOR = 1.0

LOT_PRECISION = Decimal("0.01")


def risk_percent(equity: float, dynamic_enabled: bool = True) -> float:
    """
    Percent of equity to risk on the next trade.
    
    The dynamic schedule risks heavily on tiny accounts so they can
    recover, then steps down as equity grows.
    """
    if not dynamic_enabled:
        return FIXED_RISK_PERCENT
    for ceiling, percent in DYNAMIC_RISK_STEPS:
        if equity <= ceiling:
            return percent
    return DYNAMIC_RISK_FLOOR


def risk_profile(equity: float, dynamic_enabled: bool = True) -> RiskProfile:
    return RiskProfile(risk_percent=risk_percent(equity, dynamic_enabled))


def lot_size(symbol_info: SymbolInfo, risk_pct, entry_price, stop_price, equity) -> Decimal:
    """
    Position size that loses ``risk_pct`` of ``equity`` if the stop is hit.
    
    Args:
        symbol_info: Instrument point, tick value and volume limits
        risk_pct: Percent of equity at risk
        entry_price: Planned entry price
        stop_price: Stop-loss price
        equity: Account equity
    
    Returns:
        Lot size rounded down to the instrument's volume step and clamped
        to its maximum volume
    
    Raises:
        DivisionByZeroError: If the point, stop distance or tick value is zero
        RiskTooSmallError: If the rounded size is not positive
    """
    point = D(symbol_info.point)
    tick_value = D(symbol_info.tick_value)
    if point == 0:
        raise DivisionByZeroError(f"{symbol_info.symbol}: point is zero")
    
    risk_amount = D(equity) * D(risk_pct) / Decimal(100)
    price_distance = abs(D(entry_price) - D(stop_price)) / point
    if price_distance == 0 or tick_value == 0:
        raise DivisionByZeroError(
            f"{symbol_info.symbol}: price_distance={price_distance} tick_value={tick_value}"
        )
    
    raw_lot = risk_amount / (price_distance * tick_value)
    step = D(symbol_info.volume_step) if symbol_info.volume_step else LOT_PRECISION
    lot = min(floor_to_step(raw_lot, step), D(symbol_info.volume_max))
    
    if lot <= 0:
        raise RiskTooSmallError(
            f"{symbol_info.symbol}: computed lot {raw_lot} rounds to {lot}"
        )
    
    logger.debug("lot_sized", extra={
        "symbol": symbol_info.symbol,
        "risk_percent": float(D(risk_pct)),
        "risk_amount": float(risk_amount),
        "price_distance_points": float(price_distance),
        "raw_lot": float(raw_lot),
        "lot": float(lot),
    })
    return lot

"""Decimal helpers for prices, volumes and money."""

from decimal import Decimal, ROUND_DOWN, getcontext

getcontext().prec = 28


def D(x) -> Decimal:
    """
    Convert a price, volume or amount to Decimal.
    
    Floats go through ``str`` so ``D(1.1)`` is ``Decimal('1.1')`` rather
    than its binary expansion.
    
    Raises:
        TypeError: For booleans and non-numeric types
    """
    if isinstance(x, Decimal):
        return x
    if isinstance(x, bool):
        raise TypeError("Booleans are not numeric values")
    if isinstance(x, (int, str)):
        return Decimal(x)
    if isinstance(x, float):
        return Decimal(str(x))
    raise TypeError(f"Unsupported numeric type: {type(x)}")


def floor_to_step(value: Decimal, step: Decimal) -> Decimal:
    """Round value down to a whole multiple of step (step must be > 0)."""
    steps = (value / step).to_integral_value(rounding=ROUND_DOWN)
    return (steps * step).quantize(step)

"""Strategy error taxonomy.

Every error is scoped to one symbol in one decision cycle; none of them is
fatal to the orchestrator.
"""


class StrategyError(Exception):
    """Base class for recoverable, per-symbol strategy errors."""


class InsufficientDataError(StrategyError):
    """Not enough bars for the requested computation."""

    def __init__(self, message: str, required: int = None, available: int = None):
        super().__init__(message)
        self.required = required
        self.available = available


class DivisionByZeroError(StrategyError):
    """Zero price distance, point or tick value during position sizing."""


class RiskTooSmallError(DivisionByZeroError):
    """Sizing produced a zero or negative volume."""


class OrderRejectedError(StrategyError):
    """The execution collaborator declined the order."""


class ExternalServiceError(StrategyError):
    """A market data or account collaborator could not be reached."""

"""Base class shared by the price-structure detectors."""

import logging
from typing import Any, Dict

from ..errors import InsufficientDataError
from ..models.ohlcv import OHLCV

logger = logging.getLogger(__name__)


class DetectorStats:
    """How many windows a detector evaluated and how many produced a signal."""

    def __init__(self):
        self.seen = 0
        self.fired = 0


class StructureDetector:
    """
    Parameter validation, minimum-window guard and hit counting.
    
    Subclasses set their parameter attributes before calling
    ``super().__init__`` so ``_validate_parameters`` can check them.
    """

    def __init__(self, name: str, parameters: Dict[str, Any] = None):
        self.name = name
        self.parameters = parameters or {}
        self.stats = DetectorStats()
        self._validate_parameters()
        logger.debug("detector_initialized", extra={"detector": self.name, "parameters": self.parameters})

    def _validate_parameters(self) -> None:
        pass

    def _require_bars(self, window: OHLCV, required: int, what: str) -> None:
        """Count ``window`` as evaluated, or raise if it is too short."""
        if len(window) < required:
            raise InsufficientDataError(
                f"{what} on {window.symbol} {window.timeframe} needs {required} bars, got {len(window)}",
                required=required,
                available=len(window),
            )
        self.stats.seen += 1

    def _record(self, fired: bool) -> bool:
        if fired:
            self.stats.fired += 1
        return fired

    def summary(self) -> Dict[str, Any]:
        return {"class": self.name, "seen": self.stats.seen, "fired": self.stats.fired}

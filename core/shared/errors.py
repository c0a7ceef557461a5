"""
Error kinds raised by the backtest core.

InsufficientData and InvalidParameters are non-retryable and carry the
offending parameters. UpstreamFetchFailure wraps candle provider errors.
"""
from typing import Any, Dict, Optional


class BacktestError(Exception):
    """Base class for all backtest engine errors."""
    pass


class InsufficientData(BacktestError):
    """Raised when a candle series is shorter than the required warm-up."""

    def __init__(
        self,
        message: str,
        required: Optional[int] = None,
        available: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.required = required
        self.available = available
        self.context = dict(context or {})
        details = []
        if required is not None:
            details.append(f"required={required}")
        if available is not None:
            details.append(f"available={available}")
        details.extend(f"{k}={v}" for k, v in self.context.items())
        self.message = message
        super().__init__(f"{message} ({', '.join(details)})" if details else message)

    def __reduce__(self):
        return (self.__class__, (self.message, self.required, self.available, self.context))


class InvalidParameters(BacktestError, ValueError):
    """Raised for non-positive periods/percents or an empty time range."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field} {reason}, got {value!r}")

    def __reduce__(self):
        return (self.__class__, (self.field, self.value, self.reason))


class UpstreamFetchFailure(BacktestError):
    """Raised when the candle provider cannot deliver the requested series."""

    def __init__(self, symbol: str, timeframe: str, message: str):
        self.symbol = symbol
        self.timeframe = timeframe
        self.message = message
        super().__init__(f"Failed to fetch {symbol} ({timeframe}): {message}")

    def __reduce__(self):
        return (self.__class__, (self.symbol, self.timeframe, self.message))


class SweepCancelled(BacktestError):
    """Raised when the caller aborts a grid or window sweep."""

    def __init__(self, completed: int, total: int):
        self.completed = completed
        self.total = total
        super().__init__(f"Sweep cancelled after {completed}/{total} tasks")

    def __reduce__(self):
        return (self.__class__, (self.completed, self.total))

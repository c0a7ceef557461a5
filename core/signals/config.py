"""
Strategy configuration for the trend/RSI strategy and its backtests.

Contains the strategy parameters, backtest request, and presets.
Config validation runs at construction time (fail fast with clear errors):
every violation raises InvalidParameters naming the offending field.
"""
from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, Optional

import pandas as pd

from ..shared.defaults import (
    RSI_PERIOD, RSI_OVERBOUGHT, RSI_OVERSOLD,
    EMA_SHORT_PERIOD, EMA_LONG_PERIOD,
    POSITION_SIZE_PCT, STOP_LOSS_PCT, TAKE_PROFIT_PCT,
    INITIAL_BALANCE, DEFAULT_SYMBOL, DEFAULT_TIMEFRAME,
)
from ..shared.errors import InvalidParameters
from ..data.candles import TimeLike, to_utc_timestamp


def _require_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameters(name, value, "must be an integer")
    if value < minimum:
        raise InvalidParameters(name, value, f"must be >= {minimum}")


def _require_positive(name: str, value: Any, maximum: Optional[float] = None) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParameters(name, value, "must be a number")
    if not value > 0:
        raise InvalidParameters(name, value, "must be > 0")
    if maximum is not None and value > maximum:
        raise InvalidParameters(name, value, f"must be <= {maximum}")


def _validate_params(
    *,
    position_size_pct: float,
    stop_loss_pct: float,
    take_profit_pct: float,
    rsi_period: int,
    rsi_overbought: float,
    rsi_oversold: float,
    ema_short_period: int,
    ema_long_period: int,
) -> None:
    """Validate indicator and risk parameters. Raises InvalidParameters on failure."""
    _require_positive("position_size_pct", position_size_pct, maximum=100)
    # Stop and target are % of entry price; 100% would put a price at zero
    _require_positive("stop_loss_pct", stop_loss_pct)
    if stop_loss_pct >= 100:
        raise InvalidParameters("stop_loss_pct", stop_loss_pct, "must be < 100")
    _require_positive("take_profit_pct", take_profit_pct)
    if take_profit_pct >= 100:
        raise InvalidParameters("take_profit_pct", take_profit_pct, "must be < 100")

    _require_int("rsi_period", rsi_period, 2)
    _require_int("ema_short_period", ema_short_period, 1)
    _require_int("ema_long_period", ema_long_period, 1)
    if ema_short_period >= ema_long_period:
        raise InvalidParameters(
            "ema_short_period", ema_short_period,
            f"must be less than ema_long_period ({ema_long_period})",
        )

    _require_positive("rsi_oversold", rsi_oversold, maximum=100)
    _require_positive("rsi_overbought", rsi_overbought, maximum=100)
    if rsi_oversold >= rsi_overbought:
        raise InvalidParameters(
            "rsi_oversold", rsi_oversold,
            f"must be less than rsi_overbought ({rsi_overbought})",
        )


@dataclass
class StrategyParams:
    """Parameters of one trend/RSI strategy run (percent values, e.g. 5 = 5%)."""

    # Risk management (from shared.defaults)
    position_size_pct: float = POSITION_SIZE_PCT  # % of current balance per trade
    stop_loss_pct: float = STOP_LOSS_PCT  # % of entry price
    take_profit_pct: float = TAKE_PROFIT_PCT  # % of entry price

    # RSI parameters (from shared.defaults)
    rsi_period: int = RSI_PERIOD
    rsi_overbought: float = RSI_OVERBOUGHT
    rsi_oversold: float = RSI_OVERSOLD

    # EMA parameters (from shared.defaults)
    ema_short_period: int = EMA_SHORT_PERIOD
    ema_long_period: int = EMA_LONG_PERIOD

    def __post_init__(self) -> None:
        _validate_params(
            position_size_pct=self.position_size_pct,
            stop_loss_pct=self.stop_loss_pct,
            take_profit_pct=self.take_profit_pct,
            rsi_period=self.rsi_period,
            rsi_overbought=self.rsi_overbought,
            rsi_oversold=self.rsi_oversold,
            ema_short_period=self.ema_short_period,
            ema_long_period=self.ema_long_period,
        )

    @property
    def warmup_bars(self) -> int:
        """Bars consumed before the first bar the simulator can evaluate."""
        return max(self.rsi_period, self.ema_short_period, self.ema_long_period)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> "StrategyParams":
        """Copy with some fields replaced (validated again)."""
        return replace(self, **overrides)


@dataclass
class BacktestRequest:
    """What to backtest: symbol, timeframe, time range, balance, and strategy parameters."""

    symbol: str = DEFAULT_SYMBOL
    timeframe: str = DEFAULT_TIMEFRAME
    start_time: Optional[TimeLike] = None
    end_time: Optional[TimeLike] = None
    initial_balance: float = INITIAL_BALANCE
    params: StrategyParams = field(default_factory=StrategyParams)

    def __post_init__(self) -> None:
        if not self.symbol:
            raise InvalidParameters("symbol", self.symbol, "must not be empty")
        _require_positive("initial_balance", self.initial_balance)
        if self.start_time is None or self.end_time is None:
            raise InvalidParameters(
                "start_time/end_time", (self.start_time, self.end_time), "must both be set"
            )
        self.start_time = to_utc_timestamp(self.start_time)
        self.end_time = to_utc_timestamp(self.end_time)
        if self.end_time <= self.start_time:
            raise InvalidParameters(
                "end_time", str(self.end_time), f"must be after start_time ({self.start_time})"
            )

    def with_params(self, params: StrategyParams) -> "BacktestRequest":
        return replace(self, params=params)

    def with_range(self, start_time: pd.Timestamp, end_time: pd.Timestamp) -> "BacktestRequest":
        return replace(self, start_time=start_time, end_time=end_time)


BASELINE_PARAMS = StrategyParams()

# Alternative parameter sets for comparison
PRESET_PARAMS = {
    "baseline": BASELINE_PARAMS,
    "conservative": StrategyParams(
        position_size_pct=2.0,
        stop_loss_pct=0.5,
        take_profit_pct=1.0,
    ),
    "aggressive": StrategyParams(
        position_size_pct=10.0,
        stop_loss_pct=2.0,
        take_profit_pct=4.0,
        rsi_overbought=65,
        rsi_oversold=35,
    ),
}

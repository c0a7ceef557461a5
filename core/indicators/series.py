"""
Bar-index lookup for indicator arrays.

Indicator functions return only defined values, so an array of length m
computed over n bars is aligned to the last m bars: value k belongs to bar
k + (n - m). IndicatorSeries keeps that offset in one place; callers ask for
the value at an absolute bar index and get None before warm-up.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .technical import compute_ema, compute_rsi


class IndicatorSeries:
    """Indicator values aligned to the suffix of a bar sequence."""

    def __init__(self, name: str, values: Sequence[float], total_length: int):
        values = np.asarray(values, dtype=float)
        if len(values) > total_length:
            raise ValueError(
                f"{name}: {len(values)} values cannot align to {total_length} bars"
            )
        self.name = name
        self.values = values
        self.total_length = total_length
        self.offset = total_length - len(values)

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return f"IndicatorSeries({self.name!r}, len={len(self)}, offset={self.offset})"

    @property
    def first_index(self) -> int:
        """Absolute bar index of the first defined value (== total_length when empty)."""
        return self.offset

    def at(self, bar_index: int) -> Optional[float]:
        """Value at absolute bar index, or None before warm-up / out of range."""
        if bar_index < self.offset or bar_index >= self.total_length:
            return None
        return float(self.values[bar_index - self.offset])


@dataclass
class IndicatorValues:
    """Container for indicator values at a specific bar and the bar before it."""
    bar_index: int
    rsi: float
    ema_short: float
    ema_long: float
    prev_rsi: float
    prev_ema_short: float
    prev_ema_long: float

    @property
    def bullish_cross(self) -> bool:
        """Short EMA crossed above long EMA on this bar."""
        return self.prev_ema_short < self.prev_ema_long and self.ema_short > self.ema_long

    @property
    def bearish_cross(self) -> bool:
        """Short EMA crossed below long EMA on this bar."""
        return self.prev_ema_short > self.prev_ema_long and self.ema_short < self.ema_long


class IndicatorSet:
    """
    RSI plus short and long EMA over one closing-price sequence.

    Every series is computed once over the full range; the simulator and the
    live strategy read them through values_at().
    """

    def __init__(self, rsi: IndicatorSeries, ema_short: IndicatorSeries, ema_long: IndicatorSeries):
        self.rsi = rsi
        self.ema_short = ema_short
        self.ema_long = ema_long
        self.total_length = rsi.total_length

    @property
    def start_index(self) -> int:
        """First bar where current and previous values of every series exist."""
        return max(self.rsi.first_index, self.ema_short.first_index, self.ema_long.first_index) + 1

    def values_at(self, bar_index: int) -> Optional[IndicatorValues]:
        if bar_index < self.start_index or bar_index >= self.total_length:
            return None
        return IndicatorValues(
            bar_index=bar_index,
            rsi=self.rsi.at(bar_index),
            ema_short=self.ema_short.at(bar_index),
            ema_long=self.ema_long.at(bar_index),
            prev_rsi=self.rsi.at(bar_index - 1),
            prev_ema_short=self.ema_short.at(bar_index - 1),
            prev_ema_long=self.ema_long.at(bar_index - 1),
        )


def build_indicator_set(
    closes: Sequence[float],
    rsi_period: int,
    ema_short_period: int,
    ema_long_period: int,
) -> IndicatorSet:
    """Compute RSI and both EMAs over the whole close sequence."""
    n = len(closes)
    return IndicatorSet(
        rsi=IndicatorSeries("rsi", compute_rsi(closes, rsi_period), n),
        ema_short=IndicatorSeries("ema_short", compute_ema(closes, ema_short_period), n),
        ema_long=IndicatorSeries("ema_long", compute_ema(closes, ema_long_period), n),
    )

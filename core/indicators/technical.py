"""
Technical indicators computed over a whole closing-price sequence.

Provides RSI, EMA and ADX as pure numeric functions. Each returns only the
defined values, i.e. a suffix of the input: the first value belongs to the
last bar of the warm-up window, not to bar 0. Use IndicatorSeries
(series.py) to look values up by absolute bar index.
"""
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from ..shared.defaults import ADX_PERIOD
from ..shared.errors import InvalidParameters


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def compute_ema(closes: Sequence[float], period: int) -> np.ndarray:
    """
    Calculate Exponential Moving Average.

    Seeded with the simple average of the first `period` closes, then
    smoothed with alpha = 2 / (period + 1).

    Returns:
        Array of length len(closes) - period + 1 (empty if too short)
    """
    if period < 1:
        raise InvalidParameters("ema_period", period, "must be >= 1")
    prices = _as_array(closes)
    if len(prices) < period:
        return np.array([], dtype=float)

    seed = prices[:period].mean()
    seeded = pd.Series(np.concatenate(([seed], prices[period:])))
    return seeded.ewm(alpha=2.0 / (period + 1), adjust=False).mean().to_numpy()


def compute_rsi(closes: Sequence[float], period: int) -> np.ndarray:
    """
    Calculate Relative Strength Index (RSI) with Wilder smoothing.

    RSI = 100 - (100 / (1 + RS))
    RS = Average Gain / Average Loss

    The seed window is the first `period` closes (period - 1 price changes),
    so the first RSI value belongs to bar period - 1. A window with no losses
    gives 100; a completely flat window gives 50.

    Returns:
        Array of length len(closes) - period + 1 (empty if too short)
    """
    if period < 2:
        raise InvalidParameters("rsi_period", period, "must be >= 2")
    prices = _as_array(closes)
    if len(prices) < period:
        return np.array([], dtype=float)

    delta = np.diff(prices)
    gain = np.where(delta > 0, delta, 0.0)
    loss = np.where(delta < 0, -delta, 0.0)

    # Wilder smoothing: avg = (prev * (period - 1) + x) / period
    alpha = 1.0 / period
    seed_n = period - 1
    avg_gain = pd.Series(np.concatenate(([gain[:seed_n].mean()], gain[seed_n:]))).ewm(
        alpha=alpha, adjust=False
    ).mean().to_numpy()
    avg_loss = pd.Series(np.concatenate(([loss[:seed_n].mean()], loss[seed_n:]))).ewm(
        alpha=alpha, adjust=False
    ).mean().to_numpy()

    rsi = np.empty_like(avg_gain)
    flat = (avg_gain == 0) & (avg_loss == 0)
    no_loss = (avg_loss == 0) & ~flat
    regular = ~(flat | no_loss)
    rsi[flat] = 50.0
    rsi[no_loss] = 100.0
    rs = avg_gain[regular] / avg_loss[regular]
    rsi[regular] = 100.0 - (100.0 / (1.0 + rs))
    return rsi


@dataclass
class AdxValues:
    """ADX with its directional indicators, each a suffix of the input bars."""
    adx: np.ndarray  # Length n - 2 * period + 1
    plus_di: np.ndarray  # Length n - period
    minus_di: np.ndarray  # Length n - period


def compute_adx(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = ADX_PERIOD,
) -> AdxValues:
    """
    Calculate ADX (Average Directional Index) for trend strength detection.

    ADX measures trend strength (0-100):
    - ADX > 25: Strong trend
    - ADX < 20: Weak/no trend

    True range and +/-DM are Wilder-smoothed over `period` bars; ADX is the
    Wilder-smoothed DX, seeded with the mean of the first `period` DX values.
    """
    if period < 1:
        raise InvalidParameters("adx_period", period, "must be >= 1")
    high, low, close = _as_array(highs), _as_array(lows), _as_array(closes)
    n = len(close)
    empty = np.array([], dtype=float)
    if n <= period:
        return AdxValues(adx=empty, plus_di=empty, minus_di=empty)

    prev_close = close[:-1]
    tr = np.maximum.reduce([
        high[1:] - low[1:],
        np.abs(high[1:] - prev_close),
        np.abs(low[1:] - prev_close),
    ])
    up_move = high[1:] - high[:-1]
    down_move = low[:-1] - low[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)

    # Wilder running sums: first = sum of first `period`, then s - s/period + x
    def _smooth(x: np.ndarray) -> np.ndarray:
        out = np.empty(len(x) - period + 1)
        out[0] = x[:period].sum()
        for i in range(1, len(out)):
            out[i] = out[i - 1] - out[i - 1] / period + x[period - 1 + i]
        return out

    tr_s = _smooth(tr)
    plus_s = _smooth(plus_dm)
    minus_s = _smooth(minus_dm)
    with np.errstate(divide="ignore", invalid="ignore"):
        plus_di = np.where(tr_s > 0, 100.0 * plus_s / tr_s, 0.0)
        minus_di = np.where(tr_s > 0, 100.0 * minus_s / tr_s, 0.0)
        di_sum = plus_di + minus_di
        dx = np.where(di_sum > 0, 100.0 * np.abs(plus_di - minus_di) / di_sum, 0.0)

    if len(dx) < period:
        return AdxValues(adx=empty, plus_di=plus_di, minus_di=minus_di)
    adx = np.empty(len(dx) - period + 1)
    adx[0] = dx[:period].mean()
    for i in range(1, len(adx)):
        adx[i] = (adx[i - 1] * (period - 1) + dx[period - 1 + i]) / period
    return AdxValues(adx=adx, plus_di=plus_di, minus_di=minus_di)

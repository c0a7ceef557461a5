"""
Shared candle fixtures.

The EMA-cross scenario (200 bars of 4h candles from 2024-01-01 UTC):
- bars 0-39: close falls by 1 per bar (200 -> 161), RSI 0, short EMA below long EMA
- bars 40-189: flat at 161; the EMA gap and the Wilder averages decay
- bar 190: small rise that lifts the 9-EMA above the 21-EMA with RSI(14) == 25
- bars 191-199: flat at the bar 190 close
"""
import numpy as np
import pandas as pd
import pytest

from core.data.candles import Candle


CROSS_BAR = 190
START = pd.Timestamp("2024-01-01", tz="UTC")
STEP = pd.Timedelta(hours=4)


def make_candles(closes, start=START, step=STEP, volume=1.0):
    """Candles with open == high == low == close."""
    return [
        Candle(timestamp=start + i * step, open=c, high=c, low=c, close=c, volume=volume)
        for i, c in enumerate(closes)
    ]


def cross_jump() -> float:
    """Rise at CROSS_BAR giving RSI 25: gain / (gain + 13 * avg_loss) == 1/4."""
    avg_loss = (13 / 14) ** 150
    return 13 * avg_loss / 3


def cross_closes(n_bars: int = 200):
    entry = 161.0 + cross_jump()
    closes = [200.0 - i for i in range(40)] + [161.0] * 150 + [entry] * (n_bars - 190)
    return closes[:n_bars]


def with_bar(candles, index, high=None, low=None, close=None):
    """Copy of candles with one bar's high/low/close replaced."""
    out = list(candles)
    c = out[index]
    out[index] = Candle(
        timestamp=c.timestamp,
        open=c.open,
        high=high if high is not None else c.high,
        low=low if low is not None else c.low,
        close=close if close is not None else c.close,
        volume=c.volume,
    )
    return out


@pytest.fixture
def cross_candles():
    """EMA-cross scenario with one LONG entry at CROSS_BAR."""
    return make_candles(cross_closes())


@pytest.fixture
def random_walk_candles():
    """500 4h candles of a seeded random walk with intrabar ranges."""
    rng = np.random.default_rng(42)
    closes = 100 * np.exp(np.cumsum(rng.normal(0, 0.01, 500)))
    candles = []
    for i, close in enumerate(closes):
        spread = abs(rng.normal(0, 0.005)) * close
        open_ = closes[i - 1] if i > 0 else close
        candles.append(Candle(
            timestamp=START + i * STEP,
            open=float(open_),
            high=float(max(open_, close) + spread),
            low=float(min(open_, close) - spread),
            close=float(close),
            volume=float(rng.integers(1000, 5000)),
        ))
    return candles

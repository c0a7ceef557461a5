"""
Candle model and conversions between candle lists and OHLCV DataFrames.

A candle series is always ascending by timestamp with no duplicates; all
timestamps are UTC. Providers implement the CandleProvider protocol and
are free to cache, paginate, or replay from memory.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence, Union

import pandas as pd


OHLCV_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]

TimeLike = Union[str, datetime, pd.Timestamp, int]


@dataclass(frozen=True)
class Candle:
    """One OHLCV bar."""
    timestamp: pd.Timestamp
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class CandleProvider(Protocol):
    """Anything that can deliver an ordered candle series for a symbol."""

    def fetch_candles(
        self,
        symbol: str,
        timeframe: str,
        start_time: pd.Timestamp,
        end_time: pd.Timestamp,
    ) -> List[Candle]:
        ...


def to_utc_timestamp(value: TimeLike) -> pd.Timestamp:
    """Parse a date string, datetime, Timestamp or epoch-milliseconds int as a UTC Timestamp."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return pd.Timestamp(int(value), unit="ms", tz="UTC")
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Bring an OHLCV DataFrame into canonical form.

    - Flattens yfinance multi-level columns
    - UTC DatetimeIndex, sorted ascending, duplicates dropped (keep last)
    - Only the OHLCV columns, as floats; rows with missing prices dropped
    """
    if df.empty:
        return pd.DataFrame(columns=OHLCV_COLUMNS, index=pd.DatetimeIndex([], tz="UTC"))

    df = df.copy()
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)
    df.columns = [str(c).capitalize() for c in df.columns]

    missing = [c for c in ["Open", "High", "Low", "Close"] if c not in df.columns]
    if missing:
        raise ValueError(f"OHLCV frame missing columns: {missing}. Available: {list(df.columns)}")
    if "Volume" not in df.columns:
        df["Volume"] = 0.0

    index = pd.DatetimeIndex(pd.to_datetime(df.index))
    df.index = index.tz_localize("UTC") if index.tz is None else index.tz_convert("UTC")
    df = df.sort_index(kind="mergesort")
    df = df[~df.index.duplicated(keep="last")]
    df = df[OHLCV_COLUMNS].astype(float)
    return df.dropna(subset=["Open", "High", "Low", "Close"])


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """Convert an OHLCV DataFrame to an ordered list of Candle."""
    df = normalize_frame(df)
    return [
        Candle(
            timestamp=ts,
            open=float(row.Open),
            high=float(row.High),
            low=float(row.Low),
            close=float(row.Close),
            volume=float(row.Volume),
        )
        for ts, row in zip(df.index, df.itertuples(index=False))
    ]


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """Convert candles to an OHLCV DataFrame with a UTC DatetimeIndex."""
    if not candles:
        return pd.DataFrame(columns=OHLCV_COLUMNS, index=pd.DatetimeIndex([], tz="UTC"))
    return pd.DataFrame(
        {
            "Open": [c.open for c in candles],
            "High": [c.high for c in candles],
            "Low": [c.low for c in candles],
            "Close": [c.close for c in candles],
            "Volume": [c.volume for c in candles],
        },
        index=pd.DatetimeIndex([c.timestamp for c in candles], name="Date"),
    )


def validate_candles(candles: Sequence[Candle]) -> None:
    """Raise ValueError unless timestamps are strictly increasing."""
    for prev, cur in zip(candles, candles[1:]):
        if cur.timestamp <= prev.timestamp:
            raise ValueError(
                f"Candles must be strictly ascending: {cur.timestamp} follows {prev.timestamp}"
            )


def slice_candles(
    candles: Sequence[Candle],
    start_time: Optional[pd.Timestamp] = None,
    end_time: Optional[pd.Timestamp] = None,
    inclusive_end: bool = True,
) -> List[Candle]:
    """Return candles with start_time <= timestamp <= end_time (or < end_time)."""
    out = []
    for c in candles:
        if start_time is not None and c.timestamp < start_time:
            continue
        if end_time is not None:
            if inclusive_end and c.timestamp > end_time:
                continue
            if not inclusive_end and c.timestamp >= end_time:
                continue
        out.append(c)
    return out


class FrameCandleProvider:
    """
    Serves candles from in-memory OHLCV DataFrames keyed by symbol.

    Used for CSV replay and tests; the timeframe argument is ignored because
    each frame already has a fixed bar size.
    """

    def __init__(self, frames: Dict[str, pd.DataFrame]):
        self.frames = {symbol: normalize_frame(df) for symbol, df in frames.items()}

    def fetch_candles(
        self,
        symbol: str,
        timeframe: str,
        start_time: pd.Timestamp,
        end_time: pd.Timestamp,
    ) -> List[Candle]:
        if symbol not in self.frames:
            return []
        df = self.frames[symbol]
        df = df[(df.index >= to_utc_timestamp(start_time)) & (df.index <= to_utc_timestamp(end_time))]
        return candles_from_frame(df)

"""
Data loading and management module.

Provides the candle model, a keyed CSV cache, and candle providers
(Yahoo Finance download with pagination, in-memory frames for replay).
"""
from .candles import (
    Candle,
    CandleProvider,
    FrameCandleProvider,
    candles_from_frame,
    candles_to_frame,
    normalize_frame,
    slice_candles,
    to_utc_timestamp,
    validate_candles,
)
from .cache import CandleCache
from .download import YahooCandleProvider, timeframe_hours

__all__ = [
    'Candle',
    'CandleProvider',
    'FrameCandleProvider',
    'candles_from_frame',
    'candles_to_frame',
    'normalize_frame',
    'slice_candles',
    'to_utc_timestamp',
    'validate_candles',
    'CandleCache',
    'YahooCandleProvider',
    'timeframe_hours',
]

"""
Shared types for trading signal modules.

This module consolidates the SignalType enum, the Side enum and the
TradingSignal dataclass that are used across multiple modules to avoid
code duplication and inconsistent type checking.
"""
import pandas as pd
from typing import Optional
from dataclasses import dataclass
from enum import Enum


class SignalType(Enum):
    """Type of trading signal."""
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class Side(Enum):
    """Direction of a position."""
    LONG = "long"
    SHORT = "short"


@dataclass
class TradingSignal:
    """
    Decision produced by a strategy for the latest bar.

    HOLD signals carry no price; BUY/SELL carry the close of the bar that
    triggered them.
    """
    signal_type: SignalType
    reason: str
    timestamp: Optional[pd.Timestamp] = None
    price: Optional[float] = None

    # Indicator values at signal time (for analysis)
    rsi_value: Optional[float] = None
    ema_short: Optional[float] = None
    ema_long: Optional[float] = None

"""
Shared types, errors and defaults for the backtest engine.

This module provides:
- SignalType / Side enums and the TradingSignal dataclass
- Error kinds (InsufficientData, InvalidParameters, UpstreamFetchFailure)
- Centralized default values for all strategy parameters
"""
from .types import SignalType, Side, TradingSignal
from .errors import (
    BacktestError,
    InsufficientData,
    InvalidParameters,
    UpstreamFetchFailure,
    SweepCancelled,
)
from .defaults import (
    RSI_PERIOD, RSI_OVERBOUGHT, RSI_OVERSOLD,
    EMA_SHORT_PERIOD, EMA_LONG_PERIOD,
    INITIAL_BALANCE, POSITION_SIZE_PCT, STOP_LOSS_PCT, TAKE_PROFIT_PCT,
    DEFAULT_TIMEFRAME,
)

__all__ = [
    'SignalType',
    'Side',
    'TradingSignal',
    'BacktestError',
    'InsufficientData',
    'InvalidParameters',
    'UpstreamFetchFailure',
    'SweepCancelled',
    'RSI_PERIOD', 'RSI_OVERBOUGHT', 'RSI_OVERSOLD',
    'EMA_SHORT_PERIOD', 'EMA_LONG_PERIOD',
    'INITIAL_BALANCE', 'POSITION_SIZE_PCT', 'STOP_LOSS_PCT', 'TAKE_PROFIT_PCT',
    'DEFAULT_TIMEFRAME',
]

"""
Indicator calculation module.

Provides the indicators used by the trend/RSI strategy:
- RSI and EMA over closing prices (computed once per run)
- ADX with directional indicators (pair screening)
- IndicatorSeries / IndicatorSet: lookup by absolute bar index
"""
from .technical import compute_rsi, compute_ema, compute_adx, AdxValues
from .series import IndicatorSeries, IndicatorSet, IndicatorValues, build_indicator_set

__all__ = [
    'compute_rsi',
    'compute_ema',
    'compute_adx',
    'AdxValues',
    'IndicatorSeries',
    'IndicatorSet',
    'IndicatorValues',
    'build_indicator_set',
]

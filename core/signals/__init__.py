"""
Strategy configuration and the trend/RSI decision function.

StrategyParams and BacktestRequest validate on construction; the YAML loader
and environment reader build them from config files and variables.
"""
from .config import StrategyParams, BacktestRequest, BASELINE_PARAMS, PRESET_PARAMS
from .config_loader import (
    load_params_from_yaml,
    load_request_from_yaml,
    save_params_to_yaml,
    params_from_dict,
    request_from_dict,
    params_from_env,
)
from .trend_rsi import TrendRsiStrategy

__all__ = [
    'StrategyParams',
    'BacktestRequest',
    'BASELINE_PARAMS',
    'PRESET_PARAMS',
    'load_params_from_yaml',
    'load_request_from_yaml',
    'save_params_to_yaml',
    'params_from_dict',
    'request_from_dict',
    'params_from_env',
    'TrendRsiStrategy',
]

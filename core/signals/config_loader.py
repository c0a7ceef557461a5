"""
YAML configuration loader for trading strategies.

Loads strategy parameters and backtest requests from YAML files, allowing
easy sharing and modification of strategies without code changes.

Layout (every key optional, defaults from shared.defaults):

    name: baseline
    data:
      symbol: BTC-USD
      timeframe: 4h
      start_date: "2024-01-01"
      end_date: "2024-06-01"
      initial_balance: 10000
    indicators:
      rsi: {period: 14, overbought: 70, oversold: 30}
      ema: {short_period: 9, long_period: 21}
    risk:
      position_size_pct: 5
      stop_loss_pct: 1
      take_profit_pct: 2
"""
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from .config import StrategyParams, BacktestRequest
from ..shared.defaults import *


def load_yaml(yaml_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a YAML config file into a dict.

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or not a mapping
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {yaml_path}")

    return config_dict


def params_from_dict(config_dict: Mapping[str, Any]) -> StrategyParams:
    """Build StrategyParams from the nested config layout."""
    indicators = config_dict.get('indicators', {}) or {}
    rsi = indicators.get('rsi', {}) or {}
    ema = indicators.get('ema', {}) or {}
    risk = config_dict.get('risk', {}) or {}

    return StrategyParams(
        position_size_pct=risk.get('position_size_pct', POSITION_SIZE_PCT),
        stop_loss_pct=risk.get('stop_loss_pct', STOP_LOSS_PCT),
        take_profit_pct=risk.get('take_profit_pct', TAKE_PROFIT_PCT),
        rsi_period=rsi.get('period', RSI_PERIOD),
        rsi_overbought=rsi.get('overbought', RSI_OVERBOUGHT),
        rsi_oversold=rsi.get('oversold', RSI_OVERSOLD),
        ema_short_period=ema.get('short_period', EMA_SHORT_PERIOD),
        ema_long_period=ema.get('long_period', EMA_LONG_PERIOD),
    )


def request_from_dict(
    config_dict: Mapping[str, Any],
    overrides: Optional[Mapping[str, Any]] = None,
) -> BacktestRequest:
    """
    Build a BacktestRequest from the config layout.

    Keys in overrides (symbol, timeframe, start_time, end_time,
    initial_balance) win over the config when not None (CLI > config > default).
    """
    data = config_dict.get('data', {}) or {}
    values = {
        'symbol': data.get('symbol', DEFAULT_SYMBOL),
        'timeframe': data.get('timeframe', DEFAULT_TIMEFRAME),
        'start_time': data.get('start_date'),
        'end_time': data.get('end_date'),
        'initial_balance': data.get('initial_balance', INITIAL_BALANCE),
    }
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    return BacktestRequest(params=params_from_dict(config_dict), **values)


def load_params_from_yaml(yaml_path: Union[str, Path]) -> StrategyParams:
    """Load StrategyParams from a YAML file."""
    return params_from_dict(load_yaml(yaml_path))


def load_request_from_yaml(
    yaml_path: Union[str, Path],
    overrides: Optional[Mapping[str, Any]] = None,
) -> BacktestRequest:
    """Load a full BacktestRequest from a YAML file."""
    return request_from_dict(load_yaml(yaml_path), overrides)


def params_to_dict(params: StrategyParams, name: str = "custom") -> Dict[str, Any]:
    """Nested config layout for StrategyParams (inverse of params_from_dict)."""
    return {
        'name': name,
        'indicators': {
            'rsi': {
                'period': params.rsi_period,
                'overbought': params.rsi_overbought,
                'oversold': params.rsi_oversold,
            },
            'ema': {
                'short_period': params.ema_short_period,
                'long_period': params.ema_long_period,
            },
        },
        'risk': {
            'position_size_pct': params.position_size_pct,
            'stop_loss_pct': params.stop_loss_pct,
            'take_profit_pct': params.take_profit_pct,
        },
    }


def save_params_to_yaml(params: StrategyParams, yaml_path: Union[str, Path], name: str = "custom"):
    """
    Save StrategyParams to a YAML file.

    Args:
        params: Parameters to save
        yaml_path: Path where to save YAML file
        name: Config name written to the file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    with open(yaml_path, 'w') as f:
        yaml.dump(params_to_dict(params, name), f, default_flow_style=False, sort_keys=False)


def params_from_env(environ: Optional[Mapping[str, str]] = None) -> Tuple[str, str, StrategyParams]:
    """
    Read symbol, timeframe and indicator parameters from environment variables.

    Variables: SYMBOL, TIMEFRAME, RSI_PERIOD, RSI_OVERBOUGHT, RSI_OVERSOLD,
    EMA_SHORT_PERIOD, EMA_LONG_PERIOD. Unset variables use the defaults.

    Returns:
        Tuple of (symbol, timeframe, params)
    """
    env = os.environ if environ is None else environ
    params = StrategyParams(
        rsi_period=int(env.get('RSI_PERIOD', RSI_PERIOD)),
        rsi_overbought=float(env.get('RSI_OVERBOUGHT', RSI_OVERBOUGHT)),
        rsi_oversold=float(env.get('RSI_OVERSOLD', RSI_OVERSOLD)),
        ema_short_period=int(env.get('EMA_SHORT_PERIOD', EMA_SHORT_PERIOD)),
        ema_long_period=int(env.get('EMA_LONG_PERIOD', EMA_LONG_PERIOD)),
    )
    return env.get('SYMBOL', DEFAULT_SYMBOL), env.get('TIMEFRAME', DEFAULT_TIMEFRAME), params

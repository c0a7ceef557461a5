"""
Shared CLI plumbing: logging setup, common arguments, request building, JSON output.

Precedence for every setting: explicit flag > --config YAML > defaults.
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from core.data.cache import CandleCache
from core.data.candles import CandleProvider, FrameCandleProvider
from core.data.download import YahooCandleProvider
from core.signals.config import BacktestRequest, StrategyParams
from core.signals.config_loader import load_yaml, params_from_dict, request_from_dict

# Flag dest -> StrategyParams field
PARAM_FLAGS = {
    'position_size': 'position_size_pct',
    'stop_loss': 'stop_loss_pct',
    'take_profit': 'take_profit_pct',
    'rsi_period': 'rsi_period',
    'rsi_overbought': 'rsi_overbought',
    'rsi_oversold': 'rsi_oversold',
    'ema_short': 'ema_short_period',
    'ema_long': 'ema_long_period',
}


def setup_logging(verbose: bool = False):
    """
    Setup logging to stdout.

    Args:
        verbose: If True, use DEBUG level, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def add_data_args(parser: argparse.ArgumentParser, with_range: bool = True):
    """Symbol, timeframe, range, data source and output arguments."""
    parser.add_argument("--config", type=str, help="YAML strategy config (see configs/)")
    parser.add_argument("--symbol", "-s", type=str, help="Ticker symbol (e.g. BTC-USD)")
    parser.add_argument("--timeframe", "-t", type=str, help="Bar size: 15m, 1h, 4h, 1d (default: 4h)")
    if with_range:
        parser.add_argument("--start-date", type=str, help="Range start (YYYY-MM-DD)")
        parser.add_argument("--end-date", type=str, help="Range end (YYYY-MM-DD)")
    parser.add_argument("--initial-balance", type=float, help="Starting balance (default: 10000)")
    parser.add_argument(
        "--csv",
        type=str,
        help="Replay candles from an OHLCV CSV file instead of downloading (Date index)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        help="Candle cache directory (default: historical_data/)",
    )
    parser.add_argument("--no-cache", action="store_true", help="Always download, never read the cache")
    parser.add_argument("--output", "-o", type=str, help="Write the structured result as JSON to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")


def add_param_args(parser: argparse.ArgumentParser):
    """Strategy parameter overrides."""
    group = parser.add_argument_group("strategy parameters (override --config)")
    group.add_argument("--position-size", type=float, help="Position size, %% of balance (default: 5)")
    group.add_argument("--stop-loss", type=float, help="Stop loss, %% of entry (default: 1)")
    group.add_argument("--take-profit", type=float, help="Take profit, %% of entry (default: 2)")
    group.add_argument("--rsi-period", type=int, help="RSI period (default: 14)")
    group.add_argument("--rsi-overbought", type=float, help="RSI overbought threshold (default: 70)")
    group.add_argument("--rsi-oversold", type=float, help="RSI oversold threshold (default: 30)")
    group.add_argument("--ema-short", type=int, help="Short EMA period (default: 9)")
    group.add_argument("--ema-long", type=int, help="Long EMA period (default: 21)")


def load_config(args: argparse.Namespace) -> Dict[str, Any]:
    """YAML config dict from --config, or empty."""
    return load_yaml(args.config) if getattr(args, 'config', None) else {}


def build_params(args: argparse.Namespace, config_dict: Dict[str, Any]) -> StrategyParams:
    """StrategyParams from config, with flag overrides applied."""
    params = params_from_dict(config_dict)
    overrides = {
        field: getattr(args, dest)
        for dest, field in PARAM_FLAGS.items()
        if getattr(args, dest, None) is not None
    }
    return params.with_overrides(**overrides) if overrides else params


def build_request(args: argparse.Namespace, config_dict: Dict[str, Any]) -> BacktestRequest:
    """BacktestRequest from config, with flag overrides applied."""
    request = request_from_dict(config_dict, overrides={
        'symbol': args.symbol,
        'timeframe': args.timeframe,
        'start_time': getattr(args, 'start_date', None),
        'end_time': getattr(args, 'end_date', None),
        'initial_balance': args.initial_balance,
    })
    return request.with_params(build_params(args, config_dict))


def make_provider(args: argparse.Namespace, symbol: Optional[str] = None) -> CandleProvider:
    """CSV replay provider when --csv is given, else Yahoo Finance with cache."""
    if getattr(args, 'csv', None):
        csv_path = Path(args.csv)
        df = pd.read_csv(csv_path, index_col=0, parse_dates=True)
        return FrameCandleProvider({symbol or args.symbol or csv_path.stem: df})
    cache = CandleCache(args.data_dir) if getattr(args, 'data_dir', None) else None
    return YahooCandleProvider(cache=cache, use_cache=not getattr(args, 'no_cache', False))


def write_json(data: Dict[str, Any], output_path: str):
    """Write a result dict as pretty JSON."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(data, f, indent=2, default=str)
    print(f"\nResult written to {path}")

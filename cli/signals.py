#!/usr/bin/env python3
"""
Live signal loop.

Long-running service that:
1. Fetches the latest candles on a fixed interval
2. Runs the trend/RSI decision on the last bar
3. Logs BUY / SELL / HOLD (no orders are placed)

Symbol, timeframe and indicator parameters come from the environment
(SYMBOL, TIMEFRAME, RSI_PERIOD, RSI_OVERBOUGHT, RSI_OVERSOLD,
EMA_SHORT_PERIOD, EMA_LONG_PERIOD) unless given as flags.
"""
import argparse
import logging
import signal
import sys
import threading

from core.automation.scheduler import SignalScheduler
from core.data.download import YahooCandleProvider
from core.shared.errors import BacktestError
from core.signals.config_loader import params_from_env
from core.signals.trend_rsi import TrendRsiStrategy
from cli.common import setup_logging


# Set by SIGTERM / SIGINT for graceful shutdown
stop_event = threading.Event()


def signal_handler(signum, frame):
    """Handle shutdown signals (SIGTERM, SIGINT)."""
    logger = logging.getLogger(__name__)
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    stop_event.set()


def main():
    parser = argparse.ArgumentParser(description="Trend/RSI live signal loop")
    parser.add_argument("--symbol", "-s", type=str, help="Ticker symbol (default: $SYMBOL or BTC-USD)")
    parser.add_argument("--timeframe", "-t", type=str, help="Bar size (default: $TIMEFRAME or 4h)")
    parser.add_argument("--interval", type=float, default=60.0, help="Seconds between decisions (default: 60)")
    parser.add_argument("--iterations", type=int, default=None, help="Stop after N decisions (default: run forever)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging (DEBUG level)")
    args = parser.parse_args()

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        symbol, timeframe, params = params_from_env()
    except (BacktestError, ValueError) as e:
        print(f"Error: invalid environment configuration: {e}", file=sys.stderr)
        return 1
    symbol = args.symbol or symbol
    timeframe = args.timeframe or timeframe

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    scheduler = SignalScheduler(
        # Live data must not come from the range cache
        provider=YahooCandleProvider(use_cache=False),
        strategy=TrendRsiStrategy(params),
        symbol=symbol,
        timeframe=timeframe,
        interval_seconds=args.interval,
    )
    logger.info(f"Parameters: {params.to_dict()}")
    scheduler.run_forever(max_iterations=args.iterations, stop_event=stop_event)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Trading pair screening CLI.

Ranks symbols by volume, volatility, liquidity, spread and trend strength.
"""
import argparse
import sys

from core.asset_analysis.pairs import analyze_pairs
from core.data.cache import CandleCache
from core.data.download import YahooCandleProvider
from core.shared.defaults import DEFAULT_TIMEFRAME, PAIR_LOOKBACK_DAYS
from core.shared.errors import BacktestError
from cli.common import setup_logging, write_json


def main():
    parser = argparse.ArgumentParser(
        description="Screen trading pairs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m cli.pairs BTC-USD ETH-USD SOL-USD
    python -m cli.pairs BTC-USD ETH-USD --timeframe 1h --lookback-days 14 -o results/pairs.json
        """
    )
    parser.add_argument("symbols", nargs="+", help="Symbols to screen")
    parser.add_argument("--timeframe", "-t", default=DEFAULT_TIMEFRAME, help="Bar size (default: 4h)")
    parser.add_argument("--lookback-days", type=int, default=PAIR_LOOKBACK_DAYS, help="Days of history")
    parser.add_argument("--data-dir", type=str, help="Candle cache directory (default: historical_data/)")
    parser.add_argument("--no-cache", action="store_true", help="Always download, never read the cache")
    parser.add_argument("--output", "-o", type=str, help="Write results as JSON to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)

    cache = CandleCache(args.data_dir) if args.data_dir else None
    provider = YahooCandleProvider(cache=cache, use_cache=not args.no_cache)
    try:
        results = analyze_pairs(
            args.symbols, provider, timeframe=args.timeframe, lookback_days=args.lookback_days
        )
    except BacktestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print()
    print("=" * 80)
    print(f"PAIR SCREENING ({args.timeframe}, {args.lookback_days} days)")
    print("=" * 80)
    print(f"{'Symbol':<12} {'Score':>8} {'Volume 24h':>16} {'Vol%':>7} {'Liquidity':>14} {'Spread':>7} {'Trend':>8}")
    print("-" * 80)
    for m in results:
        print(f"{m.symbol:<12} {m.score:>8.2f} {m.volume_24h:>16,.0f} {m.volatility:>7.2f} "
              f"{m.liquidity:>14,.0f} {m.spread:>7.3f} {m.trend:>8.2f}")
    skipped = len(args.symbols) - len(results)
    if skipped:
        print(f"\nSkipped {skipped} symbol(s) with insufficient data or errors")

    if args.output:
        write_json({"pairs": [m.to_dict() for m in results]}, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())

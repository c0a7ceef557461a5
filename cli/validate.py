#!/usr/bin/env python3
"""
Robustness validation CLI.

Backtests fixed parameters over trailing 30-day windows and prints
per-window results and the robustness factor.
"""
import argparse
import sys

from core.evaluation.robustness import validate_robustness
from core.shared.defaults import DEFAULT_SYMBOL, DEFAULT_TIMEFRAME, INITIAL_BALANCE, ROBUSTNESS_MONTHS
from core.shared.errors import BacktestError
from cli.common import (
    add_data_args,
    add_param_args,
    build_params,
    load_config,
    make_provider,
    setup_logging,
    write_json,
)


def main():
    parser = argparse.ArgumentParser(
        description="Validate strategy robustness over trailing months",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m cli.validate -s BTC-USD --months 12
    python -m cli.validate --config configs/baseline.yaml --months 6 --now 2024-07-01
        """
    )
    add_data_args(parser, with_range=False)
    add_param_args(parser)
    parser.add_argument("--months", type=int, default=ROBUSTNESS_MONTHS, help="Number of 30-day windows")
    parser.add_argument("--now", type=str, help="End of the most recent window (default: now)")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of parallel workers (default: auto = CPU count; 1 = sequential)",
    )
    args = parser.parse_args()

    setup_logging(args.verbose)

    try:
        config_dict = load_config(args)
        data = config_dict.get('data', {}) or {}
        symbol = args.symbol or data.get('symbol', DEFAULT_SYMBOL)
        timeframe = args.timeframe or data.get('timeframe', DEFAULT_TIMEFRAME)
        balance = args.initial_balance or data.get('initial_balance', INITIAL_BALANCE)
        report = validate_robustness(
            symbol,
            timeframe,
            params=build_params(args, config_dict),
            months=args.months,
            provider=make_provider(args, symbol),
            now=args.now,
            initial_balance=balance,
            max_workers=args.workers,
        )
    except (BacktestError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print()
    print("=" * 80)
    print(f"ROBUSTNESS: {symbol} ({timeframe}), {args.months} windows")
    print("=" * 80)
    print(f"{'Period':<27} {'Profit%':>9} {'Trades':>7} {'Win%':>7} {'DD%':>7} {'Sharpe':>8}")
    print("-" * 80)
    for w in report.windows:
        if not w.ok:
            print(f"{w.period:<27} failed: {w.error}")
            continue
        print(f"{w.period:<27} {w.profit_pct:>9.2f} {w.total_trades:>7} {w.win_rate:>7.2f} "
              f"{w.max_drawdown_pct:>7.2f} {w.sharpe_ratio:>8.2f}")
    s = report.summary
    print()
    print(f"  Avg monthly profit:  {s.avg_profit_pct:.2f}% (std {s.profit_std_dev:.2f}%)")
    print(f"  Avg win rate:        {s.avg_win_rate:.2f}%")
    print(f"  Avg drawdown:        {s.avg_drawdown_pct:.2f}%")
    print(f"  Profitable months:   {s.profitable_months}/{s.windows_evaluated} ({s.profitable_months_percent:.2f}%)")
    print(f"  Robustness factor:   {s.robustness_factor:.4f}")

    if args.output:
        write_json(report.to_dict(), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Backtest CLI.

Runs the trend/RSI strategy over one symbol and date range and prints a summary.
"""
import argparse
import sys

from core.evaluation.backtest import run_backtest
from core.shared.errors import BacktestError
from cli.common import (
    add_data_args,
    add_param_args,
    build_request,
    load_config,
    make_provider,
    setup_logging,
    write_json,
)


def print_result(result):
    """Print a BacktestResult summary."""
    print()
    print("=" * 80)
    print(f"BACKTEST: {result.symbol} ({result.timeframe})")
    print(f"Period: {result.start_date.date()} to {result.end_date.date()}")
    print("=" * 80)
    print(f"  Initial balance:  {result.initial_balance:,.2f}")
    print(f"  Final balance:    {result.final_balance:,.2f}")
    print(f"  Profit:           {result.total_profit:+,.2f} ({result.profit_pct:+.2f}%)")
    print(f"  Trades:           {result.total_trades} "
          f"({result.winning_trades} won, {result.losing_trades} lost)")
    print(f"  Win rate:         {result.win_rate:.2f}%")
    print(f"  Max drawdown:     {result.max_drawdown:,.2f} ({result.max_drawdown_pct:.2f}%)")
    print(f"  Sharpe ratio:     {result.sharpe_ratio:.2f}")
    print(f"  Avg win / loss:   {result.avg_win_pct:+.2f}% / {result.avg_loss_pct:+.2f}%")
    print(f"  Profit factor:    {result.profit_factor:.2f}")
    print(f"  Avg duration:     {result.avg_duration_hours:.1f}h")
    if result.monthly_returns:
        print()
        print("  Monthly returns:")
        for month, ret in result.monthly_returns.items():
            print(f"    {month}: {ret:+.2f}%")


def main():
    parser = argparse.ArgumentParser(
        description="Backtest the trend/RSI strategy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Baseline config
    python -m cli.backtest --config configs/baseline.yaml

    # Override range and risk
    python -m cli.backtest -s ETH-USD --start-date 2024-01-01 --end-date 2024-06-01 --stop-loss 1.5

    # Replay a CSV file and write JSON
    python -m cli.backtest --csv data/btc_4h.csv -s BTC-USD --start-date 2024-01-01 --end-date 2024-03-01 -o results/bt.json
        """
    )
    add_data_args(parser)
    add_param_args(parser)
    args = parser.parse_args()

    setup_logging(args.verbose)

    try:
        request = build_request(args, load_config(args))
        provider = make_provider(args, request.symbol)
        result = run_backtest(request, provider=provider)
    except (BacktestError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_result(result)
    if args.output:
        write_json(result.to_dict(), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Parameter optimization CLI.

Grid-searches position size, stop loss and take profit (or the axes listed
in the config's `optimizer` section) and prints the best combinations.
"""
import argparse
import sys

from core.grid_test.grid_search import grid_from_dict
from core.grid_test.optimizer import optimize_strategy
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


def _parse_values(text):
    return [float(v) for v in text.split(",") if v.strip()]


def main():
    parser = argparse.ArgumentParser(
        description="Grid-search strategy parameters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Default grid (4 x 4 x 4 risk combinations)
    python -m cli.optimize -s BTC-USD --start-date 2024-01-01 --end-date 2024-06-01

    # Custom axes, sequential
    python -m cli.optimize --config configs/baseline.yaml --stop-losses 0.5,1 --take-profits 2,4 --workers 1
        """
    )
    add_data_args(parser)
    add_param_args(parser)
    parser.add_argument("--position-sizes", type=str, help="Comma-separated position sizes in %%")
    parser.add_argument("--stop-losses", type=str, help="Comma-separated stop losses in %%")
    parser.add_argument("--take-profits", type=str, help="Comma-separated take profits in %%")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of parallel workers (default: auto = CPU count; 1 = sequential)",
    )
    parser.add_argument("--top", type=int, default=10, help="Number of ranked combinations to print")
    args = parser.parse_args()

    setup_logging(args.verbose)

    try:
        config_dict = load_config(args)
        request = build_request(args, config_dict)
        grid_values = dict(config_dict.get('optimizer', {}) or {})
        for flag, field in (
            ('position_sizes', 'position_size_pct'),
            ('stop_losses', 'stop_loss_pct'),
            ('take_profits', 'take_profit_pct'),
        ):
            if getattr(args, flag):
                grid_values[field] = _parse_values(getattr(args, flag))
        grid = grid_from_dict(grid_values, base=request.params)

        provider = make_provider(args, request.symbol)
        result = optimize_strategy(request, grid=grid, provider=provider, max_workers=args.workers)
    except (BacktestError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print()
    print("=" * 80)
    print(f"OPTIMIZATION: {request.symbol} ({request.timeframe}) "
          f"{request.start_time.date()} to {request.end_time.date()}")
    print("=" * 80)
    ranked = sorted((p for p in result.points if p.ok), key=lambda p: p.score, reverse=True)
    print(f"{'Size%':>6} {'SL%':>5} {'TP%':>5} {'Profit%':>9} {'DD%':>7} {'Sharpe':>8} {'Win%':>7} {'Score':>9}")
    print("-" * 80)
    for point in ranked[:args.top]:
        p, r = point.params, point.result
        print(f"{p.position_size_pct:>6g} {p.stop_loss_pct:>5g} {p.take_profit_pct:>5g} "
              f"{r.profit_pct:>9.2f} {r.max_drawdown_pct:>7.2f} {r.sharpe_ratio:>8.2f} "
              f"{r.win_rate:>7.2f} {point.score:>9.2f}")
    print()
    best = result.best_params
    print(f"Best: size={best.position_size_pct}% SL={best.stop_loss_pct}% TP={best.take_profit_pct}% "
          f"(score {result.best_score:.2f})")
    if result.failed:
        print(f"Failed combinations: {result.failed}")

    if args.output:
        write_json(result.to_dict(), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())

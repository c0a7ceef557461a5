#!/usr/bin/env python3
"""
Parameter reference CLI.

Shows all configurable parameters, their valid ranges, and defaults.
"""
from core.shared.defaults import (
    RSI_PERIOD, RSI_OVERSOLD, RSI_OVERBOUGHT,
    EMA_SHORT_PERIOD, EMA_LONG_PERIOD,
    INITIAL_BALANCE, POSITION_SIZE_PCT, STOP_LOSS_PCT, TAKE_PROFIT_PCT,
    ANNUAL_RISK_FREE_RATE, SHARPE_STD_FLOOR,
    OPTIMIZER_POSITION_SIZES, OPTIMIZER_STOP_LOSSES, OPTIMIZER_TAKE_PROFITS,
    SCORE_PROFIT_WEIGHT, SCORE_DRAWDOWN_WEIGHT, SCORE_SHARPE_WEIGHT, SCORE_WIN_RATE_WEIGHT,
    ROBUSTNESS_MONTHS, ROBUSTNESS_WINDOW_DAYS,
    DEFAULT_SYMBOL, DEFAULT_TIMEFRAME, PAIR_LOOKBACK_DAYS, PAIR_MIN_CANDLES,
)
from core.signals.config import PRESET_PARAMS


def main():
    """Print all configurable parameters with their ranges and defaults."""

    print("=" * 80)
    print("BACKTEST ENGINE PARAMETER REFERENCE")
    print("=" * 80)
    print()

    # Technical Indicators
    print("TECHNICAL INDICATORS")
    print("-" * 80)
    print()

    print("RSI (Relative Strength Index, Wilder smoothing):")
    print(f"  --rsi-period        Period: {RSI_PERIOD} (default)")
    print(f"                      Range: >= 2, recommended: 7-21")
    print(f"  --rsi-oversold      Oversold threshold: {RSI_OVERSOLD} (default)")
    print(f"                      Range: (0, 100), below overbought")
    print(f"  --rsi-overbought    Overbought threshold: {RSI_OVERBOUGHT} (default)")
    print(f"                      Range: (0, 100), above oversold")
    print()

    print("EMA (Exponential Moving Average):")
    print(f"  --ema-short         Short period: {EMA_SHORT_PERIOD} (default)")
    print(f"  --ema-long          Long period: {EMA_LONG_PERIOD} (default)")
    print("                      Note: Long period must be > Short period")
    print()

    # Risk Management
    print("RISK MANAGEMENT:")
    print("-" * 80)
    print()
    print(f"  --position-size     {POSITION_SIZE_PCT:g}% of current balance per trade (default)")
    print(f"                      Range: (0, 100]")
    print(f"  --stop-loss         {STOP_LOSS_PCT:g}% of entry price (default)")
    print(f"                      Range: (0, 100)")
    print(f"  --take-profit       {TAKE_PROFIT_PCT:g}% of entry price (default)")
    print(f"                      Range: (0, 100)")
    print(f"  --initial-balance   {INITIAL_BALANCE:,.0f} (default)")
    print()
    print("  Entry:  LONG on EMA cross up with RSI < oversold,")
    print("          SHORT on EMA cross down with RSI > overbought (one position at a time)")
    print("  Exit:   stop loss, then take profit, then reversal cross with RSI in the opposite zone")
    print()

    # Metrics
    print("METRICS:")
    print("-" * 80)
    print()
    print(f"  Sharpe ratio: daily returns, risk-free {ANNUAL_RISK_FREE_RATE:.0%}/year, "
          f"std floor {SHARPE_STD_FLOOR:g}, annualized with sqrt(365)")
    print(f"  Optimizer score: {SCORE_PROFIT_WEIGHT:g} x profit% - {SCORE_DRAWDOWN_WEIGHT:g} x drawdown% "
          f"+ {SCORE_SHARPE_WEIGHT:g} x Sharpe + {SCORE_WIN_RATE_WEIGHT:g} x win rate%")
    print()

    # Optimizer
    print("OPTIMIZER GRID (cli.optimize):")
    print("-" * 80)
    print()
    print(f"  --position-sizes    {','.join(f'{v:g}' for v in OPTIMIZER_POSITION_SIZES)} (default)")
    print(f"  --stop-losses       {','.join(f'{v:g}' for v in OPTIMIZER_STOP_LOSSES)} (default)")
    print(f"  --take-profits      {','.join(f'{v:g}' for v in OPTIMIZER_TAKE_PROFITS)} (default)")
    print("  --workers           Parallel workers (default: CPU count; 1 = sequential)")
    print()

    # Robustness
    print("ROBUSTNESS VALIDATION (cli.validate):")
    print("-" * 80)
    print()
    print(f"  --months            Trailing windows of {ROBUSTNESS_WINDOW_DAYS} days: {ROBUSTNESS_MONTHS} (default)")
    print("  --now               End of the most recent window (default: now)")
    print("  Robustness factor = [avg > 0] x avg / max(std, 1) x profitable% / 100")
    print()

    # Data Parameters
    print("DATA PARAMETERS:")
    print("-" * 80)
    print()
    print(f"  --symbol            Yahoo Finance ticker: {DEFAULT_SYMBOL} (default)")
    print(f"  --timeframe         15m, 30m, 1h, 4h, 1d, 1w: {DEFAULT_TIMEFRAME} (default)")
    print("  --start-date        Start date (YYYY-MM-DD)")
    print("  --end-date          End date (YYYY-MM-DD)")
    print("  --csv               Replay candles from an OHLCV CSV file")
    print(f"  Pair screening:     {PAIR_LOOKBACK_DAYS} days lookback, >= {PAIR_MIN_CANDLES} candles per symbol")
    print()

    # Presets
    print("PRESET PARAMETER SETS:")
    print("-" * 80)
    print()
    for name, params in PRESET_PARAMS.items():
        print(f"  {name:<14} size={params.position_size_pct:g}% SL={params.stop_loss_pct:g}% "
              f"TP={params.take_profit_pct:g}% RSI {params.rsi_oversold:g}/{params.rsi_overbought:g}")
    print()

    print("=" * 80)
    print()
    print("USAGE EXAMPLES:")
    print("-" * 80)
    print()
    print("  python -m cli.backtest --config configs/baseline.yaml")
    print("  python -m cli.optimize -s BTC-USD --start-date 2024-01-01 --end-date 2024-06-01")
    print("  python -m cli.validate -s BTC-USD --months 12")
    print("  python -m cli.pairs BTC-USD ETH-USD SOL-USD")
    print("  python -m cli.signals --interval 300")
    print()


if __name__ == "__main__":
    main()

"""
Unified CLI entry points for the backtest engine.

Provides command-line interfaces for:
- Single backtests
- Parameter optimization (grid search)
- Robustness validation over trailing months
- Trading pair screening
- Parameter reference
- Live trend/RSI signal loop
"""

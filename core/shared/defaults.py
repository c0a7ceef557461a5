"""
Centralized default values for strategy and backtest parameters.

This is the SINGLE SOURCE OF TRUTH for all parameter defaults.
All modules should import from here to ensure consistency.
"""

# RSI (Relative Strength Index) defaults
RSI_PERIOD = 14
RSI_OVERBOUGHT = 70
RSI_OVERSOLD = 30

# EMA (Exponential Moving Average) defaults
EMA_SHORT_PERIOD = 9
EMA_LONG_PERIOD = 21

# ADX (pair screening trend strength)
ADX_PERIOD = 14

# Trade management defaults (all percentages, e.g. 5 = 5%)
INITIAL_BALANCE = 10000.0
POSITION_SIZE_PCT = 5.0  # % of current balance committed per trade
STOP_LOSS_PCT = 1.0  # % of entry price
TAKE_PROFIT_PCT = 2.0  # % of entry price

# Sharpe ratio
ANNUAL_RISK_FREE_RATE = 0.02
DAILY_RISK_FREE_RATE = ANNUAL_RISK_FREE_RATE / 365
SHARPE_STD_FLOOR = 0.00001  # Avoid division by zero on flat equity
SHARPE_ANNUALIZATION_DAYS = 365  # Crypto markets trade every day

# Parameter optimizer grid (percent values)
OPTIMIZER_POSITION_SIZES = [1.0, 2.0, 5.0, 10.0]
OPTIMIZER_STOP_LOSSES = [0.5, 1.0, 1.5, 2.0]
OPTIMIZER_TAKE_PROFITS = [1.0, 2.0, 3.0, 4.0]

# Composite optimizer score:
#   2 * profit% - 3 * max_drawdown% + 10 * sharpe + 0.5 * win_rate
SCORE_PROFIT_WEIGHT = 2.0
SCORE_DRAWDOWN_WEIGHT = 3.0
SCORE_SHARPE_WEIGHT = 10.0
SCORE_WIN_RATE_WEIGHT = 0.5

# Robustness validation
ROBUSTNESS_MONTHS = 12
ROBUSTNESS_WINDOW_DAYS = 30
ROBUSTNESS_STD_FLOOR = 1.0

# Data / screening
DEFAULT_SYMBOL = "BTC-USD"
DEFAULT_TIMEFRAME = "4h"
PAIR_LOOKBACK_DAYS = 30
PAIR_MIN_CANDLES = 30
SIGNAL_LOOKBACK_BARS = 200  # Bars fetched for one live decision

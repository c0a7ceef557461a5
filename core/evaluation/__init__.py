"""
Backtest evaluation module.

Simulates one position at a time bar by bar, derives performance metrics,
and validates robustness over trailing monthly windows.
"""
from .simulation_types import ExitReason, Position, Trade, SimulationRun, BacktestResult
from .simulator import PositionSimulator
from .analyzer import analyze_run, daily_returns, sharpe_ratio
from .backtest import run_backtest, simulate_candles, fetch_request_candles
from .robustness_types import WindowResult, RobustnessSummary, RobustnessReport
from .robustness import validate_robustness, summarize_windows, trailing_windows

__all__ = [
    'ExitReason',
    'Position',
    'Trade',
    'SimulationRun',
    'BacktestResult',
    'PositionSimulator',
    'analyze_run',
    'daily_returns',
    'sharpe_ratio',
    'run_backtest',
    'simulate_candles',
    'fetch_request_candles',
    'WindowResult',
    'RobustnessSummary',
    'RobustnessReport',
    'validate_robustness',
    'summarize_windows',
    'trailing_windows',
]

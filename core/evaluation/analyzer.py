"""
Performance analyzer: reduce a simulation run to a BacktestResult.

Pure function of its inputs. The Sharpe ratio is computed on daily returns
resampled from the equity curve (last sample per UTC calendar day), since
the simulation usually runs on intraday bars.
"""
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..shared.defaults import (
    DAILY_RISK_FREE_RATE,
    SHARPE_STD_FLOOR,
    SHARPE_ANNUALIZATION_DAYS,
)
from .simulation_types import BacktestResult, SimulationRun, Trade


def daily_returns(equity_curve: Sequence[float], timestamps: Sequence[pd.Timestamp]) -> np.ndarray:
    """
    Relative change in equity between consecutive calendar days.

    Each day is represented by its last equity sample.
    """
    if len(equity_curve) != len(timestamps):
        raise ValueError(
            f"Equity curve ({len(equity_curve)}) and timestamps ({len(timestamps)}) differ in length"
        )
    if not equity_curve:
        return np.array([], dtype=float)
    index = pd.DatetimeIndex(timestamps)
    index = index.tz_convert("UTC") if index.tz is not None else index
    equity = pd.Series(np.asarray(equity_curve, dtype=float), index=index)
    day_close = equity.groupby(equity.index.floor("D")).last()
    return day_close.pct_change().dropna().to_numpy()


def sharpe_ratio(
    returns: Sequence[float],
    daily_risk_free_rate: float = DAILY_RISK_FREE_RATE,
    std_floor: float = SHARPE_STD_FLOOR,
    periods_per_year: int = SHARPE_ANNUALIZATION_DAYS,
) -> float:
    """
    Annualized Sharpe ratio of daily returns.

    (mean - risk_free) / max(std, floor) * sqrt(periods_per_year), with the
    population standard deviation. No returns count as a mean of 0.
    """
    r = np.asarray(returns, dtype=float)
    mean = float(r.mean()) if len(r) else 0.0
    std = float(r.std()) if len(r) else 0.0
    std = max(std, std_floor)
    return (mean - daily_risk_free_rate) / std * float(np.sqrt(periods_per_year))


def _trade_stats(trades: List[Trade]) -> Dict[str, float]:
    """Average win/loss %, profit factor and average duration."""
    wins = [t for t in trades if t.profit > 0]
    losses = [t for t in trades if t.profit <= 0]
    gross_win = sum(t.profit for t in wins)
    gross_loss = -sum(t.profit for t in losses)
    if gross_loss > 0:
        profit_factor = gross_win / gross_loss
    else:
        profit_factor = float('inf') if gross_win > 0 else 0.0
    return {
        "avg_win_pct": float(np.mean([t.profit_pct for t in wins])) if wins else 0.0,
        "avg_loss_pct": float(np.mean([t.profit_pct for t in losses])) if losses else 0.0,
        "profit_factor": profit_factor,
        "avg_duration_hours": float(np.mean([t.duration_hours for t in trades])) if trades else 0.0,
    }


def analyze_run(
    run: SimulationRun,
    symbol: str,
    timeframe: str,
    start_date: pd.Timestamp,
    end_date: pd.Timestamp,
    params: Optional[Dict[str, Any]] = None,
) -> BacktestResult:
    """
    Derive the metrics report for one simulation run.

    Args:
        run: Simulator output
        symbol: Instrument symbol
        timeframe: Bar size (e.g. '4h')
        start_date: Requested range start
        end_date: Requested range end
        params: Strategy parameters to attach to the result

    Returns:
        BacktestResult
    """
    initial = run.initial_balance
    final = run.final_balance
    total_profit = final - initial
    total_trades = len(run.trades)
    winning_trades = sum(1 for t in run.trades if t.profit > 0)
    losing_trades = total_trades - winning_trades
    win_rate = winning_trades / total_trades * 100 if total_trades > 0 else 0.0

    if run.max_drawdown > 0 and run.peak_at_max_drawdown > 0:
        max_drawdown_pct = run.max_drawdown / run.peak_at_max_drawdown * 100
    else:
        max_drawdown_pct = 0.0

    returns = daily_returns(run.equity_curve, run.equity_timestamps)

    return BacktestResult(
        symbol=symbol,
        timeframe=timeframe,
        start_date=start_date,
        end_date=end_date,
        initial_balance=initial,
        final_balance=final,
        total_profit=total_profit,
        profit_pct=total_profit / initial * 100,
        total_trades=total_trades,
        winning_trades=winning_trades,
        losing_trades=losing_trades,
        win_rate=win_rate,
        max_drawdown=run.max_drawdown,
        max_drawdown_pct=max_drawdown_pct,
        sharpe_ratio=sharpe_ratio(returns),
        trades=list(run.trades),
        monthly_returns=dict(run.monthly_returns),
        equity_curve=list(run.equity_curve),
        params=dict(params) if params is not None else None,
        **_trade_stats(run.trades),
    )

"""
Simulation types: open position, completed trade, raw run output, backtest result.

Extracted for reuse and to keep simulator.py focused on the bar loop.
Analyzers and sweeps can import these types without pulling in the simulator.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from ..shared.types import Side


class ExitReason(Enum):
    """Why a position was closed."""
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"
    REVERSAL = "reversal"  # EMA cross against the position with RSI in the opposite zone
    END_OF_DATA = "end_of_data"  # Still open after the last bar


@dataclass
class Position:
    """The single open position of a run."""
    side: Side
    entry_price: float
    entry_timestamp: pd.Timestamp
    stop_loss: float
    take_profit: float
    size: float  # Units of base asset

    def profit_at(self, exit_price: float) -> float:
        """Absolute profit if closed at exit_price."""
        if self.side == Side.LONG:
            return self.size * (exit_price - self.entry_price)
        return self.size * (self.entry_price - exit_price)


@dataclass(frozen=True)
class Trade:
    """A completed position. Never mutated after creation."""
    side: Side
    entry_timestamp: pd.Timestamp
    entry_price: float
    exit_timestamp: pd.Timestamp
    exit_price: float
    size: float
    profit: float
    profit_pct: float  # Profit relative to position value at entry
    duration_hours: float
    exit_reason: ExitReason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "side": self.side.value,
            "entry_timestamp": self.entry_timestamp.isoformat(),
            "entry_price": self.entry_price,
            "exit_timestamp": self.exit_timestamp.isoformat(),
            "exit_price": self.exit_price,
            "size": self.size,
            "profit": self.profit,
            "profit_pct": self.profit_pct,
            "duration_hours": self.duration_hours,
            "exit_reason": self.exit_reason.value,
        }


@dataclass
class SimulationRun:
    """Raw output of one simulator pass, before metrics are derived."""
    initial_balance: float
    final_balance: float
    trades: List[Trade]

    # One sample per simulated bar plus the seed sample
    equity_curve: List[float]
    equity_timestamps: List[pd.Timestamp]

    # Running maximum drawdown after each simulated bar (non-decreasing)
    drawdown_curve: List[float]
    max_drawdown: float
    peak_at_max_drawdown: float  # Equity peak current when max_drawdown was observed

    monthly_returns: Dict[str, float]  # "YYYY-MM" -> realized return %
    bars_simulated: int
    start_index: int  # First simulated bar index in the candle series


@dataclass
class BacktestResult:
    """Metrics report for one simulation run. Produced once, never mutated."""
    symbol: str
    timeframe: str
    start_date: pd.Timestamp
    end_date: pd.Timestamp

    initial_balance: float
    final_balance: float
    total_profit: float
    profit_pct: float

    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float

    max_drawdown: float
    max_drawdown_pct: float
    sharpe_ratio: float

    trades: List[Trade]
    monthly_returns: Dict[str, float]
    equity_curve: List[float]

    # Risk/reward metrics
    avg_win_pct: float = 0.0  # Average % gain per winning trade
    avg_loss_pct: float = 0.0  # Average % loss per losing trade (negative number)
    profit_factor: float = 0.0  # Total gains / Total losses (>1 is good)
    avg_duration_hours: float = 0.0

    params: Optional[Dict[str, Any]] = None

    def to_dict(self, include_curve: bool = True) -> Dict[str, Any]:
        """JSON-friendly representation."""
        data = {
            "symbol": self.symbol,
            "timeframe": self.timeframe,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "initial_balance": self.initial_balance,
            "final_balance": self.final_balance,
            "total_profit": self.total_profit,
            "profit_pct": self.profit_pct,
            "total_trades": self.total_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "win_rate": self.win_rate,
            "max_drawdown": self.max_drawdown,
            "max_drawdown_pct": self.max_drawdown_pct,
            "sharpe_ratio": self.sharpe_ratio,
            "avg_win_pct": self.avg_win_pct,
            "avg_loss_pct": self.avg_loss_pct,
            # Infinite (no losing trades) is not valid JSON
            "profit_factor": self.profit_factor if math.isfinite(self.profit_factor) else None,
            "avg_duration_hours": self.avg_duration_hours,
            "params": self.params,
            "monthly_returns": dict(self.monthly_returns),
            "trades": [t.to_dict() for t in self.trades],
        }
        if include_curve:
            data["equity_curve"] = list(self.equity_curve)
        return data

"""
Robustness validation types: per-window result, cross-window summary, report.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass
class WindowResult:
    """One trailing window. Metrics are None when the window failed."""
    index: int  # 1 = most recent window
    start: pd.Timestamp
    end: pd.Timestamp  # Exclusive
    profit_pct: Optional[float] = None
    total_trades: Optional[int] = None
    win_rate: Optional[float] = None
    max_drawdown_pct: Optional[float] = None
    sharpe_ratio: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def period(self) -> str:
        return f"{self.start.date()} - {self.end.date()}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "period": self.period,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "profit_pct": self.profit_pct,
            "total_trades": self.total_trades,
            "win_rate": self.win_rate,
            "max_drawdown_pct": self.max_drawdown_pct,
            "sharpe_ratio": self.sharpe_ratio,
            "error": self.error,
        }


@dataclass
class RobustnessSummary:
    """Statistics over the successful windows (population std dev)."""
    avg_profit_pct: float
    profit_std_dev: float
    avg_win_rate: float
    avg_drawdown_pct: float
    profitable_months: int
    profitable_months_percent: float
    robustness_factor: float
    windows_evaluated: int
    windows_failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class RobustnessReport:
    """Windows in chronological order plus their summary."""
    symbol: str
    timeframe: str
    params: Dict[str, Any]
    windows: List[WindowResult] = field(default_factory=list)
    summary: Optional[RobustnessSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timeframe": self.timeframe,
            "params": self.params,
            "windows": [w.to_dict() for w in self.windows],
            "summary": self.summary.to_dict() if self.summary is not None else None,
        }

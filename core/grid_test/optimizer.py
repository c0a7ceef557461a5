"""
Parameter optimizer: exhaustive grid search over strategy parameters.

Candles are fetched once; every grid point is an independent simulation over
the same candle slice, so points run in parallel (ProcessPoolExecutor) and
are reduced in grid order afterwards. Ties keep the first point found.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..data.candles import Candle, CandleProvider, slice_candles
from ..evaluation.backtest import fetch_request_candles, simulate_candles
from ..evaluation.simulation_types import BacktestResult
from ..shared.defaults import (
    SCORE_PROFIT_WEIGHT,
    SCORE_DRAWDOWN_WEIGHT,
    SCORE_SHARPE_WEIGHT,
    SCORE_WIN_RATE_WEIGHT,
)
from ..shared.errors import InsufficientData
from ..shared.execution import run_tasks
from ..signals.config import BacktestRequest, StrategyParams
from .grid_search import ParameterGrid


logger = logging.getLogger(__name__)


def composite_score(result: BacktestResult) -> float:
    """2 x profit% - 3 x max drawdown% + 10 x Sharpe + 0.5 x win rate%."""
    return (
        SCORE_PROFIT_WEIGHT * result.profit_pct
        - SCORE_DRAWDOWN_WEIGHT * result.max_drawdown_pct
        + SCORE_SHARPE_WEIGHT * result.sharpe_ratio
        + SCORE_WIN_RATE_WEIGHT * result.win_rate
    )


@dataclass
class GridPointResult:
    """Outcome of one grid point: a result and score, or the error that replaced them."""
    params: StrategyParams
    result: Optional[BacktestResult] = None
    score: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data = {"params": self.params.to_dict(), "score": self.score, "error": self.error}
        if self.result is not None:
            data.update({
                "profit_pct": self.result.profit_pct,
                "max_drawdown_pct": self.result.max_drawdown_pct,
                "sharpe_ratio": self.result.sharpe_ratio,
                "win_rate": self.result.win_rate,
                "total_trades": self.result.total_trades,
            })
        return data


@dataclass
class OptimizationResult:
    """Best grid point plus every evaluated point in grid order."""
    best_params: StrategyParams
    best_score: float
    best_result: BacktestResult
    points: List[GridPointResult] = field(default_factory=list)
    failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_params": self.best_params.to_dict(),
            "best_score": self.best_score,
            "best_result": self.best_result.to_dict(include_curve=False),
            "failed": self.failed,
            "points": [p.to_dict() for p in self.points],
        }


def _evaluate_point(
    candles: Sequence[Candle],
    params: StrategyParams,
    initial_balance: float,
    symbol: str,
    timeframe: str,
    start_date: pd.Timestamp,
    end_date: pd.Timestamp,
) -> BacktestResult:
    """Worker: one simulation + analysis (module-level so it pickles)."""
    return simulate_candles(candles, params, initial_balance, symbol, timeframe, start_date, end_date)


def _describe(params: StrategyParams) -> str:
    return (
        f"size={params.position_size_pct}% SL={params.stop_loss_pct}% "
        f"TP={params.take_profit_pct}%"
    )


def optimize_strategy(
    request: BacktestRequest,
    grid: Optional[ParameterGrid] = None,
    provider: Optional[CandleProvider] = None,
    candles: Optional[Sequence[Candle]] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> OptimizationResult:
    """
    Grid-search strategy parameters for one symbol and range.

    Args:
        request: Symbol, timeframe, range and balance (request.params is the grid base)
        grid: Candidate values (default: position size x stop loss x take profit)
        provider: Candle source, used once when candles is None
        candles: Pre-fetched candles
        max_workers: Worker pool size (default: CPU count; 1 = sequential)
        cancel_event: Set to abort between grid points (raises SweepCancelled)

    Returns:
        OptimizationResult

    Raises:
        InsufficientData: Every grid point failed (or the grid is empty)
    """
    grid = grid if grid is not None else ParameterGrid(base=request.params)
    if candles is None:
        if provider is None:
            raise ValueError("Either provider or candles must be given")
        candles = fetch_request_candles(request, provider)
    else:
        candles = slice_candles(candles, request.start_time, request.end_time)
    candles = list(candles)

    param_sets = list(grid.iter_params())
    if not param_sets:
        raise InsufficientData("Parameter grid has no valid combination", context={"grid": grid.values})

    logger.info(
        f"Optimizing {request.symbol} {request.timeframe}: "
        f"{len(param_sets)} combinations over {len(candles)} bars"
    )

    task_args = [
        (candles, params, request.initial_balance, request.symbol, request.timeframe,
         request.start_time, request.end_time)
        for params in param_sets
    ]
    outcomes = run_tasks(
        _evaluate_point,
        task_args,
        max_workers=max_workers,
        cancel_event=cancel_event,
        labels=[_describe(p) for p in param_sets],
    )

    points: List[GridPointResult] = []
    best: Optional[GridPointResult] = None
    for params, outcome in zip(param_sets, outcomes):
        if not outcome.ok:
            points.append(GridPointResult(params=params, error=outcome.error))
            continue
        result = outcome.value
        score = composite_score(result)
        point = GridPointResult(params=params, result=result, score=score)
        points.append(point)
        logger.debug(
            f"{_describe(params)}: profit={result.profit_pct:.2f}% "
            f"DD={result.max_drawdown_pct:.2f}% Sharpe={result.sharpe_ratio:.2f} "
            f"WinRate={result.win_rate:.2f}% score={score:.2f}"
        )
        # Strictly greater: ties keep the earlier grid point
        if best is None or score > best.score:
            best = point
            logger.info(f"New best: {_describe(params)} (score {score:.2f})")

    failed = sum(1 for p in points if not p.ok)
    if best is None:
        raise InsufficientData(
            f"All {len(points)} grid points failed",
            context={"symbol": request.symbol, "timeframe": request.timeframe, "first_error": points[0].error},
        )

    logger.info(
        f"Optimization finished: best {_describe(best.params)}, score {best.score:.2f}, "
        f"profit {best.result.profit_pct:.2f}%, win rate {best.result.win_rate:.2f}% "
        f"({failed} failed)"
    )
    return OptimizationResult(
        best_params=best.params,
        best_score=best.score,
        best_result=best.result,
        points=points,
        failed=failed,
    )

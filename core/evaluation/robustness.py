"""
Robustness validation over trailing monthly windows.

Each window is backtested independently with the same starting balance and
the same parameters (balances are not chained). A strategy is robust when
its monthly returns are consistently positive with low dispersion, which is
what the robustness factor measures:

    factor = [avg > 0] x avg / max(std, 1) x profitable% / 100
"""
import logging
import threading
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..data.candles import Candle, CandleProvider, TimeLike, slice_candles, to_utc_timestamp
from ..shared.defaults import (
    INITIAL_BALANCE,
    ROBUSTNESS_MONTHS,
    ROBUSTNESS_WINDOW_DAYS,
    ROBUSTNESS_STD_FLOOR,
)
from ..shared.errors import InsufficientData, InvalidParameters
from ..shared.execution import run_tasks
from ..signals.config import BacktestRequest, StrategyParams
from .backtest import fetch_request_candles, simulate_candles
from .robustness_types import RobustnessReport, RobustnessSummary, WindowResult


logger = logging.getLogger(__name__)


def trailing_windows(
    now: pd.Timestamp,
    months: int,
    window_days: int = ROBUSTNESS_WINDOW_DAYS,
) -> List[Tuple[int, pd.Timestamp, pd.Timestamp]]:
    """
    Half-open windows [end - window_days, end) with end = now - (k - 1) x window_days.

    Returns:
        List of (k, start, end), oldest window first (k = months ... 1)
    """
    span = pd.Timedelta(days=window_days)
    windows = []
    for k in range(months, 0, -1):
        end = now - (k - 1) * span
        windows.append((k, end - span, end))
    return windows


def summarize_windows(
    windows: Sequence[WindowResult],
    std_floor: float = ROBUSTNESS_STD_FLOOR,
) -> RobustnessSummary:
    """
    Aggregate statistics over successful windows.

    Raises:
        InsufficientData: If no window succeeded
    """
    ok = [w for w in windows if w.ok]
    failed = len(windows) - len(ok)
    if not ok:
        raise InsufficientData(
            f"All {len(windows)} robustness windows failed",
            context={"first_error": windows[0].error if windows else None},
        )

    profits = np.array([w.profit_pct for w in ok], dtype=float)
    avg_profit = float(profits.mean())
    std_profit = float(profits.std())
    profitable = int((profits > 0).sum())
    profitable_pct = profitable / len(ok) * 100

    factor = (1.0 if avg_profit > 0 else 0.0) * (avg_profit / max(std_profit, std_floor)) * (profitable_pct / 100)

    return RobustnessSummary(
        avg_profit_pct=avg_profit,
        profit_std_dev=std_profit,
        avg_win_rate=float(np.mean([w.win_rate for w in ok])),
        avg_drawdown_pct=float(np.mean([w.max_drawdown_pct for w in ok])),
        profitable_months=profitable,
        profitable_months_percent=profitable_pct,
        robustness_factor=factor,
        windows_evaluated=len(ok),
        windows_failed=failed,
    )


def _evaluate_window(
    candles: Sequence[Candle],
    params: StrategyParams,
    initial_balance: float,
    symbol: str,
    timeframe: str,
    start: pd.Timestamp,
    end: pd.Timestamp,
):
    """Worker: backtest one window (module-level so it pickles)."""
    window = slice_candles(candles, start, end, inclusive_end=False)
    return simulate_candles(window, params, initial_balance, symbol, timeframe, start, end)


def validate_robustness(
    symbol: str,
    timeframe: str,
    params: Optional[StrategyParams] = None,
    months: int = ROBUSTNESS_MONTHS,
    provider: Optional[CandleProvider] = None,
    candles: Optional[Sequence[Candle]] = None,
    now: Optional[TimeLike] = None,
    initial_balance: float = INITIAL_BALANCE,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RobustnessReport:
    """
    Backtest fixed parameters over `months` trailing 30-day windows.

    Args:
        symbol: Instrument symbol
        timeframe: Bar size
        params: Strategy parameters (default: baseline)
        months: Number of windows
        provider: Candle source; the whole span is fetched once
        candles: Pre-fetched candles covering the span
        now: End of the most recent window (default: current UTC time)
        initial_balance: Starting balance of every window
        max_workers: Worker pool size (1 = sequential)
        cancel_event: Set to abort between windows (raises SweepCancelled)

    Returns:
        RobustnessReport with windows oldest first

    Raises:
        InvalidParameters: months < 1
        InsufficientData: Every window failed
    """
    if isinstance(months, bool) or not isinstance(months, int) or months < 1:
        raise InvalidParameters("months", months, "must be a positive integer")
    params = params if params is not None else StrategyParams()
    now = to_utc_timestamp(now) if now is not None else pd.Timestamp.now(tz="UTC")
    windows = trailing_windows(now, months)

    if candles is None:
        if provider is None:
            raise ValueError("Either provider or candles must be given")
        span = BacktestRequest(
            symbol=symbol,
            timeframe=timeframe,
            start_time=windows[0][1],
            end_time=now,
            initial_balance=initial_balance,
            params=params,
        )
        candles = fetch_request_candles(span, provider)
    candles = list(candles)

    logger.info(
        f"Validating robustness of {symbol} {timeframe} over {months} windows "
        f"of {ROBUSTNESS_WINDOW_DAYS} days ending {now}"
    )

    task_args = [
        (candles, params, initial_balance, symbol, timeframe, start, end)
        for _, start, end in windows
    ]
    outcomes = run_tasks(
        _evaluate_window,
        task_args,
        max_workers=max_workers,
        cancel_event=cancel_event,
        labels=[f"window {start.date()} - {end.date()}" for _, start, end in windows],
    )

    results: List[WindowResult] = []
    for (k, start, end), outcome in zip(windows, outcomes):
        if not outcome.ok:
            results.append(WindowResult(index=k, start=start, end=end, error=outcome.error))
            continue
        r = outcome.value
        window = WindowResult(
            index=k,
            start=start,
            end=end,
            profit_pct=r.profit_pct,
            total_trades=r.total_trades,
            win_rate=r.win_rate,
            max_drawdown_pct=r.max_drawdown_pct,
            sharpe_ratio=r.sharpe_ratio,
        )
        logger.debug(
            f"Window {window.period}: profit={r.profit_pct:.2f}% trades={r.total_trades} "
            f"win rate={r.win_rate:.2f}%"
        )
        results.append(window)

    summary = summarize_windows(results)
    logger.info(
        f"Average monthly profit {summary.avg_profit_pct:.2f}% (std {summary.profit_std_dev:.2f}%), "
        f"profitable {summary.profitable_months}/{summary.windows_evaluated} "
        f"({summary.profitable_months_percent:.2f}%), robustness factor {summary.robustness_factor:.4f}"
    )
    return RobustnessReport(
        symbol=symbol,
        timeframe=timeframe,
        params=params.to_dict(),
        windows=results,
        summary=summary,
    )

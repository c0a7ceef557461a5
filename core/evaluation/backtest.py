"""
Backtest facade: fetch candles, simulate, analyze.

All data is fetched before the simulation starts; the simulation core never
touches the network.
"""
import logging
from typing import List, Optional, Sequence

import pandas as pd

from ..data.candles import Candle, CandleProvider, slice_candles, validate_candles
from ..shared.errors import BacktestError, UpstreamFetchFailure
from ..signals.config import BacktestRequest, StrategyParams
from .analyzer import analyze_run
from .simulation_types import BacktestResult
from .simulator import PositionSimulator


logger = logging.getLogger(__name__)


def fetch_request_candles(request: BacktestRequest, provider: CandleProvider) -> List[Candle]:
    """
    Fetch the candles a request covers.

    Provider errors that are not BacktestErrors are wrapped in UpstreamFetchFailure.
    """
    try:
        candles = provider.fetch_candles(
            request.symbol, request.timeframe, request.start_time, request.end_time
        )
    except BacktestError:
        raise
    except Exception as e:
        raise UpstreamFetchFailure(request.symbol, request.timeframe, str(e)) from e
    candles = list(candles)
    validate_candles(candles)
    return candles


def simulate_candles(
    candles: Sequence[Candle],
    params: StrategyParams,
    initial_balance: float,
    symbol: str,
    timeframe: str,
    start_date: pd.Timestamp,
    end_date: pd.Timestamp,
) -> BacktestResult:
    """Simulate and analyze one parameter set over already-fetched candles."""
    run = PositionSimulator(params, initial_balance).run(candles)
    return analyze_run(run, symbol, timeframe, start_date, end_date, params=params.to_dict())


def run_backtest(
    request: BacktestRequest,
    provider: Optional[CandleProvider] = None,
    candles: Optional[Sequence[Candle]] = None,
) -> BacktestResult:
    """
    Run one backtest.

    Args:
        request: Symbol, timeframe, range, balance and strategy parameters
        provider: Candle source (used when candles is None)
        candles: Pre-fetched candles; restricted to the request range

    Returns:
        BacktestResult

    Raises:
        InsufficientData: Too few candles for the indicator warm-up
        UpstreamFetchFailure: The provider failed
    """
    if candles is None:
        if provider is None:
            raise ValueError("Either provider or candles must be given")
        candles = fetch_request_candles(request, provider)
    else:
        candles = slice_candles(candles, request.start_time, request.end_time)

    logger.info(
        f"Backtesting {request.symbol} {request.timeframe} "
        f"{request.start_time.date()} -> {request.end_time.date()} ({len(candles)} bars)"
    )
    result = simulate_candles(
        candles,
        request.params,
        request.initial_balance,
        request.symbol,
        request.timeframe,
        request.start_time,
        request.end_time,
    )
    logger.info(
        f"Backtest finished: {result.total_trades} trades, "
        f"profit {result.profit_pct:+.2f}%, max DD {result.max_drawdown_pct:.2f}%, "
        f"Sharpe {result.sharpe_ratio:.2f}"
    )
    return result

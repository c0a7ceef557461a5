"""
Trading pair screening: volume, volatility, liquidity, spread and trend per symbol.

Independent of the simulator; it only reads candles and the ADX indicator.
Scores are heuristic points (see pair_score) used to rank symbols.
"""
import logging
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..data.candles import Candle, CandleProvider, TimeLike, to_utc_timestamp
from ..data.download import timeframe_hours
from ..indicators.technical import compute_adx
from ..shared.defaults import DEFAULT_TIMEFRAME, PAIR_LOOKBACK_DAYS, PAIR_MIN_CANDLES


logger = logging.getLogger(__name__)


@dataclass
class PairMetrics:
    """Screening metrics for one symbol."""
    symbol: str
    volume_24h: float
    volatility: float  # Mean (high - low) / low, in %
    liquidity: float  # volume_24h / volatility
    spread: float  # Estimated from volatility
    trend: float  # Signed ADX: + when +DI > -DI
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def pair_score(volume_24h: float, volatility: float, liquidity: float, spread: float, trend: float) -> float:
    """
    Composite screening score.

    - Volume: up to 30 points (full at 1M)
    - Volatility: 2 points per %
    - Liquidity: up to 20 points (full at 1M)
    - Spread: 10 points below 0.1, else 1 / spread
    - Trend strength: up to 20 points (full above ADX 25)
    """
    return (
        (30 if volume_24h > 1_000_000 else volume_24h / 33333)
        + volatility * 2
        + (20 if liquidity > 1_000_000 else liquidity / 50000)
        + (10 if spread < 0.1 else 1 / spread)
        + (20 if abs(trend) > 25 else abs(trend) * 0.8)
    )


def compute_pair_metrics(symbol: str, candles: Sequence[Candle], timeframe: str) -> PairMetrics:
    """Compute PairMetrics from an ascending candle series."""
    bars_per_day = max(1, int(math.ceil(24 / timeframe_hours(timeframe))))
    volume_24h = float(sum(c.volume for c in candles[-bars_per_day:]))

    ranges = [(c.high - c.low) / c.low * 100 for c in candles if c.low > 0]
    volatility = float(np.mean(ranges)) if ranges else 0.0
    liquidity = volume_24h / volatility if volatility > 0 else 0.0
    spread = volatility * 0.01

    adx = compute_adx(
        [c.high for c in candles],
        [c.low for c in candles],
        [c.close for c in candles],
    )
    if len(adx.adx) > 0:
        direction = 1 if adx.plus_di[-1] > adx.minus_di[-1] else -1
        trend = float(adx.adx[-1]) * direction
    else:
        trend = 0.0

    return PairMetrics(
        symbol=symbol,
        volume_24h=volume_24h,
        volatility=volatility,
        liquidity=liquidity,
        spread=spread,
        trend=trend,
        score=pair_score(volume_24h, volatility, liquidity, spread, trend),
    )


def analyze_pairs(
    symbols: Sequence[str],
    provider: CandleProvider,
    timeframe: str = DEFAULT_TIMEFRAME,
    lookback_days: int = PAIR_LOOKBACK_DAYS,
    now: Optional[TimeLike] = None,
    min_candles: int = PAIR_MIN_CANDLES,
) -> List[PairMetrics]:
    """
    Screen symbols over the last lookback_days and rank them.

    Symbols with fewer than min_candles candles, or whose fetch/analysis
    fails, are logged and skipped.

    Returns:
        PairMetrics sorted by descending score
    """
    end = to_utc_timestamp(now) if now is not None else pd.Timestamp.now(tz="UTC")
    start = end - pd.Timedelta(days=lookback_days)
    logger.info(f"Analyzing {len(symbols)} pairs on {timeframe} over {lookback_days} days")

    results = []
    for symbol in symbols:
        logger.info(f"Analyzing {symbol}")
        try:
            candles = provider.fetch_candles(symbol, timeframe, start, end)
            if len(candles) < min_candles:
                logger.warning(
                    f"Not enough data for {symbol}: {len(candles)} candles (need {min_candles})"
                )
                continue
            metrics = compute_pair_metrics(symbol, candles, timeframe)
        except Exception as e:
            logger.error(f"Failed to analyze {symbol}: {e}")
            continue
        logger.debug(
            f"{symbol}: score {metrics.score:.2f}, volume {metrics.volume_24h:.2f}, "
            f"volatility {metrics.volatility:.2f}%"
        )
        results.append(metrics)

    results.sort(key=lambda m: m.score, reverse=True)
    if results:
        logger.info(f"Top pairs: {', '.join(m.symbol for m in results[:3])}")
    return results

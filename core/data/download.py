"""Download historical candles from Yahoo Finance with pagination and a keyed cache."""
import logging
import re
import time
import warnings
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd
import yfinance as yf

from ..shared.errors import UpstreamFetchFailure
from .cache import CandleCache
from .candles import Candle, candles_from_frame, normalize_frame, to_utc_timestamp

# Suppress yfinance's pandas deprecation warnings (will be fixed in future yfinance version)
warnings.filterwarnings('ignore', message='.*Timestamp.utcnow.*')

logger = logging.getLogger(__name__)

# Timeframe -> (yahoo interval, max days per request, resample rule or None)
# Yahoo caps intraday history per request; larger ranges are fetched in pages.
TIMEFRAMES: Dict[str, Tuple[str, int, Optional[str]]] = {
    "1m": ("1m", 7, None),
    "5m": ("5m", 59, None),
    "15m": ("15m", 59, None),
    "30m": ("30m", 59, None),
    "1h": ("1h", 700, None),
    "4h": ("1h", 700, "4h"),
    "1d": ("1d", 3650, None),
    "1w": ("1wk", 3650, None),
}

MAX_RETRIES = 3
RETRY_BACKOFF_SECONDS = 2.0
PAGE_DELAY_SECONDS = 0.5  # Be gentle with the API between pages


def timeframe_hours(timeframe: str) -> float:
    """Hours per bar for '<n>m', '<n>h', '<n>d' timeframes (1 when unparseable)."""
    match = re.match(r"^(\d+)([mhdw])$", timeframe.strip())
    if not match:
        return 1.0
    value = int(match.group(1))
    unit = match.group(2)
    if unit == "m":
        return value / 60
    if unit == "h":
        return float(value)
    if unit == "d":
        return value * 24.0
    return value * 24.0 * 7


def _resample(df: pd.DataFrame, rule: str) -> pd.DataFrame:
    """Aggregate bars to a coarser timeframe (left-labelled, left-closed)."""
    out = df.resample(rule, label="left", closed="left").agg({
        "Open": "first",
        "High": "max",
        "Low": "min",
        "Close": "last",
        "Volume": "sum",
    })
    return out.dropna(subset=["Open", "Close"])


class YahooCandleProvider:
    """
    Candle provider backed by yfinance.

    Features:
    - Pagination: ranges longer than the interval's request cap are split
    - Keyed CSV cache: a repeated request never hits the network
    - Bounded retry with linear backoff per page; exhausted retries raise
      UpstreamFetchFailure
    """

    def __init__(
        self,
        cache: Optional[CandleCache] = None,
        use_cache: bool = True,
        max_retries: int = MAX_RETRIES,
        backoff_seconds: float = RETRY_BACKOFF_SECONDS,
        page_delay_seconds: float = PAGE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.cache = cache or CandleCache()
        self.use_cache = use_cache
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.page_delay_seconds = page_delay_seconds
        self.sleep = sleep

    def _download_page(
        self,
        symbol: str,
        timeframe: str,
        interval: str,
        start: pd.Timestamp,
        end: pd.Timestamp,
    ) -> pd.DataFrame:
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return yf.download(
                    symbol,
                    start=start.to_pydatetime(),
                    end=end.to_pydatetime(),
                    interval=interval,
                    progress=False,
                    auto_adjust=False,
                )
            except Exception as e:
                last_error = e
                logger.warning(f"Page {start} - {end} for {symbol} failed (attempt {attempt}/{self.max_retries}): {e}")
                if attempt < self.max_retries:
                    self.sleep(self.backoff_seconds * attempt)
        raise UpstreamFetchFailure(symbol, timeframe, str(last_error))

    def fetch_candles(
        self,
        symbol: str,
        timeframe: str,
        start_time,
        end_time,
    ) -> List[Candle]:
        """
        Fetch candles for [start_time, end_time], ascending, without duplicates.

        Args:
            symbol: Yahoo ticker (e.g. 'BTC-USD')
            timeframe: One of TIMEFRAMES ('15m', '1h', '4h', '1d', ...)
            start_time: Range start (inclusive)
            end_time: Range end (inclusive)

        Returns:
            List of Candle (empty when Yahoo has no data for the range)
        """
        if timeframe not in TIMEFRAMES:
            raise UpstreamFetchFailure(
                symbol, timeframe, f"unsupported timeframe, available: {list(TIMEFRAMES)}"
            )
        start = to_utc_timestamp(start_time)
        end = to_utc_timestamp(end_time)

        if self.use_cache:
            cached = self.cache.get(symbol, timeframe, start, end)
            if cached is not None:
                return cached

        interval, max_days, resample_rule = TIMEFRAMES[timeframe]
        page_span = pd.Timedelta(days=max_days)

        frames = []
        page_start = start
        while page_start < end:
            page_end = min(page_start + page_span, end)
            logger.debug(f"Fetching {symbol} {interval} from {page_start} to {page_end}")
            page = self._download_page(symbol, timeframe, interval, page_start, page_end)
            if page is not None and not page.empty:
                frames.append(normalize_frame(page))
            page_start = page_end
            if page_start < end and self.page_delay_seconds > 0:
                self.sleep(self.page_delay_seconds)

        if not frames:
            logger.warning(f"No data returned for {symbol} ({timeframe}) between {start} and {end}")
            return []

        df = normalize_frame(pd.concat(frames))
        if resample_rule is not None:
            df = _resample(df, resample_rule)
        df = df[(df.index >= start) & (df.index <= end)]

        candles = candles_from_frame(df)
        logger.info(f"Fetched {len(candles)} candles for {symbol} ({timeframe})")
        if self.use_cache and candles:
            self.cache.put(symbol, timeframe, start, end, candles)
        return candles

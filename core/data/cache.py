"""
Keyed CSV cache for fetched candle series.

One file per (symbol, timeframe, start, end) request:
    <data_dir>/<symbol>_<timeframe>_<start_ms>_<end_ms>.csv
A cached series is returned as-is; there is no incremental update, a new
range is a new key.
"""
import logging
import re
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from .candles import Candle, candles_from_frame, candles_to_frame, to_utc_timestamp


logger = logging.getLogger(__name__)

# Store data in project root /historical_data
DEFAULT_CACHE_DIR = Path(__file__).parent.parent.parent / "historical_data"


def _safe_symbol(symbol: str) -> str:
    """Filesystem-safe symbol (e.g. BTC-USD, ^GSPC -> _GSPC)."""
    return re.sub(r"[^\w\-.]", "_", str(symbol))


class CandleCache:
    """Reads and writes candle series as CSV files keyed by request parameters."""

    def __init__(self, data_dir: Union[str, Path, None] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else DEFAULT_CACHE_DIR

    def key_for(self, symbol: str, timeframe: str, start_time, end_time) -> str:
        start_ms = int(to_utc_timestamp(start_time).value // 1_000_000)
        end_ms = int(to_utc_timestamp(end_time).value // 1_000_000)
        return f"{_safe_symbol(symbol)}_{timeframe}_{start_ms}_{end_ms}"

    def path_for(self, symbol: str, timeframe: str, start_time, end_time) -> Path:
        return self.data_dir / f"{self.key_for(symbol, timeframe, start_time, end_time)}.csv"

    def get(self, symbol: str, timeframe: str, start_time, end_time) -> Optional[List[Candle]]:
        """Return cached candles, or None on a miss or an unreadable file."""
        path = self.path_for(symbol, timeframe, start_time, end_time)
        if not path.exists():
            return None
        try:
            df = pd.read_csv(path, index_col=0, parse_dates=True)
            candles = candles_from_frame(df)
        except (OSError, ValueError, pd.errors.ParserError) as e:
            logger.warning(f"Ignoring unreadable cache file {path}: {e}")
            return None
        logger.info(f"Loading {symbol} ({timeframe}) from cache: {path}")
        return candles

    def put(self, symbol: str, timeframe: str, start_time, end_time, candles: List[Candle]) -> Path:
        """Write candles to the cache and return the file path."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(symbol, timeframe, start_time, end_time)
        candles_to_frame(candles).to_csv(path)
        logger.info(f"Saved {len(candles)} candles to {path}")
        return path

    def clear(self) -> int:
        """Delete all cached CSV files. Returns the number removed."""
        if not self.data_dir.exists():
            return 0
        removed = 0
        for path in self.data_dir.glob("*.csv"):
            path.unlink()
            removed += 1
        return removed

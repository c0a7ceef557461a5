"""
Scheduler for the live signal loop.

Periodically fetches the latest candles and asks the strategy for a
decision. Signals are only logged and returned; no orders are placed.
"""
import logging
import threading
import time
from typing import Callable, List, Optional

import pandas as pd

from ..data.candles import CandleProvider
from ..data.download import timeframe_hours
from ..shared.defaults import DEFAULT_SYMBOL, DEFAULT_TIMEFRAME, SIGNAL_LOOKBACK_BARS
from ..shared.types import SignalType, TradingSignal
from ..signals.trend_rsi import TrendRsiStrategy


logger = logging.getLogger(__name__)


def _utc_now() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC")


class SignalScheduler:
    """
    Runs the trend/RSI decision on a fixed interval.

    Responsibilities:
    - Fetch the most recent lookback window before every decision
    - Skip repeated decisions on a bar that was already processed
    - Sleep in short chunks so a stop request is honoured promptly
    """

    def __init__(
        self,
        provider: CandleProvider,
        strategy: Optional[TrendRsiStrategy] = None,
        symbol: str = DEFAULT_SYMBOL,
        timeframe: str = DEFAULT_TIMEFRAME,
        interval_seconds: float = 60.0,
        lookback_bars: int = SIGNAL_LOOKBACK_BARS,
        clock: Callable[[], pd.Timestamp] = _utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize scheduler.

        Args:
            provider: Candle source
            strategy: Decision function (default: TrendRsiStrategy with default params)
            symbol: Instrument symbol
            timeframe: Bar size
            interval_seconds: Seconds between decisions
            lookback_bars: Bars fetched for every decision
            clock: Returns the current UTC time (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        self.provider = provider
        self.strategy = strategy if strategy is not None else TrendRsiStrategy()
        self.symbol = symbol
        self.timeframe = timeframe
        self.interval_seconds = interval_seconds
        self.lookback_bars = lookback_bars
        self.clock = clock
        self.sleep = sleep

        # Track last processed bar to avoid duplicate decisions
        self.last_processed_bar: Optional[pd.Timestamp] = None

    def lookback_window(self):
        """(start, end) of the candle window fetched for one decision."""
        end = self.clock()
        start = end - pd.Timedelta(hours=timeframe_hours(self.timeframe) * self.lookback_bars)
        return start, end

    def run_once(self) -> Optional[TradingSignal]:
        """
        Fetch the latest candles and analyze them.

        Returns:
            The signal, or None when the latest bar was already processed
        """
        start, end = self.lookback_window()
        candles = self.provider.fetch_candles(self.symbol, self.timeframe, start, end)
        if candles and candles[-1].timestamp == self.last_processed_bar:
            logger.debug(f"Bar {self.last_processed_bar} already processed")
            return None

        signal = self.strategy.analyze(candles)
        if candles:
            self.last_processed_bar = candles[-1].timestamp

        if signal.signal_type == SignalType.HOLD:
            logger.info(f"{self.symbol}: HOLD - {signal.reason}")
        else:
            logger.info(
                f"{self.symbol}: {signal.signal_type.value.upper()} at {signal.price} - {signal.reason}"
            )
        return signal

    def run_forever(
        self,
        max_iterations: Optional[int] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> List[TradingSignal]:
        """
        Loop run_once() until stopped.

        A failing iteration is logged and the loop continues.

        Args:
            max_iterations: Stop after this many iterations (None = unbounded)
            stop_event: Stop when set (checked between sleeps)

        Returns:
            Signals produced (HOLD included)
        """
        signals = []
        iteration = 0
        logger.info(
            f"Starting signal loop for {self.symbol} ({self.timeframe}), "
            f"every {self.interval_seconds:.0f}s"
        )
        while max_iterations is None or iteration < max_iterations:
            if stop_event is not None and stop_event.is_set():
                break
            iteration += 1
            try:
                signal = self.run_once()
                if signal is not None:
                    signals.append(signal)
            except Exception as e:
                logger.error(f"Signal iteration {iteration} failed, skipping this cycle: {e}")

            if max_iterations is not None and iteration >= max_iterations:
                break
            self._sleep_interval(stop_event)

        logger.info(f"Signal loop stopped after {iteration} iterations")
        return signals

    def _sleep_interval(self, stop_event: Optional[threading.Event]) -> None:
        # Sleep in chunks to allow graceful shutdown
        remaining = self.interval_seconds
        while remaining > 0:
            if stop_event is not None and stop_event.is_set():
                return
            chunk = min(remaining, 5.0)
            self.sleep(chunk)
            remaining -= chunk

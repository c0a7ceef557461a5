"""
Position lifecycle simulator for the trend/RSI strategy.

Walks a candle series bar by bar holding at most one position:
- Exit checks first (stop-loss, then take-profit, then trend reversal)
- Entry checks only when flat and no position closed on the same bar
- Equity is the realized balance; it only moves when a trade closes
- A position still open on the last bar is closed at that bar's close
"""
import logging
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from ..data.candles import Candle
from ..indicators.series import IndicatorSet, IndicatorValues, build_indicator_set
from ..shared.errors import InsufficientData
from ..shared.types import Side
from ..signals.config import StrategyParams
from .simulation_types import ExitReason, Position, SimulationRun, Trade


logger = logging.getLogger(__name__)


def month_key(timestamp: pd.Timestamp) -> str:
    """UTC calendar month of a timestamp as 'YYYY-MM'."""
    ts = timestamp.tz_convert("UTC") if timestamp.tzinfo is not None else timestamp
    return f"{ts.year:04d}-{ts.month:02d}"


class PositionSimulator:
    """
    Deterministic single-position backtest state machine (FLAT / IN_POSITION).

    Every run is self-contained: peak, drawdown and balance are local to
    run(), so one simulator instance can be reused for many runs.
    """

    def __init__(self, params: StrategyParams, initial_balance: float):
        """
        Initialize the simulator.

        Args:
            params: Strategy parameters (indicator periods, thresholds, risk %)
            initial_balance: Starting account balance
        """
        self.params = params
        self.initial_balance = initial_balance

    def build_indicators(self, candles: Sequence[Candle]) -> IndicatorSet:
        """Compute RSI and EMAs once over the full close sequence."""
        return build_indicator_set(
            [c.close for c in candles],
            rsi_period=self.params.rsi_period,
            ema_short_period=self.params.ema_short_period,
            ema_long_period=self.params.ema_long_period,
        )

    def _check_exit(
        self,
        position: Position,
        candle: Candle,
        values: IndicatorValues,
    ) -> Optional[Tuple[float, ExitReason]]:
        """Return (exit_price, reason) if the position closes on this bar."""
        p = self.params
        if position.side == Side.LONG:
            if candle.low <= position.stop_loss:
                return position.stop_loss, ExitReason.STOP_LOSS
            if candle.high >= position.take_profit:
                return position.take_profit, ExitReason.TAKE_PROFIT
            if values.bearish_cross and values.rsi > p.rsi_overbought:
                return candle.close, ExitReason.REVERSAL
        else:
            if candle.high >= position.stop_loss:
                return position.stop_loss, ExitReason.STOP_LOSS
            if candle.low <= position.take_profit:
                return position.take_profit, ExitReason.TAKE_PROFIT
            if values.bullish_cross and values.rsi < p.rsi_oversold:
                return candle.close, ExitReason.REVERSAL
        return None

    def _check_entry(self, candle: Candle, values: IndicatorValues, balance: float) -> Optional[Position]:
        """Open a position if the EMA cross and RSI zone agree on a side."""
        p = self.params
        if values.bullish_cross and values.rsi < p.rsi_oversold:
            side = Side.LONG
        elif values.bearish_cross and values.rsi > p.rsi_overbought:
            side = Side.SHORT
        else:
            return None

        entry_price = candle.close
        size = (balance * p.position_size_pct / 100) / entry_price
        if side == Side.LONG:
            stop_loss = entry_price * (1 - p.stop_loss_pct / 100)
            take_profit = entry_price * (1 + p.take_profit_pct / 100)
        else:
            stop_loss = entry_price * (1 + p.stop_loss_pct / 100)
            take_profit = entry_price * (1 - p.take_profit_pct / 100)

        logger.debug(
            f"{candle.timestamp}: Opened {side.value.upper()} at {entry_price:.4f} "
            f"(SL {stop_loss:.4f}, TP {take_profit:.4f}, size {size:.6f})"
        )
        return Position(
            side=side,
            entry_price=entry_price,
            entry_timestamp=candle.timestamp,
            stop_loss=stop_loss,
            take_profit=take_profit,
            size=size,
        )

    @staticmethod
    def _close(position: Position, candle: Candle, exit_price: float, reason: ExitReason) -> Trade:
        profit = position.profit_at(exit_price)
        trade = Trade(
            side=position.side,
            entry_timestamp=position.entry_timestamp,
            entry_price=position.entry_price,
            exit_timestamp=candle.timestamp,
            exit_price=exit_price,
            size=position.size,
            profit=profit,
            profit_pct=profit / (position.size * position.entry_price) * 100,
            duration_hours=(candle.timestamp - position.entry_timestamp).total_seconds() / 3600,
            exit_reason=reason,
        )
        logger.debug(
            f"{candle.timestamp}: Closed {position.side.value.upper()} by {reason.value}. "
            f"Entry {position.entry_price:.4f}, exit {exit_price:.4f}, "
            f"profit {profit:.2f} ({trade.profit_pct:.2f}%)"
        )
        return trade

    def run(
        self,
        candles: Sequence[Candle],
        indicators: Optional[IndicatorSet] = None,
    ) -> SimulationRun:
        """
        Simulate the strategy over an ascending candle series.

        Args:
            candles: Ordered candles (ascending, no duplicate timestamps)
            indicators: Precomputed indicators aligned to candles (default: computed here)

        Returns:
            SimulationRun with trades, equity/drawdown curves and monthly returns

        Raises:
            InsufficientData: If the series is empty or no bar remains after warm-up
        """
        n = len(candles)
        context = {"bars": n, **self.params.to_dict()}
        if n == 0:
            raise InsufficientData(
                "Empty candle series", required=self.params.warmup_bars + 1, available=0, context=context
            )
        if indicators is None:
            indicators = self.build_indicators(candles)
        if indicators.total_length != n:
            raise ValueError(f"Indicators cover {indicators.total_length} bars, candles {n}")

        start = indicators.start_index
        if start >= n:
            raise InsufficientData(
                "Candle series shorter than indicator warm-up",
                required=start + 1, available=n, context=context,
            )

        balance = self.initial_balance
        position: Optional[Position] = None
        trades: List[Trade] = []

        equity_curve = [self.initial_balance]
        equity_timestamps = [candles[start - 1].timestamp]
        drawdown_curve: List[float] = []
        peak = self.initial_balance
        max_drawdown = 0.0
        peak_at_max_drawdown = self.initial_balance

        monthly_returns = {}
        month_start_balance = self.initial_balance

        last = n - 1
        last_progress = -1

        for i in range(start, n):
            candle = candles[i]
            prev_candle = candles[i - 1]

            progress = int((i - start + 1) * 100 / (n - start)) // 10 * 10
            if progress != last_progress:
                if progress > 0:
                    logger.debug(f"Backtest progress: {progress}%")
                last_progress = progress

            # Month boundary: record realized return of the month that just ended
            month, prev_month = month_key(candle.timestamp), month_key(prev_candle.timestamp)
            if month != prev_month:
                monthly_returns[prev_month] = (balance - month_start_balance) / month_start_balance * 100
                month_start_balance = balance

            values = indicators.values_at(i)
            closed_this_bar = False

            if position is not None:
                exit_info = self._check_exit(position, candle, values)
                if exit_info is not None:
                    exit_price, reason = exit_info
                    trade = self._close(position, candle, exit_price, reason)
                    balance += trade.profit
                    trades.append(trade)
                    position = None
                    closed_this_bar = True

            if position is not None and i == last:
                trade = self._close(position, candle, candle.close, ExitReason.END_OF_DATA)
                balance += trade.profit
                trades.append(trade)
                position = None
                closed_this_bar = True

            # Drawdown bookkeeping on realized equity, every bar
            equity = balance
            if equity > peak:
                peak = equity
            drawdown = peak - equity
            if drawdown > max_drawdown:
                max_drawdown = drawdown
                peak_at_max_drawdown = peak
            drawdown_curve.append(max_drawdown)
            equity_curve.append(equity)
            equity_timestamps.append(candle.timestamp)

            # No re-entry on an exit bar, and nothing can open on the last bar
            if position is None and not closed_this_bar and i < last:
                position = self._check_entry(candle, values, balance)

        monthly_returns[month_key(candles[last].timestamp)] = (
            (balance - month_start_balance) / month_start_balance * 100
        )

        return SimulationRun(
            initial_balance=self.initial_balance,
            final_balance=balance,
            trades=trades,
            equity_curve=equity_curve,
            equity_timestamps=equity_timestamps,
            drawdown_curve=drawdown_curve,
            max_drawdown=max_drawdown,
            peak_at_max_drawdown=peak_at_max_drawdown,
            monthly_returns=monthly_returns,
            bars_simulated=n - start,
            start_index=start,
        )

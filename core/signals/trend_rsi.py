"""
Trend/RSI live decision function.

Same indicators and entry rule as the backtest simulator, applied to the
latest bar only, plus two RSI zone-transition rules:
1. EMA cross up with RSI oversold -> BUY
2. EMA cross down with RSI overbought -> SELL
3. RSI leaves the oversold zone while the short EMA is above the long EMA -> BUY
4. RSI enters the overbought zone while the short EMA is below the long EMA -> SELL
Anything else is HOLD.
"""
import logging
from typing import Optional, Sequence

from ..data.candles import Candle
from ..indicators.series import build_indicator_set
from ..shared.types import SignalType, TradingSignal
from .config import StrategyParams


logger = logging.getLogger(__name__)


class TrendRsiStrategy:
    """Stateless BUY / SELL / HOLD decision for the most recent bar."""

    def __init__(self, params: Optional[StrategyParams] = None):
        self.params = params if params is not None else StrategyParams()

    def analyze(self, candles: Sequence[Candle]) -> TradingSignal:
        """
        Decide on the last candle of an ascending series.

        Returns HOLD with a reason when the series is too short for the
        indicators to have a current and a previous value.
        """
        p = self.params
        if not candles:
            return TradingSignal(SignalType.HOLD, "Not enough data for analysis")

        indicators = build_indicator_set(
            [c.close for c in candles],
            rsi_period=p.rsi_period,
            ema_short_period=p.ema_short_period,
            ema_long_period=p.ema_long_period,
        )
        last = len(candles) - 1
        values = indicators.values_at(last)
        if values is None:
            return TradingSignal(
                SignalType.HOLD,
                f"Not enough data for analysis ({len(candles)} bars, need {indicators.start_index + 1})",
            )

        candle = candles[last]
        logger.debug(
            f"RSI: {values.rsi:.2f}, EMA short: {values.ema_short:.4f}, "
            f"EMA long: {values.ema_long:.4f}, price: {candle.close}"
        )

        def signal(signal_type: SignalType, reason: str) -> TradingSignal:
            return TradingSignal(
                signal_type=signal_type,
                reason=reason,
                timestamp=candle.timestamp,
                price=candle.close if signal_type != SignalType.HOLD else None,
                rsi_value=values.rsi,
                ema_short=values.ema_short,
                ema_long=values.ema_long,
            )

        uptrend = values.ema_short > values.ema_long
        downtrend = values.ema_short < values.ema_long

        if values.bullish_cross and values.rsi < p.rsi_oversold:
            return signal(
                SignalType.BUY,
                f"EMA cross up ({p.ema_short_period}>{p.ema_long_period}) "
                f"with RSI {values.rsi:.2f} oversold",
            )
        if values.bearish_cross and values.rsi > p.rsi_overbought:
            return signal(
                SignalType.SELL,
                f"EMA cross down ({p.ema_short_period}<{p.ema_long_period}) "
                f"with RSI {values.rsi:.2f} overbought",
            )
        if values.prev_rsi < p.rsi_oversold and values.rsi > p.rsi_oversold and uptrend:
            return signal(SignalType.BUY, f"RSI {values.rsi:.2f} left the oversold zone in an uptrend")
        if values.prev_rsi < p.rsi_overbought and values.rsi > p.rsi_overbought and downtrend:
            return signal(SignalType.SELL, f"RSI {values.rsi:.2f} entered the overbought zone in a downtrend")

        return signal(SignalType.HOLD, "No clear signal")

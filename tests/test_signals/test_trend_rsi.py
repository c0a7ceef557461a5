"""
Tests for the live trend/RSI decision function.
"""
import pytest

from conftest import CROSS_BAR, cross_closes, cross_jump, make_candles
from core.shared.types import SignalType
from core.signals.config import StrategyParams
from core.signals.trend_rsi import TrendRsiStrategy


@pytest.fixture
def strategy():
    return TrendRsiStrategy()


def test_empty_input(strategy):
    signal = strategy.analyze([])
    assert signal.signal_type == SignalType.HOLD
    assert "Not enough data" in signal.reason


def test_too_short(strategy):
    signal = strategy.analyze(make_candles([100.0] * 21))
    assert signal.signal_type == SignalType.HOLD
    assert "Not enough data" in signal.reason


def test_flat_market_holds(strategy):
    signal = strategy.analyze(make_candles([100.0] * 50))

    assert signal.signal_type == SignalType.HOLD
    assert signal.reason == "No clear signal"
    assert signal.price is None
    assert signal.rsi_value == 50.0


def test_cross_up_while_oversold_buys(strategy):
    candles = make_candles(cross_closes(CROSS_BAR + 1))
    signal = strategy.analyze(candles)

    assert signal.signal_type == SignalType.BUY
    assert "oversold" in signal.reason
    assert signal.price == candles[-1].close
    assert signal.timestamp == candles[-1].timestamp
    assert signal.rsi_value == pytest.approx(25.0)
    assert signal.ema_short > signal.ema_long


def test_cross_down_while_overbought_sells(strategy):
    """Mirror image of the cross-up scenario: RSI 75 on a bearish cross."""
    candles = make_candles([400.0 - c for c in cross_closes(CROSS_BAR + 1)])
    signal = strategy.analyze(candles)

    assert signal.signal_type == SignalType.SELL
    assert "overbought" in signal.reason
    assert signal.rsi_value == pytest.approx(75.0)


def test_bar_after_cross_holds(strategy):
    signal = strategy.analyze(make_candles(cross_closes(CROSS_BAR + 2)))
    assert signal.signal_type == SignalType.HOLD


def test_rsi_leaving_oversold_in_uptrend_buys(strategy):
    closes = cross_closes(CROSS_BAR + 1)
    closes.append(closes[-1] + 3 * cross_jump())
    signal = strategy.analyze(make_candles(closes))

    assert signal.signal_type == SignalType.BUY
    assert "left the oversold zone" in signal.reason
    assert signal.rsi_value == pytest.approx(100 - 100 / (1 + 715 / 507))


def test_cross_without_oversold_rsi_uses_zone_rule():
    """With oversold at 20 the cross bar (RSI 25) only qualifies as leaving the zone."""
    strategy = TrendRsiStrategy(StrategyParams(rsi_oversold=20))
    signal = strategy.analyze(make_candles(cross_closes(CROSS_BAR + 1)))

    assert signal.signal_type == SignalType.BUY
    assert "left the oversold zone" in signal.reason

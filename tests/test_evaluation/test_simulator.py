"""
Tests for the position lifecycle simulator.
"""
import pandas as pd
import pytest

from conftest import CROSS_BAR, make_candles, with_bar
from core.evaluation.simulation_types import ExitReason
from core.evaluation.simulator import PositionSimulator, month_key
from core.indicators.series import IndicatorSeries, IndicatorSet, build_indicator_set
from core.shared.errors import InsufficientData
from core.shared.types import Side
from core.signals.config import StrategyParams


def _run(candles, params=None, balance=10000.0, indicators=None):
    return PositionSimulator(params or StrategyParams(), balance).run(candles, indicators)


def _injected_indicators(rsi, ema_short, ema_long):
    """IndicatorSet with hand-made full-length series (start_index == 1)."""
    n = len(rsi)
    return IndicatorSet(
        rsi=IndicatorSeries("rsi", rsi, n),
        ema_short=IndicatorSeries("ema_short", ema_short, n),
        ema_long=IndicatorSeries("ema_long", ema_long, n),
    )


class TestEntry:
    """Entry on EMA cross with RSI in the matching zone."""

    def test_single_long_entry_at_cross_bar(self, cross_candles):
        """Exactly one LONG, opened at the close of the cross bar."""
        run = _run(cross_candles)

        assert len(run.trades) == 1
        trade = run.trades[0]
        assert trade.side == Side.LONG
        assert trade.entry_timestamp == cross_candles[CROSS_BAR].timestamp
        assert trade.entry_price == cross_candles[CROSS_BAR].close

    def test_cross_bar_rsi_is_oversold(self, cross_candles):
        """The scenario's cross bar has RSI 25 and a fresh bullish cross."""
        indicators = build_indicator_set([c.close for c in cross_candles], 14, 9, 21)
        values = indicators.values_at(CROSS_BAR)

        assert values.rsi == pytest.approx(25.0, abs=0.01)
        assert values.bullish_cross
        assert not indicators.values_at(CROSS_BAR - 1).bullish_cross

    def test_position_size_and_levels(self, cross_candles):
        """Size is balance x pct / price; SL and TP are % of entry."""
        run = _run(cross_candles, StrategyParams(position_size_pct=10, stop_loss_pct=1, take_profit_pct=2))
        trade = run.trades[0]

        assert trade.size * trade.entry_price == pytest.approx(1000.0)

    def test_open_position_force_closed_on_last_bar(self, cross_candles):
        """A position still open at the end closes at the last close."""
        run = _run(cross_candles)
        trade = run.trades[0]

        assert trade.exit_reason == ExitReason.END_OF_DATA
        assert trade.exit_timestamp == cross_candles[-1].timestamp
        assert trade.exit_price == cross_candles[-1].close
        assert trade.profit == pytest.approx(0.0)

    def test_no_entry_without_oversold_rsi(self, cross_candles):
        """RSI 25 is not below an oversold threshold of 20."""
        run = _run(cross_candles, StrategyParams(rsi_oversold=20))
        assert run.trades == []

    def test_short_entry_on_bearish_cross(self):
        """Mirrored rule: bearish cross with RSI above overbought opens a SHORT."""
        closes = [100.0] * 6
        candles = make_candles(closes)
        indicators = _injected_indicators(
            rsi=[50, 50, 80, 50, 50, 50],
            ema_short=[3, 3, 1, 1, 1, 1],
            ema_long=[2, 2, 2, 2, 2, 2],
        )
        run = _run(candles, indicators=indicators)

        assert len(run.trades) == 1
        assert run.trades[0].side == Side.SHORT
        assert run.trades[0].entry_timestamp == candles[2].timestamp


class TestExits:
    """Exit priority: stop-loss, take-profit, reversal."""

    def test_stop_loss_wins_when_both_levels_touched(self, cross_candles):
        """Bar touching both levels exits at the stop price."""
        entry = cross_candles[CROSS_BAR].close
        candles = with_bar(cross_candles, CROSS_BAR + 1, high=entry * 1.05, low=entry * 0.95)
        run = _run(candles)

        assert len(run.trades) == 1
        trade = run.trades[0]
        assert trade.exit_reason == ExitReason.STOP_LOSS
        assert trade.exit_price == pytest.approx(entry * 0.99)
        assert trade.profit == pytest.approx(-5.0)
        assert run.final_balance == pytest.approx(9995.0)

    def test_take_profit(self, cross_candles):
        """High reaching the target exits at the target price."""
        entry = cross_candles[CROSS_BAR].close
        candles = with_bar(cross_candles, CROSS_BAR + 1, high=entry * 1.03)
        run = _run(candles)

        trade = run.trades[0]
        assert trade.exit_reason == ExitReason.TAKE_PROFIT
        assert trade.exit_price == pytest.approx(entry * 1.02)
        assert trade.profit == pytest.approx(10.0)
        assert trade.profit_pct == pytest.approx(2.0)
        assert trade.duration_hours == pytest.approx(4.0)

    def test_reversal_exit_for_long(self):
        """Bearish cross with RSI above overbought closes a LONG at the close."""
        candles = make_candles([100.0, 100.0, 100.0, 100.0, 100.5, 100.5, 100.5])
        indicators = _injected_indicators(
            rsi=[50, 50, 25, 50, 80, 50, 50],
            ema_short=[1, 1, 3, 3, 1, 1, 1],
            ema_long=[2, 2, 2, 2, 2, 2, 2],
        )
        run = _run(candles, indicators=indicators)

        assert len(run.trades) == 1
        trade = run.trades[0]
        assert trade.exit_reason == ExitReason.REVERSAL
        assert trade.exit_timestamp == candles[4].timestamp
        assert trade.exit_price == 100.5

    @staticmethod
    def _short_at_bar_2(exit_bar_close=100.0, reversal=False, n_bars=7):
        """SHORT opened at 100.0 on bar 2; with reversal, bar 4 has a bullish cross and RSI 25."""
        candles = make_candles([100.0] * 4 + [exit_bar_close] * (n_bars - 4))
        tail = 3 if reversal else 1
        indicators = _injected_indicators(
            rsi=[50, 50, 80, 50, 25 if reversal else 50] + [50] * (n_bars - 5),
            ema_short=[3, 3, 1, 1] + [tail] * (n_bars - 4),
            ema_long=[2] * n_bars,
        )
        return candles, indicators

    def test_short_stop_loss_on_high(self):
        """High at or above the stop closes a SHORT at the stop price at a loss."""
        candles, indicators = self._short_at_bar_2()
        candles = with_bar(candles, 3, high=102.0)
        run = _run(candles, indicators=indicators)

        assert len(run.trades) == 1
        trade = run.trades[0]
        assert trade.side == Side.SHORT
        assert trade.exit_reason == ExitReason.STOP_LOSS
        assert trade.exit_timestamp == candles[3].timestamp
        assert trade.exit_price == pytest.approx(101.0)
        assert trade.exit_price > trade.entry_price
        assert trade.profit == pytest.approx(-5.0)

    def test_short_take_profit_on_low(self):
        """Low at or below the target closes a SHORT at the target price with a gain."""
        candles, indicators = self._short_at_bar_2()
        candles = with_bar(candles, 3, low=97.0)
        run = _run(candles, indicators=indicators)

        trade = run.trades[0]
        assert trade.side == Side.SHORT
        assert trade.exit_reason == ExitReason.TAKE_PROFIT
        assert trade.exit_price == pytest.approx(98.0)
        assert trade.exit_price < trade.entry_price
        assert trade.profit == pytest.approx(10.0)
        assert trade.profit_pct == pytest.approx(2.0)

    def test_reversal_exit_for_short(self):
        """Bullish cross with RSI below oversold closes a SHORT at the close."""
        candles, indicators = self._short_at_bar_2(exit_bar_close=99.5, reversal=True)
        run = _run(candles, indicators=indicators)

        assert len(run.trades) == 1
        trade = run.trades[0]
        assert trade.side == Side.SHORT
        assert trade.exit_reason == ExitReason.REVERSAL
        assert trade.exit_timestamp == candles[4].timestamp
        assert trade.exit_price == 99.5
        assert trade.profit == pytest.approx(2.5)
        assert run.final_balance == pytest.approx(10002.5)

    def test_no_reentry_on_exit_bar(self):
        """Entry conditions on the bar of a stop-out are ignored."""
        indicators = _injected_indicators(
            rsi=[50, 50, 25, 50, 25, 50, 50, 50],
            ema_short=[1, 1, 3, 1, 3, 3, 3, 3],
            ema_long=[2, 2, 2, 2, 2, 2, 2, 2],
        )
        candles = with_bar(make_candles([100.0] * 8), 4, low=98.0)
        run = _run(candles, indicators=indicators)

        assert len(run.trades) == 1
        assert run.trades[0].exit_reason == ExitReason.STOP_LOSS
        assert run.trades[0].exit_timestamp == candles[4].timestamp

    def test_entry_on_same_bar_when_flat(self):
        """Control: without the earlier position, bar 4 does open a LONG."""
        indicators = _injected_indicators(
            rsi=[50, 50, 50, 50, 25, 50, 50, 50],
            ema_short=[1, 1, 3, 1, 3, 3, 3, 3],
            ema_long=[2, 2, 2, 2, 2, 2, 2, 2],
        )
        candles = with_bar(make_candles([100.0] * 8), 4, low=98.0)
        run = _run(candles, indicators=indicators)

        assert len(run.trades) == 1
        assert run.trades[0].entry_timestamp == candles[4].timestamp

    def test_no_entry_on_last_bar(self):
        """A signal on the last bar never opens a position."""
        indicators = _injected_indicators(
            rsi=[50, 50, 50, 25],
            ema_short=[1, 1, 1, 3],
            ema_long=[2, 2, 2, 2],
        )
        run = _run(make_candles([100.0] * 4), indicators=indicators)
        assert run.trades == []


class TestInvariants:
    """Properties that hold for every run."""

    @pytest.fixture
    def active_params(self):
        return StrategyParams(stop_loss_pct=0.5, take_profit_pct=1.0, rsi_oversold=45, rsi_overbought=55)

    def test_equity_curve_shape(self, random_walk_candles, active_params):
        """One sample per simulated bar plus the seed; last sample is the final balance."""
        run = _run(random_walk_candles, active_params)

        assert len(run.equity_curve) == run.bars_simulated + 1
        assert len(run.equity_timestamps) == len(run.equity_curve)
        assert run.equity_curve[0] == 10000.0
        assert run.equity_curve[-1] == run.final_balance
        assert run.bars_simulated == len(random_walk_candles) - run.start_index

    def test_balance_is_sum_of_profits(self, random_walk_candles, active_params):
        run = _run(random_walk_candles, active_params)
        assert run.final_balance == pytest.approx(10000.0 + sum(t.profit for t in run.trades))

    def test_trades_do_not_overlap(self, random_walk_candles, active_params):
        """Exit after entry; next entry strictly after the previous exit."""
        run = _run(random_walk_candles, active_params)

        for trade in run.trades:
            assert trade.exit_timestamp > trade.entry_timestamp
        for prev, cur in zip(run.trades, run.trades[1:]):
            assert cur.entry_timestamp > prev.exit_timestamp

    def test_drawdown_never_decreases(self, random_walk_candles, active_params):
        run = _run(random_walk_candles, active_params)

        assert len(run.drawdown_curve) == run.bars_simulated
        assert all(b >= a for a, b in zip(run.drawdown_curve, run.drawdown_curve[1:]))
        assert run.drawdown_curve[-1] == run.max_drawdown
        assert run.max_drawdown >= 0

    def test_deterministic(self, random_walk_candles, active_params):
        """Same inputs, identical outputs (no state carried between runs)."""
        simulator = PositionSimulator(active_params, 10000.0)
        first = simulator.run(random_walk_candles)
        second = simulator.run(random_walk_candles)

        assert first.trades == second.trades
        assert first.equity_curve == second.equity_curve
        assert first.monthly_returns == second.monthly_returns


class TestMonthlyReturns:
    """Realized return per calendar month."""

    def test_boundary_and_trailing_month(self, cross_candles):
        """January flat, February holds the take-profit gain."""
        entry = cross_candles[CROSS_BAR].close
        candles = with_bar(cross_candles, CROSS_BAR + 1, high=entry * 1.03)
        run = _run(candles)

        assert list(run.monthly_returns) == ["2024-01", "2024-02"]
        assert run.monthly_returns["2024-01"] == pytest.approx(0.0)
        assert run.monthly_returns["2024-02"] == pytest.approx(0.1)

    def test_month_key_uses_utc(self):
        ts = pd.Timestamp("2024-03-01 00:30", tz="Europe/Berlin")
        assert month_key(ts) == "2024-02"


class TestInsufficientData:
    """Too little data for the warm-up."""

    def test_empty_series(self):
        with pytest.raises(InsufficientData) as exc_info:
            _run([])
        assert exc_info.value.available == 0

    def test_shorter_than_warmup(self):
        with pytest.raises(InsufficientData) as exc_info:
            _run(make_candles([100.0 + i for i in range(15)]))
        assert exc_info.value.available == 15
        assert exc_info.value.context["ema_long_period"] == 21

    def test_misaligned_indicators(self, cross_candles):
        indicators = build_indicator_set([c.close for c in cross_candles[:100]], 14, 9, 21)
        with pytest.raises(ValueError):
            _run(cross_candles, indicators=indicators)

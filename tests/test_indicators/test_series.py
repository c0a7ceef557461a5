"""
Tests for bar-index alignment of indicator arrays.
"""
import pytest

from conftest import CROSS_BAR, cross_closes
from core.indicators.series import IndicatorSeries, IndicatorValues, build_indicator_set


class TestIndicatorSeries:
    def test_suffix_alignment(self):
        series = IndicatorSeries("ema", [10.0, 11.0, 12.0], total_length=5)

        assert series.offset == 2
        assert series.first_index == 2
        assert series.at(1) is None
        assert series.at(2) == 10.0
        assert series.at(4) == 12.0
        assert series.at(5) is None

    def test_empty_series(self):
        series = IndicatorSeries("rsi", [], total_length=5)
        assert series.first_index == 5
        assert series.at(4) is None

    def test_too_many_values(self):
        with pytest.raises(ValueError):
            IndicatorSeries("rsi", [1.0, 2.0, 3.0], total_length=2)


class TestIndicatorValues:
    def make(self, prev_short, prev_long, short, long_):
        return IndicatorValues(
            bar_index=1, rsi=50.0, ema_short=short, ema_long=long_,
            prev_rsi=50.0, prev_ema_short=prev_short, prev_ema_long=prev_long,
        )

    def test_bullish_cross(self):
        values = self.make(1.0, 2.0, 3.0, 2.0)
        assert values.bullish_cross
        assert not values.bearish_cross

    def test_bearish_cross(self):
        values = self.make(3.0, 2.0, 1.0, 2.0)
        assert values.bearish_cross
        assert not values.bullish_cross

    def test_touching_is_not_a_cross(self):
        assert not self.make(2.0, 2.0, 3.0, 2.0).bullish_cross
        assert not self.make(1.0, 2.0, 2.0, 2.0).bullish_cross


class TestIndicatorSet:
    def test_start_index(self):
        indicators = build_indicator_set([100.0] * 50, rsi_period=14, ema_short_period=9, ema_long_period=21)

        assert indicators.rsi.first_index == 13
        assert indicators.ema_short.first_index == 8
        assert indicators.ema_long.first_index == 20
        assert indicators.start_index == 21
        assert indicators.values_at(20) is None
        assert indicators.values_at(21) is not None
        assert indicators.values_at(50) is None

    def test_previous_values(self):
        closes = [float(i) for i in range(1, 41)]
        indicators = build_indicator_set(closes, rsi_period=14, ema_short_period=9, ema_long_period=21)
        values = indicators.values_at(30)

        assert values.prev_ema_short == indicators.ema_short.at(29)
        assert values.prev_rsi == indicators.rsi.at(29)

    def test_cross_scenario(self):
        indicators = build_indicator_set(cross_closes(), rsi_period=14, ema_short_period=9, ema_long_period=21)
        values = indicators.values_at(CROSS_BAR)

        assert values.bullish_cross
        assert values.rsi == pytest.approx(25.0)
        assert not indicators.values_at(CROSS_BAR - 1).bullish_cross
        assert not indicators.values_at(CROSS_BAR + 1).bullish_cross

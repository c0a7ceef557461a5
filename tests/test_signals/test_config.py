"""
Tests for strategy configuration and the YAML loader.
"""
from pathlib import Path

import pandas as pd
import pytest

from core.shared.defaults import (
    EMA_LONG_PERIOD,
    EMA_SHORT_PERIOD,
    INITIAL_BALANCE,
    POSITION_SIZE_PCT,
    RSI_PERIOD,
)
from core.shared.errors import InvalidParameters
from core.signals.config import BASELINE_PARAMS, PRESET_PARAMS, BacktestRequest, StrategyParams
from core.signals.config_loader import (
    load_params_from_yaml,
    load_request_from_yaml,
    load_yaml,
    params_from_env,
    save_params_to_yaml,
)


class TestStrategyParams:
    """Test StrategyParams dataclass."""

    def test_baseline_uses_defaults(self):
        assert BASELINE_PARAMS.rsi_period == RSI_PERIOD
        assert BASELINE_PARAMS.ema_short_period == EMA_SHORT_PERIOD
        assert BASELINE_PARAMS.ema_long_period == EMA_LONG_PERIOD
        assert BASELINE_PARAMS.position_size_pct == POSITION_SIZE_PCT

    def test_presets_are_valid(self):
        assert set(PRESET_PARAMS) == {"baseline", "conservative", "aggressive"}
        assert all(isinstance(p, StrategyParams) for p in PRESET_PARAMS.values())

    def test_warmup_bars(self):
        assert StrategyParams(rsi_period=30, ema_short_period=9, ema_long_period=21).warmup_bars == 30

    def test_with_overrides(self):
        params = BASELINE_PARAMS.with_overrides(stop_loss_pct=0.5)
        assert params.stop_loss_pct == 0.5
        assert BASELINE_PARAMS.stop_loss_pct == 1.0


class TestParamsValidation:
    """Config validation fails fast with clear errors."""

    def test_ema_short_must_be_less_than_long(self):
        with pytest.raises(InvalidParameters, match="ema_short_period.*less than ema_long_period"):
            StrategyParams(ema_short_period=21, ema_long_period=21)

    def test_oversold_must_be_below_overbought(self):
        with pytest.raises(InvalidParameters) as exc:
            StrategyParams(rsi_oversold=70, rsi_overbought=30)
        assert exc.value.field == "rsi_oversold"

    @pytest.mark.parametrize("field, value", [
        ("position_size_pct", 0),
        ("position_size_pct", 150),
        ("stop_loss_pct", -1),
        ("stop_loss_pct", 100),
        ("take_profit_pct", 0),
        ("rsi_period", 1),
        ("rsi_period", 14.5),
        ("ema_short_period", 0),
        ("rsi_overbought", 120),
    ])
    def test_out_of_range(self, field, value):
        with pytest.raises(InvalidParameters) as exc:
            StrategyParams(**{field: value})
        assert exc.value.field == field
        assert exc.value.value == value

    def test_invalid_parameters_is_value_error(self):
        with pytest.raises(ValueError):
            StrategyParams(stop_loss_pct=0)


class TestBacktestRequest:
    def test_times_converted_to_utc(self):
        request = BacktestRequest(start_time="2024-01-01", end_time="2024-02-01")
        assert request.start_time == pd.Timestamp("2024-01-01", tz="UTC")
        assert request.initial_balance == INITIAL_BALANCE

    def test_empty_range(self):
        with pytest.raises(InvalidParameters, match="end_time"):
            BacktestRequest(start_time="2024-02-01", end_time="2024-02-01")

    def test_missing_range(self):
        with pytest.raises(InvalidParameters):
            BacktestRequest(start_time="2024-01-01")

    def test_non_positive_balance(self):
        with pytest.raises(InvalidParameters):
            BacktestRequest(start_time="2024-01-01", end_time="2024-02-01", initial_balance=0)

    def test_empty_symbol(self):
        with pytest.raises(InvalidParameters):
            BacktestRequest(symbol="", start_time="2024-01-01", end_time="2024-02-01")


class TestConfigLoader:
    CONFIG = """
name: test
data:
  symbol: ETH-USD
  timeframe: 1h
  start_date: "2024-01-01"
  end_date: "2024-03-01"
indicators:
  rsi: {period: 7, oversold: 25}
risk:
  stop_loss_pct: 0.5
"""

    @pytest.fixture
    def config_path(self, tmp_path):
        path = tmp_path / "test.yaml"
        path.write_text(self.CONFIG)
        return path

    def test_params_with_defaults(self, config_path):
        params = load_params_from_yaml(config_path)

        assert params.rsi_period == 7
        assert params.rsi_oversold == 25
        assert params.rsi_overbought == 70
        assert params.stop_loss_pct == 0.5
        assert params.ema_long_period == EMA_LONG_PERIOD

    def test_request(self, config_path):
        request = load_request_from_yaml(config_path)

        assert request.symbol == "ETH-USD"
        assert request.timeframe == "1h"
        assert request.end_time == pd.Timestamp("2024-03-01", tz="UTC")
        assert request.params.rsi_period == 7

    def test_overrides_win(self, config_path):
        request = load_request_from_yaml(config_path, {"symbol": "BTC-USD", "timeframe": None})
        assert request.symbol == "BTC-USD"
        assert request.timeframe == "1h"

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("risk:\n  stop_loss_pct: -1\n")
        with pytest.raises(InvalidParameters):
            load_params_from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError, match="Empty"):
            load_yaml(path)

    def test_save_and_load(self, tmp_path):
        params = StrategyParams(rsi_period=10, take_profit_pct=3.0)
        path = tmp_path / "nested" / "saved.yaml"
        save_params_to_yaml(params, path, name="saved")

        assert load_yaml(path)["name"] == "saved"
        assert load_params_from_yaml(path) == params

    def test_shipped_baseline_config(self):
        request = load_request_from_yaml(Path(__file__).parents[2] / "configs" / "baseline.yaml")
        assert request.params == BASELINE_PARAMS


class TestParamsFromEnv:
    def test_defaults(self):
        symbol, timeframe, params = params_from_env({})
        assert (symbol, timeframe) == ("BTC-USD", "4h")
        assert params == StrategyParams()

    def test_overrides(self):
        symbol, timeframe, params = params_from_env({
            "SYMBOL": "ETH-USD", "TIMEFRAME": "1h", "RSI_PERIOD": "7", "RSI_OVERSOLD": "25.5",
        })
        assert symbol == "ETH-USD"
        assert timeframe == "1h"
        assert params.rsi_period == 7
        assert params.rsi_oversold == 25.5

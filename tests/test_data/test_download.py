"""
Tests for the Yahoo Finance candle provider (yfinance is mocked).
"""
from unittest.mock import MagicMock, patch

import numpy as np
import pandas as pd
import pytest

from core.data.cache import CandleCache
from core.data.download import YahooCandleProvider, timeframe_hours
from core.shared.errors import UpstreamFetchFailure


def hourly_frame(start, n=3):
    index = pd.date_range(pd.Timestamp(start), periods=n, freq="h")
    close = 100 + np.arange(n, dtype=float)
    return pd.DataFrame(
        {"Open": close, "High": close + 1, "Low": close - 1, "Close": close, "Volume": 5.0},
        index=index,
    )


def fake_download(symbol, start, end, interval, progress, auto_adjust):
    return hourly_frame(start)


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def provider(sleep):
    return YahooCandleProvider(use_cache=False, sleep=sleep)


class TestTimeframeHours:
    @pytest.mark.parametrize("timeframe, hours", [
        ("15m", 0.25), ("1h", 1.0), ("4h", 4.0), ("1d", 24.0), ("1w", 168.0),
    ])
    def test_known(self, timeframe, hours):
        assert timeframe_hours(timeframe) == hours

    def test_unparseable_defaults_to_one_hour(self):
        assert timeframe_hours("monthly") == 1.0


class TestYahooCandleProvider:
    @patch("core.data.download.yf.download", side_effect=fake_download)
    def test_paginates_long_ranges(self, mock_download, provider, sleep):
        """1h history is capped at 700 days per request."""
        candles = provider.fetch_candles("BTC-USD", "1h", "2022-01-01", "2023-12-31")

        assert mock_download.call_count == 2
        assert len(candles) == 6
        assert candles == sorted(candles, key=lambda c: c.timestamp)
        sleep.assert_called_once_with(0.5)

    @patch("core.data.download.yf.download")
    def test_retries_then_succeeds(self, mock_download, provider, sleep):
        mock_download.side_effect = [ConnectionError("reset"), hourly_frame("2024-01-01")]
        candles = provider.fetch_candles("BTC-USD", "1h", "2024-01-01", "2024-01-02")

        assert len(candles) == 3
        assert mock_download.call_count == 2
        sleep.assert_called_once_with(2.0)

    @patch("core.data.download.yf.download", side_effect=ConnectionError("down"))
    def test_retries_exhausted(self, mock_download, provider, sleep):
        with pytest.raises(UpstreamFetchFailure, match="down"):
            provider.fetch_candles("BTC-USD", "1h", "2024-01-01", "2024-01-02")

        assert mock_download.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [2.0, 4.0]

    def test_unsupported_timeframe(self, provider):
        with pytest.raises(UpstreamFetchFailure, match="unsupported timeframe"):
            provider.fetch_candles("BTC-USD", "3h", "2024-01-01", "2024-01-02")

    @patch("core.data.download.yf.download", return_value=pd.DataFrame())
    def test_no_data(self, mock_download, provider):
        assert provider.fetch_candles("BTC-USD", "1d", "2024-01-01", "2024-01-10") == []

    @patch("core.data.download.yf.download")
    def test_four_hour_bars_resampled_from_hourly(self, mock_download, provider):
        mock_download.return_value = hourly_frame("2024-01-01", n=8)
        candles = provider.fetch_candles("BTC-USD", "4h", "2024-01-01", "2024-01-02")

        assert mock_download.call_args.kwargs["interval"] == "1h"
        assert len(candles) == 2
        first = candles[0]
        assert first.timestamp == pd.Timestamp("2024-01-01", tz="UTC")
        assert first.open == 100.0
        assert first.close == 103.0
        assert first.high == 104.0
        assert first.low == 99.0
        assert first.volume == 20.0

    @patch("core.data.download.yf.download", side_effect=fake_download)
    def test_cache_hit_skips_network(self, mock_download, tmp_path, sleep):
        provider = YahooCandleProvider(cache=CandleCache(tmp_path), sleep=sleep)
        first = provider.fetch_candles("BTC-USD", "1h", "2024-01-01", "2024-01-02")
        second = provider.fetch_candles("BTC-USD", "1h", "2024-01-01", "2024-01-02")

        assert mock_download.call_count == 1
        assert [c.close for c in second] == [c.close for c in first]
        assert len(list(tmp_path.glob("*.csv"))) == 1

"""
Tests for the keyed CSV candle cache.
"""
import pytest

from conftest import make_candles
from core.data.cache import CandleCache


@pytest.fixture
def cache(tmp_path):
    return CandleCache(tmp_path / "historical_data")


def test_key_includes_request_parameters(cache):
    key = cache.key_for("BTC-USD", "4h", "2024-01-01", "2024-01-02")
    assert key == "BTC-USD_4h_1704067200000_1704153600000"


def test_key_sanitizes_symbol(cache):
    assert cache.key_for("^GSPC", "1d", "2024-01-01", "2024-01-02").startswith("_GSPC_1d_")


def test_miss_returns_none(cache):
    assert cache.get("BTC-USD", "4h", "2024-01-01", "2024-01-02") is None


def test_put_then_get(cache):
    candles = make_candles([100.0, 101.5, 99.25])
    path = cache.put("BTC-USD", "4h", "2024-01-01", "2024-01-02", candles)

    assert path.exists()
    loaded = cache.get("BTC-USD", "4h", "2024-01-01", "2024-01-02")
    assert [c.timestamp for c in loaded] == [c.timestamp for c in candles]
    assert [c.close for c in loaded] == pytest.approx([100.0, 101.5, 99.25])


def test_different_range_is_a_different_key(cache):
    cache.put("BTC-USD", "4h", "2024-01-01", "2024-01-02", make_candles([1.0]))
    assert cache.get("BTC-USD", "4h", "2024-01-01", "2024-01-03") is None


def test_unreadable_file_is_a_miss(cache):
    path = cache.path_for("BTC-USD", "4h", "2024-01-01", "2024-01-02")
    path.parent.mkdir(parents=True)
    path.write_text("not,a\ncandle,file\n")
    assert cache.get("BTC-USD", "4h", "2024-01-01", "2024-01-02") is None


def test_clear(cache):
    cache.put("BTC-USD", "4h", "2024-01-01", "2024-01-02", make_candles([1.0]))
    cache.put("ETH-USD", "4h", "2024-01-01", "2024-01-02", make_candles([1.0]))

    assert cache.clear() == 2
    assert cache.clear() == 0

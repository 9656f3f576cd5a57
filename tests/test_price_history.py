import math

import pytest

from models.price import PriceSample
from modules.price_history import DEFAULT_WINDOW_MS, PriceHistoryStore

# ------------------------- Fixtures ------------------------- #

@pytest.fixture
def store():
    return PriceHistoryStore(window_ms=1_000)

# ------------------------- Tests ------------------------- #

def test_default_window():
    assert PriceHistoryStore().window_ms == DEFAULT_WINDOW_MS == 300_000


def test_record_creates_series_lazily(store):
    assert store.series("SUI") == ()
    series = store.record("SUI", 1.5, now=10_000)

    assert series == (PriceSample(price=1.5, observed_at=10_000),)
    assert store.symbols() == ["SUI"]


def test_series_kept_in_observation_order(store):
    store.record("SUI", 1.0, now=10_000)
    store.record("SUI", 1.1, now=10_200)
    series = store.record("SUI", 1.2, now=10_400)

    assert [s.observed_at for s in series] == [10_000, 10_200, 10_400]


def test_eviction_is_exact_at_window_boundary(store):
    store.record("SUI", 1.0, now=10_000)
    store.record("SUI", 1.1, now=10_001)
    # cutoff = 11_000 - 1_000 = 10_000 -> the first sample sits on it and goes
    series = store.record("SUI", 1.2, now=11_000)

    assert [s.observed_at for s in series] == [10_001, 11_000]
    assert all(s.observed_at > 11_000 - store.window_ms for s in series)


def test_everything_older_than_window_is_dropped(store):
    for t in range(0, 5_000, 500):
        store.record("SUI", 1.0, now=t)
    series = store.record("SUI", 2.0, now=10_000)

    assert series == (PriceSample(price=2.0, observed_at=10_000),)


def test_clock_stepping_back_keeps_order_and_eviction_exact():
    store = PriceHistoryStore(window_ms=300_000)
    store.record("SUI", 1.0, now=10_000)
    stepped_back = store.record("SUI", 1.1, now=5_000)

    assert [s.observed_at for s in stepped_back] == [5_000, 10_000]

    series = store.record("SUI", 1.2, now=305_500)

    assert [s.observed_at for s in series] == [10_000, 305_500]
    assert all(s.observed_at > 305_500 - store.window_ms for s in series)


def test_symbols_are_independent(store):
    store.record("SUI", 1.0, now=10_000)
    store.record("USDC", 1.0, now=10_000)
    store.record("SUI", 1.1, now=11_500)

    # SUI's update evicted its own old sample and left USDC alone
    assert [s.observed_at for s in store.series("SUI")] == [11_500]
    assert [s.observed_at for s in store.series("USDC")] == [10_000]


def test_nan_price_is_stored(store):
    series = store.record("SUI", math.nan, now=10_000)
    assert math.isnan(series[0].price)


def test_returned_series_is_a_snapshot(store):
    series = store.record("SUI", 1.0, now=10_000)
    store.record("SUI", 1.1, now=10_100)

    assert len(series) == 1
    assert len(store.series("SUI")) == 2


def test_clear(store):
    store.record("SUI", 1.0, now=10_000)
    store.clear()
    assert store.symbols() == []

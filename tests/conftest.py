from datetime import date, timedelta

import pytest

from data_collector import NoDataError
from models import Bar


def build_bars(closes, volumes=None, start=date(2024, 1, 1)):
    if volumes is None:
        volumes = [1000] * len(closes)
    return [
        Bar(date=start + timedelta(days=i), close=float(c), volume=int(v))
        for i, (c, v) in enumerate(zip(closes, volumes))
    ]


def sawtooth(days=120, low=90.0, high=110.0, period=10):
    """Triangle wave: peak (high) at t % period == 0, trough (low) halfway."""
    half = period // 2
    step = (high - low) / half
    return [low + step * abs((t % period) - half) for t in range(days)]


class FakeCollector:
    """In-memory stand-in for DataCollector.get_bars."""

    def __init__(self, series, failures=None):
        self.series = series
        self.failures = failures or {}
        self.calls = []

    def get_bars(self, ticker, lookback):
        self.calls.append((ticker, dict(lookback)))
        if ticker in self.failures:
            raise self.failures[ticker]
        if ticker not in self.series:
            raise NoDataError(f"No data available for {ticker}")
        return self.series[ticker]


@pytest.fixture
def make_bars():
    return build_bars


@pytest.fixture
def flat_bars():
    return build_bars([50.0] * 300, [1000] * 300)


@pytest.fixture
def sawtooth_bars():
    closes = sawtooth()
    volumes = [5000 if t % 10 == 5 else 1000 for t in range(len(closes))]
    return build_bars(closes, volumes)


@pytest.fixture
def rising_bars():
    closes = [100 + i * 0.5 for i in range(260)]
    return build_bars(closes, [1_000_000 + (i % 7) * 10_000 for i in range(260)])


@pytest.fixture
def fake_collector(flat_bars, sawtooth_bars, rising_bars):
    return FakeCollector({
        "FLAT": flat_bars,
        "SAW": sawtooth_bars,
        "UP": rising_bars,
    })

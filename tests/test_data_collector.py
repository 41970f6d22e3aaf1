from datetime import date

import numpy as np
import pandas as pd
import pytest

import data_collector
from data_collector import DataCollector, NoDataError, bars_from_history


def history_frame(rows):
    index = pd.DatetimeIndex([pd.Timestamp(d) for d, _, _ in rows])
    return pd.DataFrame(
        {"Close": [c for _, c, _ in rows], "Volume": [v for _, _, v in rows]},
        index=index,
    )


class FakeTicker:
    """Records history() calls and returns a canned frame."""

    instances = []

    def __init__(self, symbol, frame):
        self.symbol = symbol
        self.frame = frame
        self.requests = []
        FakeTicker.instances.append(self)

    def history(self, **kwargs):
        self.requests.append(kwargs)
        return self.frame


@pytest.fixture
def patch_ticker(monkeypatch):
    FakeTicker.instances = []

    def install(frame):
        monkeypatch.setattr(data_collector.yf, "Ticker", lambda symbol: FakeTicker(symbol, frame))
        return FakeTicker.instances

    return install


class TestBarsFromHistory:
    def test_sorted_deduplicated_and_cleaned(self):
        frame = history_frame([
            ("2024-03-04", 12.0, 300),
            ("2024-03-01", 10.0, 100),
            ("2024-03-02", 11.0, np.nan),
            ("2024-03-03", np.nan, 500),
            ("2024-03-04", 12.5, 350),
        ])
        bars = bars_from_history(frame)

        assert [b.date for b in bars] == [date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 4)]
        assert [b.close for b in bars] == [10.0, 11.0, 12.5]
        assert [b.volume for b in bars] == [100, 0, 350]

    def test_timezone_aware_index(self):
        frame = history_frame([("2024-05-01 00:00:00-04:00", 100.0, 10)])
        assert bars_from_history(frame)[0].date == date(2024, 5, 1)

    def test_empty_frame(self):
        assert bars_from_history(pd.DataFrame()) == []
        assert bars_from_history(None) == []


class TestDataCollector:
    def test_fetch_window_and_interval(self, patch_ticker):
        tickers = patch_ticker(history_frame([("2024-01-02", 5.0, 1)]))
        bars = DataCollector().get_bars("TSLA", {"days": 365})

        assert len(bars) == 1
        assert tickers[0].symbol == "TSLA"
        req = tickers[0].requests[0]
        assert req["interval"] == "1d"
        start, end = pd.Timestamp(req["start"]), pd.Timestamp(req["end"])
        assert end - start == pd.Timedelta(days=365)
        assert end == pd.Timestamp.today().normalize() + pd.Timedelta(days=1)

    def test_month_lookback(self, patch_ticker):
        tickers = patch_ticker(history_frame([("2024-01-02", 5.0, 1)]))
        DataCollector().get_bars("VOO", {"months": 6})
        req = tickers[0].requests[0]
        end = pd.Timestamp(req["end"])
        assert pd.Timestamp(req["start"]) == end - pd.DateOffset(months=6)

    def test_empty_history_raises_no_data(self, patch_ticker):
        patch_ticker(pd.DataFrame())
        with pytest.raises(NoDataError, match="No data available for ZZZZ"):
            DataCollector().get_bars("ZZZZ", {"days": 365})

    def test_cache_hit_skips_provider(self, patch_ticker):
        tickers = patch_ticker(history_frame([("2024-01-02", 5.0, 1)]))
        collector = DataCollector(cache_ttl=60)

        first = collector.get_bars("QQQ", {"days": 365})
        second = collector.get_bars("QQQ", {"days": 365})
        assert first is second
        assert len(tickers) == 1

        collector.get_bars("QQQ", {"months": 6})
        assert len(tickers) == 2

        collector.clear_cache()
        collector.get_bars("QQQ", {"days": 365})
        assert len(tickers) == 3

    def test_zero_ttl_always_refetches(self, patch_ticker):
        tickers = patch_ticker(history_frame([("2024-01-02", 5.0, 1)]))
        collector = DataCollector(cache_ttl=0)
        collector.get_bars("QQQ", {"days": 365})
        collector.get_bars("QQQ", {"days": 365})
        assert len(tickers) == 2

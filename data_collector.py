"""
Market Data Collector

The only blocking collaborator in the pipeline: turns a ticker into a
chronological list of daily Bars pulled from Yahoo Finance.

Simple interface → get_bars(ticker, lookback) returns List[Bar]
Complexity hidden → date-window math, DataFrame cleanup, short-lived cache
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Tuple

import pandas as pd
import yfinance as yf

from config import BAR_INTERVAL, CACHE_TTL_SECONDS
from models import Bar

logger = logging.getLogger(__name__)


class NoDataError(ValueError):
    """The provider returned an empty or missing series for a ticker."""


def bars_from_history(hist: pd.DataFrame) -> List[Bar]:
    """Convert a yfinance history frame into clean, chronological Bars."""
    if hist is None or hist.empty:
        return []

    frame = hist[~hist.index.duplicated(keep="last")].sort_index()
    frame = frame.dropna(subset=["Close"])
    volume = frame["Volume"].fillna(0) if "Volume" in frame.columns else pd.Series(0, index=frame.index)

    return [
        Bar(date=pd.Timestamp(ts).date(), close=float(close), volume=max(0, int(vol)))
        for ts, close, vol in zip(frame.index, frame["Close"], volume)
    ]


class DataCollector:
    """
    Fetches daily bars per ticker.

    lookback is a pandas.DateOffset keyword dict, e.g. {"days": 365} or
    {"months": 6}, so both analysis profiles share one code path.
    """

    def __init__(self, cache_ttl: int = CACHE_TTL_SECONDS):
        self._cache: Dict[Tuple[str, Tuple], Tuple[List[Bar], datetime]] = {}
        self._cache_timeout = timedelta(seconds=cache_ttl)

    # ── Public Interface ────────────────────────────────────────────────

    def get_bars(self, ticker: str, lookback: Dict[str, int]) -> List[Bar]:
        """Chronological daily bars; raises NoDataError when nothing comes back."""
        key = (ticker, tuple(sorted(lookback.items())))
        if key in self._cache:
            bars, ts = self._cache[key]
            if datetime.now() - ts < self._cache_timeout:
                logger.debug(f"Cache hit for {ticker}")
                return bars

        bars = self._fetch(ticker, lookback)
        self._cache[key] = (bars, datetime.now())
        return bars

    def clear_cache(self):
        self._cache.clear()

    # ── Internal ────────────────────────────────────────────────────────

    def _fetch(self, ticker: str, lookback: Dict[str, int]) -> List[Bar]:
        end = pd.Timestamp.today().normalize() + pd.Timedelta(days=1)
        start = end - pd.DateOffset(**lookback)
        logger.info(f"Fetching {ticker} bars from {start.date()} to {end.date()}")

        hist = yf.Ticker(ticker).history(
            start=start.strftime("%Y-%m-%d"),
            end=end.strftime("%Y-%m-%d"),
            interval=BAR_INTERVAL,
        )
        bars = bars_from_history(hist)
        if not bars:
            raise NoDataError(f"No data available for {ticker}")
        logger.info(f"  {ticker}: {len(bars)} bars")
        return bars

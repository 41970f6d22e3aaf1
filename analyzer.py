"""
Stock Analyzer — per-instrument pipeline and batch orchestrator

    bars → indicator arrays → latest snapshot → score → AnalysisResult

analyze_bars() is a pure function of one bar sequence. BatchAnalyzer wraps
it with the data fetch and converts any per-ticker failure into an
AnalysisError record, so one bad ticker never sinks the batch.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Union

import indicators as ind
from config import DEFAULT_PROFILE, INDICATORS, MAX_WORKERS, PROFILES
from data_collector import DataCollector, NoDataError
from models import AnalysisError, AnalysisResult, Bar, IndicatorSnapshot
from scorer import score_snapshot
from support_resistance import find_levels

logger = logging.getLogger(__name__)

BatchItem = Union[AnalysisResult, AnalysisError]


def resolve_profile(name: str) -> Dict:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(
            f"Unknown profile {name!r} (expected one of: {', '.join(PROFILES)})"
        ) from None


def compute_snapshot(bars: Sequence[Bar], profile: Dict) -> IndicatorSnapshot:
    """Run every indicator over the full series and keep the latest values."""
    if not bars:
        raise NoDataError("Empty bar sequence")

    closes = [b.close for b in bars]
    volumes = [b.volume for b in bars]
    price = closes[-1]
    volume = volumes[-1]

    sma = {p: ind.latest(ind.rolling_mean(closes, p)) for p in INDICATORS["sma_periods"]}
    rsi = ind.rsi(closes)
    macd = ind.macd(closes, mode=profile["macd_mode"])
    bb = ind.bollinger_bands(closes)
    avg_volume = ind.latest(ind.average_volume(volumes))
    week52 = ind.week52_range(closes)
    levels = find_levels(closes, volumes, mode=profile["level_mode"])

    bb_upper = ind.latest(bb["upper"])
    bb_lower = ind.latest(bb["lower"])

    return IndicatorSnapshot(
        price=price,
        volume=volume,
        rsi=ind.latest(rsi),
        macd=ind.latest(macd["macd"]),
        macd_signal=ind.latest(macd["signal"]),
        macd_histogram=ind.latest(macd["histogram"]),
        prev_macd=ind.latest(macd["macd"], 1),
        prev_macd_signal=ind.latest(macd["signal"], 1),
        sma20=sma.get(20),
        sma50=sma.get(50),
        sma200=sma.get(200),
        bb_upper=bb_upper,
        bb_middle=ind.latest(bb["middle"]),
        bb_lower=bb_lower,
        bb_position=ind.bb_position(price, bb_upper, bb_lower),
        avg_volume=avg_volume,
        volume_ratio=ind.safe_ratio(volume, avg_volume),
        week52_high=week52["high"],
        week52_low=week52["low"],
        distance_from_high=ind.distance_from_high(price, week52["high"]),
        distance_from_low=ind.distance_from_low(price, week52["low"]),
        support=tuple(levels["support"]),
        resistance=tuple(levels["resistance"]),
    )


def analyze_bars(ticker: str, bars: Sequence[Bar], profile: str = DEFAULT_PROFILE) -> AnalysisResult:
    cfg = resolve_profile(profile)
    snapshot = compute_snapshot(bars, cfg)
    card = score_snapshot(snapshot, cfg["scorer"])
    return AnalysisResult(
        ticker=ticker,
        profile=profile,
        as_of=bars[-1].date,
        snapshot=snapshot,
        score=card.score,
        recommendation=card.recommendation,
        signals=card.signals,
    )


class BatchAnalyzer:
    """
    Analyzes a list of tickers.

    Simple interface:
        analyze(tickers) -> List[AnalysisResult | AnalysisError]  (request order)

    max_workers > 1 fans the fetch+analysis out over a thread pool; results
    are identical to the sequential run because each ticker is independent.
    """

    def __init__(self, data_collector: Optional[DataCollector] = None,
                 profile: str = DEFAULT_PROFILE, max_workers: int = MAX_WORKERS):
        resolve_profile(profile)
        self.data_collector = data_collector or DataCollector()
        self.profile = profile
        self.max_workers = max(1, int(max_workers))

    def analyze_one(self, ticker: str) -> BatchItem:
        cfg = PROFILES[self.profile]
        try:
            bars = self.data_collector.get_bars(ticker, cfg["lookback"])
            if not bars:
                raise NoDataError(f"No data available for {ticker}")
            result = analyze_bars(ticker, bars, self.profile)
            logger.info(
                f"  {ticker}: {result.current_price:.2f} "
                f"score={result.score:.1f} ({result.recommendation.value})"
            )
            return result
        except NoDataError as e:
            logger.warning(f"  No data for {ticker}: {e}")
            return AnalysisError(ticker=ticker, error=str(e) or type(e).__name__)
        except Exception as e:
            logger.error(f"  Failed {ticker}: {e}", exc_info=True)
            return AnalysisError(ticker=ticker, error=str(e) or type(e).__name__)

    def analyze(self, tickers: Sequence[str]) -> List[BatchItem]:
        logger.info(f"Analyzing {len(tickers)} ticker(s) with '{self.profile}' profile...")
        if self.max_workers == 1 or len(tickers) <= 1:
            return [self.analyze_one(t) for t in tickers]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(self.analyze_one, tickers))

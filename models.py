"""Core data models — single source of truth.
Bars come in, AnalysisResult / AnalysisError records go out. Display
formatting (rounding, N/A handling) is computed here so the CLI and the
HTTP layer never disagree on the output contract.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from config import RECOMMENDATION_THRESHOLDS


class LevelKind(Enum):
    SUPPORT = "support"
    RESISTANCE = "resistance"


class Recommendation(Enum):
    STRONG_BUY = "STRONG BUY"
    MODERATE_BUY = "MODERATE BUY"
    HOLD = "HOLD"
    AVOID = "AVOID"

    @classmethod
    def from_score(cls, score: float) -> "Recommendation":
        for label, threshold in RECOMMENDATION_THRESHOLDS.items():
            if score >= threshold:
                return cls(label)
        return cls.AVOID


@dataclass(frozen=True)
class Bar:
    """One daily bar. Only close and volume feed the analysis."""
    date: date
    close: float
    volume: int = 0


@dataclass(frozen=True)
class Level:
    """Support/resistance price; count = raw swing points merged into it."""
    price: float
    kind: LevelKind
    count: int = 1

    def to_record(self) -> Dict[str, Any]:
        return {"price": _num(self.price, 2), "count": self.count}


def _num(value: Optional[float], digits: int) -> Optional[float]:
    """Round for display; undefined and non-finite values become None."""
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return round(value, digits)


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Latest-index view of every indicator (None = not computable)."""
    price: float
    volume: int
    rsi: Optional[float] = None
    macd: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_histogram: Optional[float] = None
    prev_macd: Optional[float] = None
    prev_macd_signal: Optional[float] = None
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    bb_upper: Optional[float] = None
    bb_middle: Optional[float] = None
    bb_lower: Optional[float] = None
    bb_position: Optional[float] = None
    avg_volume: Optional[float] = None
    volume_ratio: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    distance_from_high: Optional[float] = None
    distance_from_low: Optional[float] = None
    support: Tuple[Level, ...] = ()
    resistance: Tuple[Level, ...] = ()


@dataclass(frozen=True)
class AnalysisResult:
    ticker: str
    profile: str
    as_of: Optional[date]
    snapshot: IndicatorSnapshot
    score: float
    recommendation: Recommendation
    signals: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return True

    @property
    def current_price(self) -> float:
        return self.snapshot.price

    @property
    def signals_label(self) -> str:
        return ", ".join(self.signals) or "None"

    def to_record(self) -> Dict[str, Any]:
        """Flat, JSON-safe record (prices 2dp, percentages 1dp)."""
        s = self.snapshot
        return {
            "ticker": self.ticker,
            "profile": self.profile,
            "asOf": self.as_of.isoformat() if self.as_of else None,
            "currentPrice": _num(s.price, 2),
            "score": _num(self.score, 1),
            "recommendation": self.recommendation.value,
            "signals": self.signals_label,
            "rsi": _num(s.rsi, 2),
            "macd": _num(s.macd, 2),
            "macdSignal": _num(s.macd_signal, 2),
            "macdHistogram": _num(s.macd_histogram, 2),
            "sma20": _num(s.sma20, 2),
            "sma50": _num(s.sma50, 2),
            "sma200": _num(s.sma200, 2),
            "bbUpper": _num(s.bb_upper, 2),
            "bbMiddle": _num(s.bb_middle, 2),
            "bbLower": _num(s.bb_lower, 2),
            "bbPosition": _num(s.bb_position, 1),
            "volume": int(s.volume),
            "avgVolume": _num(s.avg_volume, 0),
            "volumeRatio": _num(s.volume_ratio, 2),
            "week52High": _num(s.week52_high, 2),
            "week52Low": _num(s.week52_low, 2),
            "distanceFromHigh": _num(s.distance_from_high, 1),
            "distanceFromLow": _num(s.distance_from_low, 1),
            "support": [lvl.to_record() for lvl in s.support],
            "resistance": [lvl.to_record() for lvl in s.resistance],
        }


@dataclass(frozen=True)
class AnalysisError:
    """Per-ticker failure record; never aborts the batch."""
    ticker: str
    error: str

    @property
    def ok(self) -> bool:
        return False

    def to_record(self) -> Dict[str, Any]:
        return {"ticker": self.ticker, "error": self.error}


def to_records(results: List[Any]) -> List[Dict[str, Any]]:
    return [r.to_record() for r in results]

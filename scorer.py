"""
Signal Scorer — heuristic buy-signal fusion.

Two profiles read the same IndicatorSnapshot:

  detailed     8 equally weighted factors worth 0 / 0.5 / 1.0 credit each;
               score = credits / 8 * 100, so it always lands in [0, 100].
  lightweight  flat weighted sum of bonuses and penalties; not clamped,
               only bucketed by the recommendation thresholds.

Branches are evaluated top to bottom and the first match wins. A comparison
against an undefined (None) or nan value never holds.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from config import SCORING
from models import IndicatorSnapshot, Recommendation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreCard:
    score: float
    recommendation: Recommendation
    signals: Tuple[str, ...]


def score_snapshot(snapshot: IndicatorSnapshot, profile: str = "detailed") -> ScoreCard:
    try:
        scorer = SCORERS[profile]
    except KeyError:
        raise ValueError(f"Unknown scoring profile: {profile!r}") from None
    return scorer(snapshot)


# ── Comparison helpers ─────────────────────────────────────────────────────

def _gt(a: Optional[float], b: Optional[float]) -> bool:
    return a is not None and b is not None and a > b


def _lt(a: Optional[float], b: Optional[float]) -> bool:
    return a is not None and b is not None and a < b


def _le(a: Optional[float], b: Optional[float]) -> bool:
    return a is not None and b is not None and a <= b


def _near(price: float, level_price: float) -> bool:
    return abs(price - level_price) / price < SCORING["near_level_pct"]


# ── Detailed profile ───────────────────────────────────────────────────────

def score_detailed(s: IndicatorSnapshot) -> ScoreCard:
    cfg = SCORING["detailed"]
    price = s.price
    credits = 0.0
    tags: List[str] = []

    # 1. RSI
    if _lt(s.rsi, cfg["rsi_oversold"]):
        credits += 1
        tags.append("RSI Oversold")
    elif _lt(s.rsi, cfg["rsi_low"]):
        credits += 0.5
        tags.append("RSI Low")

    # 2. MACD vs signal line
    if _gt(s.macd, s.macd_signal) and _le(s.prev_macd, s.prev_macd_signal):
        credits += 1
        tags.append("MACD Bullish Crossover")
    elif _gt(s.macd, s.macd_signal):
        credits += 0.5
        tags.append("MACD Bullish")

    # 3. Short-term MA stack
    if _gt(price, s.sma20) and _gt(s.sma20, s.sma50):
        credits += 1
        tags.append("Strong Uptrend")
    elif not (_lt(price, s.sma20) and _lt(s.sma20, s.sma50)):
        credits += 0.5

    # 4. Long-term trend
    if _gt(price, s.sma200):
        credits += 1
        tags.append("Long-term Uptrend")

    # 5. Bollinger position
    if _lt(s.bb_position, cfg["bb_lower_zone"]):
        credits += 1
        tags.append("Near Lower BB")
    elif _lt(s.bb_position, cfg["bb_lower_half"]) or _le(s.bb_position, cfg["bb_middle_zone"]):
        credits += 0.5

    # 6. Volume confirmation
    if _gt(s.volume_ratio, cfg["volume_high"]):
        credits += 1
        tags.append("High Volume")
    elif _gt(s.volume_ratio, cfg["volume_normal"]):
        credits += 0.5

    # 7. 52-week position
    if _gt(s.distance_from_high, cfg["far_from_high"]):
        credits += 1
        tags.append("Far from High")
    elif _gt(s.distance_from_high, cfg["off_high"]):
        credits += 0.5

    # 8. Support / resistance proximity
    near_support = any(_near(price, lvl.price) for lvl in s.support)
    near_resistance = any(_near(price, lvl.price) for lvl in s.resistance)
    if near_support:
        credits += 1
        tags.append("Near Support")
    elif not near_resistance:
        credits += 0.5

    score = credits / cfg["factors"] * 100
    logger.debug(f"Detailed score: {credits}/{cfg['factors']} credits → {score:.1f}")
    return ScoreCard(score=score, recommendation=Recommendation.from_score(score),
                     signals=tuple(tags))


# ── Lightweight profile ────────────────────────────────────────────────────

def score_lightweight(s: IndicatorSnapshot) -> ScoreCard:
    w = SCORING["lightweight"]
    price = s.price
    score = 0
    tags: List[str] = []

    threshold, points = w["rsi_oversold"]
    if _lt(s.rsi, threshold):
        score += points
        tags.append("RSI Oversold")
    else:
        threshold, points = w["rsi_overbought"]
        if _gt(s.rsi, threshold):
            score += points
            tags.append("RSI Overbought")

    if _gt(s.macd, 0):
        score += w["positive_macd"]
        tags.append("Positive MACD")

    if _gt(price, s.sma20) and _gt(price, s.sma50):
        score += w["above_short_mas"]
        tags.append("Above Short-term MAs")

    if _gt(s.sma20, s.sma50) and _gt(s.sma50, s.sma200):
        score += w["long_term_uptrend"]
        tags.append("Long-term Uptrend")

    threshold, points = w["high_volume"]
    if _gt(s.volume_ratio, threshold):
        score += points
        tags.append("High Volume")

    threshold, points = w["near_lower_bb"]
    if _lt(s.bb_position, threshold):
        score += points
        tags.append("Near Lower BB")
    else:
        threshold, points = w["near_upper_bb"]
        if _gt(s.bb_position, threshold):
            score += points

    factor, points = w["near_support"]
    if s.support and price <= s.support[0].price * factor:
        score += points
        tags.append("Near Support")

    recovery = w["recovery"]
    if (_gt(s.distance_from_low, recovery["min_off_low"])
            and _gt(s.distance_from_high, recovery["min_off_high"])):
        score += recovery["points"]
        tags.append("Recovery Potential")

    logger.debug(f"Lightweight score: {score}")
    return ScoreCard(score=float(score), recommendation=Recommendation.from_score(score),
                     signals=tuple(tags))


SCORERS: Dict[str, Callable[[IndicatorSnapshot], ScoreCard]] = {
    "detailed": score_detailed,
    "lightweight": score_lightweight,
}

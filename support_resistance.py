"""
Support / Resistance Level Detector

Two interchangeable strategies, picked by mode string:

  swing:  strict local extrema over the trailing window, filtered by volume,
          clustered within 2% and ranked by how many swing points merged.
  volume: the highest-volume bars act as price nodes; the node just below
          the current price is support, the node just above is resistance.

Simple interface → find_levels(closes, volumes, mode) -> {"support": [...], "resistance": [...]}
The two modes are not expected to agree.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import numpy as np

from config import LEVELS
from indicators import sequential_sum
from models import Level, LevelKind

logger = logging.getLogger(__name__)

LEVEL_MODES = ("swing", "volume")


def find_levels(closes: Sequence[float], volumes: Sequence[Optional[float]],
                mode: str = "swing") -> Dict[str, List[Level]]:
    try:
        finder = _FINDERS[mode]
    except KeyError:
        raise ValueError(f"Unknown level mode: {mode!r}") from None
    return finder(closes, volumes)


# ── Swing-point mode ───────────────────────────────────────────────────────

def swing_candidates(closes: Sequence[float], volumes: Sequence[float],
                     neighbors: int = LEVELS["swing_neighbors"],
                     volume_factor: float = LEVELS["swing_volume_factor"]) -> List[Level]:
    """
    Raw swing points in discovery order. A bar qualifies when its close
    strictly beats `neighbors` closes on each side and its volume exceeds
    volume_factor x the mean volume of the whole window.
    """
    if len(closes) == 0:
        return []
    avg_vol = sequential_sum(np.asarray(volumes, dtype=float)) / len(volumes)
    min_volume = avg_vol * volume_factor

    candidates: List[Level] = []
    for i in range(neighbors, len(closes) - neighbors):
        price = closes[i]
        if volumes[i] <= min_volume:
            continue
        around = [closes[i - k] for k in range(1, neighbors + 1)]
        around += [closes[i + k] for k in range(1, neighbors + 1)]

        if all(price > p for p in around):
            candidates.append(Level(price=price, kind=LevelKind.RESISTANCE))
        if all(price < p for p in around):
            candidates.append(Level(price=price, kind=LevelKind.SUPPORT))
    return candidates


def cluster_levels(candidates: Sequence[Level],
                   cluster_pct: float = LEVELS["cluster_pct"]) -> List[Level]:
    """
    Merge same-kind candidates into the first existing cluster whose price is
    within cluster_pct of the *incoming* candidate's price. A merge bumps the
    count and moves the cluster price to the midpoint of the two.
    """
    clusters: List[Level] = []
    for level in candidates:
        for idx, cluster in enumerate(clusters):
            if (cluster.kind == level.kind
                    and abs(cluster.price - level.price) / level.price < cluster_pct):
                clusters[idx] = replace(
                    cluster,
                    count=cluster.count + 1,
                    price=(cluster.price + level.price) / 2,
                )
                break
        else:
            clusters.append(replace(level, count=1))
    return clusters


def swing_levels(closes: Sequence[float], volumes: Sequence[float]) -> Dict[str, List[Level]]:
    lookback = min(LEVELS["swing_lookback"], len(closes))
    recent_closes = list(closes[len(closes) - lookback:])
    recent_volumes = [float(v or 0) for v in volumes[len(volumes) - lookback:]]

    clusters = cluster_levels(swing_candidates(recent_closes, recent_volumes))
    # stable: equal counts keep discovery order
    clusters.sort(key=lambda lvl: lvl.count, reverse=True)

    top = LEVELS["max_per_kind"]
    levels = {
        "support": [c for c in clusters if c.kind == LevelKind.SUPPORT][:top],
        "resistance": [c for c in clusters if c.kind == LevelKind.RESISTANCE][:top],
    }
    logger.debug(
        f"Swing levels: {len(clusters)} clusters, "
        f"{len(levels['support'])} support / {len(levels['resistance'])} resistance kept"
    )
    return levels


# ── Volume-node mode ───────────────────────────────────────────────────────

def volume_node_levels(closes: Sequence[float],
                       volumes: Sequence[Optional[float]]) -> Dict[str, List[Level]]:
    """Nearest high-volume price below (support) and above (resistance) the last close."""
    if len(closes) == 0:
        return {"support": [], "resistance": []}

    nodes = [(price, volumes[i] or 0) for i, price in enumerate(closes)]
    nodes.sort(key=lambda pv: pv[1], reverse=True)
    nodes = nodes[:LEVELS["volume_top_n"]]
    nodes.sort(key=lambda pv: pv[0])

    current = closes[-1]
    below = [price for price, _ in nodes if price < current]
    above = [price for price, _ in nodes if price > current]
    return {
        "support": [Level(price=below[-1], kind=LevelKind.SUPPORT)] if below else [],
        "resistance": [Level(price=above[0], kind=LevelKind.RESISTANCE)] if above else [],
    }


_FINDERS = {
    "swing": swing_levels,
    "volume": volume_node_levels,
}

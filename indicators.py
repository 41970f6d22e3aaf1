"""
Technical indicator math.

Every calculator returns an IndicatorArray: a list aligned index-for-index
with its input, holding None wherever the value is not yet computable
(insufficient lookback, or an undefined dependency). Degenerate ratios are
propagated as inf/nan rather than replaced with a "clean" number.

Layering:
  windowed statistics → rolling_mean, rolling_std, ema
  calculators         → rsi, macd, bollinger_bands, average_volume, week52_range
"""

import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from config import INDICATORS

IndicatorArray = List[Optional[float]]

MACD_MODES = ("full", "macd_only")


# ═══════════════════════════════════════════════════════════════════════════
# Windowed statistics
# ═══════════════════════════════════════════════════════════════════════════

def _window(values: Sequence[Optional[float]], i: int, window: int) -> Optional[np.ndarray]:
    """Trailing window ending at i, or None if any value in it is undefined."""
    chunk = values[i - window + 1:i + 1]
    if any(v is None for v in chunk):
        return None
    return np.asarray(chunk, dtype=float)


def sequential_sum(chunk: np.ndarray) -> float:
    """Strict left-to-right sum. ndarray.sum() is pairwise and rounds differently."""
    if chunk.size == 0:
        return 0.0
    return float(np.add.accumulate(chunk)[-1])


def rolling_mean(values: Sequence[Optional[float]], window: int) -> IndicatorArray:
    """Simple moving average; None before index window-1."""
    n = len(values)
    out: IndicatorArray = [None] * n
    if window <= 0 or n < window:
        return out
    for i in range(window - 1, n):
        chunk = _window(values, i, window)
        if chunk is not None:
            out[i] = sequential_sum(chunk) / window
    return out


def rolling_std(values: Sequence[Optional[float]], window: int,
                mean: IndicatorArray) -> IndicatorArray:
    """Population std-dev (divide by window) around the supplied mean."""
    n = len(values)
    out: IndicatorArray = [None] * n
    if window <= 0:
        return out
    for i in range(window - 1, n):
        m = mean[i]
        if m is None:
            continue
        chunk = _window(values, i, window)
        if chunk is not None:
            out[i] = math.sqrt(sequential_sum((chunk - m) ** 2) / window)
    return out


def ema(values: Sequence[Optional[float]], window: int) -> IndicatorArray:
    """
    Exponential moving average seeded with the SMA of the first `window`
    values at index window-1. The seed is taken from rolling_mean so that
    ema[window-1] == sma[window-1] exactly.
    """
    n = len(values)
    out: IndicatorArray = [None] * n
    if window <= 0 or n < window:
        return out

    out[window - 1] = rolling_mean(values[:window], window)[window - 1]
    k = 2 / (window + 1)
    for i in range(window, n):
        prev = out[i - 1]
        if prev is None or values[i] is None:
            continue
        out[i] = (values[i] - prev) * k + prev
    return out


# ═══════════════════════════════════════════════════════════════════════════
# Calculators
# ═══════════════════════════════════════════════════════════════════════════

def rsi(closes: Sequence[float], period: int = INDICATORS["rsi_period"]) -> IndicatorArray:
    """
    RSI from a fresh scan of the trailing `period` one-step changes at every
    index (simple averages, not Wilder smoothing; nothing carries over
    between indices).

    avg_loss == 0 → ratio is inf → RSI 100.0
    avg_gain == avg_loss == 0 → nan
    """
    c = np.asarray(closes, dtype=float)
    n = len(c)
    out: IndicatorArray = [None] * n
    if period <= 0 or n <= period:
        return out

    changes = np.diff(c)  # changes[j] = c[j + 1] - c[j]
    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(period, n):
            window = changes[i - period:i]
            avg_gain = np.float64(sequential_sum(window[window > 0])) / period
            avg_loss = np.float64(sequential_sum(np.abs(window[window < 0]))) / period
            rs = avg_gain / avg_loss
            out[i] = float(100.0 - 100.0 / (1.0 + rs))
    return out


def macd(closes: Sequence[float],
         fast: int = INDICATORS["macd"]["fast"],
         slow: int = INDICATORS["macd"]["slow"],
         signal: int = INDICATORS["macd"]["signal"],
         mode: str = "full") -> Dict[str, IndicatorArray]:
    """
    MACD line = EMA(fast) - EMA(slow).

    The signal line is an EMA over the compacted run of defined MACD values,
    mapped back onto the original indices once it has `signal` values of
    history. mode="macd_only" skips signal/histogram (left undefined).
    """
    if mode not in MACD_MODES:
        raise ValueError(f"Unknown MACD mode: {mode!r}")

    ema_fast = ema(closes, fast)
    ema_slow = ema(closes, slow)
    line: IndicatorArray = [
        f - s if f is not None and s is not None else None
        for f, s in zip(ema_fast, ema_slow)
    ]
    n = len(line)
    if mode == "macd_only":
        return {"macd": line, "signal": [None] * n, "histogram": [None] * n}

    compact_signal = ema([v for v in line if v is not None], signal)
    signal_line: IndicatorArray = [None] * n
    k = 0
    for i, value in enumerate(line):
        if value is None:
            continue
        if k >= signal - 1:
            signal_line[i] = compact_signal[k]
        k += 1

    histogram: IndicatorArray = [
        m - s if m is not None and s is not None else None
        for m, s in zip(line, signal_line)
    ]
    return {"macd": line, "signal": signal_line, "histogram": histogram}


def bollinger_bands(closes: Sequence[float],
                    period: int = INDICATORS["bb_period"],
                    num_std: float = INDICATORS["bb_std"]) -> Dict[str, IndicatorArray]:
    middle = rolling_mean(closes, period)
    std = rolling_std(closes, period, middle)
    upper: IndicatorArray = [None] * len(middle)
    lower: IndicatorArray = [None] * len(middle)
    for i, (m, s) in enumerate(zip(middle, std)):
        if m is None or s is None:
            continue
        upper[i] = m + num_std * s
        lower[i] = m - num_std * s
    return {"upper": upper, "middle": middle, "lower": lower}


def bb_position(price: float, upper: Optional[float], lower: Optional[float]) -> Optional[float]:
    """Where price sits in the band: 0 = lower, 100 = upper. None on a zero-width band."""
    if upper is None or lower is None or upper == lower:
        return None
    return (price - lower) / (upper - lower) * 100


def average_volume(volumes: Sequence[float],
                   period: int = INDICATORS["volume_sma"]) -> IndicatorArray:
    return rolling_mean([float(v) for v in volumes], period)


def week52_range(closes: Sequence[float],
                 bars: int = INDICATORS["week52_bars"]) -> Optional[Dict[str, float]]:
    """High/low of the trailing min(bars, len) closes."""
    if len(closes) == 0:
        return None
    recent = np.asarray(closes[-min(bars, len(closes)):], dtype=float)
    return {"high": float(recent.max()), "low": float(recent.min())}


def safe_ratio(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
    """numerator / denominator; None if either side is undefined, inf/nan on zero."""
    if numerator is None or denominator is None:
        return None
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator))


def distance_from_high(price: float, high: float) -> Optional[float]:
    """How far price sits below the high, in % of the high."""
    ratio = safe_ratio(high - price, high)
    return None if ratio is None else ratio * 100


def distance_from_low(price: float, low: float) -> Optional[float]:
    """How far price sits above the low, in % of the low."""
    ratio = safe_ratio(price - low, low)
    return None if ratio is None else ratio * 100


def latest(values: IndicatorArray, offset: int = 0) -> Optional[float]:
    """Value `offset` bars back from the end, or None if out of range."""
    if offset >= len(values):
        return None
    return values[-1 - offset]

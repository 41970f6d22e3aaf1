"""
Terminal Display Module

Per-ticker analysis report plus a ranked summary. Undefined indicator
values always print as N/A, never as 0.
"""

import logging
import math
from datetime import datetime
from typing import List, Optional, Sequence, Union

from config import TERMINAL_WIDTH
from models import AnalysisError, AnalysisResult, Recommendation

logger = logging.getLogger(__name__)

RECOMMENDATION_NOTES = {
    Recommendation.STRONG_BUY: "Multiple positive indicators",
    Recommendation.MODERATE_BUY: "Some positive signals, proceed with caution",
    Recommendation.HOLD: "Mixed signals, not ideal for buying",
    Recommendation.AVOID: "Bearish indicators, wait for better entry point",
}

RECOMMENDATION_COLORS = {
    Recommendation.STRONG_BUY: "\033[92m",
    Recommendation.MODERATE_BUY: "\033[93m",
    Recommendation.HOLD: "\033[33m",
    Recommendation.AVOID: "\033[91m",
}
RESET = "\033[0m"


def fmt(value: Optional[float], digits: int = 2, prefix: str = "", suffix: str = "") -> str:
    """Format a number, or N/A when it is undefined or non-finite."""
    if value is None or not math.isfinite(value):
        return "N/A"
    return f"{prefix}{value:.{digits}f}{suffix}"


def volume_label(ratio: Optional[float]) -> str:
    if ratio is None or math.isnan(ratio):
        return ""
    if ratio > 1.2:
        return "(High ↑)"
    if ratio < 0.8:
        return "(Low ↓)"
    return "(Normal)"


class Display:
    def __init__(self, width: int = TERMINAL_WIDTH, currency: str = "USD", color: bool = True):
        self.width = width
        self.currency = currency
        self.color = color

    def _fc(self, amount: Optional[float]) -> str:
        """Format currency."""
        symbols = {"EUR": "€", "GBP": "£"}
        return fmt(amount, 2, prefix=symbols.get(self.currency, "$"))

    def _paint(self, text: str, rec: Recommendation) -> str:
        if not self.color:
            return text
        return f"{RECOMMENDATION_COLORS.get(rec, RESET)}{text}{RESET}"

    def _rule(self, title: Optional[str] = None):
        print("=" * self.width)
        if title:
            print(title)
            print("=" * self.width)

    # ── Per-ticker report ───────────────────────────────────────────────

    def show_result(self, item: Union[AnalysisResult, AnalysisError]):
        if isinstance(item, AnalysisError):
            self.show_error(item)
        else:
            self.show_analysis(item)

    def show_error(self, err: AnalysisError):
        print()
        self._rule(f"{err.ticker} Analysis")
        print(f"\n  Error: {err.error}\n")

    def show_analysis(self, r: AnalysisResult):
        s = r.snapshot
        print()
        self._rule(f"{r.ticker} Analysis - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
                   f"  [{r.profile}]")
        print(f"\nCurrent Price: {self._fc(s.price)}")
        if r.as_of:
            print(f"As of: {r.as_of.isoformat()}")

        print("\n52-Week Range:")
        print(f"  High: {self._fc(s.week52_high)} ({fmt(s.distance_from_high, 1, suffix='% below')})")
        print(f"  Low:  {self._fc(s.week52_low)} ({fmt(s.distance_from_low, 1, suffix='% above')})")

        print("\nMoving Averages:")
        print(f"  20-day SMA:  {self._fc(s.sma20)}")
        print(f"  50-day SMA:  {self._fc(s.sma50)}")
        print(f"  200-day SMA: {self._fc(s.sma200)}")

        print("\nBollinger Bands (20, 2):")
        print(f"  Upper: {self._fc(s.bb_upper)}")
        print(f"  Lower: {self._fc(s.bb_lower)}")
        print(f"  Position: {fmt(s.bb_position, 1, suffix='%')} (0%=lower, 100%=upper)")

        print("\nTechnical Indicators:")
        print(f"  RSI (14):    {fmt(s.rsi)}")
        print(f"  MACD:        {fmt(s.macd)}")
        print(f"  Signal Line: {fmt(s.macd_signal)}")
        print(f"  MACD Hist:   {fmt(s.macd_histogram)}")

        print("\nVolume:")
        print(f"  Current: {s.volume / 1_000_000:.2f}M")
        avg = None if s.avg_volume is None else s.avg_volume / 1_000_000
        print(f"  20-day Avg: {fmt(avg, suffix='M')}")
        print(f"  Ratio: {fmt(s.volume_ratio, suffix='x')} {volume_label(s.volume_ratio)}")

        print("\nSupport/Resistance Levels:")
        for i, lvl in enumerate(s.support, 1):
            print(f"  Support {i}: {self._fc(lvl.price)} (x{lvl.count})")
        for i, lvl in enumerate(s.resistance, 1):
            print(f"  Resistance {i}: {self._fc(lvl.price)} (x{lvl.count})")
        if not s.support and not s.resistance:
            print("  No strong levels detected")

        print()
        self._rule("RECOMMENDATION")
        print(f"\nSignals: {r.signals_label}")
        print(f"Buy Signal Strength: {r.score:.1f}%")
        label = f"{r.recommendation.value} - {RECOMMENDATION_NOTES[r.recommendation]}"
        print(self._paint(label, r.recommendation))
        self._rule()

    # ── Summary ─────────────────────────────────────────────────────────

    def show_summary(self, results: Sequence[Union[AnalysisResult, AnalysisError]]):
        ranked: List[AnalysisResult] = sorted(
            (r for r in results if isinstance(r, AnalysisResult)),
            key=lambda r: r.score,
            reverse=True,
        )
        failed = [r for r in results if isinstance(r, AnalysisError)]

        print()
        self._rule("SUMMARY")
        print()
        for idx, r in enumerate(ranked, 1):
            line = (
                f"{idx}. {r.ticker:<6s} {self._fc(r.current_price):>10s} - "
                f"Signal: {r.score:5.1f}%  {r.recommendation.value}"
            )
            print(self._paint(line, r.recommendation))
        for err in failed:
            print(f"   {err.ticker:<6s} ERROR: {err.error}")

        print("\n  DISCLAIMER: This is for educational purposes only.")
        print("    Not financial advice. Always do your own research.")
        self._rule()
        print()


def print_startup_banner(tickers: Sequence[str], profile: str):
    print("\n  Starting Stock Analysis...")
    print(f"  Analyzing: {', '.join(tickers)}")
    print(f"  Profile: {profile}\n")

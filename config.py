"""
Configuration for the Stock Buy-Signal Analyzer
Centralized configuration, easy to modify.

Two analysis profiles share the same indicator math:
- detailed:    1 year of bars, full MACD, swing-point S/R, 8-factor score
- lightweight: 6 months of bars, MACD line only, volume-node S/R, weighted sum
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Base directories ────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).parent
LOGS_DIR = BASE_DIR / "logs"

# ── Universe ────────────────────────────────────────────────────────────────
# Yahoo Finance symbols
_env_tickers = os.getenv("ANALYSIS_TICKERS", "")
TICKERS = (
    [t.strip().upper() for t in _env_tickers.split(",") if t.strip()]
    or ["TSLA", "VOO", "QQQ"]
)

# ── Timing ──────────────────────────────────────────────────────────────────
UPDATE_INTERVAL = int(os.getenv("ANALYSIS_UPDATE_INTERVAL", "300"))  # --watch mode
CACHE_TTL_SECONDS = 60

# ── Data ────────────────────────────────────────────────────────────────────
DATA_PROVIDER = "yfinance"
BAR_INTERVAL = "1d"

# Batch fan-out; 1 = sequential
MAX_WORKERS = max(1, int(os.getenv("ANALYSIS_MAX_WORKERS", "1")))

# ── Technical Indicators ────────────────────────────────────────────────────
INDICATORS = {
    # Trend
    "sma_periods": [20, 50, 200],
    "macd": {"fast": 12, "slow": 26, "signal": 9},

    # Momentum
    "rsi_period": 14,

    # Volatility
    "bb_period": 20,
    "bb_std": 2,

    # Volume
    "volume_sma": 20,

    # Range
    "week52_bars": 252,        # ~1 trading year
}

# ── Support / Resistance ────────────────────────────────────────────────────
LEVELS = {
    # swing mode
    "swing_lookback": 60,      # trailing bars scanned for swing points
    "swing_neighbors": 2,      # bars each side that must be strictly beaten
    "swing_volume_factor": 0.8,  # swing bar volume must exceed 0.8x window mean
    "cluster_pct": 0.02,       # merge same-kind levels within 2%
    "max_per_kind": 2,

    # volume mode
    "volume_top_n": 10,        # highest-volume bars used as price nodes
}

# ── Scoring ─────────────────────────────────────────────────────────────────
SCORING = {
    "near_level_pct": 0.02,

    "detailed": {
        "factors": 8,
        "rsi_oversold": 30,
        "rsi_low": 40,
        "bb_lower_zone": 20,
        "bb_lower_half": 40,
        "bb_middle_zone": 60,
        "volume_high": 1.2,
        "volume_normal": 0.8,
        "far_from_high": 20,
        "off_high": 10,
    },

    "lightweight": {
        "rsi_oversold": (30, 25),
        "rsi_overbought": (70, -15),
        "positive_macd": 20,
        "above_short_mas": 20,
        "long_term_uptrend": 15,
        "high_volume": (1.2, 10),
        "near_lower_bb": (20, 15),
        "near_upper_bb": (80, -10),
        "near_support": (1.02, 10),
        "recovery": {"min_off_low": 5, "min_off_high": 30, "points": 10},
    },
}

# score >= threshold → recommendation (checked top to bottom)
RECOMMENDATION_THRESHOLDS = {
    "STRONG BUY": 75,
    "MODERATE BUY": 50,
    "HOLD": 25,
}

# ── Profiles ────────────────────────────────────────────────────────────────
PROFILES = {
    "detailed": {
        "lookback": {"days": 365},
        "macd_mode": "full",
        "level_mode": "swing",
        "scorer": "detailed",
    },
    "lightweight": {
        "lookback": {"months": 6},
        "macd_mode": "macd_only",
        "level_mode": "volume",
        "scorer": "lightweight",
    },
}
DEFAULT_PROFILE = os.getenv("ANALYSIS_PROFILE", "detailed")

# ── HTTP API ────────────────────────────────────────────────────────────────
API_HOST = os.getenv("ANALYSIS_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("ANALYSIS_API_PORT", "3001"))

# ── Display ─────────────────────────────────────────────────────────────────
TERMINAL_WIDTH = 72

# ── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

"""
Stock Analysis Bot — command-line entry point

One-shot by default: fetch, analyze, print a report per ticker and a ranked
summary. --watch re-runs the batch every interval until Ctrl+C.
--json prints the flat result records instead of the terminal report.
"""

import argparse
import json
import logging
import signal
import sys
import time
from datetime import datetime
from typing import List, Optional, Sequence

from config import (
    TICKERS, UPDATE_INTERVAL, LOG_LEVEL, LOG_FORMAT, LOGS_DIR,
    DEFAULT_PROFILE, MAX_WORKERS, PROFILES,
)
from analyzer import BatchAnalyzer, BatchItem
from display import Display, print_startup_banner
from models import to_records

logger = logging.getLogger(__name__)


def setup_logging(level: str = LOG_LEVEL, to_file: bool = True):
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if to_file:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        handlers.insert(
            0, logging.FileHandler(LOGS_DIR / f"analyzer_{datetime.now().strftime('%Y%m%d')}.log")
        )
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)


class StockAnalysisBot:
    """
    Main orchestrator.

    Flow per iteration:
    1. Fetch daily bars for each ticker
    2. Compute indicators, levels and score (BatchAnalyzer)
    3. Print report + summary, or JSON records
    """

    def __init__(self, tickers: Sequence[str], profile: str = DEFAULT_PROFILE,
                 as_json: bool = False, analyzer: Optional[BatchAnalyzer] = None):
        self.tickers = list(tickers)
        self.profile = profile
        self.as_json = as_json
        self.running = False
        self.analyzer = analyzer or BatchAnalyzer(profile=profile, max_workers=MAX_WORKERS)
        self.display = Display()
        self.results: List[BatchItem] = []
        logger.info(f"Bot initialized for tickers: {', '.join(self.tickers)}")

    def _signal_handler(self, signum, frame):
        logger.info("Shutdown signal received")
        self.running = False

    def run_once(self) -> List[BatchItem]:
        self.results = self.analyzer.analyze(self.tickers)
        if self.as_json:
            print(json.dumps({"results": to_records(self.results)}, indent=2))
        else:
            for item in self.results:
                self.display.show_result(item)
            self.display.show_summary(self.results)
        return self.results

    def watch(self, interval: int = UPDATE_INTERVAL):
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)
        self.running = True

        iteration = 0
        while self.running:
            try:
                iteration += 1
                logger.info(f"=== Iteration {iteration} ===")
                self.run_once()
                if self.running:
                    logger.info(f"Sleeping {interval}s")
                    time.sleep(interval)
            except KeyboardInterrupt:
                break
            except Exception as e:
                logger.error(f"Error in main loop: {e}", exc_info=True)
                time.sleep(10)

        logger.info("Shutting down bot...")

    def exit_code(self) -> int:
        """0 if at least one ticker produced a result."""
        return 0 if any(r.ok for r in self.results) else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="stock-analyzer",
        description="Technical buy-signal scores for stocks/ETFs (educational, not advice).",
    )
    p.add_argument("tickers", nargs="*", help=f"Ticker symbols (default: {' '.join(TICKERS)})")
    p.add_argument("--profile", choices=sorted(PROFILES), default=DEFAULT_PROFILE,
                   help=f"Analysis profile (default: {DEFAULT_PROFILE})")
    p.add_argument("--json", action="store_true", help="Print result records as JSON")
    p.add_argument("--watch", action="store_true", help="Re-run every --interval seconds")
    p.add_argument("--interval", type=int, default=UPDATE_INTERVAL,
                   help=f"Seconds between runs in --watch mode (default: {UPDATE_INTERVAL})")
    p.add_argument("--log-level", default=LOG_LEVEL)
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    tickers = [t.strip().upper() for t in args.tickers if t.strip()] or TICKERS

    try:
        bot = StockAnalysisBot(tickers=tickers, profile=args.profile, as_json=args.json)
        if not args.json:
            print_startup_banner(tickers, args.profile)
        if args.watch:
            bot.watch(args.interval)
        else:
            bot.run_once()
        return bot.exit_code()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

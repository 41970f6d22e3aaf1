"""
HTTP API for the analyzer.

GET  /             service banner + usage
POST /api/analyze  {"tickers": ["TSLA", "AAPL"], "profile": "detailed"}
                   → {"results": [record | {"ticker", "error"}, ...]}
"""

import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from analyzer import BatchAnalyzer
from config import API_HOST, API_PORT, DEFAULT_PROFILE, MAX_WORKERS, PROFILES
from data_collector import DataCollector
from models import to_records

logger = logging.getLogger(__name__)


def create_app(data_collector: Optional[DataCollector] = None) -> Flask:
    app = Flask(__name__)
    CORS(app, resources={r"/*": {"origins": "*"}})
    collector = data_collector or DataCollector()

    @app.get("/")
    def index():
        return jsonify({
            "message": "Stock Analyzer API is running!",
            "endpoints": {
                "analyze": "/api/analyze (POST)",
                "usage": 'Send POST request with body: {"tickers": ["TSLA", "AAPL"]}',
                "profiles": sorted(PROFILES),
            },
        })

    @app.post("/api/analyze")
    def analyze():
        payload = request.get_json(silent=True)
        tickers = payload.get("tickers") if isinstance(payload, dict) else None
        if not isinstance(tickers, list) or not tickers:
            return jsonify({"error": "Please provide at least one ticker"}), 400
        if not all(isinstance(t, str) and t.strip() for t in tickers):
            return jsonify({"error": "Tickers must be non-empty strings"}), 400

        profile = payload.get("profile") or DEFAULT_PROFILE
        if not isinstance(profile, str) or profile not in PROFILES:
            return jsonify({"error": f"Unknown profile: {profile}"}), 400

        try:
            analyzer = BatchAnalyzer(data_collector=collector, profile=profile,
                                     max_workers=MAX_WORKERS)
            results = analyzer.analyze([t.strip().upper() for t in tickers])
            return jsonify({"results": to_records(results)})
        except Exception as e:
            logger.error(f"Analyze request failed: {e}", exc_info=True)
            return jsonify({"error": str(e)}), 500

    return app


if __name__ == "__main__":
    from bot import setup_logging

    setup_logging()
    create_app().run(host=API_HOST, port=API_PORT)

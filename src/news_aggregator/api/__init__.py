"""
HTTP API (FastAPI).

Usage:
    python -m news_aggregator.api
"""

from .server import create_app, run_api_server

__all__ = ["create_app", "run_api_server"]

"""
Run the News Aggregator HTTP API.

    python -m news_aggregator.api --host 0.0.0.0 --port 8765
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace

from news_aggregator.api.server import run_api_server
from news_aggregator.shared.settings import Settings


def main() -> None:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="News Aggregator HTTP API Server")
    parser.add_argument("--host", default=settings.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    parser.add_argument("--feeds-file", default=settings.feeds_file, help="Feed catalogue (YAML)")
    parser.add_argument("--no-prefetch", action="store_true", help="Disable the background refresh job")
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    run_api_server(
        replace(
            settings,
            host=args.host,
            port=args.port,
            feeds_file=args.feeds_file,
            prefetch_enabled=settings.prefetch_enabled and not args.no_prefetch,
        )
    )


if __name__ == "__main__":
    main()

"""
Runtime settings read from the environment.

All values have defaults so the service starts without any configuration;
the search API key is the only setting that is required for live API
results (its absence is reported per request as a ConfigurationError).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_FEEDS_FILE = str(Path(__file__).resolve().parent.parent / "feeds.yaml")
DEFAULT_NEWSDATA_BASE_URL = "https://newsdata.io/api/1"
DEFAULT_AGGREGATOR_DOMAINS = ("news.google.com",)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name, "").strip()
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    return int(value) if value else default


@dataclass
class Settings:
    """Service configuration."""

    api_key: str | None = None
    base_url: str = DEFAULT_NEWSDATA_BASE_URL
    language: str = "en"
    api_timeout: float = 10.0
    feed_timeout: float = 10.0
    redirect_timeout: float = 5.0
    resolve_redirects: bool = False
    aggregator_domains: tuple[str, ...] = DEFAULT_AGGREGATOR_DOMAINS
    feeds_file: str = DEFAULT_FEEDS_FILE
    prefetch_enabled: bool = True
    prefetch_interval: float = 900.0
    prefetch_page_size: int = 50
    host: str = "127.0.0.1"
    port: int = 8765

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``NEWSDATA_*`` / ``NEWS_*`` environment variables."""
        domains = os.environ.get("NEWS_AGGREGATOR_DOMAINS", "")
        return cls(
            api_key=os.environ.get("NEWSDATA_API_KEY", "").strip() or None,
            base_url=os.environ.get("NEWSDATA_BASE_URL", DEFAULT_NEWSDATA_BASE_URL),
            language=os.environ.get("NEWS_LANGUAGE", "en").strip() or "en",
            api_timeout=_env_float("NEWS_API_TIMEOUT", 10.0),
            feed_timeout=_env_float("NEWS_FEED_TIMEOUT", 10.0),
            redirect_timeout=_env_float("NEWS_REDIRECT_TIMEOUT", 5.0),
            resolve_redirects=_env_bool("NEWS_RESOLVE_REDIRECTS", False),
            aggregator_domains=tuple(d.strip().lower() for d in domains.split(",") if d.strip())
            or DEFAULT_AGGREGATOR_DOMAINS,
            feeds_file=os.environ.get("NEWS_FEEDS_FILE", DEFAULT_FEEDS_FILE),
            prefetch_enabled=_env_bool("NEWS_PREFETCH_ENABLED", True),
            prefetch_interval=_env_float("NEWS_PREFETCH_INTERVAL", 900.0),
            prefetch_page_size=_env_int("NEWS_PREFETCH_PAGE_SIZE", 50),
            host=os.environ.get("NEWS_API_HOST", "127.0.0.1"),
            port=_env_int("NEWS_API_PORT", 8765),
        )

    def as_container_config(self) -> dict[str, Any]:
        """Flatten into the dict shape consumed by ``ApplicationContainer.config``."""
        return {
            "api_key": self.api_key,
            "base_url": self.base_url,
            "language": self.language,
            "api_timeout": self.api_timeout,
            "feed_timeout": self.feed_timeout,
            "redirect_timeout": self.redirect_timeout,
            "resolve_redirects": self.resolve_redirects,
            "aggregator_domains": list(self.aggregator_domains),
            "feeds_file": self.feeds_file,
            "prefetch_enabled": self.prefetch_enabled,
            "prefetch_interval": self.prefetch_interval,
            "prefetch_page_size": self.prefetch_page_size,
        }

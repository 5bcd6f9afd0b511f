"""
Extraction strategies for semi-structured feed HTML.

Each strategy is a small function; the ordered tuples ``URL_STRATEGIES`` and
``IMAGE_STRATEGIES`` define the priority. Evaluation stops at the first
strategy that yields an acceptable value.

URL strategies (article links hidden behind aggregator redirects):
    1. plain URL regex
    2. ``href=`` attributes
    3. ``url=`` query parameters
    4. anchor tags with unquoted hrefs

Image strategies:
    1. enclosure
    2. ``media:content``
    3. inline ``<img src>`` in content
    4. ``media:thumbnail``
"""

from __future__ import annotations

import html
import re
import urllib.parse
from collections.abc import Callable, Iterable, Mapping
from typing import Any

_PLAIN_URL = re.compile(r"https?://[^\s\"'<>]+", re.IGNORECASE)
_HREF_ATTR = re.compile(r"href\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_URL_PARAM = re.compile(r"[?&](?:amp;)?url=([^&\"'\s<>]+)", re.IGNORECASE)
_ANCHOR_TAG = re.compile(r"<a\b[^>]*?\bhref\s*=\s*([^\s\"'>]+)", re.IGNORECASE)
_IMG_SRC = re.compile(r"<img[^>]+src\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")

_TRAILING_PUNCTUATION = ".,;:!?)]}'\""
_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp", ".ico")

SUMMARY_MAX_LENGTH = 500


# =============================================================================
# Text helpers
# =============================================================================


def strip_html(text: str | None) -> str:
    """Plain text from an HTML fragment: tags removed, entities decoded, whitespace collapsed."""
    if not text:
        return ""
    without_tags = _TAG.sub(" ", text)
    return _WHITESPACE.sub(" ", html.unescape(without_tags)).strip()


def truncate(text: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length]


def host_of(url: str) -> str:
    try:
        return (urllib.parse.urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_blocked_host(url: str, blocked_hosts: Iterable[str]) -> bool:
    """True when the URL's host is (a subdomain of) one of ``blocked_hosts``."""
    host = host_of(url)
    if not host:
        return False
    return any(host == blocked or host.endswith(f".{blocked}") for blocked in blocked_hosts)


def _clean_url(candidate: str) -> str:
    url = html.unescape(candidate.strip())
    return url.rstrip(_TRAILING_PUNCTUATION)


def _looks_like_image(url: str) -> bool:
    path = urllib.parse.urlparse(url).path.lower()
    return path.endswith(_IMAGE_EXTENSIONS)


def _is_acceptable_article_url(url: str, blocked_hosts: Iterable[str]) -> bool:
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    if is_blocked_host(url, blocked_hosts):
        return False
    return not _looks_like_image(url)


# =============================================================================
# Article URL strategies
# =============================================================================


def urls_from_plain_text(text: str) -> list[str]:
    return _PLAIN_URL.findall(text)


def urls_from_href_attributes(text: str) -> list[str]:
    return _HREF_ATTR.findall(text)


def urls_from_url_params(text: str) -> list[str]:
    return [urllib.parse.unquote(value) for value in _URL_PARAM.findall(html.unescape(text))]


def urls_from_anchor_tags(text: str) -> list[str]:
    return _ANCHOR_TAG.findall(text)


URL_STRATEGIES: tuple[Callable[[str], list[str]], ...] = (
    urls_from_plain_text,
    urls_from_href_attributes,
    urls_from_url_params,
    urls_from_anchor_tags,
)


def extract_article_url(text: str | None, blocked_hosts: Iterable[str]) -> str | None:
    """
    Find a real article URL embedded in feed content.

    URLs on ``blocked_hosts`` (the aggregator's own redirect domains) and
    image URLs are rejected.
    """
    if not text:
        return None
    blocked = tuple(blocked_hosts)
    for strategy in URL_STRATEGIES:
        for candidate in strategy(text):
            url = _clean_url(candidate)
            if _is_acceptable_article_url(url, blocked):
                return url
    return None


# =============================================================================
# Image strategies
# =============================================================================


def _media_url(item: Any) -> str | None:
    if not isinstance(item, Mapping):
        return None
    url = item.get("url") or item.get("href")
    return str(url) if url else None


def image_from_enclosure(entry: Mapping[str, Any], content: str) -> str | None:
    for enclosure in entry.get("enclosures") or []:
        url = _media_url(enclosure)
        media_type = str(enclosure.get("type") or "") if isinstance(enclosure, Mapping) else ""
        if url and (not media_type or media_type.startswith("image/")):
            return url
    return None


def image_from_media_content(entry: Mapping[str, Any], content: str) -> str | None:
    for media in entry.get("media_content") or []:
        url = _media_url(media)
        medium = str(media.get("medium") or "") if isinstance(media, Mapping) else ""
        if url and medium in ("", "image"):
            return url
    return None


def image_from_inline_img(entry: Mapping[str, Any], content: str) -> str | None:
    match = _IMG_SRC.search(content or "")
    return html.unescape(match.group(1)) if match else None


def image_from_media_thumbnail(entry: Mapping[str, Any], content: str) -> str | None:
    for thumbnail in entry.get("media_thumbnail") or []:
        url = _media_url(thumbnail)
        if url:
            return url
    return None


IMAGE_STRATEGIES: tuple[Callable[[Mapping[str, Any], str], str | None], ...] = (
    image_from_enclosure,
    image_from_media_content,
    image_from_inline_img,
    image_from_media_thumbnail,
)


def extract_image_url(entry: Mapping[str, Any], content: str) -> str | None:
    """First image found by ``IMAGE_STRATEGIES``, in priority order."""
    for strategy in IMAGE_STRATEGIES:
        url = strategy(entry, content)
        if url:
            return url
    return None

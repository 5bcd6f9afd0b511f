"""
Offset pagination for the local store half of a response.

The API half is never paginated here: its continuation token is threaded
through verbatim by the aggregation service.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def clamp_page(page: int | None) -> int:
    return max(1, int(page or 1))


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(int(limit), MAX_LIMIT))


def page_bounds(page: int | None, limit: int | None) -> tuple[int, int]:
    """``(skip, limit)`` for a 1-based page."""
    limit = clamp_limit(limit)
    return (clamp_page(page) - 1) * limit, limit


@dataclass
class Page:
    items: list[Any] = field(default_factory=list)
    page: int = 1
    limit: int = DEFAULT_LIMIT
    total: int = 0

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    def to_dict(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


def paginate(items: Sequence[Any], page: int | None = 1, limit: int | None = DEFAULT_LIMIT, total: int | None = None) -> Page:
    """
    Slice ``items`` for one page.

    ``total`` defaults to ``len(items)``; pass it explicitly when ``items``
    is already the requested page (store-side skip/limit).
    """
    skip, limit = page_bounds(page, limit)
    if total is None:
        return Page(items=list(items[skip : skip + limit]), page=clamp_page(page), limit=limit, total=len(items))
    return Page(items=list(items), page=clamp_page(page), limit=limit, total=total)

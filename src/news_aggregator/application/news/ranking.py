"""
Ranker - deterministic ordering of merged article sets

Policies:
    date        newest first
    relevance   text-match score against the search term
    popularity  heuristic proxy (image, content length, recency, known source)

Every policy is a total order: equal scores fall back to newest first, then
ascending id, so a given input always sorts the same way and pages never
overlap.

Scoring tables:

    relevance                                  points
    title equals term                          100
    title starts with term (else)               80
    title contains term (else)                  60
    description contains term                  +30
    content contains term                      +10
    per word of len > 2 in title               +5
    per word of len > 2 in description         +2

    popularity                                 points
    has image                                  +20
    content length / 10, capped                +30 max
    age < 24h / < 72h / < 168h                 +20 / +10 / +5
    known source                               +10
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from enum import StrEnum

from news_aggregator.domain.entities import Article, utc_now
from news_aggregator.shared.exceptions import ErrorContext, ValidationError

KNOWN_SOURCES: frozenset[str] = frozenset(
    {
        "ars technica",
        "bbc news",
        "bloomberg",
        "cnn",
        "reuters",
        "techcrunch",
        "the guardian",
        "the new york times",
        "the verge",
        "the wall street journal",
        "wired",
        "zdnet",
    }
)

CONTENT_LENGTH_DIVISOR = 10
CONTENT_SCORE_CAP = 30.0
RECENCY_BONUSES: tuple[tuple[timedelta, float], ...] = (
    (timedelta(hours=24), 20.0),
    (timedelta(hours=72), 10.0),
    (timedelta(hours=168), 5.0),
)


class SortPolicy(StrEnum):
    RELEVANCE = "relevance"
    DATE = "date"
    POPULARITY = "popularity"


def resolve_policy(sort: str | None, q: str | None) -> SortPolicy:
    """
    Pick the sort policy for a request.

    Default: relevance when there is a search term, date otherwise.

    Raises:
        ValidationError: Unknown policy name
    """
    if not sort or not sort.strip():
        return SortPolicy.RELEVANCE if q and q.strip() else SortPolicy.DATE
    try:
        return SortPolicy(sort.strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid sort '{sort}'. Use one of: relevance, date, popularity",
            context=ErrorContext(input_value=sort),
        ) from None


def relevance_score(article: Article, query: str | None) -> float:
    if not query or not query.strip():
        return 0.0
    term = query.strip().lower()
    title = article.title.lower()
    description = article.description.lower()
    content = article.content.lower()

    score = 0.0
    if title == term:
        score += 100
    elif title.startswith(term):
        score += 80
    elif term in title:
        score += 60
    if term in description:
        score += 30
    if term in content:
        score += 10

    for word in term.split():
        if len(word) <= 2:
            continue
        if word in title:
            score += 5
        if word in description:
            score += 2
    return score


def popularity_score(
    article: Article,
    now: datetime | None = None,
    known_sources: frozenset[str] = KNOWN_SOURCES,
) -> float:
    now = now or utc_now()
    score = 0.0
    if article.has_image:
        score += 20
    score += min(len(article.content) / CONTENT_LENGTH_DIVISOR, CONTENT_SCORE_CAP)

    age = now - article.published_at
    for threshold, bonus in RECENCY_BONUSES:
        if age < threshold:
            score += bonus
            break

    if article.source_name.strip().lower() in known_sources:
        score += 10
    return score


def _tie_break(article: Article) -> tuple[float, str]:
    return (-article.published_at.timestamp(), article.id)


def rank(
    articles: Iterable[Article],
    policy: SortPolicy,
    query: str | None = None,
    *,
    now: datetime | None = None,
) -> list[Article]:
    """
    Return a new list ordered by ``policy``.

    Scores are written to ``relevance_score`` / ``popularity_score`` on the
    articles for the policy in use.
    """
    items = list(articles)
    if policy is SortPolicy.DATE:
        return sorted(items, key=_tie_break)

    if policy is SortPolicy.RELEVANCE:
        for article in items:
            article.relevance_score = relevance_score(article, query)
        return sorted(items, key=lambda a: (-(a.relevance_score or 0.0), *_tie_break(a)))

    now = now or utc_now()
    for article in items:
        article.popularity_score = popularity_score(article, now)
    return sorted(items, key=lambda a: (-(a.popularity_score or 0.0), *_tie_break(a)))

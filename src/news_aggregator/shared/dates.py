"""Timestamp parsing for feed and API dates."""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import Any

from dateutil.parser import parse as parse_date

# Timezone abbreviations seen in RSS pubDate values
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse a timestamp into an aware UTC datetime.

    Accepts datetimes, ``time.struct_time`` (feedparser's ``*_parsed``
    fields) and strings in any format dateutil understands. Naive values
    are taken as UTC. Returns None when the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, time.struct_time):
        dt = datetime(*value[:6], tzinfo=timezone.utc)
    elif isinstance(value, str):
        try:
            dt = parse_date(value, tzinfos=TZINFOS)
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

from __future__ import annotations
"""Parsing of persisted instants.

All instants are local wall-clock times. Anything that cannot be read is
reported as None so status derivation can fall back instead of failing.
"""
from datetime import datetime, date
from typing import Optional, Union

LEGACY_FORMATS = (
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y/%m/%d %H:%M:%S',
    '%Y/%m/%d %H:%M',
)

Instant = Union[datetime, str, None]


def parse_instant(value: Instant) -> Optional[datetime]:
    """Return a naive datetime for value, or None if absent or unparsable.

    Offsets and a trailing 'Z' are accepted and dropped.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        pass
    for fmt in LEGACY_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.replace(tzinfo=None).isoformat(timespec='seconds')

from __future__ import annotations
from datetime import datetime
from typing import Iterable
from labtrack.constants.statuses import OCCUPYING_STATUSES
from labtrack.services.effective_status import resolve_effective_status


def is_occupying(log, now: datetime) -> bool:
    """True when the log currently holds its asset busy (in-progress or overdue)."""
    return resolve_effective_status(log, now) in OCCUPYING_STATUSES


def any_occupying(logs: Iterable, now: datetime) -> bool:
    return any(is_occupying(log, now) for log in logs)


__all__ = ['is_occupying', 'any_occupying']

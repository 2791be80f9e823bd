from __future__ import annotations
"""Effective status of a usage log.

The stored status only records explicit user actions; what a log means right
now also depends on the clock. A log can become overdue without anyone writing
to it, so the effective status is recomputed on every read and never stored.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple
from labtrack.constants.statuses import UsageStatus, EffectiveStatus
from labtrack.utils.timestamps import parse_instant

logger = logging.getLogger(__name__)


def _instant(log, field: str) -> Optional[datetime]:
    raw = getattr(log, field, None)
    value = parse_instant(raw)
    if value is None and raw not in (None, ''):
        logger.warning('usage log %s has unparsable %s %r; treating it as absent', getattr(log, 'id', None), field, raw)
    return value


def log_window(log) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Return the parsed (start, end) of a log; unparsable values are None."""
    return _instant(log, 'start_time'), _instant(log, 'end_time')


def resolve_effective_status(log, now: datetime) -> EffectiveStatus:
    """Map (log, now) to the status to display.

    completed is final. Before the start the log is not-started; past a known
    end it is overdue; otherwise it is running. Without an end time a log is
    never overdue. When the start cannot be read the stored label decides
    between not-started and in-progress.
    """
    stored = UsageStatus.parse(getattr(log, 'status', None))
    if stored is UsageStatus.COMPLETED:
        return UsageStatus.COMPLETED
    start, end = log_window(log)
    if start is not None and now < start:
        return UsageStatus.NOT_STARTED
    if end is not None and now > end:
        return UsageStatus.OVERDUE
    if start is None and stored is UsageStatus.NOT_STARTED:
        return UsageStatus.NOT_STARTED
    return UsageStatus.IN_PROGRESS


__all__ = ['resolve_effective_status', 'log_window']

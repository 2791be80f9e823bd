from __future__ import annotations
"""Lane ("track") assignment for the usage timeline.

Each asset row renders its usage intervals as bars; bars that overlap in time
must sit on different tracks. Intervals are placed greedily in start order
(shorter first on ties) onto the lowest track whose last bar has ended. For
interval graphs this first-fit order uses exactly as many tracks as the
largest set of mutually overlapping intervals.

Everything here is read-only and recomputed per render pass: open-ended
running intervals grow with `now`, so no layout may be cached.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from labtrack.config.timeline import (
    DAY_WIDTH_PX,
    MIN_ROW_HEIGHT_PX,
    ITEM_BAR_TOTAL_HEIGHT_PX,
    ITEM_BAR_VERTICAL_MARGIN_PX,
)
from labtrack.constants.statuses import OCCUPYING_STATUSES, UsageStatus
from labtrack.services.effective_status import resolve_effective_status, log_window

MIN_DURATION = timedelta(minutes=1)
OPEN_ENDED_SPAN = timedelta(days=1)
OPEN_ENDED_BAR_SPAN = timedelta(hours=1)


@dataclass(frozen=True)
class TimelineInterval:
    interval_id: str
    asset_id: int
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    effective_status: UsageStatus
    log_id: Optional[int] = None
    config_id: Optional[str] = None


@dataclass(frozen=True)
class TrackAssignment:
    interval: TimelineInterval
    track_index: int


@dataclass(frozen=True)
class AssetLayout:
    asset_id: Optional[int]
    assignments: Tuple[TrackAssignment, ...] = ()
    max_tracks: int = 0
    # Intervals without a readable start cannot be placed on a time axis.
    skipped: Tuple[TimelineInterval, ...] = ()

    def track_of(self, interval_id: str) -> Optional[int]:
        for a in self.assignments:
            if a.interval.interval_id == interval_id:
                return a.track_index
        return None


@dataclass(frozen=True)
class TimelineLayout:
    layouts: Mapping[int, AssetLayout] = field(default_factory=dict)

    def for_asset(self, asset_id: int) -> AssetLayout:
        return self.layouts.get(asset_id) or AssetLayout(asset_id=asset_id)

    def max_tracks(self, asset_id: int) -> int:
        return self.for_asset(asset_id).max_tracks


def build_timeline_intervals(logs: Iterable, now: datetime) -> List[TimelineInterval]:
    """Expand usage logs into display intervals, one per selected config or one default."""
    out: List[TimelineInterval] = []
    for log in logs:
        status = resolve_effective_status(log, now)
        start, end = log_window(log)
        config_ids = [c for c in (getattr(log, 'selected_config_ids', None) or []) if c not in (None, '')]
        base = dict(asset_id=log.asset_id, start_time=start, end_time=end, effective_status=status, log_id=log.id)
        if config_ids:
            for config_id in config_ids:
                out.append(TimelineInterval(interval_id=f"{log.id}-{config_id}", config_id=str(config_id), **base))
        else:
            out.append(TimelineInterval(interval_id=str(log.id), **base))
    return out


def layout_bounds(interval: TimelineInterval, now: datetime) -> Tuple[datetime, datetime]:
    """Time span an interval occupies for overlap purposes.

    Open-ended intervals end at `now` while running, else one day after start.
    Inverted or empty spans are clamped to MIN_DURATION.
    """
    start = interval.start_time
    assert start is not None, 'layout_bounds requires a start time'
    end = interval.end_time
    if end is None:
        end = now if interval.effective_status in OCCUPYING_STATUSES else start + OPEN_ENDED_SPAN
    if end - start < MIN_DURATION:
        end = start + MIN_DURATION
    return start, end


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def layout_tracks(intervals: Iterable[TimelineInterval], now: datetime, asset_id: Optional[int] = None) -> AssetLayout:
    placeable = []
    skipped = []
    for interval in intervals:
        if interval.start_time is None:
            skipped.append(interval)
            continue
        start, end = layout_bounds(interval, now)
        placeable.append((start, end, interval))
    placeable.sort(key=lambda item: (item[0], item[1] - item[0], item[2].interval_id))

    track_last: List[Tuple[datetime, datetime]] = []
    assignments: List[TrackAssignment] = []
    for start, end, interval in placeable:
        track_index = len(track_last)
        for idx, (last_start, last_end) in enumerate(track_last):
            if not overlaps(start, end, last_start, last_end):
                track_index = idx
                break
        if track_index == len(track_last):
            track_last.append((start, end))
        else:
            track_last[track_index] = (start, end)
        assignments.append(TrackAssignment(interval=interval, track_index=track_index))

    return AssetLayout(
        asset_id=asset_id,
        assignments=tuple(assignments),
        max_tracks=len(track_last),
        skipped=tuple(skipped),
    )


def layout_timeline(logs: Iterable, now: datetime, asset_ids: Optional[Iterable[int]] = None) -> TimelineLayout:
    """Lay out every asset's intervals independently.

    asset_ids, when given, guarantees an (possibly empty) entry per asset.
    """
    by_asset: Dict[int, List[TimelineInterval]] = {}
    for asset_id in asset_ids or ():
        by_asset.setdefault(asset_id, [])
    for interval in build_timeline_intervals(logs, now):
        by_asset.setdefault(interval.asset_id, []).append(interval)
    return TimelineLayout(layouts={
        asset_id: layout_tracks(items, now, asset_id=asset_id) for asset_id, items in by_asset.items()
    })


def bar_geometry(interval: TimelineInterval, view_start: datetime, view_end: datetime, now: datetime,
                 day_width_px: float = DAY_WIDTH_PX) -> dict:
    """Horizontal placement of one bar inside [view_start, view_end).

    Open-ended bars that are not running are drawn one hour wide.
    """
    hidden = {'left': 0.0, 'width': 0.0, 'display': False}
    start = interval.start_time
    if start is None:
        return hidden
    end = interval.end_time
    if end is None:
        end = now if interval.effective_status in OCCUPYING_STATUSES else start + OPEN_ENDED_BAR_SPAN
    if end <= view_start or start >= view_end:
        return hidden
    shown_start = max(start, view_start)
    shown_end = min(end, view_end)
    if shown_start >= shown_end:
        return hidden
    minutes_per_day = 24 * 60
    left_minutes = (shown_start - view_start).total_seconds() / 60
    width_minutes = (shown_end - shown_start).total_seconds() / 60
    return {
        'left': left_minutes / minutes_per_day * day_width_px,
        'width': max(width_minutes / minutes_per_day * day_width_px, 2.0),
        'display': True,
    }


def row_height(max_tracks: int) -> int:
    if max_tracks <= 0:
        return MIN_ROW_HEIGHT_PX
    return max(MIN_ROW_HEIGHT_PX, max_tracks * ITEM_BAR_TOTAL_HEIGHT_PX + ITEM_BAR_VERTICAL_MARGIN_PX * 2)


__all__ = [
    'TimelineInterval', 'TrackAssignment', 'AssetLayout', 'TimelineLayout',
    'build_timeline_intervals', 'layout_bounds', 'overlaps', 'layout_tracks', 'layout_timeline',
    'bar_geometry', 'row_height',
]

from __future__ import annotations
"""Read-only timeline view: calendar window plus per-asset track layout."""
from collections import defaultdict
from flask import Blueprint, request, current_app
from labtrack import get_db, get_clock
from labtrack.config.timeline import normalize_window, normalize_day_start_hour
from labtrack.errors import ValidationError
from labtrack.models.asset import Asset
from labtrack.models.usage_log import UsageLog
from labtrack.services.calendar_window import build_calendar_view
from labtrack.services.holidays import source_from_config
from labtrack.services.track_layout import (
    build_timeline_intervals, layout_bounds, overlaps, layout_tracks, bar_geometry, row_height,
)
from labtrack.utils.timestamps import parse_instant, to_iso
from labtrack.utils.validation import normalize_region

timeline_bp = Blueprint('timeline', __name__)


def _window_args(now):
    cfg = current_app.config
    try:
        before, after = normalize_window(
            request.args.get('days_before'), request.args.get('days_after'),
            max_days=cfg['TIMELINE_MAX_DAYS'],
            default_before=cfg['TIMELINE_DAYS_BEFORE'], default_after=cfg['TIMELINE_DAYS_AFTER'],
        )
        hour = normalize_day_start_hour(request.args.get('day_start_hour'), default=cfg['DAY_START_HOUR'])
    except ValueError as e:
        raise ValidationError(description=str(e))
    reference = now
    if request.args.get('reference'):
        reference = parse_instant(request.args['reference'])
        if reference is None:
            raise ValidationError(description='reference is not a valid timestamp')
    return reference, before, after, hour


@timeline_bp.get('')
def get_timeline():
    session = get_db()
    now = get_clock()()
    reference, before, after, hour = _window_args(now)
    try:
        region = normalize_region(request.args.get('region') or current_app.config['HOLIDAY_REGION'])
    except ValueError as e:
        raise ValidationError(description=str(e))
    view = build_calendar_view(reference, before, after, day_start_hour=hour, region=region,
                               source=source_from_config(current_app.config))

    q = session.query(Asset).order_by(Asset.id)
    if request.args.get('type'):
        q = q.filter(Asset.type == request.args['type'])
    assets = q.all()
    asset_ids = [a.id for a in assets]
    logs = session.query(UsageLog).filter(UsageLog.asset_id.in_(asset_ids)).all() if asset_ids else []

    visible = defaultdict(list)
    for interval in build_timeline_intervals(logs, now):
        if interval.start_time is None:
            continue
        start, end = layout_bounds(interval, now)
        if overlaps(start, end, view.start, view.end):
            visible[interval.asset_id].append(interval)

    rows = []
    for asset in assets:
        layout = layout_tracks(visible.get(asset.id, []), now, asset_id=asset.id)
        bars = []
        for assignment in layout.assignments:
            interval = assignment.interval
            geometry = bar_geometry(interval, view.start, view.end, now)
            bars.append({
                'interval_id': interval.interval_id,
                'log_id': interval.log_id,
                'config_id': interval.config_id,
                'track_index': assignment.track_index,
                'start_time': to_iso(interval.start_time),
                'end_time': to_iso(interval.end_time),
                'effective_status': interval.effective_status.value,
                **geometry,
            })
        rows.append({
            'asset_id': asset.id,
            'name': asset.name,
            'status': asset.status,
            'max_tracks': layout.max_tracks,
            'row_height': row_height(layout.max_tracks),
            'bars': bars,
        })

    return {
        'window': {'start': to_iso(view.start), 'end': to_iso(view.end), 'day_start_hour': hour},
        'days': [
            {'start': to_iso(d.start), 'date': d.date.isoformat(),
             'type': d.classification.type.value, 'name': d.classification.name}
            for d in view.days
        ],
        'warnings': list(view.warnings),
        'assets': rows,
    }

from __future__ import annotations
"""Usage log writes with their asset status correction.

Each mutation re-derives the owning asset's status from the asset's other
persisted logs plus one candidate state for the mutated log:

* create: the new log;
* status change: the log's new state (its stale persisted row is excluded);
* metadata-only edit: the log's prior state;
* delete: nothing.

Log and asset are committed together or not at all.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Dict, Optional, Tuple
from labtrack.constants.statuses import UsageStatus
from labtrack.errors import ValidationError, NotFoundError
from labtrack.models.asset import Asset
from labtrack.services.assets import get_asset
from labtrack.models.usage_log import UsageLog
from labtrack.services.reconcile import AssetStatusWrite, recompute_asset_status
from labtrack.utils.timestamps import parse_instant, to_iso
from labtrack.utils.unit_of_work import atomic
from labtrack.utils.validation import require_mapping, reject_unknown

logger = logging.getLogger(__name__)

TEXT_FIELDS = ('user', 'project_id', 'test_project_id', 'notes', 'selected_waterfall')
WRITABLE_FIELDS = ('asset_id', 'start_time', 'end_time', 'status', 'selected_config_ids') + TEXT_FIELDS


@dataclass(frozen=True)
class UsageLogResult:
    log: UsageLog
    asset_status_writes: Tuple[AssetStatusWrite, ...] = ()
    deleted: bool = False


def _required_instant(raw, field: str) -> str:
    value = parse_instant(raw)
    if value is None:
        raise ValidationError(description=f'{field} is not a valid timestamp')
    return to_iso(value)


def _normalize(data: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    require_mapping(data)
    reject_unknown(data, WRITABLE_FIELDS)
    if not partial:
        missing = [f for f in ('asset_id', 'start_time') if data.get(f) in (None, '')]
        if missing:
            raise ValidationError(description=f'{", ".join(missing)} required')
    staged: Dict[str, Any] = {}
    if 'asset_id' in data:
        try:
            staged['asset_id'] = int(data['asset_id'])
        except (TypeError, ValueError):
            raise ValidationError(description='asset_id must be int')
    if 'start_time' in data:
        staged['start_time'] = _required_instant(data['start_time'], 'start_time')
    if 'end_time' in data:
        staged['end_time'] = None if data['end_time'] in (None, '') else _required_instant(data['end_time'], 'end_time')
    if 'status' in data:
        status = UsageStatus.parse(data['status'])
        if status is None:
            raise ValidationError(description=f"unknown usage status {data['status']!r}")
        staged['status'] = status.value
    if 'selected_config_ids' in data:
        raw = data['selected_config_ids'] or []
        if not isinstance(raw, (list, tuple)):
            raise ValidationError(description='selected_config_ids must be a list')
        staged['selected_config_ids'] = [str(c) for c in raw if c not in (None, '')]
    for key in TEXT_FIELDS:
        if key in data:
            staged[key] = None if data[key] is None else str(data[key])
    return staged


def _check_window(start_iso: Optional[str], end_iso: Optional[str]):
    start, end = parse_instant(start_iso), parse_instant(end_iso)
    if start is not None and end is not None and start > end:
        raise ValidationError(description='start_time must not be after end_time')


def _completion_end(end_iso: Optional[str], now: datetime) -> str:
    """Completing a log closes it at now unless it already ended in the past."""
    end = parse_instant(end_iso)
    if end is None or end > now:
        return to_iso(now)
    return end_iso


def _snapshot(log: UsageLog) -> SimpleNamespace:
    return SimpleNamespace(id=log.id, asset_id=log.asset_id, status=log.status,
                           start_time=log.start_time, end_time=log.end_time)


def get_usage_log(session, log_id: int) -> UsageLog:
    log = session.get(UsageLog, log_id)
    if log is None:
        raise NotFoundError(description=f'usage log {log_id} not found')
    return log


def list_usage_logs(session, asset_id: Optional[int] = None):
    q = session.query(UsageLog)
    if asset_id is not None:
        q = q.filter(UsageLog.asset_id == asset_id)
    return q.order_by(UsageLog.id.desc())


def _writes(*items) -> Tuple[AssetStatusWrite, ...]:
    return tuple(w for w in items if w is not None)


def create_usage_log(session, data: Dict[str, Any], now: datetime) -> UsageLogResult:
    staged = _normalize(data, partial=False)
    staged.setdefault('status', UsageStatus.NOT_STARTED.value)
    if staged['status'] == UsageStatus.COMPLETED.value:
        staged['end_time'] = _completion_end(staged.get('end_time'), now)
    _check_window(staged['start_time'], staged.get('end_time'))
    asset = get_asset(session, staged['asset_id'])

    log = UsageLog(**staged)
    with atomic(session, 'usage log creation'):
        session.add(log)
        session.flush()
        write = recompute_asset_status(session, asset, now, exclude_log_id=log.id, candidate=log)
    return UsageLogResult(log=log, asset_status_writes=_writes(write))


def update_usage_log(session, log_id: int, changes: Dict[str, Any], now: datetime) -> UsageLogResult:
    log = get_usage_log(session, log_id)
    staged = _normalize(changes, partial=True)
    status_change = 'status' in staged and staged['status'] != log.status
    if staged.get('status') == UsageStatus.COMPLETED.value:
        staged['end_time'] = _completion_end(staged.get('end_time', log.end_time), now)
    _check_window(staged.get('start_time', log.start_time), staged.get('end_time', log.end_time))

    old_asset_id = log.asset_id
    new_asset = get_asset(session, staged.get('asset_id', old_asset_id))
    moved = new_asset.id != old_asset_id
    prior = _snapshot(log)

    with atomic(session, f'usage log {log.id} update'):
        for key, value in staged.items():
            setattr(log, key, value)
        old_write = None
        if moved:
            old_write = recompute_asset_status(session, session.get(Asset, old_asset_id), now, exclude_log_id=log.id)
        candidate = log if (status_change or moved) else prior
        write = recompute_asset_status(session, new_asset, now, exclude_log_id=log.id, candidate=candidate)
    return UsageLogResult(log=log, asset_status_writes=_writes(old_write, write))


def delete_usage_log(session, log_id: int, now: datetime) -> UsageLogResult:
    log = get_usage_log(session, log_id)
    asset = session.get(Asset, log.asset_id)
    if asset is None:
        logger.warning('usage log %s references missing asset %s; deleting log only', log.id, log.asset_id)
    with atomic(session, f'usage log {log.id} deletion'):
        session.delete(log)
        write = recompute_asset_status(session, asset, now, exclude_log_id=log.id)
    return UsageLogResult(log=log, asset_status_writes=_writes(write), deleted=True)


def remove_config_from_usage_log(session, log_id: int, config_id: str, now: datetime) -> UsageLogResult:
    """Drop one config row from a log; removing the last config deletes the log."""
    log = get_usage_log(session, log_id)
    configs = list(log.selected_config_ids or [])
    if str(config_id) not in configs:
        raise NotFoundError(description=f'config {config_id} not selected on usage log {log_id}')
    remaining = [c for c in configs if c != str(config_id)]
    if not remaining:
        return delete_usage_log(session, log_id, now)
    asset = session.get(Asset, log.asset_id)
    with atomic(session, f'usage log {log.id} config removal'):
        log.selected_config_ids = remaining
        write = recompute_asset_status(session, asset, now, exclude_log_id=log.id, candidate=log)
    return UsageLogResult(log=log, asset_status_writes=_writes(write))


__all__ = [
    'UsageLogResult', 'get_usage_log', 'list_usage_logs', 'create_usage_log', 'update_usage_log',
    'delete_usage_log', 'remove_config_from_usage_log',
]

from __future__ import annotations
"""Asset status reconciliation.

Asset.status is a cache of what the usage logs imply. Reconciliation re-derives
it from a full read and proposes only the writes needed to make the cache
match, so running it twice with no data change yields no writes the second
time. Assets in maintenance belong to the repair ticket machine and are never
touched here.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy import select
from labtrack.constants.statuses import AssetStatus, AssetType
from labtrack.models.asset import Asset
from labtrack.models.usage_log import UsageLog
from labtrack.services.occupancy import is_occupying, any_occupying
from labtrack.utils.unit_of_work import atomic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetStatusWrite:
    asset_id: int
    new_status: AssetStatus
    previous_status: Optional[str] = None

    def as_dict(self):
        return {'asset_id': self.asset_id, 'new_status': self.new_status.value, 'previous_status': self.previous_status}


def is_usage_tracked(asset) -> bool:
    """Only chamber assets follow usage logs; a missing type counts as chamber."""
    kind = getattr(asset, 'type', None)
    return not kind or AssetType.parse(kind) is AssetType.CHAMBER


def derive_occupancy_status(logs: Iterable, now: datetime) -> AssetStatus:
    return AssetStatus.IN_USE if any_occupying(logs, now) else AssetStatus.AVAILABLE


def plan_asset_status(asset, logs: Iterable, now: datetime) -> Optional[AssetStatusWrite]:
    """Corrective write for one asset given all of its relevant logs, or None."""
    current = AssetStatus.parse(asset.status)
    if current is AssetStatus.MAINTENANCE or not is_usage_tracked(asset):
        return None
    target = derive_occupancy_status(logs, now)
    if current is target:
        return None
    return AssetStatusWrite(asset_id=asset.id, new_status=target, previous_status=asset.status)


def reconcile_asset_status(assets: Iterable, usage_logs: Iterable, now: datetime) -> List[AssetStatusWrite]:
    """Minimal list of status corrections for a full snapshot. Pure."""
    assets = list(assets)
    occupied = {log.asset_id for log in usage_logs if is_occupying(log, now)}
    writes: List[AssetStatusWrite] = []
    for asset in assets:
        current = AssetStatus.parse(asset.status)
        if current is AssetStatus.MAINTENANCE or not is_usage_tracked(asset):
            continue
        target = AssetStatus.IN_USE if asset.id in occupied else AssetStatus.AVAILABLE
        if current is target:
            continue
        writes.append(AssetStatusWrite(asset_id=asset.id, new_status=target, previous_status=asset.status))
    maintenance_ids = {a.id for a in assets if AssetStatus.parse(a.status) is AssetStatus.MAINTENANCE}
    assert not maintenance_ids & {w.asset_id for w in writes}, 'usage reconciliation targeted a maintenance asset'
    return writes


def apply_status_writes(session, writes: Iterable[AssetStatusWrite]) -> int:
    """Stage writes on the session; the caller owns the commit."""
    count = 0
    for write in writes:
        asset = session.get(Asset, write.asset_id)
        if asset is None:
            logger.warning('asset %s vanished before its status write', write.asset_id)
            continue
        asset.status = write.new_status.value
        count += 1
    return count


def recompute_asset_status(session, asset, now: datetime, exclude_log_id: Optional[int] = None,
                           candidate=None) -> Optional[AssetStatusWrite]:
    """Re-derive one asset from its persisted logs and stage the correction.

    exclude_log_id drops that log's persisted row from the scan; candidate,
    when given, is counted in its place (the log's new or prior state).
    """
    if asset is None:
        return None
    q = select(UsageLog).where(UsageLog.asset_id == asset.id)
    if exclude_log_id is not None:
        q = q.where(UsageLog.id != exclude_log_id)
    logs = list(session.execute(q).scalars())
    if candidate is not None:
        logs.append(candidate)
    write = plan_asset_status(asset, logs, now)
    if write is not None:
        asset.status = write.new_status.value
        logger.info('asset %s status %s -> %s', asset.id, write.previous_status, write.new_status.value)
    return write


def reconcile_all(session, now: datetime) -> List[AssetStatusWrite]:
    """Batch job: read everything, commit all corrections in one unit of work."""
    assets = session.execute(select(Asset)).scalars().all()
    logs = session.execute(select(UsageLog)).scalars().all()
    writes = reconcile_asset_status(assets, logs, now)
    if not writes:
        logger.info('reconciliation found no status drift across %d assets', len(assets))
        return writes
    with atomic(session, 'asset status reconciliation'):
        apply_status_writes(session, writes)
    logger.info('reconciliation corrected %d of %d assets', len(writes), len(assets))
    return writes


__all__ = [
    'AssetStatusWrite', 'is_usage_tracked', 'derive_occupancy_status', 'plan_asset_status',
    'reconcile_asset_status', 'apply_status_writes', 'recompute_asset_status', 'reconcile_all',
]

from __future__ import annotations
"""Asset records: creation, descriptive edits and deletion.

status is never written here beyond the initial `available`; it is derived
from usage logs and repair tickets. Deleting an asset removes its usage logs
and repair tickets in the same unit of work (SQLite does not enforce the
foreign key cascade).
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict
from labtrack.constants.statuses import AssetStatus, AssetType
from labtrack.errors import ValidationError, NotFoundError
from labtrack.models.asset import Asset
from labtrack.models.repair_ticket import RepairTicket
from labtrack.models.usage_log import UsageLog
from labtrack.utils.timestamps import parse_instant, to_iso
from labtrack.utils.unit_of_work import atomic
from labtrack.utils.validation import require_mapping, reject_unknown

logger = logging.getLogger(__name__)

DESCRIPTIVE_FIELDS = ('category', 'manufacturer', 'model', 'serial_number', 'location', 'calibration_date')
EDITABLE_FIELDS = ('name',) + DESCRIPTIVE_FIELDS


@dataclass(frozen=True)
class AssetDeletion:
    asset_id: int
    usage_logs_deleted: int
    repair_tickets_deleted: int


def _text(raw, field: str):
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationError(description=f'{field} must be a string')
    return raw.strip() or None


def _stage(data: Dict[str, Any]) -> Dict[str, Any]:
    staged: Dict[str, Any] = {}
    if 'name' in data:
        name = _text(data['name'], 'name')
        if not name:
            raise ValidationError(description='name required')
        staged['name'] = name
    for key in DESCRIPTIVE_FIELDS:
        if key not in data:
            continue
        if key == 'calibration_date' and data[key] not in (None, ''):
            value = parse_instant(data[key])
            if value is None:
                raise ValidationError(description='calibration_date is not a valid timestamp')
            staged[key] = to_iso(value)
        else:
            staged[key] = _text(data[key], key)
    return staged


def get_asset(session, asset_id: int) -> Asset:
    asset = session.get(Asset, asset_id)
    if asset is None:
        raise NotFoundError(description=f'asset {asset_id} not found')
    return asset


def create_asset(session, data: Dict[str, Any]) -> Asset:
    require_mapping(data)
    reject_unknown(data, EDITABLE_FIELDS + ('type',))
    if 'name' not in data:
        raise ValidationError(description='name required')
    asset_type = AssetType.parse(data.get('type', AssetType.CHAMBER.value))
    if asset_type is None:
        raise ValidationError(description='type invalid')
    # New assets start available; usage logs and tickets move them from there.
    asset = Asset(type=asset_type.value, status=AssetStatus.AVAILABLE.value, **_stage(data))
    with atomic(session, 'asset creation'):
        session.add(asset)
    return asset


def update_asset(session, asset_id: int, changes: Dict[str, Any]) -> Asset:
    """Edit name and descriptive metadata. status is derived and type is fixed at creation."""
    require_mapping(changes)
    if 'status' in changes:
        raise ValidationError(description='status is derived from usage logs and repair tickets')
    reject_unknown(changes, EDITABLE_FIELDS, message='fields not editable')
    asset = get_asset(session, asset_id)
    staged = _stage(changes)
    if not staged:
        return asset
    with atomic(session, f'asset {asset.id} update'):
        for key, value in staged.items():
            setattr(asset, key, value)
    return asset


def delete_asset(session, asset_id: int) -> AssetDeletion:
    asset = get_asset(session, asset_id)
    with atomic(session, f'asset {asset.id} deletion'):
        logs = session.query(UsageLog).filter(UsageLog.asset_id == asset.id).delete(synchronize_session='fetch')
        tickets = session.query(RepairTicket).filter(RepairTicket.asset_id == asset.id).delete(synchronize_session='fetch')
        session.delete(asset)
    logger.info('asset %s deleted with %d usage logs and %d repair tickets', asset_id, logs, tickets)
    return AssetDeletion(asset_id=asset_id, usage_logs_deleted=logs, repair_tickets_deleted=tickets)


__all__ = ['AssetDeletion', 'get_asset', 'create_asset', 'update_asset', 'delete_asset']

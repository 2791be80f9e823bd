from __future__ import annotations
from flask import Blueprint, request
from labtrack import get_db, get_clock
from labtrack.constants.statuses import AssetStatus
from labtrack.errors import ValidationError
from labtrack.models.asset import Asset
from labtrack.routes.serializers import asset_json, status_writes_json
from labtrack.services import assets as svc
from labtrack.services.reconcile import reconcile_all
from labtrack.utils.listing import paginate
from labtrack.utils.validation import json_body

assets_bp = Blueprint('assets', __name__)


@assets_bp.get('')
def list_assets():
    session = get_db()
    q = session.query(Asset)
    asset_type = request.args.get('type')
    status = request.args.get('status')
    if asset_type:
        q = q.filter(Asset.type == asset_type)
    if status:
        if AssetStatus.parse(status) is None:
            raise ValidationError(description='status invalid')
        q = q.filter(Asset.status == status)
    q = q.order_by(Asset.id)
    return paginate(q, asset_json)


@assets_bp.post('')
def create_asset():
    a = svc.create_asset(get_db(), json_body())
    return asset_json(a), 201


@assets_bp.get('/<int:asset_id>')
def get_asset(asset_id: int):
    return asset_json(svc.get_asset(get_db(), asset_id))


@assets_bp.patch('/<int:asset_id>')
def update_asset(asset_id: int):
    return asset_json(svc.update_asset(get_db(), asset_id, json_body()))


@assets_bp.delete('/<int:asset_id>')
def delete_asset(asset_id: int):
    result = svc.delete_asset(get_db(), asset_id)
    return {'id': asset_id, 'deleted': True, 'usage_logs_deleted': result.usage_logs_deleted,
            'repair_tickets_deleted': result.repair_tickets_deleted}


@assets_bp.post('/reconcile')
def reconcile_assets():
    session = get_db()
    writes = reconcile_all(session, get_clock()())
    return {'changed': len(writes), 'writes': status_writes_json(writes)}

from __future__ import annotations
from flask import Blueprint, request
from labtrack import get_db, get_clock
from labtrack.config import as_int
from labtrack.errors import ValidationError
from labtrack.routes.serializers import usage_log_json, status_writes_json
from labtrack.services import usage_logs as svc
from labtrack.utils.listing import paginate
from labtrack.utils.validation import json_body

usage_bp = Blueprint('usage_logs', __name__)


def _result_json(result, now):
    body = usage_log_json(result.log, now)
    body['asset_status_writes'] = status_writes_json(result.asset_status_writes)
    return body


@usage_bp.get('')
def list_logs():
    session = get_db()
    try:
        asset_id = as_int(request.args.get('asset_id'), None, 'asset_id')
    except ValueError as e:
        raise ValidationError(description=str(e))
    now = get_clock()()
    return paginate(svc.list_usage_logs(session, asset_id=asset_id), lambda log: usage_log_json(log, now))


@usage_bp.post('')
def create_log():
    session = get_db()
    now = get_clock()()
    result = svc.create_usage_log(session, json_body(), now)
    return _result_json(result, now), 201


@usage_bp.get('/<int:log_id>')
def get_log(log_id: int):
    return usage_log_json(svc.get_usage_log(get_db(), log_id), get_clock()())


@usage_bp.patch('/<int:log_id>')
def update_log(log_id: int):
    session = get_db()
    now = get_clock()()
    result = svc.update_usage_log(session, log_id, json_body(), now)
    return _result_json(result, now)


@usage_bp.delete('/<int:log_id>')
def delete_log(log_id: int):
    now = get_clock()()
    result = svc.delete_usage_log(get_db(), log_id, now)
    return {'id': log_id, 'deleted': True, 'asset_status_writes': status_writes_json(result.asset_status_writes)}


@usage_bp.delete('/<int:log_id>/configs/<config_id>')
def remove_config(log_id: int, config_id: str):
    now = get_clock()()
    result = svc.remove_config_from_usage_log(get_db(), log_id, config_id, now)
    if result.deleted:
        return {'id': log_id, 'deleted': True, 'asset_status_writes': status_writes_json(result.asset_status_writes)}
    return _result_json(result, now)

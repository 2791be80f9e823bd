from __future__ import annotations
from flask import Blueprint, request
from labtrack import get_db, get_clock
from labtrack.config import as_int
from labtrack.errors import ValidationError
from labtrack.routes.serializers import ticket_json, status_writes_json
from labtrack.services import repair_tickets as svc
from labtrack.utils.listing import paginate
from labtrack.utils.validation import json_body

rpr_bp = Blueprint('repairs', __name__)


def _result_json(result):
    body = ticket_json(result.ticket)
    body['asset_status_writes'] = status_writes_json([result.asset_status_write])
    return body


@rpr_bp.get('/tickets')
def list_tickets():
    session = get_db()
    try:
        asset_id = as_int(request.args.get('asset_id'), None, 'asset_id')
    except ValueError as e:
        raise ValidationError(description=str(e))
    q = svc.list_repair_tickets(session, status=request.args.get('status'), asset_id=asset_id)
    return paginate(q, ticket_json)


@rpr_bp.post('/tickets')
def create_ticket():
    session = get_db()
    data = json_body()
    asset_id = data.get('asset_id')
    if asset_id is None:
        raise ValidationError(description='asset_id, problem_desc required')
    try:
        asset_id = int(asset_id)
    except (TypeError, ValueError):
        raise ValidationError(description='asset_id must be int')
    result = svc.create_repair_ticket(
        session, asset_id, data.get('problem_desc'), get_clock()(),
        expected_return_at=data.get('expected_return_at'),
    )
    return _result_json(result), 201


@rpr_bp.get('/tickets/<int:ticket_id>')
def get_ticket(ticket_id: int):
    return ticket_json(svc.get_repair_ticket(get_db(), ticket_id))


@rpr_bp.patch('/tickets/<int:ticket_id>')
def update_ticket(ticket_id: int):
    ticket = svc.update_repair_ticket(get_db(), ticket_id, json_body())
    return ticket_json(ticket)


@rpr_bp.post('/tickets/<int:ticket_id>/transition')
def transition_ticket(ticket_id: int):
    data = json_body()
    if not data.get('to'):
        raise ValidationError(description='to required')
    result = svc.transition_repair_ticket(
        get_db(), ticket_id, data['to'], get_clock()(),
        note=data.get('note'),
        vendor_name=data.get('vendor_name'),
        quote_amount=data.get('quote_amount'),
    )
    return _result_json(result)


@rpr_bp.delete('/tickets/<int:ticket_id>')
def delete_ticket(ticket_id: int):
    result = svc.delete_repair_ticket(get_db(), ticket_id)
    return {'id': ticket_id, 'deleted': True,
            'asset_status_writes': status_writes_json([result.asset_status_write])}

from __future__ import annotations
from datetime import datetime
from labtrack.models.asset import Asset
from labtrack.models.usage_log import UsageLog
from labtrack.models.repair_ticket import RepairTicket
from labtrack.services.effective_status import resolve_effective_status


def _ts(value):
    return value.isoformat() if isinstance(value, datetime) else value


def asset_json(a: Asset):
    return {
        'id': a.id,
        'type': a.type,
        'name': a.name,
        'category': a.category,
        'status': a.status,
        'manufacturer': a.manufacturer,
        'model': a.model,
        'serial_number': a.serial_number,
        'location': a.location,
        'calibration_date': a.calibration_date,
        'updated_at': _ts(a.updated_at),
    }


def usage_log_json(log: UsageLog, now: datetime):
    return {
        'id': log.id,
        'asset_id': log.asset_id,
        'user': log.user,
        'project_id': log.project_id,
        'test_project_id': log.test_project_id,
        'start_time': log.start_time,
        'end_time': log.end_time,
        'status': log.status,
        'effective_status': resolve_effective_status(log, now).value,
        'notes': log.notes,
        'selected_config_ids': list(log.selected_config_ids or []),
        'selected_waterfall': log.selected_waterfall,
    }


def ticket_json(t: RepairTicket):
    return {
        'id': t.id,
        'asset_id': t.asset_id,
        'status': t.status,
        'problem_desc': t.problem_desc,
        'vendor_name': t.vendor_name,
        'quote_amount': t.quote_amount,
        'quote_at': t.quote_at,
        'expected_return_at': t.expected_return_at,
        'completed_at': t.completed_at,
        'created_at': t.created_at,
        'timeline': list(t.timeline or []),
    }


def status_writes_json(writes):
    return [w.as_dict() for w in writes if w is not None]

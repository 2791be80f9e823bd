from __future__ import annotations
"""Repair ticket lifecycle and the asset status it forces.

    quote-pending -> repair-pending -> completed
    quote-pending -> completed

completed is terminal. While a ticket is open its asset is in maintenance;
completing or deleting the last open ticket hands the asset back as available
(never in-use: a freshly repaired asset waits for the next reconciliation).
Each operation validates first, then commits the ticket and the asset status
in one unit of work.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import select
from labtrack.constants.statuses import AssetStatus, RepairStatus, OPEN_REPAIR_STATUSES
from labtrack.errors import ValidationError, ConflictError, NotFoundError
from labtrack.models.asset import Asset
from labtrack.services.assets import get_asset
from labtrack.models.repair_ticket import RepairTicket
from labtrack.services.reconcile import AssetStatusWrite
from labtrack.utils.fsm import TransitionValidator
from labtrack.utils.timestamps import parse_instant, to_iso
from labtrack.utils.unit_of_work import atomic
from labtrack.utils.validation import require_mapping, reject_unknown

logger = logging.getLogger(__name__)

REPAIR_FSM = TransitionValidator({
    RepairStatus.QUOTE_PENDING: {RepairStatus.REPAIR_PENDING, RepairStatus.COMPLETED},
    RepairStatus.REPAIR_PENDING: {RepairStatus.COMPLETED},
    RepairStatus.COMPLETED: set(),
})

EDITABLE_FIELDS = ('problem_desc', 'vendor_name', 'quote_amount', 'expected_return_at')


@dataclass(frozen=True)
class TicketResult:
    ticket: RepairTicket
    asset_status_write: Optional[AssetStatusWrite] = None


def get_repair_ticket(session, ticket_id: int) -> RepairTicket:
    ticket = session.get(RepairTicket, ticket_id)
    if ticket is None:
        raise NotFoundError(description=f'repair ticket {ticket_id} not found')
    return ticket


def open_tickets_for_asset(session, asset_id: int, exclude_ticket_id: Optional[int] = None) -> List[RepairTicket]:
    q = select(RepairTicket).where(
        RepairTicket.asset_id == asset_id,
        RepairTicket.status.in_([s.value for s in OPEN_REPAIR_STATUSES]),
    )
    if exclude_ticket_id is not None:
        q = q.where(RepairTicket.id != exclude_ticket_id)
    return list(session.execute(q).scalars())


def status_after_repair(session, asset_id: int, closing_ticket_id: int) -> AssetStatus:
    """maintenance while another ticket is open, else available."""
    if open_tickets_for_asset(session, asset_id, exclude_ticket_id=closing_ticket_id):
        return AssetStatus.MAINTENANCE
    return AssetStatus.AVAILABLE


def _force_asset_status(asset: Asset, status: AssetStatus) -> Optional[AssetStatusWrite]:
    if AssetStatus.parse(asset.status) is status:
        return None
    write = AssetStatusWrite(asset_id=asset.id, new_status=status, previous_status=asset.status)
    asset.status = status.value
    return write


def _timeline_entry(now: datetime, to: RepairStatus, frm: Optional[RepairStatus] = None, note: Optional[str] = None):
    entry: Dict[str, Any] = {'at': to_iso(now), 'from': frm.value if frm else None, 'to': to.value}
    if note:
        entry['note'] = note
    return entry


def _append_timeline(ticket: RepairTicket, entry: Dict[str, Any]):
    # Reassign so the JSON column registers the change; earlier entries are never edited.
    ticket.timeline = list(ticket.timeline or []) + [entry]


def _parse_quote(raw) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str) and raw.strip():
        try:
            value = float(raw)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def _parse_vendor(raw) -> Optional[str]:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationError(description='vendor_name must be a string')
    return raw.strip() or None


def _parse_optional_instant(raw, field: str) -> Optional[str]:
    if raw in (None, ''):
        return None
    value = parse_instant(raw)
    if value is None:
        raise ValidationError(description=f'{field} is not a valid timestamp')
    return to_iso(value)


def create_repair_ticket(session, asset_id: int, problem_desc: str, now: datetime,
                         expected_return_at=None) -> TicketResult:
    asset = get_asset(session, asset_id)
    if not problem_desc or not str(problem_desc).strip():
        raise ValidationError(description='problem_desc required')
    expected = _parse_optional_instant(expected_return_at, 'expected_return_at')
    if AssetStatus.parse(asset.status) is AssetStatus.IN_USE:
        raise ConflictError(description='asset is in use; a repair ticket cannot be opened')
    if open_tickets_for_asset(session, asset.id):
        raise ConflictError(description='asset already has an existing open ticket')

    ticket = RepairTicket(
        asset_id=asset.id,
        status=RepairStatus.QUOTE_PENDING.value,
        problem_desc=str(problem_desc).strip(),
        expected_return_at=expected,
        created_at=to_iso(now),
        timeline=[_timeline_entry(now, RepairStatus.QUOTE_PENDING)],
    )
    with atomic(session, 'repair ticket creation'):
        session.add(ticket)
        write = _force_asset_status(asset, AssetStatus.MAINTENANCE)
    logger.info('repair ticket %s opened for asset %s', ticket.id, asset.id)
    return TicketResult(ticket=ticket, asset_status_write=write)


def transition_repair_ticket(session, ticket_id: int, to, now: datetime, note: Optional[str] = None,
                             vendor_name: Optional[str] = None, quote_amount=None) -> TicketResult:
    target = RepairStatus.parse(to)
    if target is None:
        raise ValidationError(description=f'unknown repair status {to!r}')
    ticket = get_repair_ticket(session, ticket_id)
    current = RepairStatus.parse(ticket.status)
    REPAIR_FSM.assert_can_transition(current or ticket.status, target)

    if target is RepairStatus.REPAIR_PENDING:
        vendor = _parse_vendor(vendor_name)
        quote = _parse_quote(quote_amount)
        if not vendor or quote is None:
            raise ValidationError(description='vendor_name and a numeric quote_amount are both required for repair-pending')
    elif vendor_name is not None or quote_amount is not None:
        raise ValidationError(description='vendor_name/quote_amount are only accepted when entering repair-pending')

    asset = get_asset(session, ticket.asset_id)
    with atomic(session, f'repair ticket {ticket.id} transition'):
        if target is RepairStatus.REPAIR_PENDING:
            ticket.vendor_name = vendor
            ticket.quote_amount = quote
            ticket.quote_at = to_iso(now)
        if target is RepairStatus.COMPLETED:
            ticket.completed_at = to_iso(now)
            new_status = status_after_repair(session, asset.id, ticket.id)
        else:
            new_status = AssetStatus.MAINTENANCE
        ticket.status = target.value
        _append_timeline(ticket, _timeline_entry(now, target, frm=current, note=note))
        write = _force_asset_status(asset, new_status)
    logger.info('repair ticket %s %s -> %s', ticket.id, current, target)
    return TicketResult(ticket=ticket, asset_status_write=write)


def delete_repair_ticket(session, ticket_id: int) -> TicketResult:
    """Delete in any state; the asset is re-derived as on completion."""
    ticket = get_repair_ticket(session, ticket_id)
    asset = session.get(Asset, ticket.asset_id)
    with atomic(session, f'repair ticket {ticket.id} deletion'):
        write = None
        if asset is not None:
            write = _force_asset_status(asset, status_after_repair(session, asset.id, ticket.id))
        session.delete(ticket)
    logger.info('repair ticket %s deleted', ticket_id)
    return TicketResult(ticket=ticket, asset_status_write=write)


def update_repair_ticket(session, ticket_id: int, changes: Dict[str, Any]) -> RepairTicket:
    """Edit descriptive fields; status and timeline only move through transitions."""
    require_mapping(changes)
    reject_unknown(changes, EDITABLE_FIELDS, message='fields not editable')
    ticket = get_repair_ticket(session, ticket_id)
    staged: Dict[str, Any] = {}
    if 'problem_desc' in changes:
        desc = str(changes['problem_desc'] or '').strip()
        if not desc:
            raise ValidationError(description='problem_desc cannot be empty')
        staged['problem_desc'] = desc
    if 'vendor_name' in changes:
        staged['vendor_name'] = _parse_vendor(changes['vendor_name'])
    if 'quote_amount' in changes:
        if changes['quote_amount'] is None:
            staged['quote_amount'] = None
        else:
            quote = _parse_quote(changes['quote_amount'])
            if quote is None:
                raise ValidationError(description='quote_amount must be a non-negative number')
            staged['quote_amount'] = quote
    if 'expected_return_at' in changes:
        staged['expected_return_at'] = _parse_optional_instant(changes['expected_return_at'], 'expected_return_at')

    if ticket.quote_at:
        vendor = staged.get('vendor_name', ticket.vendor_name)
        quote = staged.get('quote_amount', ticket.quote_amount)
        if not vendor or quote is None:
            raise ValidationError(description='a quoted ticket must keep both vendor_name and quote_amount')

    if not staged:
        return ticket
    with atomic(session, f'repair ticket {ticket.id} update'):
        for key, value in staged.items():
            setattr(ticket, key, value)
    return ticket


def list_repair_tickets(session, status=None, asset_id: Optional[int] = None):
    q = session.query(RepairTicket)
    if status is not None:
        parsed = RepairStatus.parse(status)
        if parsed is None:
            raise ValidationError(description=f'unknown repair status {status!r}')
        q = q.filter(RepairTicket.status == parsed.value)
    if asset_id is not None:
        q = q.filter(RepairTicket.asset_id == asset_id)
    return q.order_by(RepairTicket.id.desc())


__all__ = [
    'REPAIR_FSM', 'TicketResult', 'get_repair_ticket', 'open_tickets_for_asset', 'status_after_repair',
    'create_repair_ticket', 'transition_repair_ticket', 'delete_repair_ticket',
    'update_repair_ticket', 'list_repair_tickets',
]

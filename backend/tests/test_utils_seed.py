"""Test seeding utilities for assets, usage logs and repair tickets.

Rows are inserted directly so tests can start from states the services would
refuse to produce (e.g. two open tickets on one asset).
"""
from datetime import datetime
from typing import Iterable, Optional
from labtrack.models import Asset, UsageLog, RepairTicket


def at(hour: int, minute: int = 0, day: int = 15, month: int = 10, year: int = 2025) -> datetime:
    return datetime(year, month, day, hour, minute)


def iso(hour: int, minute: int = 0, day: int = 15) -> str:
    return at(hour, minute, day).isoformat(timespec='seconds')


def make_asset(session, name: str = 'Chamber A', status: str = 'available', type: str = 'chamber') -> Asset:
    asset = Asset(name=name, status=status, type=type)
    session.add(asset); session.commit()
    return asset


def make_log(session, asset: Asset, start: str, end: Optional[str] = None, status: str = 'in-progress',
             configs: Iterable[str] = ()) -> UsageLog:
    log = UsageLog(asset_id=asset.id, user='tester', start_time=start, end_time=end, status=status,
                   selected_config_ids=list(configs))
    session.add(log); session.commit()
    return log


def make_ticket(session, asset: Asset, status: str = 'quote-pending') -> RepairTicket:
    """Insert a ticket without going through the state machine."""
    ticket = RepairTicket(asset_id=asset.id, status=status, problem_desc='seeded', timeline=[{'at': iso(8), 'from': None, 'to': status}])
    session.add(ticket); session.commit()
    return ticket


def transient_log(start: Optional[str], end: Optional[str] = None, status: str = 'in-progress',
                  log_id: int = 1, asset_id: int = 1, configs: Iterable[str] = ()) -> UsageLog:
    """Unsaved log for pure-function tests."""
    return UsageLog(id=log_id, asset_id=asset_id, start_time=start, end_time=end, status=status,
                    selected_config_ids=list(configs))


def reload(session, model, pk):
    session.expire_all()
    return session.get(model, pk)


__all__ = ['at', 'iso', 'make_asset', 'make_log', 'make_ticket', 'transient_log', 'reload']

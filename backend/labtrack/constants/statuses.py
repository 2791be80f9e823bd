from __future__ import annotations
"""Closed status vocabularies.

Values are the persisted strings; members compare equal to them (str enums)
so ORM columns can hold plain text while code matches on members.
"""
from enum import Enum
from typing import Optional


class _StrEnum(str, Enum):
    @classmethod
    def parse(cls, raw) -> Optional['_StrEnum']:
        """Return the member for raw, or None when raw is not a known value."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class AssetStatus(_StrEnum):
    AVAILABLE = 'available'
    IN_USE = 'in-use'
    MAINTENANCE = 'maintenance'


class AssetType(_StrEnum):
    CHAMBER = 'chamber'
    INSTRUMENT = 'instrument'
    FIXTURE = 'fixture'


class UsageStatus(_StrEnum):
    NOT_STARTED = 'not-started'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'
    OVERDUE = 'overdue'


# Effective status shares the stored vocabulary.
EffectiveStatus = UsageStatus

OCCUPYING_STATUSES = frozenset({UsageStatus.IN_PROGRESS, UsageStatus.OVERDUE})


class RepairStatus(_StrEnum):
    QUOTE_PENDING = 'quote-pending'
    REPAIR_PENDING = 'repair-pending'
    COMPLETED = 'completed'


OPEN_REPAIR_STATUSES = frozenset({RepairStatus.QUOTE_PENDING, RepairStatus.REPAIR_PENDING})


class DayType(_StrEnum):
    WEEKDAY = 'weekday'
    WEEKEND_REST = 'weekend-rest'
    PUBLIC_HOLIDAY_LOW_WAGE = 'public-holiday-low-wage'
    PUBLIC_HOLIDAY_HIGH_WAGE = 'public-holiday-high-wage'
    WORKDAY_OVERRIDE = 'workday-override'


__all__ = [
    'AssetStatus', 'AssetType', 'UsageStatus', 'EffectiveStatus', 'OCCUPYING_STATUSES',
    'RepairStatus', 'OPEN_REPAIR_STATUSES', 'DayType',
]

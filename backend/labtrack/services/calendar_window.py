from __future__ import annotations
"""Day boundaries and day classification for the scrollable timeline.

A logical day starts at a configurable hour rather than midnight, so a night
shift ending at 02:00 still belongs to the previous day. Each day is shaded
from a holiday table; missing holiday data only degrades the shading and is
reported as a warning next to an otherwise complete window.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union
from labtrack.config.timeline import DEFAULT_DAY_START_HOUR
from labtrack.constants.statuses import DayType
from labtrack.errors import HolidayFetchError
from labtrack.services.holidays import HolidayEntry, HolidaySource

logger = logging.getLogger(__name__)

HIGH_WAGE = 3

DayLike = Union[date, datetime]


@dataclass(frozen=True)
class DayClassification:
    type: DayType
    name: Optional[str] = None


@dataclass(frozen=True)
class HolidayTable:
    entries: Mapping[str, HolidayEntry] = field(default_factory=dict)
    warnings: Tuple[str, ...] = ()

    def get(self, key: str) -> Optional[HolidayEntry]:
        return self.entries.get(key)


@dataclass(frozen=True)
class CalendarDay:
    start: datetime
    date: date
    classification: DayClassification


@dataclass(frozen=True)
class CalendarView:
    days: Tuple[CalendarDay, ...]
    warnings: Tuple[str, ...] = ()

    @property
    def start(self) -> Optional[datetime]:
        return self.days[0].start if self.days else None

    @property
    def end(self) -> Optional[datetime]:
        return self.days[-1].start + timedelta(days=1) if self.days else None


def _check_hour(day_start_hour: int):
    if not 0 <= day_start_hour <= 23:
        raise ValueError('day_start_hour must be between 0 and 23')


def logical_day_start(moment: DayLike, day_start_hour: int = DEFAULT_DAY_START_HOUR) -> datetime:
    """Return the day boundary at or before moment. A plain date maps to its own boundary."""
    _check_hour(day_start_hour)
    if not isinstance(moment, datetime):
        return datetime(moment.year, moment.month, moment.day, day_start_hour)
    moment = moment.replace(tzinfo=None)
    boundary = moment.replace(hour=day_start_hour, minute=0, second=0, microsecond=0)
    if moment < boundary:
        boundary -= timedelta(days=1)
    return boundary


def build_calendar_window(reference: DayLike, days_before: int, days_after: int,
                          day_start_hour: int = DEFAULT_DAY_START_HOUR) -> List[datetime]:
    if days_before < 0 or days_after < 0:
        raise ValueError('days_before/days_after must be >= 0')
    base = logical_day_start(reference, day_start_hour)
    return [base + timedelta(days=offset) for offset in range(-days_before, days_after + 1)]


def _date_key(day: DayLike) -> str:
    return day.strftime('%Y-%m-%d')


def classify_day(day: DayLike, holiday_table: Union[HolidayTable, Mapping[str, HolidayEntry], None]) -> DayClassification:
    entry = holiday_table.get(_date_key(day)) if holiday_table is not None else None
    if entry is not None:
        if entry.is_holiday:
            if entry.wage == HIGH_WAGE:
                return DayClassification(DayType.PUBLIC_HOLIDAY_HIGH_WAGE, entry.name or None)
            return DayClassification(DayType.PUBLIC_HOLIDAY_LOW_WAGE, entry.name or None)
        return DayClassification(DayType.WORKDAY_OVERRIDE, entry.name or None)
    if day.weekday() >= 5:
        return DayClassification(DayType.WEEKEND_REST, 'weekend')
    return DayClassification(DayType.WEEKDAY, 'workday')


def load_holiday_table(years: Iterable[int], region: str, source: HolidaySource) -> HolidayTable:
    entries: Dict[str, HolidayEntry] = {}
    warnings: List[str] = []
    for year in sorted(set(years)):
        try:
            year_entries = source.fetch(year, region)
        except HolidayFetchError as e:
            logger.warning('%s', e)
            warnings.append(str(e))
            continue
        if not year_entries:
            warnings.append(f'no holiday data for {year} ({region}); weekends only')
        entries.update(year_entries)
    return HolidayTable(entries=entries, warnings=tuple(warnings))


def build_calendar_view(reference: DayLike, days_before: int, days_after: int,
                        day_start_hour: int = DEFAULT_DAY_START_HOUR,
                        region: str = 'cn', source: Optional[HolidaySource] = None) -> CalendarView:
    starts = build_calendar_window(reference, days_before, days_after, day_start_hour)
    if source is None:
        table = HolidayTable()
    else:
        table = load_holiday_table((s.year for s in starts), region, source)
    days = tuple(CalendarDay(start=s, date=s.date(), classification=classify_day(s, table)) for s in starts)
    return CalendarView(days=days, warnings=table.warnings)


__all__ = [
    'DayClassification', 'HolidayTable', 'CalendarDay', 'CalendarView',
    'logical_day_start', 'build_calendar_window', 'classify_day', 'load_holiday_table', 'build_calendar_view',
]

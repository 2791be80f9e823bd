from __future__ import annotations
"""Holiday tables keyed by calendar date.

Sources return, for one (year, region), a mapping 'yyyy-MM-dd' -> HolidayEntry.
A year with no data is an empty mapping; a source that fails (I/O, bad
payload, timeout) raises HolidayFetchError so the caller can degrade.

Payload format (one file / response per region and year):
    {"code": 0, "holiday": {"10-01": {"holiday": true, "name": "National Day",
                                      "wage": 3, "date": "2025-10-01"}, ...}}
"""
import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol

import requests

from labtrack.errors import HolidayFetchError
from labtrack.utils.validation import normalize_region

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolidayEntry:
    date: str
    is_holiday: bool
    name: str = ''
    wage: int = 1


class HolidaySource(Protocol):
    def fetch(self, year: int, region: str) -> Dict[str, HolidayEntry]: ...


def parse_holiday_payload(payload, year: int, region: str) -> Dict[str, HolidayEntry]:
    if not isinstance(payload, dict) or payload.get('code', 0) != 0:
        raise HolidayFetchError(year, region, 'payload is not a success envelope')
    raw = payload.get('holiday')
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise HolidayFetchError(year, region, "'holiday' is not an object")
    table: Dict[str, HolidayEntry] = {}
    for key, detail in raw.items():
        if not isinstance(detail, dict):
            logger.warning('skipping malformed holiday entry %s for %s (%s)', key, year, region)
            continue
        day = detail.get('date') or f"{year}-{key}"
        try:
            wage = int(detail.get('wage', 1))
        except (TypeError, ValueError):
            wage = 1
        table[str(day)] = HolidayEntry(
            date=str(day),
            is_holiday=bool(detail.get('holiday', False)),
            name=str(detail.get('name') or ''),
            wage=wage,
        )
    return table


def _safe_region(year: int, region: str) -> str:
    # region ends up in a file path or URL
    try:
        return normalize_region(region)
    except ValueError as e:
        raise HolidayFetchError(year, region, str(e)) from e


class StaticHolidaySource:
    """In-memory tables: {(year, region): {date: HolidayEntry}}. Used for tests and fixtures."""

    def __init__(self, tables: Optional[Mapping] = None):
        self.tables = dict(tables or {})

    def fetch(self, year: int, region: str) -> Dict[str, HolidayEntry]:
        return dict(self.tables.get((year, region.lower()), {}))


class DirectoryHolidaySource:
    """Reads <root>/<region>/<year>.json."""

    def __init__(self, root: str):
        self.root = root

    def path_for(self, year: int, region: str) -> str:
        return os.path.join(self.root, _safe_region(year, region), f"{year}.json")

    def fetch(self, year: int, region: str) -> Dict[str, HolidayEntry]:
        path = self.path_for(year, region)
        if not os.path.exists(path):
            logger.warning('holiday data file not found for %s (%s): %s', year, region, path)
            return {}
        try:
            with open(path, encoding='utf-8') as fh:
                payload = json.load(fh)
        except (OSError, ValueError) as e:
            raise HolidayFetchError(year, region, str(e)) from e
        return parse_holiday_payload(payload, year, region)


class HttpHolidaySource:
    """GETs <base_url>/<region>/<year>.json with a bounded timeout; 404 means no data."""

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, year: int, region: str) -> str:
        return f"{self.base_url}/{_safe_region(year, region)}/{year}.json"

    def fetch(self, year: int, region: str) -> Dict[str, HolidayEntry]:
        url = self.url_for(year, region)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise HolidayFetchError(year, region, str(e)) from e
        if resp.status_code == 404:
            logger.warning('holiday data not published for %s (%s)', year, region)
            return {}
        if resp.status_code >= 400:
            raise HolidayFetchError(year, region, f'HTTP {resp.status_code}')
        try:
            payload = resp.json()
        except ValueError as e:
            raise HolidayFetchError(year, region, 'response is not JSON') from e
        return parse_holiday_payload(payload, year, region)


def source_from_config(config: Mapping) -> HolidaySource:
    """Pick the holiday source configured for the app; no configuration means no holidays."""
    if config.get('HOLIDAY_SOURCE') is not None:
        return config['HOLIDAY_SOURCE']
    if config.get('HOLIDAY_API_URL'):
        return HttpHolidaySource(config['HOLIDAY_API_URL'], timeout=float(config.get('HOLIDAY_TIMEOUT', 5)))
    if config.get('HOLIDAY_DATA_DIR'):
        return DirectoryHolidaySource(config['HOLIDAY_DATA_DIR'])
    return StaticHolidaySource()


__all__ = [
    'HolidayEntry', 'HolidaySource', 'parse_holiday_payload',
    'StaticHolidaySource', 'DirectoryHolidaySource', 'HttpHolidaySource', 'source_from_config',
]

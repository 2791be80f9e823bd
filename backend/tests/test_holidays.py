import json
import pytest
import requests
from labtrack.errors import HolidayFetchError
from labtrack.services.holidays import (
    parse_holiday_payload, StaticHolidaySource, DirectoryHolidaySource, HttpHolidaySource, source_from_config,
)

PAYLOAD = {
    'code': 0,
    'holiday': {
        '10-01': {'holiday': True, 'name': 'National Day', 'wage': 3, 'date': '2025-10-01'},
        '10-11': {'holiday': False, 'name': 'Makeup workday', 'wage': 1},
    },
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError('no json')
        return self._payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.exc:
            raise self.exc
        return self.response


def test_parse_payload_keys_by_full_date():
    table = parse_holiday_payload(PAYLOAD, 2025, 'cn')
    assert table['2025-10-01'].is_holiday is True
    assert table['2025-10-01'].wage == 3
    # Date falls back to year + key when the entry has none
    assert table['2025-10-11'].is_holiday is False


def test_parse_payload_rejects_error_envelope():
    with pytest.raises(HolidayFetchError):
        parse_holiday_payload({'code': 1}, 2025, 'cn')


def test_static_source_is_region_insensitive():
    src = StaticHolidaySource({(2025, 'cn'): {'2025-10-01': object()}})
    assert '2025-10-01' in src.fetch(2025, 'CN')
    assert src.fetch(2024, 'cn') == {}


def test_directory_source_reads_region_year_file(tmp_path):
    (tmp_path / 'cn').mkdir()
    (tmp_path / 'cn' / '2025.json').write_text(json.dumps(PAYLOAD), encoding='utf-8')
    src = DirectoryHolidaySource(str(tmp_path))
    assert src.fetch(2025, 'cn')['2025-10-01'].name == 'National Day'
    assert src.fetch(2026, 'cn') == {}


def test_directory_source_bad_file_raises(tmp_path):
    (tmp_path / 'cn').mkdir()
    (tmp_path / 'cn' / '2025.json').write_text('{not json', encoding='utf-8')
    with pytest.raises(HolidayFetchError):
        DirectoryHolidaySource(str(tmp_path)).fetch(2025, 'cn')


def test_http_source_uses_timeout_and_parses():
    session = FakeSession(FakeResponse(200, PAYLOAD))
    src = HttpHolidaySource('https://holidays.example.com/', timeout=2.5, session=session)
    table = src.fetch(2025, 'CN')
    assert session.calls == [('https://holidays.example.com/cn/2025.json', 2.5)]
    assert table['2025-10-01'].wage == 3


def test_http_source_404_means_no_data():
    src = HttpHolidaySource('https://holidays.example.com', session=FakeSession(FakeResponse(404)))
    assert src.fetch(2025, 'cn') == {}


@pytest.mark.parametrize('session', [
    FakeSession(exc=requests.Timeout('slow')),
    FakeSession(FakeResponse(500)),
    FakeSession(FakeResponse(200, None)),
])
def test_http_source_failures_raise_fetch_error(session):
    with pytest.raises(HolidayFetchError):
        HttpHolidaySource('https://holidays.example.com', session=session).fetch(2025, 'cn')


def test_source_from_config_precedence(tmp_path):
    custom = StaticHolidaySource()
    assert source_from_config({'HOLIDAY_SOURCE': custom, 'HOLIDAY_API_URL': 'http://x'}) is custom
    assert isinstance(source_from_config({'HOLIDAY_API_URL': 'http://x', 'HOLIDAY_DATA_DIR': str(tmp_path)}), HttpHolidaySource)
    assert isinstance(source_from_config({'HOLIDAY_DATA_DIR': str(tmp_path)}), DirectoryHolidaySource)
    assert isinstance(source_from_config({}), StaticHolidaySource)


@pytest.mark.parametrize('region', ['../etc', 'c', 'cn/2025', 'a' * 9, ''])
def test_sources_refuse_unsafe_regions(tmp_path, region):
    session = FakeSession(FakeResponse(200, PAYLOAD))
    with pytest.raises(HolidayFetchError):
        DirectoryHolidaySource(str(tmp_path)).fetch(2025, region)
    with pytest.raises(HolidayFetchError):
        HttpHolidaySource('https://holidays.example.com', session=session).fetch(2025, region)
    assert session.calls == []

import pytest
from labtrack import create_app
from labtrack.config.pagination import normalize_pagination, MAX_LIMIT
from labtrack.config.timeline import normalize_window, normalize_day_start_hour


def test_pagination_defaults_and_clamps():
    assert normalize_pagination(None, None) == (50, 0)
    assert normalize_pagination('10000', '-4') == (MAX_LIMIT, 0)
    with pytest.raises(ValueError):
        normalize_pagination('ten', None)


def test_window_bounds():
    assert normalize_window(None, None) == (7, 21)
    assert normalize_window('3', '4', max_days=10) == (3, 4)
    with pytest.raises(ValueError):
        normalize_window('-1', '4')
    with pytest.raises(ValueError):
        normalize_window('100', '100', max_days=120)


def test_day_start_hour_range():
    assert normalize_day_start_hour('') == 7
    assert normalize_day_start_hour('0') == 0
    with pytest.raises(ValueError):
        normalize_day_start_hour('24')


def test_create_app_rejects_bad_config():
    with pytest.raises(ValueError):
        create_app({'DATABASE_URL': 'sqlite+pysqlite:///:memory:', 'DAY_START_HOUR': '25'})
    with pytest.raises(ValueError):
        create_app({'DATABASE_URL': 'sqlite+pysqlite:///:memory:', 'CLOCK': 'now'})


def test_create_app_rejects_bad_region():
    with pytest.raises(ValueError):
        create_app({'DATABASE_URL': 'sqlite+pysqlite:///:memory:', 'HOLIDAY_REGION': '../cn'})

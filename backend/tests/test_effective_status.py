import pytest
from labtrack.constants.statuses import UsageStatus
from labtrack.services.effective_status import resolve_effective_status, log_window
from labtrack.services.occupancy import is_occupying, any_occupying
from tests.test_utils_seed import at, iso, transient_log


def test_in_progress_past_end_is_overdue():
    log = transient_log(iso(9), iso(10), status='in-progress')
    assert resolve_effective_status(log, at(10, 30)) is UsageStatus.OVERDUE


def test_open_ended_log_is_never_overdue():
    log = transient_log(iso(9), None, status='in-progress')
    assert resolve_effective_status(log, at(10, 30)) is UsageStatus.IN_PROGRESS
    assert resolve_effective_status(log, at(9, day=20)) is UsageStatus.IN_PROGRESS


@pytest.mark.parametrize('now', [at(8), at(9, 30), at(12, day=20)])
def test_completed_is_final(now):
    log = transient_log(iso(9), iso(10), status='completed')
    assert resolve_effective_status(log, now) is UsageStatus.COMPLETED


def test_before_start_is_not_started_regardless_of_label():
    log = transient_log(iso(12), iso(13), status='in-progress')
    assert resolve_effective_status(log, at(10, 30)) is UsageStatus.NOT_STARTED


def test_end_boundary_is_still_running():
    log = transient_log(iso(9), iso(10), status='in-progress')
    assert resolve_effective_status(log, at(10)) is UsageStatus.IN_PROGRESS


def test_not_started_label_past_start_becomes_in_progress():
    log = transient_log(iso(9), None, status='not-started')
    assert resolve_effective_status(log, at(10, 30)) is UsageStatus.IN_PROGRESS
    log = transient_log(iso(9), iso(10), status='not-started')
    assert resolve_effective_status(log, at(10, 30)) is UsageStatus.OVERDUE


def test_unknown_stored_label_falls_back_to_time():
    log = transient_log(iso(9), iso(11), status='paused')
    assert resolve_effective_status(log, at(10, 30)) is UsageStatus.IN_PROGRESS


def test_malformed_end_is_treated_as_absent(caplog):
    log = transient_log(iso(9), 'not a time', status='in-progress')
    assert resolve_effective_status(log, at(12, day=20)) is UsageStatus.IN_PROGRESS
    assert any('unparsable end_time' in r.getMessage() for r in caplog.records)


def test_malformed_start_uses_stored_label():
    assert resolve_effective_status(transient_log('garbage', None, status='not-started'), at(10)) is UsageStatus.NOT_STARTED
    assert resolve_effective_status(transient_log('garbage', None, status='in-progress'), at(10)) is UsageStatus.IN_PROGRESS


def test_log_window_accepts_legacy_and_zulu_formats():
    start, end = log_window(transient_log('2025/10/15 09:00', '2025-10-15T10:00:00Z'))
    assert start == at(9)
    assert end == at(10)
    assert end.tzinfo is None


@pytest.mark.parametrize('stored,start,end,expected', [
    ('in-progress', iso(9), None, True),
    ('in-progress', iso(9), iso(10), True),       # overdue still holds the asset
    ('completed', iso(9), None, False),
    ('not-started', iso(12), iso(13), False),
    ('in-progress', iso(12), None, False),        # scheduled later today
])
def test_is_occupying(stored, start, end, expected):
    assert is_occupying(transient_log(start, end, status=stored), at(10, 30)) is expected


def test_any_occupying_on_empty_is_false():
    assert any_occupying([], at(10)) is False
    logs = [transient_log(iso(9), iso(10), status='completed', log_id=1),
            transient_log(iso(10), None, status='in-progress', log_id=2)]
    assert any_occupying(logs, at(10, 30)) is True

import pytest
from sqlalchemy.exc import OperationalError
from labtrack.constants.statuses import AssetStatus
from labtrack.errors import ValidationError, NotFoundError, StorageError
from labtrack.models import Asset, UsageLog
from labtrack.services.usage_logs import (
    create_usage_log, update_usage_log, delete_usage_log, remove_config_from_usage_log, list_usage_logs,
)
from tests.test_utils_seed import at, iso, make_asset, make_log, reload

NOW = at(10, 30)


def test_create_running_log_marks_asset_in_use(session):
    chamber = make_asset(session)
    result = create_usage_log(session, {'asset_id': chamber.id, 'start_time': iso(9), 'status': 'in-progress'}, NOW)
    assert result.log.id is not None
    assert [(w.asset_id, w.new_status) for w in result.asset_status_writes] == [(chamber.id, AssetStatus.IN_USE)]
    assert reload(session, Asset, chamber.id).status == 'in-use'


def test_create_future_log_leaves_asset_available(session):
    chamber = make_asset(session)
    result = create_usage_log(session, {'asset_id': chamber.id, 'start_time': iso(14), 'end_time': iso(16)}, NOW)
    assert result.log.status == 'not-started'
    assert result.asset_status_writes == ()
    assert reload(session, Asset, chamber.id).status == 'available'


def test_create_rejects_inverted_window_without_writing(session):
    chamber = make_asset(session)
    with pytest.raises(ValidationError):
        create_usage_log(session, {'asset_id': chamber.id, 'start_time': iso(11), 'end_time': iso(9)}, NOW)
    assert session.query(UsageLog).count() == 0


@pytest.mark.parametrize('data', [
    {'start_time': '2025-10-15T09:00:00'},
    {'asset_id': 1, 'start_time': 'yesterday'},
    {'asset_id': 1, 'start_time': '2025-10-15T09:00:00', 'status': 'paused'},
    {'asset_id': 1, 'start_time': '2025-10-15T09:00:00', 'color': 'red'},
])
def test_create_validation(session, data):
    make_asset(session)
    with pytest.raises(ValidationError):
        create_usage_log(session, data, NOW)


def test_create_for_missing_asset(session):
    with pytest.raises(NotFoundError):
        create_usage_log(session, {'asset_id': 999, 'start_time': iso(9)}, NOW)


def test_create_on_maintenance_asset_keeps_maintenance(session):
    chamber = make_asset(session, status='maintenance')
    result = create_usage_log(session, {'asset_id': chamber.id, 'start_time': iso(9), 'status': 'in-progress'}, NOW)
    assert result.asset_status_writes == ()
    assert reload(session, Asset, chamber.id).status == 'maintenance'


def test_completing_log_frees_asset_and_closes_at_now(session):
    chamber = make_asset(session, status='in-use')
    log = make_log(session, chamber, iso(9), iso(12))
    result = update_usage_log(session, log.id, {'status': 'completed'}, NOW)
    assert result.log.end_time == iso(10, 30)
    assert [w.new_status for w in result.asset_status_writes] == [AssetStatus.AVAILABLE]
    assert reload(session, Asset, chamber.id).status == 'available'


def test_completing_keeps_past_end(session):
    chamber = make_asset(session, status='in-use')
    log = make_log(session, chamber, iso(8), iso(9))
    result = update_usage_log(session, log.id, {'status': 'completed'}, NOW)
    assert result.log.end_time == iso(9)


def test_metadata_edit_keeps_asset_in_use(session):
    chamber = make_asset(session, status='in-use')
    log = make_log(session, chamber, iso(9), None)
    result = update_usage_log(session, log.id, {'notes': 'swapped fixture'}, NOW)
    assert result.asset_status_writes == ()
    assert reload(session, UsageLog, log.id).notes == 'swapped fixture'
    assert reload(session, Asset, chamber.id).status == 'in-use'


def test_moving_log_updates_both_assets(session):
    old = make_asset(session, 'Old', status='in-use')
    new = make_asset(session, 'New')
    log = make_log(session, old, iso(9), None)
    result = update_usage_log(session, log.id, {'asset_id': new.id}, NOW)
    assert {(w.asset_id, w.new_status) for w in result.asset_status_writes} == {
        (old.id, AssetStatus.AVAILABLE), (new.id, AssetStatus.IN_USE),
    }


def test_delete_last_running_log_frees_asset(session):
    chamber = make_asset(session, status='in-use')
    log = make_log(session, chamber, iso(9), None)
    result = delete_usage_log(session, log.id, NOW)
    assert result.deleted is True
    assert reload(session, UsageLog, log.id) is None
    assert reload(session, Asset, chamber.id).status == 'available'


def test_delete_with_other_running_log_keeps_in_use(session):
    chamber = make_asset(session, status='in-use')
    first = make_log(session, chamber, iso(9), None)
    make_log(session, chamber, iso(10), iso(11))
    result = delete_usage_log(session, first.id, NOW)
    assert result.asset_status_writes == ()
    assert reload(session, Asset, chamber.id).status == 'in-use'


def test_remove_config_keeps_log_until_last(session):
    chamber = make_asset(session, status='in-use')
    log = make_log(session, chamber, iso(9), None, configs=['cfg-1', 'cfg-2'])
    result = remove_config_from_usage_log(session, log.id, 'cfg-1', NOW)
    assert result.deleted is False
    assert reload(session, UsageLog, log.id).selected_config_ids == ['cfg-2']
    result = remove_config_from_usage_log(session, log.id, 'cfg-2', NOW)
    assert result.deleted is True
    assert reload(session, Asset, chamber.id).status == 'available'


def test_remove_unknown_config(session):
    chamber = make_asset(session)
    log = make_log(session, chamber, iso(9), None, configs=['cfg-1'])
    with pytest.raises(NotFoundError):
        remove_config_from_usage_log(session, log.id, 'cfg-9', NOW)


def test_failed_commit_rolls_back_log_and_asset(session, monkeypatch):
    chamber = make_asset(session)

    def boom():
        raise OperationalError('COMMIT', {}, Exception('disk I/O error'))

    monkeypatch.setattr(session, 'commit', boom)
    with pytest.raises(StorageError):
        create_usage_log(session, {'asset_id': chamber.id, 'start_time': iso(9), 'status': 'in-progress'}, NOW)
    monkeypatch.undo()
    assert session.query(UsageLog).count() == 0
    assert reload(session, Asset, chamber.id).status == 'available'


def test_list_usage_logs_filters_by_asset(session):
    a = make_asset(session, 'A')
    b = make_asset(session, 'B')
    make_log(session, a, iso(9))
    make_log(session, b, iso(9))
    make_log(session, a, iso(12))
    assert [log.asset_id for log in list_usage_logs(session, asset_id=a.id)] == [a.id, a.id]
    assert list_usage_logs(session).count() == 3


@pytest.mark.parametrize('data', [[1], 'asset', None, {1: 'x'}])
def test_non_object_payload_is_rejected(session, data):
    make_asset(session)
    with pytest.raises(ValidationError):
        create_usage_log(session, data, NOW)

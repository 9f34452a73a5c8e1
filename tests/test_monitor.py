"""Tests for the monitoring run coordinator."""

from datetime import timedelta
from pathlib import Path

import pytest

from backupset_monitor.config import ConfigManager
from backupset_monitor.core.errors import NotifierFailure
from backupset_monitor.core.models import PathStatus
from backupset_monitor.core.monitor import BackupMonitor
from tests.helpers import NOW, write_backup_sets


class RecordingNotifier:
    """Notifier double that records sent messages."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, subject: str, body: str) -> bool:
        if self.fail:
            raise NotifierFailure("connection refused")
        self.sent.append((subject, body))
        return True


def _hourly(count: int, newest_age: timedelta):
    newest = NOW - newest_age
    return [newest - timedelta(hours=count - 1 - i) for i in range(count)]


@pytest.fixture
def healthy_path(tmp_path: Path) -> Path:
    path = tmp_path / "healthy"
    write_backup_sets(path, _hourly(6, timedelta(minutes=30)))
    return path


@pytest.fixture
def stale_path(tmp_path: Path) -> Path:
    path = tmp_path / "stale"
    write_backup_sets(path, _hourly(6, timedelta(hours=5)))
    return path


def _monitor(tmp_path: Path, paths, notify_type: str = "alarm", notifier=None,
             **reports) -> BackupMonitor:
    manager = ConfigManager()
    manager.load_dict({
        "backup_paths": [str(p) for p in paths],
        "notifications": {"notify_type": notify_type},
        "email": {
            "smtp_server": "smtp.example.com",
            "from_address": "monitor@example.com",
            "to_addresses": ["admin@example.com"],
            "subject_prefix": "[Test]",
        },
        "reports": {"directory": str(tmp_path / "reports"), **reports},
    })
    return BackupMonitor(config_manager=manager, notifier=notifier, clock=lambda: NOW)


def test_run_check_evaluates_paths_in_order(tmp_path: Path, healthy_path: Path,
                                            stale_path: Path) -> None:
    missing = tmp_path / "missing"
    monitor = _monitor(tmp_path, [stale_path, missing, healthy_path])

    report = monitor.run_check()

    assert report.generated_at == NOW
    assert report.checked_paths == (str(stale_path), str(missing), str(healthy_path))
    stale, not_found, healthy = report.results
    assert stale.statuses == (PathStatus.STALE,)
    assert not_found.statuses == (PathStatus.NOT_FOUND,)
    assert healthy.is_ok
    assert healthy.item_count == 6
    assert report.has_alarm is True
    assert report.alarm_on_last_backup is True


def test_unreadable_path_does_not_stop_other_paths(tmp_path: Path, healthy_path: Path) -> None:
    not_a_dir = tmp_path / "file.tar"
    not_a_dir.write_bytes(b"x")
    monitor = _monitor(tmp_path, [not_a_dir, healthy_path])

    report = monitor.run_check()

    assert report.results[0].statuses == (PathStatus.NOT_FOUND,)
    assert "cannot be read" in report.results[0].messages[0]
    assert report.results[1].is_ok


def test_alarm_is_notified(tmp_path: Path, stale_path: Path) -> None:
    notifier = RecordingNotifier()
    monitor = _monitor(tmp_path, [stale_path], notifier=notifier)

    result = monitor.run()

    assert result["notified"] is True
    assert len(notifier.sent) == 1
    subject, body = notifier.sent[0]
    assert subject.startswith("[Test] ALARM")
    assert body == result["text"]
    assert "[STALE]" in body


def test_clean_run_is_not_notified_for_alarm_mode(tmp_path: Path, healthy_path: Path) -> None:
    notifier = RecordingNotifier()
    monitor = _monitor(tmp_path, [healthy_path], notifier=notifier)

    result = monitor.run()

    assert result["notified"] is False
    assert notifier.sent == []


def test_always_mode_sends_all_clear(tmp_path: Path, healthy_path: Path) -> None:
    notifier = RecordingNotifier()
    monitor = _monitor(tmp_path, [healthy_path], notify_type="always", notifier=notifier)

    monitor.run()

    assert len(notifier.sent) == 1
    assert notifier.sent[0][0].startswith("[Test] OK")


def test_notify_flag_suppresses_notification(tmp_path: Path, stale_path: Path) -> None:
    notifier = RecordingNotifier()
    monitor = _monitor(tmp_path, [stale_path], notifier=notifier)

    result = monitor.run(notify=False)

    assert result["notified"] is False
    assert notifier.sent == []


def test_notifier_failure_keeps_report(tmp_path: Path, stale_path: Path) -> None:
    monitor = _monitor(tmp_path, [stale_path], notifier=RecordingNotifier(fail=True))

    result = monitor.run()

    assert result["notified"] is False
    assert result["report"].has_alarm is True
    assert result["report"].results[0].statuses == (PathStatus.STALE,)


def test_report_is_saved_when_requested(tmp_path: Path, healthy_path: Path) -> None:
    monitor = _monitor(tmp_path, [healthy_path], notify_type="off")

    result = monitor.run(save_report=True)

    saved = result["saved_to"]
    assert saved is not None
    assert saved.parent == tmp_path / "reports"
    assert saved.read_text(encoding="utf-8") == result["text"]


def test_report_saving_follows_configuration(tmp_path: Path, healthy_path: Path) -> None:
    monitor = _monitor(tmp_path, [healthy_path], notify_type="off", save_local=True)

    result = monitor.run()

    assert result["saved_to"] is not None
    assert result["saved_to"].name == "backupset_report_20260110_120000.txt"


def test_collect_items_is_newest_first(tmp_path: Path, healthy_path: Path) -> None:
    monitor = _monitor(tmp_path, [healthy_path])

    items = monitor.collect_items(str(healthy_path))

    assert [item.name for item in items][0] == "backup_005.tar"
    assert items == sorted(items, key=lambda item: item.timestamp, reverse=True)


def test_email_notifier_is_built_from_configuration(tmp_path: Path, healthy_path: Path) -> None:
    monitor = _monitor(tmp_path, [healthy_path])

    assert monitor.notifier is not None
    assert monitor.notifier.to_addresses == ["admin@example.com"]


def test_unwritable_report_directory_keeps_report(tmp_path: Path, stale_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    notifier = RecordingNotifier()
    monitor = _monitor(tmp_path, [stale_path], notifier=notifier,
                       directory=str(blocker / "reports"))

    result = monitor.run(save_report=True)

    assert result["saved_to"] is None
    assert result["notified"] is True
    assert result["report"].results[0].statuses == (PathStatus.STALE,)
    assert "[STALE]" in result["text"]

"""Tests for the command-line interface."""

import json
from pathlib import Path

from click.testing import CliRunner

from backupset_monitor.cli import cli


def _config(tmp_path: Path, *paths: Path) -> str:
    lines = ["backup_paths:"]
    lines.extend(f"  - {path}" for path in paths)
    lines.extend(["logging:", "  level: ERROR", ""])
    config_file = tmp_path / "config.yaml"
    config_file.write_text("\n".join(lines), encoding="utf-8")
    return str(config_file)


def _fresh_backups(tmp_path: Path) -> Path:
    path = tmp_path / "fresh"
    path.mkdir()
    for i in range(3):
        (path / f"backup_{i}.tar").write_bytes(b"x" * 10)
    return path


def _invoke(*args):
    return CliRunner().invoke(cli, ["--log-level", "ERROR", *args])


def test_cli_help_lists_commands() -> None:
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("check", "list", "validate-config", "test-email"):
        assert command in result.output


def test_check_clean_run_exits_zero(tmp_path: Path) -> None:
    config = _config(tmp_path, _fresh_backups(tmp_path))

    result = _invoke("--config", config, "check", "--no-notify")

    assert result.exit_code == 0
    assert "No failed backups found." in result.output
    assert "INFORMATION:" in result.output


def test_check_alarm_exits_two(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    config = _config(tmp_path, _fresh_backups(tmp_path), missing)

    result = _invoke("--config", config, "check", "--no-notify")

    assert result.exit_code == 2
    assert f"[NOT_FOUND] {missing}: path not found" in result.output


def test_check_json_output(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    config = _config(tmp_path, missing)

    result = _invoke("--config", config, "check", "--output", "json", "--no-notify")

    assert result.exit_code == 2
    data = json.loads(result.output)
    assert data["checked_paths"] == [str(missing)]
    assert data["results"][0]["status"] == ["NOT_FOUND"]
    assert data["notified"] is False
    assert data["saved_to"] is None


def test_check_with_missing_config_fails(tmp_path: Path) -> None:
    result = _invoke("--config", str(tmp_path / "nope.yaml"), "check")

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_list_shows_backup_sets(tmp_path: Path) -> None:
    fresh = _fresh_backups(tmp_path)
    missing = tmp_path / "missing"
    config = _config(tmp_path, fresh, missing)

    result = _invoke("--config", config, "list")

    assert result.exit_code == 0
    assert f"{fresh}:" in result.output
    assert "backup_2.tar" in result.output
    assert f"{missing}:\n  path not found" in result.output


def test_validate_config_summarises_settings(tmp_path: Path) -> None:
    config = _config(tmp_path, tmp_path / "a", tmp_path / "b")

    result = _invoke("--config", config, "validate-config")

    assert result.exit_code == 0
    assert "Configuration loaded successfully" in result.output
    assert "Backup paths: 2" in result.output
    assert "Notify type: off" in result.output
    assert "Email: not configured" in result.output


def test_validate_config_rejects_unknown_keys(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("backup_paths: [/backup]\nbackup_count: 3\n", encoding="utf-8")

    result = _invoke("--config", str(config_file), "validate-config")

    assert result.exit_code == 1
    assert "Unknown configuration sections" in result.output


def test_test_email_without_email_section_fails(tmp_path: Path) -> None:
    config = _config(tmp_path, tmp_path)

    result = _invoke("--config", config, "test-email")

    assert result.exit_code == 1
    assert "Email not configured" in result.output


def test_check_keeps_alarm_exit_code_when_report_cannot_be_saved(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    missing = tmp_path / "missing"
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "\n".join([
            "backup_paths:",
            f"  - {missing}",
            "logging:",
            "  level: ERROR",
            "reports:",
            "  save_local: true",
            f"  directory: {blocker / 'reports'}",
            "",
        ]),
        encoding="utf-8",
    )

    result = _invoke("--config", str(config_file), "check", "--no-notify")

    assert result.exit_code == 2
    assert f"[NOT_FOUND] {missing}: path not found" in result.output
    assert "Report saved" not in result.output

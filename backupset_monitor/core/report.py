"""Report assembly, notification decision and text rendering."""

from datetime import datetime
from typing import Iterable

from .models import NotifyType, PathResult, Report
from ..utils.formatters import format_date


def assemble_report(results: Iterable[PathResult], generated_at: datetime) -> Report:
    """Join path results into a report, keeping their order."""
    results = tuple(results)
    return Report(
        generated_at=generated_at,
        checked_paths=tuple(result.path for result in results),
        results=results
    )


def should_notify(report: Report, notify_type: NotifyType) -> bool:
    """Decide whether a report is sent for the given notification mode.

    'always' only notifies when no alarm was raised. It is the all-clear
    message, alarms go out through a configuration using 'alarm'.
    """
    if notify_type == NotifyType.OFF:
        return False
    if notify_type == NotifyType.ALWAYS:
        return not report.has_alarm
    if notify_type == NotifyType.ALARM:
        return report.has_alarm
    if notify_type == NotifyType.ALARM_ON_LAST_BACKUP:
        return report.has_alarm and report.alarm_on_last_backup
    raise ValueError(f"Unknown notify type: {notify_type}")


def build_subject(report: Report, prefix: str = "[Backup Monitor]") -> str:
    """Build a notification subject reflecting the alarm state."""
    if report.has_alarm:
        failed = sum(1 for result in report.results if not result.is_ok)
        state = f"ALARM - {failed} of {len(report.results)} backup paths failed"
    else:
        state = "OK - no failed backups"
    return f"{prefix} {state}".strip()


def render_text(report: Report) -> str:
    """Render a report as plain text."""
    lines = [
        f"Backup check report generated {format_date(report.generated_at)}",
        "",
        "CHECKED PATHS:",
    ]
    lines.extend(f"  {path}" for path in report.checked_paths)
    lines.append("")

    lines.append("ALARMS:")
    if report.has_alarm:
        for result in report.results:
            for finding in result.findings:
                lines.append(f"  [{finding.status.value}] {finding.message}")
    else:
        lines.append("  No failed backups found.")

    notes = [note for result in report.results for note in result.notes]
    if notes:
        lines.extend(["", "INFORMATION:"])
        lines.extend(f"  {note}" for note in notes)

    return "\n".join(lines) + "\n"

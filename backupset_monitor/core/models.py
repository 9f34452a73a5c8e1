"""Data models for backup-set monitoring."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class PathStatus(Enum):
    """Outcome categories of a backup path check."""
    OK = "OK"
    TOO_FEW_BACKUPS = "TOO_FEW_BACKUPS"
    STALE = "STALE"
    IRREGULAR_INTERVAL = "IRREGULAR_INTERVAL"
    SIZE_ANOMALY = "SIZE_ANOMALY"
    NOT_FOUND = "NOT_FOUND"


class NotifyType(Enum):
    """When a report should be sent out."""
    OFF = "off"
    ALARM = "alarm"
    ALWAYS = "always"
    ALARM_ON_LAST_BACKUP = "alarmOnLastBackup"


@dataclass(frozen=True)
class BackupItem:
    """One backup set found in a monitored path."""
    name: str
    path: str
    timestamp: datetime
    size_bytes: int
    is_directory: bool = False


@dataclass(frozen=True)
class Finding:
    """A single non-OK observation about a backup path."""
    status: PathStatus
    message: str


@dataclass(frozen=True)
class PathResult:
    """Evaluation result for one monitored path."""
    path: str
    findings: Tuple[Finding, ...] = ()
    alarm_on_latest: bool = False
    item_count: int = 0
    latest: Optional[BackupItem] = None
    notes: Tuple[str, ...] = ()

    @property
    def is_ok(self) -> bool:
        return not self.findings

    @property
    def statuses(self) -> Tuple[PathStatus, ...]:
        if not self.findings:
            return (PathStatus.OK,)
        return tuple(finding.status for finding in self.findings)

    @property
    def messages(self) -> Tuple[str, ...]:
        return tuple(finding.message for finding in self.findings)

    def to_dict(self) -> Dict[str, Any]:
        latest = None
        if self.latest:
            latest = {
                'name': self.latest.name,
                'timestamp': self.latest.timestamp.isoformat(),
                'size_bytes': self.latest.size_bytes,
            }
        return {
            'path': self.path,
            'status': [status.value for status in self.statuses],
            'messages': list(self.messages),
            'notes': list(self.notes),
            'alarm_on_latest': self.alarm_on_latest,
            'item_count': self.item_count,
            'latest': latest,
        }


@dataclass(frozen=True)
class Report:
    """Aggregated results of one monitoring run."""
    generated_at: datetime
    checked_paths: Tuple[str, ...]
    results: Tuple[PathResult, ...] = field(default_factory=tuple)

    @property
    def has_alarm(self) -> bool:
        return any(not result.is_ok for result in self.results)

    @property
    def alarm_on_last_backup(self) -> bool:
        return any(result.alarm_on_latest for result in self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generated_at': self.generated_at.isoformat(),
            'checked_paths': list(self.checked_paths),
            'has_alarm': self.has_alarm,
            'alarm_on_last_backup': self.alarm_on_last_backup,
            'results': [result.to_dict() for result in self.results],
        }

"""Anomaly evaluation of backup sets."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .models import BackupItem, Finding, PathResult, PathStatus
from .statistics import median
from ..utils.formatters import format_date, format_duration, format_file_size


DISCREPANCY_TOLERANCE_PERCENT = 5
GRACE_WINDOW = timedelta(hours=25)


class AnomalyEvaluator:
    """Decides whether the newest backup of a path looks healthy.

    All thresholds are relative to the history of the path itself: the
    median interval between backups and the median backup size. A nightly
    job and an hourly job are therefore judged by their own cadence.
    """

    def __init__(self, min_backup_sets: int = 5):
        """Initialize anomaly evaluator.

        Args:
            min_backup_sets: Number of backup sets a path must hold before
                interval and size checks apply.
        """
        if min_backup_sets < 1:
            raise ValueError(f"min_backup_sets must be positive, got {min_backup_sets}")

        self.min_backup_sets = min_backup_sets
        self.logger = logging.getLogger(__name__)

    def evaluate(self, path: str, items: Optional[Sequence[BackupItem]],
                 now: datetime) -> PathResult:
        """Evaluate the backup sets of one path.

        Args:
            path: Monitored path.
            items: Backup items of the path, or None if the path is missing.
            now: Reference time for staleness checks.

        Returns:
            PathResult with the findings in check order.
        """
        if items is None:
            self.logger.warning(f"Backup path not found: {path}")
            return PathResult(
                path=path,
                findings=(Finding(PathStatus.NOT_FOUND, f"{path}: path not found"),)
            )

        items = sorted(items, key=lambda item: item.timestamp)
        count = len(items)
        latest = items[-1] if items else None

        if count < self.min_backup_sets:
            return self._check_count(path, items, now)

        findings: List[Finding] = []
        alarm_on_latest = False

        deltas = [
            (later.timestamp - earlier.timestamp).total_seconds()
            for earlier, later in zip(items, items[1:])
        ]

        if deltas:
            stale = self._check_staleness(path, latest, deltas, now)
            if stale:
                findings.append(stale)
                alarm_on_latest = True

            irregular, on_last_pair = self._check_regularity(path, items, deltas)
            if irregular:
                findings.append(irregular)
                alarm_on_latest = alarm_on_latest or on_last_pair

            size_anomaly = self._check_size(path, items)
            if size_anomaly:
                findings.append(size_anomaly)

        self.logger.debug(
            f"Evaluated {path}: {count} backup sets, {len(findings)} findings"
        )
        return PathResult(
            path=path,
            findings=tuple(findings),
            alarm_on_latest=alarm_on_latest,
            item_count=count,
            latest=latest
        )

    def _check_count(self, path: str, items: List[BackupItem], now: datetime) -> PathResult:
        """Handle paths holding fewer backup sets than required."""
        count = len(items)
        message = (f"{path}: only {count} backup set(s) found, "
                   f"{self.min_backup_sets} required")

        if not items:
            return PathResult(
                path=path,
                findings=(Finding(PathStatus.TOO_FEW_BACKUPS, message),),
                alarm_on_latest=True
            )

        latest = items[-1]
        if now - latest.timestamp <= GRACE_WINDOW:
            note = (f"{path}: {count} of {self.min_backup_sets} backup sets present, "
                    f"latest {latest.name} from {format_date(latest.timestamp)} is recent")
            self.logger.info(note)
            return PathResult(path=path, item_count=count, latest=latest, notes=(note,))

        return PathResult(
            path=path,
            findings=(Finding(PathStatus.TOO_FEW_BACKUPS,
                              f"{message}, latest from {format_date(latest.timestamp)}"),),
            alarm_on_latest=True,
            item_count=count,
            latest=latest
        )

    def _check_staleness(self, path: str, latest: BackupItem, deltas: List[float],
                         now: datetime) -> Optional[Finding]:
        """Flag the path when the newest backup is older than the usual interval."""
        usual_interval = median(deltas)
        elapsed = (now - latest.timestamp).total_seconds()
        allowed = usual_interval * (100 + DISCREPANCY_TOLERANCE_PERCENT) / 100

        if elapsed <= allowed:
            return None

        return Finding(
            PathStatus.STALE,
            f"{path}: last backup {latest.name} is {format_duration(elapsed)} old, "
            f"usual interval is {format_duration(usual_interval)}"
        )

    def _check_regularity(self, path: str, items: List[BackupItem],
                          deltas: List[float]):
        """Find the first pair of consecutive intervals that disagree.

        Returns:
            Tuple of (finding or None, whether the pair is the last one).
        """
        for i in range(len(deltas) - 1):
            if deltas[i] == 0:
                continue

            discrepancy = round(abs(deltas[i] - deltas[i + 1]) / deltas[i] * 100)
            if discrepancy <= DISCREPANCY_TOLERANCE_PERCENT:
                continue

            names = ", ".join(item.name for item in items[i:i + 3])
            finding = Finding(
                PathStatus.IRREGULAR_INTERVAL,
                f"{path}: backup interval changed by {discrepancy}% between "
                f"{names} ({format_duration(deltas[i])} vs {format_duration(deltas[i + 1])})"
            )
            return finding, i == len(deltas) - 2

        return None, False

    def _check_size(self, path: str, items: List[BackupItem]) -> Optional[Finding]:
        """Flag a newest backup that is far smaller than its predecessors."""
        latest = items[-1]
        usual_size = median([item.size_bytes for item in items[:-1]])

        if latest.size_bytes * 100 >= usual_size * DISCREPANCY_TOLERANCE_PERCENT:
            return None

        return Finding(
            PathStatus.SIZE_ANOMALY,
            f"{path}: last backup {latest.name} has {format_file_size(latest.size_bytes)}, "
            f"usual size is {format_file_size(int(usual_size))}"
        )

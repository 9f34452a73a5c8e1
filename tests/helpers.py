"""Builders for backup items and backup directories used across tests."""

import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Sequence

from backupset_monitor.core.models import BackupItem


NOW = datetime(2026, 1, 10, 12, 0, 0)


def build_items(deltas: Sequence[float], gap_to_now: float,
                sizes: Optional[Sequence[int]] = None,
                now: datetime = NOW) -> List[BackupItem]:
    """Build backup items separated by deltas, the newest gap_to_now seconds before now."""
    count = len(deltas) + 1
    sizes = list(sizes) if sizes is not None else [1000] * count
    assert len(sizes) == count

    timestamps = [now - timedelta(seconds=gap_to_now)]
    for delta in reversed(deltas):
        timestamps.insert(0, timestamps[0] - timedelta(seconds=delta))

    return [
        BackupItem(name=f"backup_{i}", path=f"/backup/backup_{i}",
                   timestamp=timestamp, size_bytes=size)
        for i, (timestamp, size) in enumerate(zip(timestamps, sizes))
    ]


def write_backup_sets(directory: Path, timestamps: Sequence[datetime],
                      size: int = 100) -> List[Path]:
    """Create one file per timestamp with its mtime set accordingly."""
    directory.mkdir(parents=True, exist_ok=True)
    files = []
    for i, timestamp in enumerate(timestamps):
        backup_file = directory / f"backup_{i:03d}.tar"
        backup_file.write_bytes(b"x" * size)
        epoch = timestamp.timestamp()
        os.utime(backup_file, (epoch, epoch))
        files.append(backup_file)
    return files


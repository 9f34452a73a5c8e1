"""Backup item collection for monitored paths."""

import os
import logging
from datetime import datetime
from typing import List

from .errors import PathNotFound
from .models import BackupItem


TIMESTAMP_SOURCES = ('modified', 'created')


class MetadataCollector:
    """Lists the backup sets stored directly below a directory."""

    def __init__(self, timestamp_source: str = 'modified', include_hidden: bool = True):
        """Initialize metadata collector.

        Args:
            timestamp_source: 'modified' for the last write time or 'created'
                for the creation time of each entry.
            include_hidden: Whether entries starting with a dot are backup sets.
                Set to False to skip lock files and similar dot entries.
        """
        if timestamp_source not in TIMESTAMP_SOURCES:
            raise ValueError(f"Invalid timestamp source: {timestamp_source}")

        self.timestamp_source = timestamp_source
        self.include_hidden = include_hidden
        self.logger = logging.getLogger(__name__)

    def collect(self, path: str) -> List[BackupItem]:
        """Collect one BackupItem per direct child of a directory.

        Args:
            path: Directory holding the backup sets.

        Returns:
            Unordered list of backup items.

        Raises:
            PathNotFound: If the path does not exist.
            NotADirectoryError: If the path is not a directory.
        """
        if not os.path.exists(path):
            raise PathNotFound(path)

        if not os.path.isdir(path):
            raise NotADirectoryError(f"Path is not a directory: {path}")

        items = []
        with os.scandir(path) as entries:
            for entry in entries:
                if not self.include_hidden and entry.name.startswith('.'):
                    continue

                # Symlinked backup sets are judged by their target
                try:
                    entry_stat = entry.stat()
                    readable = True
                except OSError as e:
                    self.logger.warning(f"Cannot read {entry.path}, counting it as 0 bytes: {e}")
                    try:
                        entry_stat = entry.stat(follow_symlinks=False)
                    except OSError as e:
                        self.logger.warning(f"Skipping {entry.path}: {e}")
                        continue
                    readable = False

                is_directory = readable and entry.is_dir()
                if is_directory:
                    size = self._directory_size(entry.path)
                elif readable:
                    size = entry_stat.st_size
                else:
                    size = 0

                items.append(BackupItem(
                    name=entry.name,
                    path=entry.path,
                    timestamp=self._timestamp(entry_stat),
                    size_bytes=size,
                    is_directory=is_directory
                ))

        self.logger.debug(f"Collected {len(items)} backup items from {path}")
        return items

    def _timestamp(self, entry_stat: os.stat_result) -> datetime:
        """Pick the configured timestamp from a stat result."""
        if self.timestamp_source == 'created':
            # st_ctime is the inode change time on most Unix systems
            created = getattr(entry_stat, 'st_birthtime', None)
            if created is None:
                created = entry_stat.st_ctime
            return datetime.fromtimestamp(created)
        return datetime.fromtimestamp(entry_stat.st_mtime)

    def _directory_size(self, directory_path: str) -> int:
        """Sum the sizes of all files below a directory.

        Unreadable subdirectories and files count as zero bytes.
        """
        total_size = 0

        def _log_walk_error(error: OSError):
            self.logger.debug(f"Cannot read {error.filename}: {error}")

        for root, _dirs, files in os.walk(directory_path, onerror=_log_walk_error):
            for name in files:
                file_path = os.path.join(root, name)
                try:
                    if os.path.islink(file_path):
                        continue
                    total_size += os.path.getsize(file_path)
                except OSError as e:
                    self.logger.debug(f"Cannot stat {file_path}: {e}")

        return total_size

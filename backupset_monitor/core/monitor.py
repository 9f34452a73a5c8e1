"""Main backupset monitoring class."""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .collector import MetadataCollector
from .errors import NotifierFailure, PathNotFound
from .evaluator import AnomalyEvaluator
from .models import BackupItem, Finding, PathResult, PathStatus, Report
from .report import assemble_report, build_subject, render_text, should_notify
from ..config.config_manager import ConfigManager
from ..reporters.email_reporter import EmailNotifier


class BackupMonitor:
    """Main backupset monitoring coordinator."""

    def __init__(self, config_path: Optional[str] = None,
                 config_manager: Optional[ConfigManager] = None,
                 notifier: Optional[EmailNotifier] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize backup monitor.

        Args:
            config_path: Optional path to configuration file.
            config_manager: Already loaded configuration, used instead of config_path.
            notifier: Notifier to use instead of the configured email notifier.
            clock: Returns the reference time of a run.
        """
        if config_manager is None:
            config_manager = ConfigManager(config_path)
            config_manager.load_config()

        self.config_manager = config_manager
        self.settings = config_manager.get_settings()
        self.clock = clock
        self.notifier = notifier
        self.logger = logging.getLogger(__name__)

        self._initialize_components()

    def _initialize_components(self):
        """Initialize monitoring components."""
        self.collector = MetadataCollector(
            timestamp_source=self.settings.timestamp_source,
            include_hidden=self.settings.include_hidden
        )
        self.evaluator = AnomalyEvaluator(min_backup_sets=self.settings.min_backup_sets)

        email_config = self.config_manager.get_email_config()
        if self.notifier is None and email_config:
            self.notifier = EmailNotifier.from_config(email_config)

    def collect_items(self, path: str) -> List[BackupItem]:
        """List the backup sets of a path, newest first."""
        items = self.collector.collect(path)
        return sorted(items, key=lambda item: item.timestamp, reverse=True)

    def check_path(self, path: str, now: datetime) -> PathResult:
        """Collect and evaluate one backup path.

        Errors are turned into findings so one broken path never stops
        the others from being checked.
        """
        try:
            items = self.collector.collect(path)
        except PathNotFound:
            return self.evaluator.evaluate(path, None, now)
        except OSError as e:
            self.logger.error(f"Failed to read backup path {path}: {e}")
            return PathResult(
                path=path,
                findings=(Finding(PathStatus.NOT_FOUND, f"{path}: cannot be read ({e})"),)
            )

        return self.evaluator.evaluate(path, items, now)

    def run_check(self, now: Optional[datetime] = None) -> Report:
        """Check all configured backup paths.

        Args:
            now: Reference time, defaults to the monitor clock.

        Returns:
            Report covering every configured path in configuration order.
        """
        now = now or self.clock()
        self.logger.info(f"Checking {len(self.settings.backup_paths)} backup paths")

        results = []
        for path in self.settings.backup_paths:
            result = self.check_path(path, now)
            if result.is_ok:
                self.logger.info(f"{path}: OK ({result.item_count} backup sets)")
            else:
                for message in result.messages:
                    self.logger.warning(message)
            results.append(result)

        return assemble_report(results, generated_at=now)

    def send_notification(self, report: Report, text: Optional[str] = None) -> bool:
        """Send a report through the notifier.

        Returns:
            True if the notifier accepted the report. A failure is logged
            and leaves the report untouched.
        """
        if not self.notifier:
            self.logger.warning("Notifier not configured")
            return False

        prefix = self.config_manager.get_email_config().get('subject_prefix', '[Backup Monitor]')
        subject = build_subject(report, prefix)
        try:
            return self.notifier.send(subject, text or render_text(report))
        except NotifierFailure as e:
            self.logger.error(f"Failed to send notification: {e}")
            return False

    def run(self, notify: bool = True, save_report: Optional[bool] = None,
            now: Optional[datetime] = None) -> Dict[str, Any]:
        """Run a complete check, then notify and save as configured.

        Args:
            notify: Whether a notification may be sent.
            save_report: Whether to save the text report, defaults to configuration.
            now: Reference time, defaults to the monitor clock.

        Returns:
            Dictionary with the report, its text and what was done with it.
        """
        report = self.run_check(now)
        text = render_text(report)

        notified = False
        if notify and should_notify(report, self.settings.notify_type):
            notified = self.send_notification(report, text)
        else:
            self.logger.info(f"No notification for notify type '{self.settings.notify_type.value}'")

        saved_to = None
        if save_report is None:
            save_report = self.settings.save_reports
        if save_report:
            # A failed save is logged and leaves the report untouched
            try:
                saved_to = self._save_report_locally(report, text)
            except OSError as e:
                self.logger.error(f"Failed to save report to {self.settings.report_directory}: {e}")

        return {
            'report': report,
            'text': text,
            'notified': notified,
            'saved_to': saved_to
        }

    def _save_report_locally(self, report: Report, text: str) -> Path:
        """Save the text report and prune old ones.

        Args:
            report: Report being saved.
            text: Rendered report.

        Returns:
            Path of the written file.
        """
        report_dir = Path(self.settings.report_directory)
        report_dir.mkdir(parents=True, exist_ok=True)

        timestamp = report.generated_at.strftime('%Y%m%d_%H%M%S')
        report_file = report_dir / f'backupset_report_{timestamp}.txt'
        report_file.write_text(text, encoding='utf-8')
        self.logger.info(f"Text report saved: {report_file}")

        self._cleanup_old_reports(report_dir, self.settings.report_retention_days)
        return report_file

    def _cleanup_old_reports(self, report_dir: Path, retention_days: int):
        """Clean up old report files.

        Args:
            report_dir: Directory containing reports.
            retention_days: Number of days to keep reports.
        """
        cutoff_time = time.time() - (retention_days * 24 * 60 * 60)

        for report_file in report_dir.glob('backupset_report_*'):
            try:
                if report_file.stat().st_mtime < cutoff_time:
                    report_file.unlink()
                    self.logger.debug(f"Deleted old report: {report_file}")
            except OSError as e:
                self.logger.warning(f"Could not delete old report {report_file}: {e}")

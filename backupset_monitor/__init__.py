"""
Backupset Monitor - Median-based anomaly detection for backup directories.

This package inspects directories of historical backup sets, decides whether the
most recent backup looks healthy and reports the findings by email.
"""

__version__ = "1.0.0"

from .core.monitor import BackupMonitor
from .core.collector import MetadataCollector
from .core.evaluator import AnomalyEvaluator
from .reporters.email_reporter import EmailNotifier

__all__ = ["BackupMonitor", "MetadataCollector", "AnomalyEvaluator", "EmailNotifier"]

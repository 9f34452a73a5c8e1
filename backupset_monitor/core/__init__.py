"""Core monitoring functionality."""

from .errors import EmptyInput, NotifierFailure, PathNotFound
from .models import BackupItem, Finding, NotifyType, PathResult, PathStatus, Report
from .statistics import median
from .collector import MetadataCollector
from .evaluator import AnomalyEvaluator
from .report import assemble_report, build_subject, render_text, should_notify
from .monitor import BackupMonitor

__all__ = [
    "AnomalyEvaluator", "BackupItem", "BackupMonitor", "EmptyInput", "Finding",
    "MetadataCollector", "NotifierFailure", "NotifyType", "PathNotFound", "PathResult",
    "PathStatus", "Report", "assemble_report", "build_subject", "median", "render_text",
    "should_notify",
]

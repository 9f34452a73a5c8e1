"""Notification delivery for backupset reports."""

from .email_reporter import EmailNotifier

__all__ = ["EmailNotifier"]

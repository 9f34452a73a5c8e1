"""Command-line interface for backupset monitor."""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

import click

from .core.errors import NotifierFailure, PathNotFound
from .core.monitor import BackupMonitor
from .config.config_manager import ConfigManager
from .reporters.email_reporter import EmailNotifier
from .utils.formatters import format_date, format_file_size


EXIT_ALARM = 2


def setup_logging(level: str, log_file: Optional[str] = None,
                  max_size_mb: int = 10, backup_count: int = 5):
    """Set up logging configuration."""
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Set up root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Reports go to stdout, so log to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Add rotating file handler if specified
    if log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_size_mb * 1024 * 1024,
                backupCount=backup_count
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


def _load_monitor(ctx) -> BackupMonitor:
    """Load configuration, apply its logging section and build the monitor."""
    config_manager = ConfigManager(ctx.obj.get('config_path'))
    config_manager.load_config()

    # Command line options win over the logging section
    logging_config = config_manager.get_logging_config()
    setup_logging(
        ctx.obj.get('log_level') or logging_config.get('level', 'INFO'),
        ctx.obj.get('log_file') or logging_config.get('file'),
        max_size_mb=logging_config.get('max_size_mb', 10),
        backup_count=logging_config.get('backup_count', 5)
    )

    return BackupMonitor(config_manager=config_manager)


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (overrides the configuration file)')
@click.option('--log-file',
              help='Log file path (overrides the configuration file)')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str]):
    """Backupset Monitor - Detect stale, irregular or undersized backups."""
    # Ensure context exists
    ctx.ensure_object(dict)

    # Set up logging first, the configuration may raise the level later
    setup_logging(log_level or 'WARNING', log_file)

    ctx.obj['config_path'] = config_path
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


@cli.command()
@click.option('--output', '-o', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
@click.option('--notify/--no-notify', default=True,
              help='Send a notification according to notify_type')
@click.option('--save/--no-save', default=None,
              help='Save the text report locally (default from configuration)')
@click.pass_context
def check(ctx, output: str, notify: bool, save: Optional[bool]):
    """Check all configured backup paths and report anomalies."""
    try:
        monitor = _load_monitor(ctx)
        result = monitor.run(notify=notify, save_report=save)
    except (OSError, ValueError) as e:
        click.echo(f"Error during check: {e}", err=True)
        sys.exit(1)

    # Print the report before deciding the exit code
    report = result['report']
    if output == 'json':
        data = report.to_dict()
        data['notified'] = result['notified']
        data['saved_to'] = str(result['saved_to']) if result['saved_to'] else None
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(result['text'], nl=False)
        if result['notified']:
            click.echo("\nNotification sent")
        if result['saved_to']:
            click.echo(f"Report saved: {result['saved_to']}")

    if report.has_alarm:
        sys.exit(EXIT_ALARM)


@cli.command(name='list')
@click.argument('path', required=False)
@click.pass_context
def list_items(ctx, path: Optional[str]):
    """Show the backup sets found in each configured path, newest first."""
    try:
        monitor = _load_monitor(ctx)
    except (OSError, ValueError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    paths = [path] if path else list(monitor.settings.backup_paths)
    for backup_path in paths:
        click.echo(f"{backup_path}:")
        try:
            items = monitor.collect_items(backup_path)
        except PathNotFound:
            click.echo("  path not found")
            continue
        except OSError as e:
            click.echo(f"  cannot be read: {e}")
            continue

        if not items:
            click.echo("  no backup sets")
        for item in items:
            kind = "dir " if item.is_directory else "file"
            click.echo(f"  {format_date(item.timestamp)}  {kind}  "
                       f"{format_file_size(item.size_bytes):>8}  {item.name}")
        click.echo("")


@cli.command(name='validate-config')
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    try:
        config_manager = ConfigManager(ctx.obj.get('config_path'))
        config_manager.load_config()
        settings = config_manager.get_settings()
    except (OSError, ValueError) as e:
        click.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    click.echo("Configuration loaded successfully")
    click.echo("")
    click.echo(f"Backup paths: {len(settings.backup_paths)}")
    for i, backup_path in enumerate(settings.backup_paths, 1):
        click.echo(f"  {i}. {backup_path}")
    click.echo(f"Minimum backup sets: {settings.min_backup_sets}")
    click.echo(f"Timestamp source: {settings.timestamp_source}")
    click.echo(f"Notify type: {settings.notify_type.value}")

    email_config = config_manager.get_email_config()
    if not email_config:
        click.echo("Email: not configured")
        return

    click.echo(f"Email from: {email_config.get('from_address')}")
    click.echo(f"Email recipients: {len(email_config.get('to_addresses', []))}")

    email_errors = EmailNotifier.from_config(email_config).validate_configuration()
    if email_errors:
        click.echo("Email configuration issues:")
        for error in email_errors:
            click.echo(f"  - {error}")
        sys.exit(1)
    click.echo("Email configuration valid")


@cli.command(name='test-email')
@click.pass_context
def test_email(ctx):
    """Send a test email to verify email configuration."""
    try:
        monitor = _load_monitor(ctx)
    except (OSError, ValueError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if not monitor.notifier:
        click.echo("Email not configured - cannot send test email", err=True)
        sys.exit(1)

    # Validate configuration first
    errors = monitor.notifier.validate_configuration()
    if errors:
        click.echo("Email configuration errors:", err=True)
        for error in errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(1)

    try:
        monitor.notifier.send_test_email()
    except NotifierFailure as e:
        click.echo(f"Failed to send test email: {e}", err=True)
        sys.exit(1)

    click.echo("Test email sent successfully")
    click.echo(f"Recipients: {', '.join(monitor.notifier.to_addresses)}")


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()

"""Command-line interface for backup retention."""

import json
import logging
import logging.handlers
import sys
from typing import Optional

import click

from .config.config_manager import ConfigManager
from .core.cleanup import CleanupOrchestrator
from .core.sample_archives import SampleArchiveGenerator
from .reporters.email_reporter import EmailReporter
from .utils.formatters import format_cleanup_summary

DATE_FORMATS = ['%Y-%m-%d', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S']


def setup_logging(level: str, log_file: Optional[str] = None, max_size_mb: int = 5,
                  backup_count: int = 5):
    """Set up logging configuration."""
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=int(max_size_mb * 1024 * 1024),
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


def _load_config(ctx) -> ConfigManager:
    """Load configuration and apply its logging section, exiting on errors."""
    config_manager = ConfigManager(ctx.obj.get('config_path'))
    try:
        config_manager.load_config()
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"❌ Configuration error: {e}", err=True)
        sys.exit(1)

    logging_config = config_manager.get_logging_config()
    setup_logging(
        ctx.obj.get('log_level') or logging_config.get('level', 'INFO'),
        ctx.obj.get('log_file') or logging_config.get('file'),
        max_size_mb=logging_config.get('max_size_mb', 5),
        backup_count=logging_config.get('backup_count', 5)
    )
    return config_manager


def _outcome_to_dict(outcome) -> dict:
    return {
        'dry_run': outcome.dry_run,
        'deleted_paths': outcome.deleted_paths,
        'directories': [
            {
                'directory': result.directory,
                'scanned': result.scanned,
                'kept': result.kept,
                'deleted': result.deleted,
                'failed': result.failed,
                'skipped': result.skipped,
                'error_message': result.error_message
            }
            for result in outcome.directories
        ]
    }


def _notify(config_manager: ConfigManager, outcome) -> None:
    email_config = config_manager.get_email_config()
    if not email_config or not email_config.get('enabled', True):
        return

    reporter = EmailReporter.from_config(email_config)
    if not reporter.send_cleanup_report(outcome):
        click.echo("⚠️  Cleanup report could not be emailed", err=True)


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (overrides the configuration file)')
@click.option('--log-file',
              help='Log file path (overrides the configuration file)')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str]):
    """Backup Retention - Clean up dated backup archives."""
    ctx.ensure_object(dict)

    setup_logging(log_level or 'INFO', log_file)

    ctx.obj['config_path'] = config_path
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


@cli.command()
@click.option('--dry-run', is_flag=True, default=False,
              help='Show what would be deleted without deleting anything')
@click.option('--now', 'now', type=click.DateTime(formats=DATE_FORMATS), default=None,
              help='Reference time for the retention windows')
@click.option('--output', '-o', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
@click.option('--email/--no-email', default=True,
              help='Send the cleanup report via email if configured')
@click.pass_context
def cleanup(ctx, dry_run: bool, now, output: str, email: bool):
    """Delete backups that fall outside the retention policy."""
    config_manager = _load_config(ctx)
    orchestrator = CleanupOrchestrator.from_config(config_manager, dry_run=dry_run)

    outcome = orchestrator.run(now=now)

    if output == 'json':
        click.echo(json.dumps(_outcome_to_dict(outcome), indent=2))
    else:
        click.echo(format_cleanup_summary(outcome))

    if email and not dry_run:
        _notify(config_manager, outcome)


@cli.command()
@click.option('--now', 'now', type=click.DateTime(formats=DATE_FORMATS), default=None,
              help='Reference time for the retention windows')
@click.pass_context
def plan(ctx, now):
    """Show which backups the next cleanup would delete."""
    ctx.invoke(cleanup, dry_run=True, now=now, output='text', email=False)


@cli.command('generate-test-archives')
@click.option('--now', 'now', type=click.DateTime(formats=DATE_FORMATS), default=None,
              help='Reference time the synthetic dates are relative to')
@click.option('--run-cleanup', is_flag=True, default=False,
              help='Run cleanup right after generating the archives')
@click.pass_context
def generate_test_archives(ctx, now, run_cleanup: bool):
    """Create fake backup archives spread across both retention windows."""
    config_manager = _load_config(ctx)
    orchestrator = CleanupOrchestrator.from_config(config_manager)

    if not orchestrator.directories:
        click.echo("❌ No backup destinations configured", err=True)
        sys.exit(1)

    generator = SampleArchiveGenerator(orchestrator.directories, orchestrator.policy, now=now)
    summary = generator.run()

    click.echo(f"✅ Created {summary['files_created']} test files")
    for directory in summary['test_directories']:
        click.echo(f"   📂 {directory}")
    policies = summary['retention_policies']
    click.echo(f"   Retention: {policies['keep_daily_backups']} days, "
               f"{policies['keep_monthly_backups']} months")

    if run_cleanup:
        outcome = orchestrator.run(now=now)
        click.echo("")
        click.echo(format_cleanup_summary(outcome))


@cli.command('validate-config')
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    config_manager = _load_config(ctx)

    click.echo("✅ Configuration loaded successfully")

    orchestrator = CleanupOrchestrator.from_config(config_manager)
    policy = orchestrator.policy

    click.echo(f"\n📊 Configuration Summary:")
    click.echo(f"   Filesystem backups: {len(config_manager.get_filesystems())}")
    click.echo(f"   Database backups: {len(config_manager.get_databases())}")
    click.echo(f"   Retention: {policy.daily_window_days} days daily, "
               f"{policy.monthly_window_months} months monthly")
    click.echo(f"   Backup directories: {len(orchestrator.directories)}")
    for i, directory in enumerate(orchestrator.directories, 1):
        click.echo(f"     {i}. {directory}")

    email_config = config_manager.get_email_config()
    if not email_config:
        click.echo("   📧 Email: Not configured")
        return

    click.echo(f"   📧 Email configured: {email_config.get('from_address', 'N/A')}")
    email_errors = EmailReporter.from_config(email_config).validate_configuration()
    if email_errors:
        click.echo("\n⚠️  Email configuration issues:")
        for error in email_errors:
            click.echo(f"     • {error}")
    else:
        click.echo("\n✅ Email configuration valid")


@cli.command('test-email')
@click.pass_context
def test_email(ctx):
    """Send a test email to verify email configuration."""
    config_manager = _load_config(ctx)
    email_config = config_manager.get_email_config()

    if not email_config:
        click.echo("❌ Email not configured - cannot send test email", err=True)
        sys.exit(1)

    reporter = EmailReporter.from_config(email_config)

    errors = reporter.validate_configuration()
    if errors:
        click.echo("❌ Email configuration errors:")
        for error in errors:
            click.echo(f"   • {error}")
        sys.exit(1)

    click.echo("Sending test email...")
    if reporter.send_test_email():
        click.echo("✅ Test email sent successfully!")
        click.echo(f"   Recipients: {', '.join(reporter.to_addresses)}")
    else:
        click.echo("❌ Failed to send test email", err=True)
        sys.exit(1)


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()

"""Formatting utilities for cleanup reports."""

from datetime import datetime
from typing import Optional

from ..core.models import CleanupOutcome


def format_date(dt: datetime, short: bool = False) -> str:
    """Format datetime for display.

    Args:
        dt: Datetime to format.
        short: If True, use short format.

    Returns:
        Formatted date string.
    """
    if short:
        return dt.strftime('%Y-%m-%d %H:%M')
    else:
        return dt.strftime('%Y-%m-%d %H:%M:%S')


def format_path_relative(full_path: str, base_path: str) -> str:
    """Format path relative to base path.

    Args:
        full_path: Full absolute path.
        base_path: Base path to make relative to.

    Returns:
        Relative path string.
    """
    base_path = base_path.rstrip('/')
    if full_path.startswith(base_path + '/'):
        return full_path[len(base_path) + 1:]
    return full_path


def format_cleanup_summary(outcome: CleanupOutcome, generated_at: Optional[datetime] = None) -> str:
    """Render a plain-text summary of a cleanup run.

    Args:
        outcome: Result of the cleanup run.
        generated_at: Time shown in the header, defaults to now.

    Returns:
        Summary text.
    """
    generated_at = generated_at or datetime.now()
    verb = "Would delete" if outcome.dry_run else "Deleted"

    lines = [
        "Cleanup Summary:",
        "----------------",
        f"Generated: {format_date(generated_at)}",
        f"Directories: {len(outcome.directories)}",
        f"{verb}: {len(outcome.deleted_paths)} files",
    ]

    failed_count = sum(len(result.failed) for result in outcome.directories)
    if failed_count:
        lines.append(f"Failed to delete: {failed_count} files")

    for result in outcome.directories:
        lines.append("")
        lines.append(result.directory)

        if result.error_message:
            lines.append(f"  Error: {result.error_message}")
            continue

        if result.skipped:
            lines.append("  Skipped: directory not found")
            continue

        lines.append(f"  Scanned: {result.scanned}, kept: {len(result.kept)}, "
                     f"{verb.lower()}: {len(result.deleted)}")
        for path in result.deleted:
            lines.append(f"  - {format_path_relative(path, result.directory)}")
        for path in result.failed:
            lines.append(f"  ! failed to delete {format_path_relative(path, result.directory)}")

    return "\n".join(lines)

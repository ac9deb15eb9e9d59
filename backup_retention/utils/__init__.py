"""Utility modules for backup retention."""

from .formatters import format_date, format_cleanup_summary

__all__ = ["format_date", "format_cleanup_summary"]

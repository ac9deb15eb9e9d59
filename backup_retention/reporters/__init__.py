"""Reporters for cleanup results."""

from .email_reporter import EmailReporter

__all__ = ["EmailReporter"]

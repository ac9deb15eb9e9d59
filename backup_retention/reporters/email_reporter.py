"""Email reporter for sending cleanup reports."""

import logging
import re
import smtplib
from datetime import datetime
from email.mime.text import MIMEText
from typing import List, Optional

from ..core.models import CleanupOutcome
from ..utils.formatters import format_cleanup_summary, format_date

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


class EmailReporter:
    """Handles sending cleanup reports via email."""

    def __init__(self, smtp_server: str = None, smtp_port: int = 587, smtp_user: str = None,
                 smtp_pass: str = None, from_address: str = None,
                 to_addresses: List[str] = None, use_tls: bool = True,
                 always_notify: bool = False, subject_prefix: str = "Backup Cleanup Report",
                 logger: Optional[logging.Logger] = None):
        """Initialize email reporter.

        Args:
            smtp_server: SMTP server hostname.
            smtp_port: SMTP server port.
            smtp_user: SMTP username.
            smtp_pass: SMTP password.
            from_address: From email address.
            to_addresses: List of recipient email addresses.
            use_tls: Whether to use TLS encryption.
            always_notify: Send reports for clean runs too, not only on errors.
            subject_prefix: Prefix of the report subject line.
            logger: Logger to report delivery problems to.
        """
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.from_address = from_address
        self.to_addresses = to_addresses or []
        self.use_tls = use_tls
        self.always_notify = always_notify
        self.subject_prefix = subject_prefix
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, email_config: dict, logger: Optional[logging.Logger] = None) -> 'EmailReporter':
        """Create a reporter from the ``email`` configuration section."""
        return cls(
            smtp_server=email_config.get('smtp_server'),
            smtp_port=email_config.get('smtp_port', 587),
            smtp_user=email_config.get('smtp_user'),
            smtp_pass=email_config.get('smtp_pass'),
            from_address=email_config.get('from_address'),
            to_addresses=email_config.get('to_addresses', []),
            use_tls=email_config.get('use_tls', True),
            always_notify=email_config.get('always_notify', False),
            subject_prefix=email_config.get('subject', "Backup Cleanup Report"),
            logger=logger
        )

    def send_cleanup_report(self, outcome: CleanupOutcome, success: Optional[bool] = None) -> bool:
        """Send the summary of a cleanup run.

        Args:
            outcome: Result of the cleanup run.
            success: Overall status; derived from the outcome if omitted.

        Returns:
            True if the report was sent or deliberately skipped.
        """
        if success is None:
            success = not outcome.has_errors

        if success and not self.always_notify:
            self.logger.debug("Cleanup succeeded and always_notify is off, not sending report")
            return True

        status = "OK" if success else "ERRORS"
        subject = f"{self.subject_prefix} [{status}] - {len(outcome.deleted_paths)} files removed"
        return self.send_report(subject, format_cleanup_summary(outcome))

    def send_report(self, subject: str, text_content: str) -> bool:
        """Send a plain-text report via email.

        Args:
            subject: Email subject line.
            text_content: Plain text email content.

        Returns:
            True if email sent successfully.
        """
        if not self.to_addresses:
            self.logger.error("No recipient addresses configured")
            return False

        if not text_content:
            self.logger.error("No content provided for email")
            return False

        try:
            self._send_message(self._create_message(subject, text_content))
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(f"Failed to send email report: {e}")
            return False

        self.logger.info(f"Email report sent successfully to {len(self.to_addresses)} recipients")
        return True

    def _create_message(self, subject: str, text_content: str) -> MIMEText:
        msg = MIMEText(text_content, 'plain', 'utf-8')
        msg['Subject'] = subject
        msg['From'] = self.from_address
        msg['To'] = ', '.join(self.to_addresses)
        return msg

    def _send_message(self, msg: MIMEText) -> None:
        """Send email message via SMTP.

        Args:
            msg: Email message to send.
        """
        self.logger.debug(f"Connecting to SMTP server {self.smtp_server}:{self.smtp_port}")

        with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
            if self.use_tls:
                server.starttls()
                self.logger.debug("Started TLS encryption")

            if self.smtp_user and self.smtp_pass:
                server.login(self.smtp_user, self.smtp_pass)
                self.logger.debug(f"Authenticated as {self.smtp_user}")

            server.send_message(msg)

    def send_test_email(self, subject: str = "Backup Retention Test Email") -> bool:
        """Send a test email to verify configuration.

        Args:
            subject: Test email subject.

        Returns:
            True if test email sent successfully.
        """
        test_content = f"""
This is a test email from the backup cleanup job.

Configuration:
- SMTP Server: {self.smtp_server}:{self.smtp_port}
- From: {self.from_address}
- Recipients: {', '.join(self.to_addresses)}
- TLS Enabled: {self.use_tls}
- Always notify: {self.always_notify}

If you receive this email, cleanup reports will be delivered.

Generated at: {format_date(datetime.now())}
        """.strip()

        return self.send_report(subject, test_content)

    def validate_configuration(self) -> List[str]:
        """Validate email configuration.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []

        if not self.smtp_server:
            errors.append("SMTP server not configured")

        if not self.from_address:
            errors.append("From address not configured")
        elif not EMAIL_PATTERN.match(self.from_address):
            errors.append(f"Invalid from address: {self.from_address}")

        if not self.to_addresses:
            errors.append("No recipient addresses configured")

        for addr in self.to_addresses:
            if not EMAIL_PATTERN.match(addr):
                errors.append(f"Invalid recipient address: {addr}")

        return errors

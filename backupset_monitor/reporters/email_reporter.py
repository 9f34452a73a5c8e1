"""Email notifier for sending backupset reports."""

import logging
import re
import smtplib
from datetime import datetime
from email.mime.text import MIMEText
from typing import Any, Dict, List

from ..core.errors import NotifierFailure


EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


class EmailNotifier:
    """Sends backupset reports as plain text email."""

    def __init__(self, smtp_server: str = None, smtp_port: int = 587, smtp_user: str = None,
                 smtp_pass: str = None, from_address: str = None,
                 to_addresses: List[str] = None, use_tls: bool = True):
        """Initialize email notifier.

        Args:
            smtp_server: SMTP server hostname.
            smtp_port: SMTP server port.
            smtp_user: SMTP username.
            smtp_pass: SMTP password.
            from_address: From email address.
            to_addresses: List of recipient email addresses.
            use_tls: Whether to use TLS encryption.
        """
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.from_address = from_address
        self.to_addresses = to_addresses or []
        self.use_tls = use_tls
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, email_config: Dict[str, Any]) -> "EmailNotifier":
        """Create a notifier from the email configuration section."""
        return cls(
            smtp_server=email_config.get('smtp_server'),
            smtp_port=int(email_config.get('smtp_port', 587)),
            smtp_user=email_config.get('smtp_user'),
            smtp_pass=email_config.get('smtp_pass'),
            from_address=email_config.get('from_address'),
            to_addresses=email_config.get('to_addresses', []),
            use_tls=email_config.get('use_tls', True)
        )

    def send(self, subject: str, body: str) -> bool:
        """Send a report via email.

        Args:
            subject: Email subject line.
            body: Plain text email content.

        Returns:
            True once the message was handed to the SMTP server.

        Raises:
            NotifierFailure: If the message could not be sent.
        """
        if not self.to_addresses:
            raise NotifierFailure("No recipient addresses configured")

        msg = self._create_message(subject, body)
        try:
            self._send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotifierFailure(f"Failed to send email report: {e}") from e

        self.logger.info(f"Email report sent successfully to {len(self.to_addresses)} recipients")
        return True

    def _create_message(self, subject: str, body: str) -> MIMEText:
        msg = MIMEText(body, 'plain', 'utf-8')
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
            self.logger.debug("Email message sent successfully")

    def send_test_email(self, subject: str = "Backupset Monitor Test Email") -> bool:
        """Send a test email to verify configuration.

        Raises:
            NotifierFailure: If the message could not be sent.
        """
        test_content = f"""
This is a test email from the Backupset Monitor.

Configuration:
- SMTP Server: {self.smtp_server}:{self.smtp_port}
- From: {self.from_address}
- Recipients: {', '.join(self.to_addresses)}
- TLS Enabled: {self.use_tls}

If you receive this email, the email configuration is working correctly.

Generated at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
        """.strip()

        return self.send(subject, test_content)

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

        if not self.to_addresses:
            errors.append("No recipient addresses configured")

        if self.from_address and not EMAIL_PATTERN.match(self.from_address):
            errors.append(f"Invalid from address: {self.from_address}")

        for addr in self.to_addresses:
            if not EMAIL_PATTERN.match(addr):
                errors.append(f"Invalid recipient address: {addr}")

        return errors

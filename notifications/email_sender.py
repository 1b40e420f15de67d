"""
SMTP email sender for alert notifications.

Handles:
  - SMTP connection with TLS
  - Plain-text alert bodies with a configurable subject
  - Credential management (env vars > config file)

No external dependencies beyond Python stdlib (email, smtplib, ssl).
"""
import os
import ssl
import smtplib
import logging
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate

logger = logging.getLogger("alertinator.notifications.email_sender")


class EmailSender:
    """
    SMTP email sender.

    Credential resolution order:
      1. Environment variables: ALERTINATOR_SMTP_USER, ALERTINATOR_SMTP_PASS
      2. Config file: config.email.smtp_username, config.email.smtp_password

    Without credentials the connection is made unauthenticated, which is
    what a local relay on localhost:25 expects.
    """

    def __init__(self, config: dict):
        email_config = config.get("email", {})
        self.smtp_host = email_config.get("smtp_host", "localhost")
        self.smtp_port = email_config.get("smtp_port", 25)
        self.use_tls = email_config.get("use_tls", False)
        self.from_address = email_config.get("from_address", "")
        self.from_name = email_config.get("from_name", "Alertinator")
        self.subject = email_config.get("subject", "Alert")
        self.timeout = email_config.get("timeout", 30)

        # Credential resolution: env vars take priority
        self.username = os.environ.get(
            "ALERTINATOR_SMTP_USER",
            email_config.get("smtp_username", ""),
        )
        self.password = os.environ.get(
            "ALERTINATOR_SMTP_PASS",
            email_config.get("smtp_password", ""),
        )

    def is_configured(self) -> bool:
        """Check if the fields needed to send are present."""
        return all([self.smtp_host, self.from_address])

    def send(self, address: str, message: str) -> None:
        """Send ``message`` to ``address`` as the body of a plain-text email.

        Raises whatever smtplib raises; the caller decides how to aggregate.
        """
        if not self.is_configured():
            raise RuntimeError("Email not configured: smtp_host and from_address are required")

        msg = MIMEText(message, "plain", "utf-8")
        msg["From"] = formataddr((self.from_name, self.from_address))
        msg["To"] = address
        msg["Subject"] = self.subject
        msg["Date"] = formatdate(localtime=True)

        self._send(msg)
        logger.info(f"Email sent to {address}: {self.subject}")

    def _connect(self):
        context = ssl.create_default_context()
        server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout)
        try:
            server.ehlo()
            if self.use_tls:
                server.starttls(context=context)
                server.ehlo()
            if self.username and self.password:
                server.login(self.username, self.password)
        except Exception:
            server.close()
            raise
        return server

    def _send(self, msg: MIMEText) -> None:
        """Internal: send a constructed MIME message via SMTP."""
        try:
            with self._connect() as server:
                server.send_message(msg)
        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed. Check username/password.")
            raise
        except smtplib.SMTPRecipientsRefused:
            logger.error(f"Recipient refused: {msg['To']}")
            raise

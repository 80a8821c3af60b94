"""
SMTP email sender for alert notifications.

Handles:
  - SMTP connection with TLS
  - Plain-text alert message construction
  - Credential management (env vars > config file)
"""
import os
import ssl
import smtplib
import logging
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate

logger = logging.getLogger("v1z3r.notifications.email_sender")


class EmailSender:
    """
    SMTP email sender.

    Credential resolution order:
      1. Environment variables: V1Z3R_SMTP_USER, V1Z3R_SMTP_PASS
      2. Config file: config.email.smtp_username, config.email.smtp_password
    """

    def __init__(self, config: dict):
        email_config = config.get("email", {}) or {}
        self.smtp_host = email_config.get("smtp_host", "")
        self.smtp_port = email_config.get("smtp_port", 587)
        self.use_tls = email_config.get("use_tls", True)
        self.from_address = email_config.get("from_address", "")
        self.from_name = email_config.get("from_name", "v1z3r Monitoring")
        self.timeout = email_config.get("timeout", 30)

        # Credential resolution: env vars take priority
        self.username = os.environ.get(
            "V1Z3R_SMTP_USER",
            email_config.get("smtp_username", ""),
        )
        self.password = os.environ.get(
            "V1Z3R_SMTP_PASS",
            email_config.get("smtp_password", ""),
        )

    def is_configured(self) -> bool:
        """Check if all required SMTP fields are present."""
        return all([self.smtp_host, self.from_address, self.username, self.password])

    def build_message(self, recipients: list, subject: str, body: str) -> MIMEText:
        msg = MIMEText(body, "plain", "utf-8")
        msg["From"] = formataddr((self.from_name, self.from_address))
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=True)
        return msg

    def send_alert(self, recipients: list, subject: str, body: str) -> bool:
        """Send a single alert email. Returns False when unconfigured or on failure."""
        if not self.is_configured():
            logger.warning("Email not configured - skipping alert send")
            return False
        if not recipients:
            logger.warning("Email alert has no recipients")
            return False
        return self._send(self.build_message(recipients, subject, body))

    def _send(self, msg: MIMEText) -> bool:
        """Internal: send a constructed MIME message via SMTP."""
        try:
            context = ssl.create_default_context()
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.ehlo()
                if self.use_tls:
                    server.starttls(context=context)
                    server.ehlo()
                server.login(self.username, self.password)
                server.send_message(msg)
            logger.info(f"Email sent to {msg['To']}: {msg['Subject']}")
            return True
        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed. Check username/password.")
            return False
        except smtplib.SMTPRecipientsRefused:
            logger.error(f"Recipient refused: {msg['To']}")
            return False
        except Exception as e:
            logger.error(f"Email send failed: {e}")
            return False

"""SMTP delivery for transactional and campaign email."""

import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from ..errors import IntegrationError, IntegrationNotConfiguredError
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger("mailer")


class SmtpMailer:
    name = "SMTP"

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.timeout = timeout

    def send(self, to: str, subject: str, html: str, from_name: str = "Flores&Boxes") -> None:
        """Send one HTML message over STARTTLS."""
        if not self.host:
            raise IntegrationNotConfiguredError(self.name, "SMTP_HOST")
        if not to:
            raise IntegrationError(self.name, "recipient address is empty")

        msg = EmailMessage()
        msg["From"] = formataddr((from_name, self.user or ""))
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("Este mensaje requiere un cliente de correo con soporte HTML.")
        msg.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                if self.user:
                    server.login(self.user, self.password or "")
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise IntegrationError(self.name, str(e)) from e

        logger.info("Sent '%s' to %s", subject, mask_pii(to))

"""Twilio WhatsApp sender."""

from typing import Optional

import requests

from ..errors import IntegrationError, IntegrationNotConfiguredError
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger("whatsapp")

TWILIO_API_BASE_URL = "https://api.twilio.com/2010-04-01"


class WhatsAppClient:
    name = "Twilio"

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        timeout: float = 30,
        base_url: str = TWILIO_API_BASE_URL,
        http: Optional[requests.Session] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()

    def send_message(self, to: str, body: str) -> str:
        """Send ``body`` to ``to`` (``whatsapp:+598...``) and return the message SID."""
        if not (self.account_sid and self.auth_token):
            raise IntegrationNotConfiguredError(self.name, "TWILIO_SID/TWILIO_AUTH")
        if not self.from_number:
            raise IntegrationNotConfiguredError(self.name, "TWILIO_WHATSAPP_FROM")

        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        try:
            response = self.http.post(
                url,
                data={"From": self.from_number, "To": to, "Body": body},
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise IntegrationError(self.name, str(e)) from e

        if response.status_code >= 400:
            raise IntegrationError(self.name, response.text, response.status_code)

        sid = response.json().get("sid", "")
        logger.info("WhatsApp reply %s sent to %s", sid, mask_pii(to))
        return sid

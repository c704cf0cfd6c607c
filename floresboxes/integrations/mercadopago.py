"""
MercadoPago REST client.

Covers the two calls the storefront needs: creating a Checkout Pro preference
and reading back a payment by id.
"""

from typing import Any, Dict, Optional

import requests

from ..errors import IntegrationError, IntegrationNotConfiguredError
from ..utils.logger import get_logger

logger = get_logger("mercadopago")


class MercadoPagoClient:
    """Thin wrapper over api.mercadopago.com."""

    name = "MercadoPago"

    def __init__(
        self,
        access_token: Optional[str],
        base_url: str = "https://api.mercadopago.com",
        timeout: float = 30,
        http: Optional[requests.Session] = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()

    def _headers(self) -> Dict[str, str]:
        if not self.access_token:
            raise IntegrationNotConfiguredError(self.name, "MP_ACCESS_TOKEN")
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = self._headers()
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise IntegrationError(self.name, str(e)) from e

        if response.status_code >= 400:
            logger.error("MercadoPago %s %s -> %s: %s", method, path, response.status_code, response.text)
            raise IntegrationError(self.name, response.text, response.status_code)
        return response.json()

    def create_preference(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Create a checkout preference; the result carries ``id`` and ``init_point``."""
        preference = self._request("POST", "/checkout/preferences", json=body)
        logger.info("Created preference %s for %s", preference.get("id"), body.get("external_reference"))
        return preference

    def get_payment(self, payment_id: str) -> Dict[str, Any]:
        """Fetch the authoritative payment record."""
        return self._request("GET", f"/v1/payments/{payment_id}")

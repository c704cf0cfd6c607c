"""
MercadoPago checkout preferences and payment reconciliation.
"""

import re
from typing import Any, Dict, Optional

from ..data.models import Order, OrderStatus, PaymentStatus
from ..errors import MalformedNotificationError
from ..integrations.mercadopago import MercadoPagoClient
from ..schemas.order_models import PaymentNotification
from ..utils.logger import get_logger
from .notifications import NotificationDispatcher
from .orders import OrderService

logger = get_logger("payments")


def build_preference(
    order: Order,
    frontend_url: str,
    backend_url: str,
    currency: str = "UYU",
) -> Dict[str, Any]:
    """Checkout Pro preference body for ``order``; ``external_reference`` is the order id."""
    customer = order.customer or {}
    frontend_url = (frontend_url or "").rstrip("/")
    backend_url = (backend_url or "").rstrip("/")
    return {
        "external_reference": order.order_id,
        "items": [
            {
                "id": re.sub(r"\s", "_", item["name"]),
                "title": item["name"],
                "quantity": item["qty"],
                "currency_id": currency,
                "unit_price": item["price"],
            }
            for item in order.items
        ],
        "payer": {
            "name": customer.get("name"),
            "email": customer.get("email"),
            "phone": {"number": customer.get("phone")},
        },
        "back_urls": {
            "success": f"{frontend_url}/success",
            "failure": f"{frontend_url}/failure",
            "pending": f"{frontend_url}/pending",
        },
        "auto_return": "approved",
        "notification_url": f"{backend_url}/api/mp-webhook",
        "shipments": {
            "cost": order.shipping,
            "mode": "not_specified",
        },
    }


def map_payment_status(gateway_status: Optional[str]) -> str:
    if gateway_status == "approved":
        return PaymentStatus.approved.value
    if gateway_status == "rejected":
        return PaymentStatus.rejected.value
    return PaymentStatus.pending.value


class PaymentReconciler:
    """Applies MercadoPago payment notifications to local orders.

    The payment is always re-read from the gateway; the notification body only
    supplies its id. Redelivered approvals send the emails again.
    """

    def __init__(self, gateway: MercadoPagoClient, orders: OrderService, notifier: NotificationDispatcher):
        self.gateway = gateway
        self.orders = orders
        self.notifier = notifier

    def reconcile(self, notification: PaymentNotification) -> Optional[Order]:
        """Returns the updated order, or None when there was nothing to apply."""
        if notification.type != "payment":
            logger.debug("Ignoring notification type=%s", notification.type)
            return None
        if notification.data is None:
            raise MalformedNotificationError(notification.type)

        payment_id = str(notification.data.id)
        payment = self.gateway.get_payment(payment_id)
        order_id = payment.get("external_reference")
        new_status = map_payment_status(payment.get("status"))
        logger.info("Payment %s for order %s is %s", payment_id, order_id, payment.get("status"))

        order_status = OrderStatus.confirmed.value if new_status == PaymentStatus.approved.value else None
        order = self.orders.apply_payment_result(order_id, new_status, payment_id, order_status)

        if order is not None and new_status == PaymentStatus.approved.value:
            self.notifier.send_order_confirmation(order)
            self.notifier.notify_admin(order)
        return order

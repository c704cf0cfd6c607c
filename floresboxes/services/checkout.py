"""Checkout: turns a storefront cart into a stored order."""
from typing import Any, Dict

from ..data.database import Database
from ..data.models import Order, OrderStatus, PaymentStatus, utcnow
from ..integrations.mercadopago import MercadoPagoClient
from ..schemas.order_models import OrderCreate
from ..utils.logger import get_logger
from .leads import BUYER_TAG, LeadService
from .notifications import NotificationDispatcher
from .orders import FREE_SHIPPING_THRESHOLD, SHIPPING_FEE, OrderService, compute_totals
from .payments import build_preference

logger = get_logger("checkout")

MERCADOPAGO = "mercadopago"


class CheckoutService:
    def __init__(
        self,
        db: Database,
        leads: LeadService,
        gateway: MercadoPagoClient,
        notifier: NotificationDispatcher,
        frontend_url: str = "",
        backend_url: str = "",
        currency: str = "UYU",
        free_shipping_threshold: float = FREE_SHIPPING_THRESHOLD,
        shipping_fee: float = SHIPPING_FEE,
    ):
        self.db = db
        self.leads = leads
        self.gateway = gateway
        self.notifier = notifier
        self.frontend_url = frontend_url
        self.backend_url = backend_url
        self.currency = currency
        self.free_shipping_threshold = free_shipping_threshold
        self.shipping_fee = shipping_fee

    def create_order(self, payload: OrderCreate) -> Dict[str, Any]:
        """
        Price and store the order.

        MercadoPago orders get a hosted checkout preference and stay pending
        until the payment webhook arrives. Every other method is treated as
        already paid: the order is confirmed and both emails go out at once.
        """
        subtotal, shipping, total = compute_totals(
            payload.items, self.free_shipping_threshold, self.shipping_fee
        )
        customer = payload.customer.model_dump()
        items = [item.model_dump(exclude_none=True) for item in payload.items]

        with self.db.session() as s:
            order = Order(
                order_id=OrderService.next_order_id(s),
                customer=customer,
                items=items,
                subtotal=subtotal,
                shipping=shipping,
                total=total,
                payment_method=payload.paymentMethod,
                created_at=utcnow(),
            )

            preference = None
            if payload.paymentMethod == MERCADOPAGO:
                # The remote preference is not cancelled if the insert below fails.
                preference = self.gateway.create_preference(
                    build_preference(order, self.frontend_url, self.backend_url, self.currency)
                )
                order.mp_preference_id = preference.get("id")
            else:
                order.payment_status = PaymentStatus.approved.value
                order.order_status = OrderStatus.confirmed.value

            s.add(order)

        logger.info("Created order %s total=%s method=%s", order.order_id, total, payload.paymentMethod)

        if preference is not None:
            self.leads.upsert(customer["email"], customer["name"], "checkout", [BUYER_TAG])
            return {
                "success": True,
                "orderId": order.order_id,
                "mpInitPoint": preference.get("init_point"),
                "preferenceId": preference.get("id"),
            }

        self.notifier.send_order_confirmation(order)
        self.notifier.notify_admin(order)
        self.leads.upsert(customer["email"], customer["name"], "checkout", [BUYER_TAG])
        return {"success": True, "orderId": order.order_id}

"""Order pricing, identifier allocation and lifecycle."""
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..data.database import Database
from ..data.models import Order, OrderStatus
from ..errors import InvalidOrderStatusError, OrderNotFoundError
from ..utils.logger import get_logger

logger = get_logger("orders")

FREE_SHIPPING_THRESHOLD = 2000
SHIPPING_FEE = 150


def compute_totals(
    items: Iterable,
    free_shipping_threshold: float = FREE_SHIPPING_THRESHOLD,
    shipping_fee: float = SHIPPING_FEE,
) -> Tuple[float, float, float]:
    """Return ``(subtotal, shipping, total)`` for items exposing ``price`` and ``qty``."""
    subtotal = sum(item.price * item.qty for item in items)
    shipping = 0 if subtotal >= free_shipping_threshold else shipping_fee
    return subtotal, shipping, subtotal + shipping


def format_order_id(count: int) -> str:
    """``#0001`` style id for the order that follows ``count`` existing ones."""
    return f"#{count + 1:04d}"


class OrderService:
    """Reads and status changes for stored orders.

    There is no transition graph: any known status can be set from any other.
    """

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def next_order_id(session: Session) -> str:
        # Not atomic; two concurrent checkouts can read the same count and the
        # unique index on order_id rejects the second insert.
        count = session.scalar(select(func.count()).select_from(Order))
        return format_order_id(count or 0)

    def find(self, order_id: str) -> Optional[Order]:
        with self.db.session() as s:
            return s.scalar(select(Order).where(Order.order_id == order_id))

    def get(self, order_id: str) -> Order:
        order = self.find(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def list_all(self) -> List[Order]:
        with self.db.session() as s:
            return list(s.scalars(select(Order).order_by(Order.created_at.desc(), Order.id.desc())))

    def set_status(self, order_id: str, status: str) -> Optional[Order]:
        """Admin override of ``order_status``; returns None for an unknown order."""
        allowed = [s.value for s in OrderStatus]
        value = getattr(status, "value", status)
        if value not in allowed:
            raise InvalidOrderStatusError(str(value), allowed)

        with self.db.session() as s:
            order = s.scalar(select(Order).where(Order.order_id == order_id))
            if order is None:
                return None
            logger.info("Order %s status %s -> %s", order_id, order.order_status, value)
            order.order_status = value
            return order

    def apply_payment_result(
        self, order_id: str, payment_status: str, payment_id: str, order_status: Optional[str] = None
    ) -> Optional[Order]:
        """Record a gateway payment outcome. Unknown orders are ignored."""
        with self.db.session() as s:
            order = s.scalar(select(Order).where(Order.order_id == order_id))
            if order is None:
                logger.warning("Payment %s references unknown order %s", payment_id, order_id)
                return None
            order.payment_status = payment_status
            order.mp_payment_id = payment_id
            if order_status is not None:
                order.order_status = order_status
            return order

"""Order related pydantic models.

Route handlers validate request bodies with these inside their own try block,
so a malformed checkout payload is answered like any other internal failure.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from ..data.models import OrderStatus


class CustomerInfo(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    barrio: Optional[str] = None
    deliveryDate: Optional[str] = None
    message: Optional[str] = None


class LineItem(BaseModel):
    name: str
    price: float = Field(ge=0)
    qty: int = Field(ge=0)
    emoji: Optional[str] = None


class OrderCreate(BaseModel):
    customer: CustomerInfo
    items: List[LineItem]
    paymentMethod: str = "card"


class StatusUpdate(BaseModel):
    status: OrderStatus


class PaymentNotificationData(BaseModel):
    id: Union[int, str]


class PaymentNotification(BaseModel):
    """MercadoPago webhook body. Only ``type`` and ``data.id`` are read."""

    type: Optional[str] = None
    data: Optional[PaymentNotificationData] = None

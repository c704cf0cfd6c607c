"""
SQLAlchemy models for the storefront.

Each entity is stored as one document-shaped row: customer data, line items,
tags and chat turns live in JSON columns and nothing references another table.
"""

import enum
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Float, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class OrderStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    preparing = "preparing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    customer: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False)
    shipping: Mapped[float] = mapped_column(Float, nullable=False)
    total: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.pending.value
    )
    order_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderStatus.pending.value
    )
    mp_preference_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mp_payment_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderId": self.order_id,
            "customer": dict(self.customer or {}),
            "items": [dict(i) for i in self.items or []],
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "total": self.total,
            "paymentMethod": self.payment_method,
            "paymentStatus": self.payment_status,
            "orderStatus": self.order_status,
            "mpPreferenceId": self.mp_preference_id,
            "mpPaymentId": self.mp_payment_id,
            "createdAt": _iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Order(order_id='{self.order_id}', total={self.total}, payment={self.payment_status})>"


class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="website")
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "source": self.source,
            "tags": list(self.tags or []),
            "createdAt": _iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Lead(email='{self.email}', tags={self.tags})>"


class Chat(Base):
    __tablename__ = "chats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    phone: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    messages: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phone": self.phone,
            "messages": [dict(m) for m in self.messages or []],
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Chat(phone='{self.phone}', turns={len(self.messages or [])})>"

"""Shared fakes and builders for the test suite."""
import os
import shutil
import tempfile
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional
from unittest.mock import patch

from sqlalchemy.orm import Session

from floresboxes.app.config import Config
from floresboxes.app.container import build_services
from floresboxes.data.database import Database
from floresboxes.data.models import Lead, Order, utcnow
from floresboxes.errors import IntegrationError


class FakeConfig(Config):
    ADMIN_EMAIL = "admin@floresboxes.uy"
    FRONTEND_URL = "https://floresboxes.uy"
    BACKEND_URL = "https://api.floresboxes.uy"
    MP_CURRENCY = "UYU"
    FREE_SHIPPING_THRESHOLD = 2000
    SHIPPING_FEE = 150
    CHAT_CONTEXT_TURNS = 20
    CHAT_MAX_TOKENS = 500
    CHAT_TEMPERATURE = 0.7
    ANALYTICS_WEEKS = 8


class FakeGateway:
    """Stands in for MercadoPagoClient."""

    def __init__(self):
        self.preferences: List[Dict[str, Any]] = []
        self.payments: Dict[str, Dict[str, Any]] = {}
        self.payment_lookups: List[str] = []
        self.fail_lookups = False

    def create_preference(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self.preferences.append(body)
        n = len(self.preferences)
        return {"id": f"pref-{n}", "init_point": f"https://mp.test/init/{n}"}

    def add_payment(self, payment_id: str, status: str, order_id: str) -> None:
        self.payments[str(payment_id)] = {"id": payment_id, "status": status, "external_reference": order_id}

    def get_payment(self, payment_id: str) -> Dict[str, Any]:
        self.payment_lookups.append(payment_id)
        if self.fail_lookups:
            raise IntegrationError("MercadoPago", "gateway unavailable", 503)
        return self.payments[str(payment_id)]


class FakeMailer:
    """Stands in for SmtpMailer; ``fail_for`` lists recipients that raise."""

    def __init__(self, fail_for: Optional[List[str]] = None):
        self.sent: List[Dict[str, str]] = []
        self.fail_for = set(fail_for or [])

    def send(self, to: str, subject: str, html: str, from_name: str = "Flores&Boxes") -> None:
        if to in self.fail_for:
            raise IntegrationError("SMTP", f"mailbox unavailable for {to}", 550)
        self.sent.append({"to": to, "subject": subject, "html": html, "from_name": from_name})

    def recipients(self) -> List[str]:
        return [m["to"] for m in self.sent]


class FakeGenClient:
    """Stands in for GenerationClient and records what the model was given."""

    def __init__(self, reply: str = "¡Hola! 🌸 ¿En qué te ayudo?"):
        self.reply = reply
        self.calls: List[Dict[str, Any]] = []

    def generate_reply(self, system_prompt, messages, max_tokens=500, temperature=0.7) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "messages": list(messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        return f"{self.reply} ({len(self.calls)})"


class FakeMessenger:
    def __init__(self):
        self.sent: List[Dict[str, str]] = []

    def send_message(self, to: str, body: str) -> str:
        self.sent.append({"to": to, "body": body})
        return f"SM{len(self.sent)}"


class ServicesFixture:
    """Builds a full service graph on a throwaway SQLite file."""

    def __init__(self):
        self.tmpdir = tempfile.mkdtemp(prefix="floresboxes-test-")
        self.db = Database(f"sqlite:///{os.path.join(self.tmpdir, 'test.db')}")
        self.gateway = FakeGateway()
        self.mailer = FakeMailer()
        self.gen_client = FakeGenClient()
        self.messenger = FakeMessenger()
        self.services = build_services(
            config=FakeConfig,
            db=self.db,
            gateway=self.gateway,
            mailer=self.mailer,
            gen_client=self.gen_client,
            messenger=self.messenger,
        )

    def close(self) -> None:
        self.services.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def add_order(
        self,
        order_id: str,
        total: float,
        payment_status: str = "pending",
        order_status: str = "pending",
        created_at: Optional[datetime] = None,
        email: str = "ana@example.com",
    ) -> Order:
        with self.db.session() as s:
            order = Order(
                order_id=order_id,
                customer={"name": "Ana", "email": email, "phone": "+59899111222",
                          "address": "Av. Brasil 1234", "barrio": "Pocitos", "deliveryDate": "2026-10-20"},
                items=[{"name": "Box Romántica", "price": total, "qty": 1}],
                subtotal=total,
                shipping=0,
                total=total,
                payment_method="mercadopago",
                payment_status=payment_status,
                order_status=order_status,
                created_at=created_at or utcnow(),
            )
            s.add(order)
        return order

    def add_lead(self, email: str, name: str = "Lead", tags=None, created_at: Optional[datetime] = None) -> Lead:
        with self.db.session() as s:
            lead = Lead(email=email, name=name, source="popup", tags=list(tags or []),
                        created_at=created_at or utcnow())
            s.add(lead)
        return lead

    @contextmanager
    def competing_lead_insert(self, email: str):
        """Another writer stores ``email`` right after the next lookup misses it."""
        real_scalar = Session.scalar
        state = {"done": False}

        def scalar_then_insert(session, *args, **kwargs):
            result = real_scalar(session, *args, **kwargs)
            if not state["done"]:
                state["done"] = True
                self.add_lead(email, name="Concurrent")
            return result

        with patch.object(Session, "scalar", autospec=True, side_effect=scalar_then_insert):
            yield


def checkout_payload(items=None, payment_method: str = "mercadopago", email: str = "ana@example.com") -> Dict[str, Any]:
    return {
        "customer": {
            "name": "Ana Pérez",
            "email": email,
            "phone": "+59899111222",
            "address": "Av. Brasil 1234",
            "barrio": "Pocitos",
            "deliveryDate": "2026-10-20",
            "message": "¡Feliz cumple!",
        },
        "items": items if items is not None else [
            {"name": "Ramo Primaveral", "price": 890, "qty": 1, "emoji": "💐"},
        ],
        "paymentMethod": payment_method,
    }

"""Explicit wiring of clients and services.

Everything the routes use is built here once and handed to the FastAPI app, so
tests can swap any external client for a fake.
"""
from dataclasses import dataclass
from typing import Optional

from ..data.catalog import Catalog
from ..data.database import Database
from ..integrations.mailer import SmtpMailer
from ..integrations.mercadopago import MercadoPagoClient
from ..integrations.whatsapp import WhatsAppClient
from ..services.analytics import AnalyticsService
from ..services.checkout import CheckoutService
from ..services.leads import LeadService
from ..services.notifications import NotificationDispatcher
from ..services.orders import OrderService
from ..services.payments import PaymentReconciler
from ..utils.logger import get_logger
from .config import Config
from .controller import AssistantController
from .generate import GenerationClient
from .prompt_builder import PromptBuilder
from .session import ChatSessionManager

logger = get_logger("container")


@dataclass
class Services:
    db: Database
    orders: OrderService
    checkout: CheckoutService
    reconciler: PaymentReconciler
    leads: LeadService
    notifier: NotificationDispatcher
    sessions: ChatSessionManager
    assistant: AssistantController
    analytics: AnalyticsService

    def close(self) -> None:
        self.analytics.close()
        self.db.close()


def build_services(
    config=Config,
    db: Optional[Database] = None,
    gateway: Optional[MercadoPagoClient] = None,
    mailer: Optional[SmtpMailer] = None,
    gen_client: Optional[GenerationClient] = None,
    messenger: Optional[WhatsAppClient] = None,
) -> Services:
    """Construct the service graph. The database is initialized here so a bad
    ``DATABASE_URL`` fails at startup; the other clients only check their
    credentials when called."""
    db = db or Database(config.DATABASE_URL)
    db.init()

    gateway = gateway or MercadoPagoClient(
        config.MP_ACCESS_TOKEN, base_url=config.MP_API_BASE_URL, timeout=config.HTTP_TIMEOUT
    )
    mailer = mailer or SmtpMailer(
        config.SMTP_HOST, config.SMTP_PORT, config.SMTP_USER, config.SMTP_PASS, timeout=config.HTTP_TIMEOUT
    )
    gen_client = gen_client or GenerationClient(
        config.OPENAI_API_KEY, model=config.OPENAI_MODEL, base_url=config.OPENAI_BASE_URL,
        timeout=config.HTTP_TIMEOUT,
    )
    messenger = messenger or WhatsAppClient(
        config.TWILIO_SID, config.TWILIO_AUTH, config.TWILIO_WHATSAPP_FROM, timeout=config.HTTP_TIMEOUT
    )

    orders = OrderService(db)
    leads = LeadService(db)
    notifier = NotificationDispatcher(mailer, config.ADMIN_EMAIL, config.FRONTEND_URL)
    checkout = CheckoutService(
        db,
        leads,
        gateway,
        notifier,
        frontend_url=config.FRONTEND_URL,
        backend_url=config.BACKEND_URL,
        currency=config.MP_CURRENCY,
        free_shipping_threshold=config.FREE_SHIPPING_THRESHOLD,
        shipping_fee=config.SHIPPING_FEE,
    )
    sessions = ChatSessionManager(db, config.CHAT_CONTEXT_TURNS)
    builder = PromptBuilder(Catalog(config.FRONTEND_URL), config.FREE_SHIPPING_THRESHOLD)
    assistant = AssistantController(
        sessions, builder, gen_client, messenger,
        max_tokens=config.CHAT_MAX_TOKENS, temperature=config.CHAT_TEMPERATURE,
    )

    logger.info("Services ready")
    return Services(
        db=db,
        orders=orders,
        checkout=checkout,
        reconciler=PaymentReconciler(gateway, orders, notifier),
        leads=leads,
        notifier=notifier,
        sessions=sessions,
        assistant=assistant,
        analytics=AnalyticsService(db, weeks=config.ANALYTICS_WEEKS),
    )

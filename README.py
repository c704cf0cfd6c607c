"""
Flores&Boxes Backend - System Documentation
===========================================

This module-style README documents the architecture, components, data flows
and operational practices of the Flores&Boxes storefront backend. It mirrors
the live codebase and can be imported to programmatically inspect sections or
printed for human consumption.

How to use this file
--------------------
- View in an editor for structured reading.
- Run `python README.py` to print the outline.
- Import `README` in tools or scripts to surface sections.

Table of Contents
-----------------
1. System Overview
2. Architecture
3. Backend Components
4. Data & Persistence
5. Checkout & Payments
6. WhatsApp Assistant
7. Email
8. Configuration & Environment
9. Testing Strategy
10. Security & PII Handling
11. Observability
12. Known Limitations
"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{body.strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    Order-taking and customer-engagement backend for Flores&Boxes, a flower and
    gift-box shop in Montevideo. It accepts orders from the storefront, starts
    MercadoPago hosted checkouts and reconciles their payment webhooks, sends
    transactional and campaign email, and answers customers on WhatsApp with an
    LLM-backed assistant grounded on the product catalog.
    """,
)


ARCHITECTURE = section(
    "2. Architecture",
    """
    - FastAPI app (`floresboxes/app/main.py`) exposing `/api/*` and `/health`.
    - Every request is a straight chain: route -> service -> one or two
      external calls (SQL, MercadoPago, OpenAI, Twilio, SMTP) -> response.
    - No background workers, queues or retries; MercadoPago's redelivery is the
      only retry mechanism and is driven by our HTTP status code.
    - Clients and services are built once in `app/container.py` and passed to
      `create_app()`; tests pass fakes the same way.
    """,
)


BACKEND_COMPONENTS = section(
    "3. Backend Components",
    """
    app/
      - main.py: routes, CORS, lifespan (builds and closes the service graph).
      - container.py: explicit wiring of clients and services.
      - config.py: env-driven configuration (.env supported).
      - controller.py: WhatsApp turn handling.
      - session.py: per-contact chat history + context window.
      - prompt_builder.py: system prompt from catalog and store policy.
      - generate.py: OpenAI-compatible chat completions client.

    services/
      - orders.py: pricing, #NNNN ids, lookup/list/status override.
      - checkout.py: cart -> stored order (+ MercadoPago preference).
      - payments.py: preference body, payment webhook reconciliation.
      - leads.py: upsert by email, segments.
      - notifications.py: confirmation, admin alert, welcome, campaigns.
      - analytics.py: KPI summary and 8-week revenue series.

    integrations/
      - mercadopago.py, whatsapp.py (Twilio), mailer.py (SMTP).

    data/
      - database.py/models.py: SQLAlchemy engine, sessions, Order/Lead/Chat.
      - catalog.py: static product list.
    """,
)


DATA_AND_PERSISTENCE = section(
    "4. Data & Persistence",
    """
    - DB: SQLite by default (`DATABASE_URL`), any SQLAlchemy URL works.
    - Entities: Order (unique orderId), Lead (unique email), Chat (unique phone).
      Embedded data (customer, items, tags, turns) are JSON columns; no table
      references another.
    - Totals are computed once at checkout and never recomputed.
    """,
)


CHECKOUT_AND_PAYMENTS = section(
    "5. Checkout & Payments",
    """
    - Shipping is free from $2.000 UYU, otherwise a flat $150.
    - `mercadopago`: preference created, order stays pending, client is sent to
      `mpInitPoint`. Any other method is confirmed immediately and emailed.
    - Webhook: payment re-read from MercadoPago by id; approved -> confirmed
      plus customer and admin emails; rejected/pending leave orderStatus alone.
    - Admin can set any orderStatus from any other (no transition graph).
    """,
)


WHATSAPP_ASSISTANT = section(
    "6. WhatsApp Assistant",
    """
    - Twilio posts inbound messages to `/api/whatsapp-webhook`.
    - Full history is stored per phone; only the last 20 turns go to the model
      (gpt-4o-mini, 500 tokens, temperature 0.7).
    - The reply is sent back through Twilio and the webhook answers empty TwiML.
    """,
)


EMAIL = section(
    "7. Email",
    """
    - SMTP with STARTTLS (Brevo, Gmail...).
    - Campaign segments: buyers (tag "buyer"), new (no "buyer" tag), all.
    - Campaigns send sequentially and stop at the first failure.
    """,
)


CONFIG_ENV = section(
    "8. Configuration & Environment",
    """
    - `.env` compatible; keys: DATABASE_URL, MP_ACCESS_TOKEN, OPENAI_API_KEY,
      TWILIO_SID, TWILIO_AUTH, TWILIO_WHATSAPP_FROM, SMTP_HOST, SMTP_USER,
      SMTP_PASS, FRONTEND_URL, BACKEND_URL, ADMIN_EMAIL, PORT, LOG_LEVEL.
    - Only storage is checked at startup; integrations fail when first called.
    - Run locally via `uvicorn floresboxes.app.main:app --reload --port 3000`.
    """,
)


TESTING = section(
    "9. Testing Strategy",
    """
    - unittest-style suites under `/tests`, run with pytest
      (`pip install -e .[test] && pytest`).
    - External clients are replaced with in-memory fakes; storage is a
      throwaway SQLite file per test.
    """,
)


SECURITY = section(
    "10. Security & PII Handling",
    """
    - `utils/security.py`: PII masking; phone numbers and emails are masked in logs.
    - Customer-supplied fields are HTML-escaped in email templates.
    - Payment status always comes from MercadoPago, never the webhook body.
    - Keys: loaded from env; do not commit secrets.
    """,
)


OBSERVABILITY = section(
    "11. Observability",
    """
    - Logs via `utils/logger.py` (`floresboxes.*` loggers, LOG_LEVEL).
    - Route failures are logged with tracebacks before answering 500.
    """,
)


KNOWN_LIMITATIONS = section(
    "12. Known Limitations",
    """
    - Order ids come from a row count; concurrent checkouts can collide and the
      loser gets a 500 from the unique index.
    - Redelivered approved payments send the emails again.
    - Checkout replaces a lead's tags with ["buyer"] instead of merging them.
    - Two simultaneous WhatsApp messages from one phone: last save wins.
    - A failed campaign send aborts the rest and the partial count is lost.
    """,
)


def as_text() -> str:
    return "\n".join(
        [
            SYSTEM_OVERVIEW,
            ARCHITECTURE,
            BACKEND_COMPONENTS,
            DATA_AND_PERSISTENCE,
            CHECKOUT_AND_PAYMENTS,
            WHATSAPP_ASSISTANT,
            EMAIL,
            CONFIG_ENV,
            TESTING,
            SECURITY,
            OBSERVABILITY,
            KNOWN_LIMITATIONS,
        ]
    )


def main() -> None:
    print(textwrap.dedent(as_text()))


if __name__ == "__main__":
    main()

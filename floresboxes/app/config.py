#!/usr/bin/env python3
"""
Configuration management for the Flores&Boxes backend.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    """Configuration class for the application."""

    # Storage
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///floresboxes.db")

    # MercadoPago (Uruguay)
    MP_ACCESS_TOKEN = os.getenv("MP_ACCESS_TOKEN")
    MP_API_BASE_URL = os.getenv("MP_API_BASE_URL", "https://api.mercadopago.com")
    MP_CURRENCY = os.getenv("MP_CURRENCY", "UYU")

    # OpenAI-compatible chat completions
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    CHAT_MAX_TOKENS = 500
    CHAT_TEMPERATURE = 0.7
    CHAT_CONTEXT_TURNS = int(os.getenv("CHAT_CONTEXT_TURNS", 20))

    # Twilio WhatsApp
    TWILIO_SID = os.getenv("TWILIO_SID")
    TWILIO_AUTH = os.getenv("TWILIO_AUTH")
    TWILIO_WHATSAPP_FROM = os.getenv("TWILIO_WHATSAPP_FROM")  # whatsapp:+14155238886

    # Outbound mail (Brevo or Gmail)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASS = os.getenv("SMTP_PASS")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")

    # Public URLs
    FRONTEND_URL = os.getenv("FRONTEND_URL", "")
    BACKEND_URL = os.getenv("BACKEND_URL", "")

    # Application Configuration
    PORT = int(os.getenv("PORT", 3000))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", 30))
    FREE_SHIPPING_THRESHOLD = float(os.getenv("FREE_SHIPPING_THRESHOLD", 2000))
    SHIPPING_FEE = float(os.getenv("SHIPPING_FEE", 150))
    CHATS_PAGE_SIZE = 50
    ANALYTICS_WEEKS = 8

    @classmethod
    def validate(cls):
        """Validate that all required configuration is present.

        Only storage is required up front; every other integration checks its
        own credentials when it is first called.
        """
        missing = []

        if not cls.DATABASE_URL:
            missing.append("DATABASE_URL")

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

# Validate configuration on import
Config.validate()

"""Pydantic models for the non-order API bodies."""
from typing import Literal, Optional

from pydantic import BaseModel


class LeadCreate(BaseModel):
    name: Optional[str] = None
    email: str


class CampaignRequest(BaseModel):
    subject: str
    html: str
    segment: Optional[str] = "all"


class InboundMessage(BaseModel):
    """Twilio WhatsApp webhook fields we use."""

    Body: Optional[str] = None
    From: Optional[str] = None
    ProfileName: Optional[str] = None


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: str

#!/usr/bin/env python3
"""
Session management module for the WhatsApp assistant.

Conversation history is stored per phone number in the ``chats`` table. The
stored log is never trimmed; only the slice handed to the model is bounded.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select

from ..data.database import Database
from ..data.models import Chat, utcnow
from ..schemas.io_models import ChatTurn

class ChatSessionManager:
    """Loads, appends to and saves per-contact conversation history."""

    def __init__(self, db: Database, max_context_turns: int = 20):
        """Initialize the session manager."""
        self.db = db
        self.max_context_turns = max_context_turns

    def get_history(self, phone: str) -> List[Dict[str, Any]]:
        """
        Retrieve the stored turns for a contact.

        Args:
            phone: Messaging channel contact identifier

        Returns:
            List of stored turns, empty for a new contact
        """
        with self.db.session() as s:
            chat = s.scalar(select(Chat).where(Chat.phone == phone))
            return list(chat.messages) if chat else []

    @staticmethod
    def make_turn(role: str, content: str) -> Dict[str, Any]:
        return ChatTurn(role=role, content=content, timestamp=utcnow().isoformat()).model_dump()

    def context_window(self, messages: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """
        Get the conversation context sent to the model.

        Args:
            messages: Full stored history

        Returns:
            The last ``max_context_turns`` turns with only 'role' and 'content'
        """
        recent = messages[-self.max_context_turns:] if self.max_context_turns > 0 else []
        return [{"role": m["role"], "content": m["content"]} for m in recent]

    def save_history(self, phone: str, messages: List[Dict[str, Any]]) -> Chat:
        """
        Persist the full history for a contact, creating the chat if needed.

        This is a plain read-modify-write: two overlapping requests for the
        same phone overwrite each other and the last save wins.
        """
        with self.db.session() as s:
            chat = s.scalar(select(Chat).where(Chat.phone == phone))
            if chat is None:
                chat = Chat(phone=phone)
                s.add(chat)
            chat.messages = list(messages)
            chat.updated_at = utcnow()
            return chat

    def latest_chats(self, limit: int = 50) -> List[Chat]:
        with self.db.session() as s:
            query = select(Chat).order_by(Chat.updated_at.desc(), Chat.id.desc()).limit(limit)
            return list(s.scalars(query))

    def get_chat(self, phone: str) -> Optional[Chat]:
        with self.db.session() as s:
            return s.scalar(select(Chat).where(Chat.phone == phone))

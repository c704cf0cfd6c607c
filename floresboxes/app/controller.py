"""Controller for the WhatsApp assistant.

One inbound message produces exactly one user turn and one assistant turn.
"""
from typing import Any, Dict, Optional

from ..integrations.whatsapp import WhatsAppClient
from ..utils.logger import get_logger
from ..utils.security import mask_pii
from .generate import GenerationClient
from .prompt_builder import PromptBuilder
from .session import ChatSessionManager

logger = get_logger("controller")


class AssistantController:
    def __init__(
        self,
        sessions: ChatSessionManager,
        builder: PromptBuilder,
        gen_client: GenerationClient,
        messenger: WhatsAppClient,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ):
        self.sessions = sessions
        self.builder = builder
        self.gen_client = gen_client
        self.messenger = messenger
        self.max_tokens = max_tokens
        self.temperature = temperature

    def handle_inbound(self, phone: str, text: str, profile_name: Optional[str] = None) -> Dict[str, Any]:
        logger.info("Inbound WhatsApp message from %s (%s)", mask_pii(phone), profile_name or "-")

        messages = self.sessions.get_history(phone)
        messages.append(self.sessions.make_turn("user", text))

        context = self.sessions.context_window(messages)
        reply = self.gen_client.generate_reply(
            self.builder.system_prompt,
            context,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        messages.append(self.sessions.make_turn("assistant", reply))
        self.sessions.save_history(phone, messages)

        self.messenger.send_message(phone, reply)
        return {"reply": reply, "turns": len(messages), "context_turns": len(context)}

#!/usr/bin/env python3
"""
Generation module for the WhatsApp assistant.

This module handles reply generation using an OpenAI-compatible chat
completions API.
"""

from typing import Dict, List, Optional

import requests

from ..errors import IntegrationError, IntegrationNotConfiguredError
from ..utils.logger import get_logger

logger = get_logger("generate")


class GenerationClient:
    """Client for generating replies using a hosted chat completions API."""

    name = "OpenAI"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60,
        http: Optional[requests.Session] = None,
    ):
        """Initialize the generation client.

        A missing key is only reported when ``generate_reply`` is called.
        """
        self.api_key = api_key
        self.model = model
        self.api_base_url = f"{base_url.rstrip('/')}/chat/completions"
        self.timeout = timeout
        self.http = http or requests.Session()

    def generate_reply(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        """
        Generate the assistant's next turn.

        Args:
            system_prompt: Instructions prepended as the system message
            messages: Conversation turns as ``{"role", "content"}`` dicts
            max_tokens: Upper bound on the reply length
            temperature: Sampling temperature

        Returns:
            Generated reply text
        """
        if not self.api_key:
            raise IntegrationNotConfiguredError(self.name, "OPENAI_API_KEY")

        payload = {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        logger.debug("Sending %d turns to %s", len(messages), self.model)

        try:
            response = self.http.post(
                self.api_base_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise IntegrationError(self.name, str(e)) from e

        if response.status_code != 200:
            logger.error("Error response body: %s", response.text)
            raise IntegrationError(self.name, response.text, response.status_code)

        data = response.json()
        try:
            answer = data["choices"][0]["message"]["content"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise IntegrationError(self.name, f"unexpected response structure: {data}") from e

        logger.debug("Extracted answer, length: %d", len(answer))
        return answer

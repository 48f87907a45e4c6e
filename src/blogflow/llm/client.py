"""OpenAI-compatible LLM client.

This wraps the `openai` Python SDK and provides a minimal interface for chat completions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Sequence

import openai
from openai import OpenAI

from blogflow.config import Settings
from blogflow.errors import ConfigurationError, GenerationError
from blogflow.logging import get_logger

logger = get_logger(__name__)

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """A chat message."""

    role: Role
    content: str


class LLMClient:
    """LLM client using OpenAI-compatible Chat Completions API."""

    def __init__(self, settings: Settings, client: OpenAI | None = None) -> None:
        self._settings = settings
        if client is None:
            if not settings.openai_api_key:
                raise ConfigurationError(
                    "Missing BLOGFLOW_OPENAI_API_KEY. "
                    "Set it in environment variables or a .env file."
                )
            client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
        self._client = client

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        """Generate a completion.

        Args:
            messages: Chat messages.
            temperature: Sampling temperature.
            json_mode: Ask the API for a single JSON object (`response_format`).

        Returns:
            Assistant message content.

        Raises:
            GenerationError: The API call failed.
        """

        payload: list[dict[str, str]] = [{"role": m.role, "content": m.content} for m in messages]
        extra: dict[str, Any] = {"response_format": {"type": "json_object"}} if json_mode else {}
        try:
            resp = self._client.chat.completions.create(
                model=self._settings.openai_model,
                messages=payload,
                temperature=temperature,
                max_tokens=self._settings.openai_max_tokens,
                timeout=self._settings.openai_timeout_s,
                **extra,
            )
        except openai.OpenAIError as e:
            logger.error("LLM request failed", extra={"error_type": type(e).__name__})
            raise GenerationError(f"LLM request failed: {e}") from e

        choice = resp.choices[0]
        if not choice.message or choice.message.content is None:
            return ""
        return choice.message.content

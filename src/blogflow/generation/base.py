"""Shared plumbing for the LLM-backed generators."""

from __future__ import annotations

from typing import Protocol, Sequence

from blogflow.errors import GenerationError
from blogflow.llm.client import ChatMessage


class ChatModel(Protocol):
    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str: ...


def complete_json(llm: ChatModel, messages: Sequence[ChatMessage], *, temperature: float) -> str:
    """Ask for a JSON reply.

    Raises:
        GenerationError: The LLM failed or answered with nothing.
    """

    reply = llm.complete(messages, temperature=temperature, json_mode=True)
    if not reply.strip():
        raise GenerationError("No content received from the LLM")
    return reply

"""Reasoning-service clients.

The selection and analysis stages send a list of chat messages and read the
free-text reply. The reply may or may not embed JSON; parsing is the
caller's job.

* ``BaseTextGenerator`` defines the async ``generate_text`` method.
* ``MockTextGenerator`` returns a fixed reply (or the next one of several),
  for offline runs.
* ``ChatCompletionsClient`` talks to any OpenAI-compatible
  ``/chat/completions`` endpoint through the ``openai`` SDK.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import openai
from pydantic import BaseModel


class ChatMessage(BaseModel):
    role: str
    content: str


class TextResponse(BaseModel):
    content: str
    model: Optional[str] = None


class BaseTextGenerator:
    """Abstract base class for reasoning-service clients."""

    async def generate_text(self, messages: List[ChatMessage]) -> TextResponse:
        raise NotImplementedError


class MockTextGenerator(BaseTextGenerator):
    """Replies with ``replies`` in order, repeating the last one.

    With no replies configured the mock answers with plain text, which sends
    every stage down its fallback path.
    """

    def __init__(self, replies: Optional[Sequence[str]] = None):
        self.replies = list(replies or ["No structured answer available in offline mode."])
        self.calls: List[List[ChatMessage]] = []

    async def generate_text(self, messages: List[ChatMessage]) -> TextResponse:
        self.calls.append(list(messages))
        index = min(len(self.calls), len(self.replies)) - 1
        return TextResponse(content=self.replies[index], model="mock")


class ChatCompletionsClient(BaseTextGenerator):
    """Client for OpenAI-compatible chat completion APIs.

    Uses the ``openai`` SDK; point ``base_url`` at another vendor's
    compatible endpoint to use it instead of OpenAI.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.3,
        timeout: float = 120,
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        if not api_key:
            raise ValueError("An API key must be provided for the chat completions client")
        self.model = model
        self.temperature = temperature
        self.client = client or openai.AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def generate_text(self, messages: List[ChatMessage]) -> TextResponse:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[m.model_dump() for m in messages],
            temperature=self.temperature,
        )
        if not response.choices:
            raise ValueError("Chat completion response contained no choices")
        content = response.choices[0].message.content or ""
        return TextResponse(content=content.strip(), model=response.model)


def get_text_generator(
    provider: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
) -> BaseTextGenerator:
    """Factory function that returns a reasoning-service client.

    Supported providers are ``"mock"`` and ``"openai"`` (any OpenAI-compatible
    endpoint; set ``base_url`` for other vendors).
    """
    provider = (provider or "mock").lower()
    if provider == "openai":
        return ChatCompletionsClient(
            api_key=api_key or "",
            model=model or "gpt-4o",
            base_url=base_url or "https://api.openai.com/v1",
        )
    if provider == "mock":
        return MockTextGenerator()
    raise ValueError(f"Unsupported reasoning service provider: {provider}")

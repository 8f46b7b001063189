# app/agents/delay_message_agent.py
"""
DelayMessageAgent:
Writes the customer-facing delay notice with an OpenAI chat model.

This agent never fails outward. An empty completion, or a provider that keeps
erroring after every backoff attempt, both produce the fixed fallback notice,
so the notification step always has something to send.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import openai

from app.common.clients import get_openai_client
from app.orchestrator.temporal.common.backoff import BackoffPolicy, retry
from app.orchestrator.temporal.common.errors import (
    TransientRemoteError,
    remote_error_for_status,
)
from app.orchestrator.temporal.common.fallback import fallback_message

logger = logging.getLogger("freight.message")

GENERATED = "generated"
FALLBACK = "fallback"


def build_prompt(delay_minutes: int, customer_name: str, signature: str) -> str:
    return (
        f"Write a short, polite message to tell {customer_name} that their delivery is delayed "
        f"by {delay_minutes} minutes because of traffic. Keep it simple and friendly. "
        f"Sign it from {signature}."
    )


@dataclass(frozen=True)
class DelayMessage:
    """Either model output (`source == "generated"`) or the fallback notice."""
    text: str
    source: str

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK


class DelayMessageAgent:
    def __init__(
        self,
        client: Optional[Any] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        signature: str = "The Dispatch Team",
        policy: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = client
        self.model = model
        self.temperature = temperature
        self.signature = signature
        self._policy = policy or BackoffPolicy()
        self._sleep = sleep

    @property
    def client(self):
        return self._client or get_openai_client()

    async def _complete(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.APIStatusError as e:
            raise remote_error_for_status(e.status_code, str(e)) from e
        except openai.APIConnectionError as e:
            raise TransientRemoteError(f"OpenAI connection error: {e}") from e

        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        message = getattr(choices[0], "message", None)
        return (getattr(message, "content", None) or "").strip()

    async def generate(self, delay_minutes: int, customer_name: str) -> DelayMessage:
        prompt = build_prompt(delay_minutes, customer_name, self.signature)

        async def _attempt(attempt: int) -> DelayMessage:
            logger.info(
                "Generating message delay=%d customer=%s attempt=%d",
                delay_minutes, customer_name, attempt,
            )
            text = await self._complete(prompt)
            if not text:
                logger.warning(
                    "Empty completion; using fallback message (delay=%d customer=%s)",
                    delay_minutes, customer_name,
                )
                return DelayMessage(fallback_message(delay_minutes, customer_name), FALLBACK)
            logger.info("Message generated (length=%d)", len(text))
            return DelayMessage(text, GENERATED)

        try:
            return await retry(_attempt, policy=self._policy, sleep=self._sleep, name="generate_message")
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Message generation failed after retries (%s); using fallback message", e
            )
            return DelayMessage(fallback_message(delay_minutes, customer_name), FALLBACK)

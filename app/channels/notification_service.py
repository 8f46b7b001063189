# app/channels/notification_service.py
"""NotificationService emails the delay notice to the customer via SendGrid."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from app.channels.providers.email import send_email
from app.common.clients import get_http_client
from app.orchestrator.temporal.common.backoff import BackoffPolicy, retry
from app.orchestrator.temporal.common.errors import ConfigurationError

logger = logging.getLogger("freight.notification")

DEFAULT_SUBJECT = "Freight Delivery Delay Notice"


class NotificationService:
    def __init__(
        self,
        api_key: Optional[str],
        sender: str,
        subject: str = DEFAULT_SUBJECT,
        http_client: Optional[httpx.AsyncClient] = None,
        policy: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._api_key = api_key
        self.sender = sender
        self.subject = subject
        self._http = http_client
        self._policy = policy or BackoffPolicy()
        self._sleep = sleep

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http or get_http_client()

    async def send(self, contact: str, message: str) -> None:
        """Deliver `message` to `contact`; raises once the retry budget is spent."""
        if not self._api_key:
            raise ConfigurationError("SendGrid API key is missing")

        async def _attempt(attempt: int) -> None:
            logger.info(
                "Sending email notification to=%s length=%d attempt=%d",
                contact, len(message), attempt,
            )
            message_id = await send_email(
                self.http,
                self._api_key,
                to=contact,
                sender=self.sender,
                subject=self.subject,
                body=message,
            )
            logger.info("Email notification sent to=%s message_id=%s", contact, message_id or "-")

        await retry(_attempt, policy=self._policy, sleep=self._sleep, name="send_notification")

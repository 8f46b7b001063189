# app/channels/providers/email.py
import logging

import httpx

from app.orchestrator.temporal.common.errors import (
    TransientRemoteError,
    remote_error_for_status,
)

logger = logging.getLogger("freight.email")

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


async def send_email(
    client: httpx.AsyncClient,
    api_key: str,
    *,
    to: str,
    sender: str,
    subject: str,
    body: str,
) -> str:
    """Send a plain-text email through SendGrid. Returns the provider message id."""
    try:
        resp = await client.post(
            SENDGRID_SEND_URL,
            headers={"Authorization": f"Bearer {api_key}"},
            json={
                "personalizations": [{"to": [{"email": to}]}],
                "from": {"email": sender},
                "subject": subject,
                "content": [{"type": "text/plain", "value": body}],
            },
        )
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning(f"Email send failed with {e.response.status_code}: {e}")
        raise remote_error_for_status(e.response.status_code, e.response.text[:200]) from e
    except httpx.TransportError as e:
        raise TransientRemoteError(f"SendGrid transport error: {e}") from e

    return resp.headers.get("X-Message-Id", "")

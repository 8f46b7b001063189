# app/common/clients.py
"""
Process-wide provider client handles.

Each handle is built on first use and reused afterwards; adapters receive
them through their constructors, so tests pass fakes instead of patching
these globals.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx
from openai import AsyncOpenAI

from app.config import get_settings

logger = logging.getLogger("freight.clients")

_http: Optional[httpx.AsyncClient] = None
_openai: Optional[AsyncOpenAI] = None


def get_http_client() -> httpx.AsyncClient:
    """Lazily create and cache the shared httpx client."""
    global _http
    if _http is None:
        timeout = get_settings().HTTP_TIMEOUT_SECONDS
        _http = httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        logger.debug("Created shared httpx client (timeout=%ss)", timeout)
    return _http


def get_openai_client() -> AsyncOpenAI:
    """Lazily create and cache the OpenAI client."""
    global _openai
    if _openai is None:
        # Backoff is handled by our own retry loop, not the SDK.
        _openai = AsyncOpenAI(api_key=get_settings().OPENAI_API_KEY, max_retries=0)
        logger.debug("Created shared OpenAI client")
    return _openai


async def close_clients() -> None:
    """Close cached handles (worker shutdown)."""
    global _http, _openai
    if _http is not None:
        await _http.aclose()
        _http = None
    if _openai is not None:
        await _openai.close()
        _openai = None

# tests/conftest.py
import sys
import asyncio

if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from pathlib import Path
from typing import Any, Dict

import pytest

# --- Ensure project root is importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.orchestrator.temporal.common.backoff import BackoffPolicy  # noqa: E402
from tests.fake_providers import SleepRecorder  # noqa: E402


# --- Provider credentials for anything that reads Settings
@pytest.fixture(autouse=True)
def provider_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai-key")
    monkeypatch.setenv("SENDGRID_API_KEY", "test-sendgrid-key")
    monkeypatch.setenv("ORS_API_KEY", "test-ors-key")
    from app.config import get_settings, get_workflow_defaults
    get_settings.cache_clear()
    get_workflow_defaults.cache_clear()
    yield
    get_settings.cache_clear()
    get_workflow_defaults.cache_clear()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def policy() -> BackoffPolicy:
    return BackoffPolicy(max_attempts=3, base_delay=0.5)


@pytest.fixture
def valid_input() -> Dict[str, Any]:
    return {
        "from": "New York, NY",
        "to": "Los Angeles, CA",
        "contact": "customer@example.com",
        "customerName": "Jane Doe",
        "delayThreshold": 30,
        "workflowId": "freight-delay-test",
    }

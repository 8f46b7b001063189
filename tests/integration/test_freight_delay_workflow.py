# tests/integration/test_freight_delay_workflow.py
import asyncio
import uuid
from typing import List

import pytest
import pytest_asyncio
from temporalio import activity
from temporalio.client import WorkflowFailureError
from temporalio.exceptions import ApplicationError, CancelledError
from temporalio.testing import WorkflowEnvironment
from temporalio.worker import Worker

from app.orchestrator.temporal.common.errors import NotFoundError, TransientRemoteError
from app.orchestrator.temporal.common.fallback import fallback_message
from app.orchestrator.temporal.common.outcome import FAILED, NOTIFIED, SKIPPED
from app.orchestrator.temporal.trigger import run_freight_delay
from app.orchestrator.temporal.workflows.freight_delay import FreightDelayWorkflow

pytestmark = pytest.mark.integration

TASK_QUEUE = "test-freight-delay"


class Recorder:
    """Fake activities registered under the production activity names."""

    def __init__(self, delay=45, message="AI notice", traffic_error=None,
                 message_error=None, notify_error=None, block_generation=False):
        self.delay = delay
        self.message = message
        self.traffic_error = traffic_error
        self.message_error = message_error
        self.notify_error = notify_error
        self.block_generation = block_generation
        self.generation_started = asyncio.Event()
        self.generated: List[tuple] = []
        self.sent: List[tuple] = []
        self.notify_attempts = 0

    def activities(self):
        @activity.defn(name="check_traffic")
        async def check_traffic(origin: str, destination: str) -> int:
            if self.traffic_error:
                raise self.traffic_error
            return self.delay

        @activity.defn(name="generate_message")
        async def generate_message(delay_minutes: int, customer_name: str) -> str:
            self.generated.append((delay_minutes, customer_name))
            self.generation_started.set()
            while self.block_generation:
                activity.heartbeat()
                await asyncio.sleep(0.1)
            if self.message_error:
                raise self.message_error
            return self.message

        @activity.defn(name="send_notification")
        async def send_notification(contact: str, message: str) -> None:
            self.notify_attempts += 1
            if self.notify_error:
                raise self.notify_error
            self.sent.append((contact, message))

        return [check_traffic, generate_message, send_notification]


@pytest_asyncio.fixture
async def env():
    try:
        environment = await WorkflowEnvironment.start_time_skipping()
    except Exception as e:  # noqa: BLE001
        pytest.skip(f"Temporal test server unavailable: {e}")
    try:
        yield environment
    finally:
        await environment.shutdown()


def _payload(**overrides):
    payload = {
        "from": "New York, NY",
        "to": "Los Angeles, CA",
        "contact": "jane@example.com",
        "customerName": "Jane Doe",
        "delayThreshold": 30,
    }
    payload.update(overrides)
    return payload


async def _run(env, recorder, payload):
    async with Worker(
        env.client,
        task_queue=TASK_QUEUE,
        workflows=[FreightDelayWorkflow],
        activities=recorder.activities(),
    ):
        return await run_freight_delay(
            env.client, payload, workflow_id=f"wf-{uuid.uuid4()}", task_queue=TASK_QUEUE
        )


@pytest.mark.asyncio
async def test_significant_delay_sends_one_notification(env):
    rec = Recorder(delay=45)
    outcome = await _run(env, rec, _payload())
    assert outcome.status == NOTIFIED
    assert outcome.message == "AI notice"
    assert rec.sent == [("jane@example.com", "AI notice")]


@pytest.mark.asyncio
async def test_small_delay_is_skipped(env):
    rec = Recorder(delay=10)
    outcome = await _run(env, rec, _payload())
    assert outcome.status == SKIPPED
    assert outcome.reason == "below threshold"
    assert rec.generated == []
    assert rec.sent == []


@pytest.mark.asyncio
async def test_generation_failure_still_notifies_with_fallback(env):
    rec = Recorder(delay=45, message_error=RuntimeError("model unavailable"))
    outcome = await _run(env, rec, _payload())
    expected = fallback_message(45, "Jane Doe")
    assert outcome.status == NOTIFIED
    assert outcome.message == expected
    assert rec.sent == [("jane@example.com", expected)]


@pytest.mark.asyncio
async def test_invalid_input_fails_with_validation_error(env):
    rec = Recorder()
    outcome = await _run(env, rec, _payload(contact="", customerName=""))
    assert outcome.status == FAILED
    assert outcome.error_type == "ValidationError"
    assert "contact" in outcome.error_message
    assert "customerName" in outcome.error_message
    assert rec.generated == [] and rec.sent == []


@pytest.mark.asyncio
async def test_unknown_place_fails_run_without_outer_retries(env):
    rec = Recorder(traffic_error=NotFoundError("no coordinates for 'Atlantis'", stage="geocoding"))
    outcome = await _run(env, rec, _payload(to="Atlantis"))
    assert outcome.status == FAILED
    assert outcome.error_type == "NotFoundError"
    assert "no coordinates" in outcome.error_message
    assert rec.sent == []


@pytest.mark.asyncio
async def test_notification_failure_fails_run_after_outer_retries(env):
    rec = Recorder(delay=60, notify_error=TransientRemoteError("HTTP 503: unavailable"))
    outcome = await _run(env, rec, _payload())
    assert outcome.status == FAILED
    assert outcome.error_type == "TransientRemoteError"
    assert outcome.error_message == "HTTP 503: unavailable"
    assert rec.notify_attempts == 3


@pytest.mark.asyncio
async def test_state_query_reports_terminal_state(env):
    rec = Recorder(delay=5)
    async with Worker(
        env.client,
        task_queue=TASK_QUEUE,
        workflows=[FreightDelayWorkflow],
        activities=rec.activities(),
    ):
        handle = await env.client.start_workflow(
            FreightDelayWorkflow.run,
            _payload(),
            id=f"wf-{uuid.uuid4()}",
            task_queue=TASK_QUEUE,
        )
        await handle.result()
        assert await handle.query(FreightDelayWorkflow.get_state) == "SKIPPED"


@pytest.mark.asyncio
async def test_failure_error_surfaces_on_the_handle(env):
    rec = Recorder(traffic_error=NotFoundError("no route", stage="routing"))
    async with Worker(
        env.client,
        task_queue=TASK_QUEUE,
        workflows=[FreightDelayWorkflow],
        activities=rec.activities(),
    ):
        handle = await env.client.start_workflow(
            FreightDelayWorkflow.run,
            _payload(),
            id=f"wf-{uuid.uuid4()}",
            task_queue=TASK_QUEUE,
        )
        with pytest.raises(WorkflowFailureError) as exc:
            await handle.result()
    assert isinstance(exc.value.cause, ApplicationError)
    assert exc.value.cause.type == "NotFoundError"


@pytest.mark.asyncio
async def test_cancel_during_generation_sends_nothing(env):
    rec = Recorder(delay=45, block_generation=True)
    async with Worker(
        env.client,
        task_queue=TASK_QUEUE,
        workflows=[FreightDelayWorkflow],
        activities=rec.activities(),
    ):
        handle = await env.client.start_workflow(
            FreightDelayWorkflow.run,
            _payload(),
            id=f"wf-{uuid.uuid4()}",
            task_queue=TASK_QUEUE,
        )
        await asyncio.wait_for(rec.generation_started.wait(), timeout=10)
        await handle.cancel()
        with pytest.raises(WorkflowFailureError) as exc:
            await handle.result()
    assert isinstance(exc.value.cause, CancelledError)
    assert rec.notify_attempts == 0
    assert rec.sent == []

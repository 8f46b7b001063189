# app/orchestrator/freight_delay.py
"""
FreightDelayOrchestrator
------------------------
Validating -> CheckingTraffic -> (Skipped | GeneratingMessage) -> Notifying
-> (Completed | Failed)

The state machine knows nothing about Temporal. It drives whatever `steps`
object it is given (activities in production, fakes in tests) and makes the
same decision for the same inputs and step results, so a replayed run
reaches the same outcome.

Failure policy:
- invalid input, traffic lookup errors and notification errors end the run
  and are re-raised unchanged;
- message generation never blocks notification: any error there is
  replaced by the fallback notice;
- cancellation (asyncio.CancelledError) is never an error here: it passes
  through every step and nothing after it runs.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Protocol

from app.orchestrator.temporal.common.errors import ValidationError
from app.orchestrator.temporal.common.fallback import fallback_message
from app.orchestrator.temporal.common.outcome import RunOutcome, RunState
from app.orchestrator.temporal.common.workflow_input import (
    WorkflowInput,
    validate_workflow_input,
)


class FreightDelaySteps(Protocol):
    async def check_traffic(self, origin: str, destination: str) -> int: ...

    async def generate_message(self, delay_minutes: int, customer_name: str) -> str: ...

    async def send_notification(self, contact: str, message: str) -> None: ...


class FreightDelayOrchestrator:
    def __init__(
        self,
        steps: FreightDelaySteps,
        *,
        logger: Optional[Any] = None,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._steps = steps
        self._log = logger or logging.getLogger("freight.orchestrator")
        self._id_factory = id_factory
        self._clock = clock
        self.state: RunState = RunState.VALIDATING
        self.input: Optional[WorkflowInput] = None
        self.delay_minutes: Optional[int] = None

    def _elapsed_ms(self, since: float) -> int:
        return int((self._clock() - since) * 1000)

    async def run(self, raw_input: Any) -> RunOutcome:
        started = self._clock()

        # 1. Validating
        self.state = RunState.VALIDATING
        try:
            data = validate_workflow_input(raw_input, self._id_factory)
        except ValidationError as e:
            self.state = RunState.FAILED
            self._log.error("Workflow input rejected: %s", "; ".join(e.violations))
            raise
        self.input = data

        self._log.info(
            "Workflow started | id=%s from=%s to=%s contact=%s threshold=%s",
            data.workflow_id, data.origin, data.destination, data.contact, data.threshold,
        )

        # 2. CheckingTraffic
        self.state = RunState.CHECKING_TRAFFIC
        step_started = self._clock()
        try:
            delay = await self._steps.check_traffic(data.origin, data.destination)
        except Exception as e:
            self.state = RunState.FAILED
            self._log.error(
                "Workflow failed at traffic check after %dms: %s", self._elapsed_ms(started), e
            )
            raise
        self.delay_minutes = delay
        self._log.info(
            "Checked traffic | delay=%d threshold=%s duration_ms=%d",
            delay, data.threshold, self._elapsed_ms(step_started),
        )

        # 3. Branch
        if delay < data.threshold:
            self.state = RunState.SKIPPED
            self._log.info(
                "Delay below threshold, no notification sent | delay=%d threshold=%s "
                "decision=skip_notification total_ms=%d",
                delay, data.threshold, self._elapsed_ms(started),
            )
            return RunOutcome.skipped(delay)

        # 4. GeneratingMessage
        self.state = RunState.GENERATING_MESSAGE
        step_started = self._clock()
        try:
            message = await self._steps.generate_message(delay, data.customer_name)
        except Exception as e:
            message = ""
            self._log.warning("Message generation failed, using fallback message: %s", e)
        if not message:
            message = fallback_message(delay, data.customer_name)
        self._log.info(
            "Message created | length=%d duration_ms=%d", len(message), self._elapsed_ms(step_started)
        )

        # 5. Notifying
        self.state = RunState.NOTIFYING
        step_started = self._clock()
        try:
            await self._steps.send_notification(data.contact, message)
        except Exception as e:
            self.state = RunState.FAILED
            self._log.error(
                "Workflow failed at notification after %dms: %s", self._elapsed_ms(started), e
            )
            raise

        # 6. Completed
        self.state = RunState.COMPLETED
        self._log.info(
            "Workflow finished and notification sent | contact=%s delay=%d "
            "notification_ms=%d total_ms=%d decision=notification_sent",
            data.contact, delay, self._elapsed_ms(step_started), self._elapsed_ms(started),
        )
        return RunOutcome.notified(delay, message)

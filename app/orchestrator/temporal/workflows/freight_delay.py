# app/orchestrator/temporal/workflows/freight_delay.py
"""
FreightDelayWorkflow
--------------------
Checks a freight route for traffic delay and emails the customer when the
delay reaches the threshold.

- check_traffic      -> delay in minutes (fatal on failure)
- generate_message   -> AI notice, fallback text on failure
- send_notification  -> email (fatal on failure)

The decisions live in FreightDelayOrchestrator; this class only turns its
steps into activity calls and its errors into workflow failures that keep the
original error type.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from temporalio import workflow
from temporalio.exceptions import ActivityError, ApplicationError, CancelledError

with workflow.unsafe.imports_passed_through():
    from app.orchestrator.freight_delay import FreightDelayOrchestrator
    from app.orchestrator.temporal.common.errors import ValidationError
    from app.orchestrator.temporal.common.outcome import RunOutcome, RunState
    from app.orchestrator.temporal.common.retry_policies import activity_options_for


async def _execute(name: str, args: List[Any], result_type: Any = None) -> Any:
    opts, rp = activity_options_for(name)
    try:
        return await workflow.execute_activity(
            name,
            args=args,
            retry_policy=rp,
            result_type=result_type,
            **opts,
        )
    except ActivityError as e:
        if isinstance(e.cause, CancelledError):
            # The run is being cancelled; no later step may run, fallback included.
            raise asyncio.CancelledError() from e
        # Surface the activity's own error type/message, not the wrapper.
        cause = e.cause
        if isinstance(cause, ApplicationError):
            raise ApplicationError(
                cause.message, *cause.details, type=cause.type, non_retryable=True
            ) from e
        raise


class _ActivitySteps:
    async def check_traffic(self, origin: str, destination: str) -> int:
        return await _execute("check_traffic", [origin, destination], int)

    async def generate_message(self, delay_minutes: int, customer_name: str) -> str:
        return await _execute("generate_message", [delay_minutes, customer_name], str)

    async def send_notification(self, contact: str, message: str) -> None:
        await _execute("send_notification", [contact, message])


@workflow.defn
class FreightDelayWorkflow:
    def __init__(self) -> None:
        self._state: RunState = RunState.VALIDATING
        self._orchestrator: FreightDelayOrchestrator | None = None

    @workflow.query
    def get_state(self) -> str:
        if self._orchestrator is not None:
            return self._orchestrator.state.value
        return self._state.value

    @workflow.run
    async def run(self, raw_input: Dict[str, Any]) -> RunOutcome:
        self._orchestrator = FreightDelayOrchestrator(
            _ActivitySteps(),
            logger=workflow.logger,
            id_factory=lambda: workflow.info().workflow_id,
            clock=workflow.time,
        )
        try:
            return await self._orchestrator.run(raw_input)
        except ValidationError as e:
            raise ApplicationError(
                str(e), e.violations, type=type(e).__name__, non_retryable=True
            ) from e

# app/orchestrator/temporal/trigger.py
"""Start a FreightDelayWorkflow run and report its outcome."""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import asdict
from typing import Any, Dict, Optional

import typer
from temporalio.client import Client, WorkflowFailureError, WorkflowHandle
from temporalio.exceptions import ApplicationError

from app.common.bootstrap_env import load_env
from app.common.tracing import set_workflow_id, setup_logging
from app.config import get_workflow_defaults
from app.orchestrator.temporal.common.outcome import RunOutcome
from app.orchestrator.temporal.config import TASK_QUEUE, TEMPORAL_NAMESPACE, TEMPORAL_TARGET
from app.orchestrator.temporal.workflows.freight_delay import FreightDelayWorkflow

log = logging.getLogger("freight.trigger")

cli = typer.Typer(
    name="freight-delay-trigger",
    help="Start a freight delay check and wait for its outcome.",
    add_completion=False,
)


def default_workflow_id() -> str:
    return f"freight-delay-{int(time.time() * 1000)}"


def outcome_from_failure(err: WorkflowFailureError) -> RunOutcome:
    """Keep the category and message of whatever actually failed the run."""
    cause = err.cause
    while cause is not None and not isinstance(cause, ApplicationError) and cause.cause is not None:
        cause = cause.cause
    if isinstance(cause, ApplicationError):
        return RunOutcome.failed(cause.type or type(cause).__name__, cause.message)
    if cause is not None:
        return RunOutcome.failed(type(cause).__name__, str(cause))
    return RunOutcome.failed(type(err).__name__, str(err))


async def start_freight_delay(
    client: Client,
    payload: Dict[str, Any],
    *,
    workflow_id: Optional[str] = None,
    task_queue: str = TASK_QUEUE,
) -> WorkflowHandle:
    workflow_id = workflow_id or payload.get("workflowId") or default_workflow_id()
    payload = {**payload, "workflowId": workflow_id}
    handle = await client.start_workflow(
        FreightDelayWorkflow.run,
        payload,
        id=workflow_id,
        task_queue=task_queue,
    )
    log.info("Freight delay workflow started | workflow_id=%s", handle.id)
    return handle


async def run_freight_delay(
    client: Client,
    payload: Dict[str, Any],
    *,
    workflow_id: Optional[str] = None,
    task_queue: str = TASK_QUEUE,
) -> RunOutcome:
    """Start a run and wait for it; failures come back as a failed RunOutcome."""
    started = time.monotonic()
    handle = await start_freight_delay(
        client, payload, workflow_id=workflow_id, task_queue=task_queue
    )
    set_workflow_id(handle.id)
    try:
        outcome = await handle.result()
    except WorkflowFailureError as e:
        outcome = outcome_from_failure(e)
        log.error("Freight delay workflow failed: %s: %s", outcome.error_type, outcome.error_message)
    log.info(
        "Freight delay workflow finished | status=%s total_ms=%d",
        outcome.status, (time.monotonic() - started) * 1000,
    )
    return outcome


async def _trigger(payload: Dict[str, Any]) -> RunOutcome:
    client = await Client.connect(TEMPORAL_TARGET, namespace=TEMPORAL_NAMESPACE)
    return await run_freight_delay(client, payload)


@cli.command()
def main(
    origin: str = typer.Option(..., "--from", help="Pickup location"),
    destination: str = typer.Option(..., "--to", help="Delivery location"),
    contact: str = typer.Option(..., "--contact", help="Customer email address"),
    customer_name: str = typer.Option(..., "--customer-name", help="Customer name"),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", help="Delay threshold in minutes (default: DELAY_THRESHOLD_MINUTES)"
    ),
    workflow_id: Optional[str] = typer.Option(None, "--workflow-id", help="Explicit workflow id"),
) -> None:
    """Start a run, wait for the outcome, print it as JSON."""
    load_env()
    defaults = get_workflow_defaults()
    setup_logging(defaults.LOG_LEVEL)

    if threshold is None:
        threshold = defaults.DELAY_THRESHOLD_MINUTES

    payload: Dict[str, Any] = {
        "from": origin,
        "to": destination,
        "contact": contact,
        "customerName": customer_name,
        "delayThreshold": threshold,
    }
    if workflow_id:
        payload["workflowId"] = workflow_id

    outcome = asyncio.run(_trigger(payload))
    typer.echo(json.dumps(asdict(outcome)))
    if outcome.is_failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    cli()

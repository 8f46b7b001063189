# app/orchestrator/temporal/worker.py
from __future__ import annotations
import asyncio
import logging
import signal
import sys

from temporalio.client import Client
from temporalio.worker import Worker

from app.common.bootstrap_env import load_env
from app.common.clients import close_clients
from app.common.tracing import setup_logging
from app.config import get_settings
from app.orchestrator.temporal.activities.freight_delay import FreightDelayActivities
from app.orchestrator.temporal.config import TASK_QUEUE, TEMPORAL_NAMESPACE, TEMPORAL_TARGET
from app.orchestrator.temporal.workflows.freight_delay import FreightDelayWorkflow

log = logging.getLogger("freight.worker")


# --------------------------------------------------------------------------
# Helper Functions
# --------------------------------------------------------------------------
async def _connect_temporal(
    target: str, namespace: str, retries: int = 3, delay: int = 3
) -> Client:
    """Connect to Temporal with retry logic."""
    for attempt in range(1, retries + 1):
        try:
            log.info(
                "Connecting to Temporal server (%s@%s), attempt %d/%d",
                namespace, target, attempt, retries,
            )
            client = await Client.connect(target, namespace=namespace)
            log.info("Connected to Temporal server: %s", target)
            return client
        except Exception as e:
            log.warning("Connection attempt %d failed: %s", attempt, e)
            if attempt < retries:
                await asyncio.sleep(delay)
    raise RuntimeError(f"Failed to connect to Temporal server after {retries} attempts")


def build_worker(client: Client, activities: FreightDelayActivities, task_queue: str = TASK_QUEUE) -> Worker:
    return Worker(
        client=client,
        task_queue=task_queue,
        workflows=[FreightDelayWorkflow],
        activities=activities.all(),
    )


# --------------------------------------------------------------------------
# Main Runner
# --------------------------------------------------------------------------
async def run() -> None:
    """Entrypoint for the freight delay worker."""
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    env_path = load_env()
    # Missing provider credentials stop the worker here, before any run.
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    log.info(
        "Freight delay worker starting | target=%s namespace=%s queue=%s env=%s",
        TEMPORAL_TARGET, TEMPORAL_NAMESPACE, TASK_QUEUE, env_path or "-",
    )

    client = await _connect_temporal(TEMPORAL_TARGET, TEMPORAL_NAMESPACE)
    activities = FreightDelayActivities.from_settings(settings)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass

    worker = build_worker(client, activities)
    log.info(
        "Worker ready | queue=%s workflows=%s activities=%s",
        TASK_QUEUE,
        [FreightDelayWorkflow.__name__],
        ["check_traffic", "generate_message", "send_notification"],
    )
    try:
        async with worker:
            await stop_event.wait()
            log.info("Stop signal received, shutting down worker...")
    finally:
        await close_clients()
        log.info("Worker stopped cleanly.")


# --------------------------------------------------------------------------
# CLI Entrypoint
# --------------------------------------------------------------------------
def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        log.info("KeyboardInterrupt, exiting.")


if __name__ == "__main__":
    main()

# app/orchestrator/temporal/common/retry_policies.py
from __future__ import annotations

from datetime import timedelta
from typing import Dict, Tuple

from temporalio.common import RetryPolicy

from app.orchestrator.temporal.common.errors import NON_RETRYABLE_ERROR_TYPES

# -----------------------------------------------------------------------------
# Per-step defaults (central source of truth)
# -----------------------------------------------------------------------------
# stc = start_to_close timeout (seconds). The in-activity backoff loop has no
# timeout of its own; stc is what cuts off a runaway step.
_DEFAULTS = {
    "check_traffic":     dict(stc=60, initial=1.0, backoff=2.0, max_interval=30.0, max_attempts=3),
    "generate_message":  dict(stc=60, initial=1.0, backoff=2.0, max_interval=30.0, max_attempts=3),
    "send_notification": dict(stc=60, initial=1.0, backoff=2.0, max_interval=30.0, max_attempts=3),
}


def activity_options_for(step: str) -> Tuple[Dict, RetryPolicy]:
    """
    Returns (**kwargs for workflow.execute_activity**, RetryPolicy) for a step.

    Example:
        opts, rp = activity_options_for("check_traffic")
        await workflow.execute_activity(..., retry_policy=rp, **opts)
    """
    cfg = _DEFAULTS.get(step)
    if cfg is None:
        raise KeyError(f"no activity options for step {step!r}")

    rp = RetryPolicy(
        initial_interval=timedelta(seconds=cfg["initial"]),
        backoff_coefficient=cfg["backoff"],
        maximum_interval=timedelta(seconds=cfg["max_interval"]),
        maximum_attempts=cfg["max_attempts"],
        non_retryable_error_types=NON_RETRYABLE_ERROR_TYPES,
    )
    opts: Dict = {"start_to_close_timeout": timedelta(seconds=cfg["stc"])}
    return opts, rp

# app/orchestrator/temporal/common/workflow_input.py
from __future__ import annotations

import uuid
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from app.orchestrator.temporal.common.errors import ValidationError

DEFAULT_DELAY_THRESHOLD = 30  # minutes


def new_workflow_id() -> str:
    return f"freight-delay-{uuid.uuid4().hex}"


class WorkflowInput(BaseModel):
    """
    One shipment to check. Field names on the wire follow the trigger's
    camelCase payload (`from`, `to`, `customerName`, ...).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    origin: str = Field(..., alias="from", min_length=1)
    destination: str = Field(..., alias="to", min_length=1)
    contact: str = Field(..., min_length=1)
    customer_name: str = Field(..., alias="customerName", min_length=1)
    delay_threshold: Optional[float] = Field(None, alias="delayThreshold")
    workflow_id: Optional[str] = Field(None, alias="workflowId")

    @property
    def threshold(self) -> float:
        if self.delay_threshold is None:
            return DEFAULT_DELAY_THRESHOLD
        return self.delay_threshold


def _violations(err: PydanticValidationError) -> list[str]:
    out = []
    for e in err.errors():
        field = ".".join(str(p) for p in e.get("loc", ())) or "input"
        out.append(f"{field}: {e.get('msg', 'invalid')}")
    return out


def validate_workflow_input(
    raw: Any,
    id_factory: Optional[Callable[[], str]] = None,
) -> WorkflowInput:
    """
    Parse `raw` into a WorkflowInput with defaults filled in.
    Raises ValidationError listing every violated field.
    """
    if isinstance(raw, WorkflowInput):
        parsed = raw
    elif isinstance(raw, Mapping):
        try:
            parsed = WorkflowInput.model_validate(dict(raw))
        except PydanticValidationError as e:
            raise ValidationError(_violations(e)) from e
    else:
        raise ValidationError([f"input: expected an object, got {type(raw).__name__}"])

    updates = {}
    if parsed.delay_threshold is None:
        updates["delay_threshold"] = DEFAULT_DELAY_THRESHOLD
    if not parsed.workflow_id:
        updates["workflow_id"] = (id_factory or new_workflow_id)()
    return parsed.model_copy(update=updates) if updates else parsed

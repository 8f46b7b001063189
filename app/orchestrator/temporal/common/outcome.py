# app/orchestrator/temporal/common/outcome.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RunState(str, Enum):
    VALIDATING = "VALIDATING"
    CHECKING_TRAFFIC = "CHECKING_TRAFFIC"
    SKIPPED = "SKIPPED"
    GENERATING_MESSAGE = "GENERATING_MESSAGE"
    NOTIFYING = "NOTIFYING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


SKIPPED = "skipped"
NOTIFIED = "notified"
FAILED = "failed"

BELOW_THRESHOLD = "below threshold"


@dataclass
class RunOutcome:
    """Terminal result of one run: skipped, notified, or failed."""
    status: str
    delay_minutes: Optional[int] = None
    reason: Optional[str] = None
    message: Optional[str] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def skipped(cls, delay_minutes: int, reason: str = BELOW_THRESHOLD) -> "RunOutcome":
        return cls(status=SKIPPED, delay_minutes=delay_minutes, reason=reason)

    @classmethod
    def notified(cls, delay_minutes: int, message: str) -> "RunOutcome":
        return cls(status=NOTIFIED, delay_minutes=delay_minutes, message=message)

    @classmethod
    def failed(cls, error_type: str, error_message: str) -> "RunOutcome":
        return cls(status=FAILED, error_type=error_type, error_message=error_message)

    @property
    def is_failed(self) -> bool:
        return self.status == FAILED

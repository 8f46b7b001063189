# app/orchestrator/temporal/common/errors.py
from __future__ import annotations
from typing import Iterable, List, Optional, Tuple

# ---- Canonical error classes ------------------------------------------------

class FreightDelayError(Exception):
    code: str = "unknown"
    retryable: bool = False

    def __init__(self, message: str = ""):
        super().__init__(message)


class ValidationError(FreightDelayError):
    """Malformed workflow input; carries every violated field."""
    code, retryable = "validation", False

    def __init__(self, violations: Iterable[str]):
        self.violations: List[str] = list(violations)
        super().__init__("Invalid workflow input: " + ", ".join(self.violations))


class NotFoundError(FreightDelayError):
    """Geocoding or routing produced nothing. `stage` says which."""
    code, retryable = "not_found", False

    def __init__(self, message: str = "", stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class ConfigurationError(FreightDelayError):
    code, retryable = "configuration", False


class TransientRemoteError(FreightDelayError):
    code, retryable = "transient_remote", True


class TerminalRemoteError(FreightDelayError):
    code, retryable = "terminal_remote", False


# Class names Temporal must never retry (matched against ApplicationError.type)
NON_RETRYABLE_ERROR_TYPES = [
    ValidationError.__name__,
    NotFoundError.__name__,
    ConfigurationError.__name__,
    TerminalRemoteError.__name__,
]


# ---- Helpers ----------------------------------------------------------------

def classify_exception(exc: BaseException) -> Tuple[str, bool]:
    """
    Return (code, retryable) for any exception.
    Taxonomy members carry their own metadata; anything else is treated as a
    remote failure that is worth another attempt.
    """
    if isinstance(exc, FreightDelayError):
        return exc.code, exc.retryable
    if not isinstance(exc, Exception):
        # cancellation, interpreter exit
        return "aborted", False
    return TransientRemoteError.code, True


def is_retryable(exc: BaseException) -> bool:
    _, retry = classify_exception(exc)
    return retry


def remote_error_for_status(status: int, detail: str) -> FreightDelayError:
    """Map an HTTP status from a provider onto the taxonomy."""
    if status == 429 or status >= 500:
        return TransientRemoteError(f"HTTP {status}: {detail}")
    return TerminalRemoteError(f"HTTP {status}: {detail}")

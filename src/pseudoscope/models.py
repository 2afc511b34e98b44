from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Optional

from .constants import Limits
from .errors import (
    ConfigError,
    RetriesExhausted,
    TransportError,
    UnexpectedResponseFormat,
)

SeverityLevel = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class Transaction:
    """Intercepted request/response pair. Only ever re-sliced, never mutated."""

    raw_request: str
    raw_response: str
    reference: Any = None


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = Limits.MAX_RETRIES
    retry_delay_seconds: float = Limits.RETRY_DELAY_SECONDS
    initial_budget: int = Limits.MAX_TOTAL_LENGTH


@dataclass(frozen=True)
class TruncationResult:
    request: str
    response: str


class AttemptKind(str, Enum):
    SUCCESS = "success"
    SIZE_LIMIT = "size_limit"
    TRANSIENT = "transient"
    APPLICATION_ERROR = "application_error"
    EMPTY = "empty"
    MALFORMED = "malformed"
    FATAL = "fatal"


@dataclass
class ApiAttempt:
    attempt_number: int
    kind: AttemptKind
    body: Optional[dict] = None
    error: Optional[str] = None


class FailureKind(str, Enum):
    CONFIGURATION = "configuration"
    FORMAT = "format"
    EXHAUSTED = "exhausted"
    FATAL = "fatal"
    UNEXPECTED = "unexpected"


def failure_kind_for(exc: BaseException) -> FailureKind:
    if isinstance(exc, ConfigError):
        return FailureKind.CONFIGURATION
    if isinstance(exc, UnexpectedResponseFormat):
        return FailureKind.FORMAT
    if isinstance(exc, RetriesExhausted):
        return FailureKind.EXHAUSTED
    if isinstance(exc, TransportError):
        return FailureKind.FATAL
    return FailureKind.UNEXPECTED


@dataclass
class AnalysisOutcome:
    """Result of one pipeline run: either a success body or a failure."""

    success: bool
    body: Optional[dict] = None
    error: Optional[str] = None
    failure_kind: Optional[FailureKind] = None
    attempts: int = 0
    budget: Optional[int] = None

    @classmethod
    def succeeded(cls, body: dict, *, attempts: int, budget: int) -> "AnalysisOutcome":
        return cls(success=True, body=body, attempts=attempts, budget=budget)

    @classmethod
    def failed(
        cls,
        exc: BaseException,
        *,
        attempts: int = 0,
        budget: Optional[int] = None,
    ) -> "AnalysisOutcome":
        return cls(
            success=False,
            error=str(exc) or exc.__class__.__name__,
            failure_kind=failure_kind_for(exc),
            attempts=attempts,
            budget=budget,
        )


@dataclass
class Finding:
    title: str
    description: Optional[str]
    severity: SeverityLevel
    reporter: str
    request: Any = None

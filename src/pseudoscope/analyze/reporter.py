from __future__ import annotations

from typing import Any, Optional

from ..constants import (
    DEFAULT_REPORTER,
    ERROR_DESCRIPTION_PREFIX,
    ERROR_FINDING_TITLE,
    FINDING_TITLE,
    Severity,
)
from ..host import FindingsStore
from ..logging import AnalysisLogger
from ..models import AnalysisOutcome, Finding

MISSING_MESSAGE_ERROR = "Unexpected response format from OpenAI API (missing message)"


def extract_answer(body: Any) -> Optional[str]:
    """Pull the model's answer out of choices[0], or None if there is none."""
    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None

    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]

    # Legacy completions shape.
    text = first.get("text")
    if isinstance(text, str):
        return text
    return None


class ResultReporter:
    """Write exactly one finding per outcome. Never raises."""

    def __init__(
        self,
        store: FindingsStore,
        *,
        reporter: str = DEFAULT_REPORTER,
        logger: Optional[AnalysisLogger] = None,
    ) -> None:
        self.store = store
        self.reporter = reporter
        self.logger = logger

    def build_finding(self, outcome: AnalysisOutcome, request: Any = None) -> Finding:
        if outcome.success:
            answer = extract_answer(outcome.body)
            if answer is not None:
                return Finding(
                    title=FINDING_TITLE,
                    description=answer,
                    severity=Severity.MEDIUM.value,
                    reporter=self.reporter,
                    request=request,
                )
            return self.error_finding(MISSING_MESSAGE_ERROR, request)
        return self.error_finding(outcome.error or "unknown error", request)

    def error_finding(self, message: str, request: Any = None) -> Finding:
        return Finding(
            title=ERROR_FINDING_TITLE,
            description=f"{ERROR_DESCRIPTION_PREFIX}{message}",
            severity=Severity.LOW.value,
            reporter=self.reporter,
            request=request,
        )

    async def report(self, outcome: AnalysisOutcome, request: Any = None) -> Optional[Finding]:
        finding = self.build_finding(outcome, request)
        try:
            await self.store.create(finding)
        except Exception as exc:
            if self.logger:
                self.logger.error("Error creating finding", error=str(exc), title=finding.title)
            return None

        if self.logger:
            self.logger.info(
                "Finding created",
                title=finding.title,
                severity=finding.severity,
                failure_kind=outcome.failure_kind.value if outcome.failure_kind else None,
                attempts=outcome.attempts,
            )
        return finding

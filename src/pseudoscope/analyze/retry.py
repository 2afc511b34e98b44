from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from ..errors import RetriesExhausted, TransportError, UnexpectedResponseFormat
from ..logging import AnalysisLogger
from ..models import AnalysisOutcome, ApiAttempt, AttemptKind, RetryPolicy, Transaction
from .normalizer import ResponseNormalizer
from .prompt_builder import build_prompt
from .transport import TransportClient
from .truncation import truncate

SIZE_LIMIT_SIGNATURES = (
    "string too long",
    "maximum length",
    "maximum context length",
    "reduce the length",
    "context_length_exceeded",
)

NETWORK_SIGNATURES = (
    "failed to send request",
    "operationfailed",
    "timeout",
    "timed out",
    "network",
    "connect",
)

# Retried with identical content after the fixed delay.
DELAYED_RETRY_KINDS = {
    AttemptKind.TRANSIENT,
    AttemptKind.APPLICATION_ERROR,
    AttemptKind.EMPTY,
}


def is_size_limit_error(message: str) -> bool:
    lowered = (message or "").lower()
    return any(signature in lowered for signature in SIZE_LIMIT_SIGNATURES)


def is_network_error(message: str) -> bool:
    lowered = (message or "").lower()
    return any(signature in lowered for signature in NETWORK_SIGNATURES)


def classify_transport_error(exc: BaseException) -> AttemptKind:
    """Map a dispatch failure to transient, size-limit, or fatal."""
    message = str(exc)
    cause = exc.__cause__
    if isinstance(cause, (httpx.TimeoutException, httpx.NetworkError)) or is_network_error(message):
        return AttemptKind.TRANSIENT
    if is_size_limit_error(message):
        return AttemptKind.SIZE_LIMIT
    return AttemptKind.FATAL


class RetryController:
    """
    Drive send/normalize/classify until success, a fatal error, or the ceiling.

    Size-limit failures halve the budget and resend at once. Other
    recoverable failures wait ``retry_delay_seconds`` and resend the same
    prompt. Every attempt counts toward ``max_retries``.
    """

    def __init__(
        self,
        transport: TransportClient,
        policy: Optional[RetryPolicy] = None,
        *,
        normalizer: Optional[ResponseNormalizer] = None,
        logger: Optional[AnalysisLogger] = None,
    ) -> None:
        self.transport = transport
        self.policy = policy or RetryPolicy()
        self.normalizer = normalizer or ResponseNormalizer(logger=logger)
        self.logger = logger

    def _log(self, message: str, **kwargs) -> None:
        if self.logger:
            self.logger.info(message, **kwargs)

    def _prepare(self, transaction: Transaction, budget: int) -> str:
        truncated = truncate(transaction.raw_request, transaction.raw_response, budget)
        prompt = build_prompt(truncated.request, truncated.response)
        self._log(
            "Prompt prepared",
            budget=budget,
            request_chars=len(truncated.request),
            response_chars=len(truncated.response),
            prompt_chars=len(prompt),
        )
        return prompt

    async def _attempt(self, attempt_number: int, prompt: str) -> ApiAttempt:
        self._log("Sending attempt", attempt=attempt_number + 1, max_retries=self.policy.max_retries)
        try:
            raw = await self.transport.send_analysis_request(prompt)
        except TransportError as exc:
            kind = classify_transport_error(exc)
            if self.logger:
                self.logger.warning("Transport failed", attempt=attempt_number + 1, kind=kind.value, error=str(exc))
            return ApiAttempt(attempt_number, kind, error=str(exc))

        parsed = self.normalizer.normalize(raw)
        if parsed is None:
            return ApiAttempt(attempt_number, AttemptKind.EMPTY, error="No response body received from model API")

        error_message = parsed.error_message
        if error_message is not None:
            if self.logger:
                self.logger.warning("Error in response", attempt=attempt_number + 1, error=error_message)
            kind = AttemptKind.SIZE_LIMIT if is_size_limit_error(error_message) else AttemptKind.APPLICATION_ERROR
            return ApiAttempt(attempt_number, kind, body=parsed.data, error=error_message)

        if parsed.choices:
            self._log("Response has choices", count=len(parsed.choices))
            return ApiAttempt(attempt_number, AttemptKind.SUCCESS, body=parsed.data)

        return ApiAttempt(attempt_number, AttemptKind.MALFORMED, error="Unexpected response format")

    async def run(self, transaction: Transaction) -> AnalysisOutcome:
        budget = self.policy.initial_budget
        prompt = self._prepare(transaction, budget)
        last_error: Optional[str] = None
        attempt_number = 0

        while attempt_number < self.policy.max_retries:
            attempt = await self._attempt(attempt_number, prompt)
            attempt_number += 1

            if attempt.kind is AttemptKind.SUCCESS:
                return AnalysisOutcome.succeeded(attempt.body, attempts=attempt_number, budget=budget)
            if attempt.kind is AttemptKind.MALFORMED:
                return AnalysisOutcome.failed(
                    UnexpectedResponseFormat(attempt.error), attempts=attempt_number, budget=budget
                )
            if attempt.kind is AttemptKind.FATAL:
                return AnalysisOutcome.failed(
                    TransportError(attempt.error), attempts=attempt_number, budget=budget
                )

            last_error = attempt.error
            if attempt_number >= self.policy.max_retries:
                break

            if attempt.kind is AttemptKind.SIZE_LIMIT:
                budget //= 2
                if budget <= 0:
                    return AnalysisOutcome.failed(
                        RetriesExhausted(f"Could not find a working content size: {last_error}"),
                        attempts=attempt_number,
                        budget=budget,
                    )
                self._log("Content too long, reducing budget", budget=budget)
                prompt = self._prepare(transaction, budget)
                continue

            if attempt.kind in DELAYED_RETRY_KINDS:
                self._log(
                    "Retrying after delay",
                    kind=attempt.kind.value,
                    delay_seconds=self.policy.retry_delay_seconds,
                )
                await asyncio.sleep(self.policy.retry_delay_seconds)

        return AnalysisOutcome.failed(
            RetriesExhausted(f"Maximum retry attempts reached: {last_error}"),
            attempts=attempt_number,
            budget=budget,
        )

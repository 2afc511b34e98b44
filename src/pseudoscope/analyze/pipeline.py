from __future__ import annotations

import uuid
from typing import Any, Optional

from ..config import AnalyzerConfig
from ..constants import DEFAULT_REPORTER
from ..errors import ConfigError
from ..host import HostEnvironment
from ..logging import AnalysisLogger
from ..models import AnalysisOutcome, Finding, Transaction
from .normalizer import ResponseNormalizer
from .reporter import ResultReporter
from .retry import RetryController
from .transport import TransportClient


def make_logger(host: HostEnvironment, run_id: Optional[str] = None) -> AnalysisLogger:
    console = getattr(host, "console", None)
    sink = getattr(console, "log", None)
    return AnalysisLogger(run_id or uuid.uuid4().hex[:12], sink=sink if callable(sink) else None)


async def analyze_transaction(
    transaction: Transaction,
    host: HostEnvironment,
    config: AnalyzerConfig,
    *,
    logger: Optional[AnalysisLogger] = None,
) -> Optional[Finding]:
    """
    Run the analysis pipeline for one transaction.

    Every path ends in exactly one ResultReporter.report call. Returns the
    finding written, or None if the store rejected it.
    """
    logger = logger or make_logger(host)
    reporter = ResultReporter(host.findings, reporter=config.reporter, logger=logger)

    try:
        with logger.stage("analysis"):
            logger.info(
                "Transaction received",
                request_chars=len(transaction.raw_request),
                response_chars=len(transaction.raw_response),
            )
            if not config.has_api_key():
                raise ConfigError("OpenAI API key is missing")

            transport = TransportClient(
                host.requests,
                config.openai_api_key.get_secret_value(),
                model=config.model,
                endpoint=config.api_url,
                logger=logger,
            )
            controller = RetryController(
                transport,
                config.retry_policy(),
                normalizer=ResponseNormalizer(logger=logger),
                logger=logger,
            )
            outcome = await controller.run(transaction)
    except Exception as exc:
        outcome = AnalysisOutcome.failed(exc)

    if not outcome.success:
        logger.error(
            "Error in Pseudocode Analysis",
            failure_kind=outcome.failure_kind.value if outcome.failure_kind else None,
            error=outcome.error,
            attempts=outcome.attempts,
        )
    return await reporter.report(outcome, transaction.reference)


async def run(
    request: Any,
    response: Any,
    host: HostEnvironment,
    config: Optional[AnalyzerConfig] = None,
    *,
    logger: Optional[AnalysisLogger] = None,
) -> Optional[Finding]:
    """Host entry point: read raw text from the host objects and analyze."""
    logger = logger or make_logger(host)

    if request is None or response is None:
        logger.warning("Missing request or response data - skipping analysis")
        return None

    try:
        if config is None:
            config = AnalyzerConfig()
        transaction = Transaction(
            raw_request=request.get_raw().to_text(),
            raw_response=response.get_raw().to_text(),
            reference=request,
        )
    except Exception as exc:
        logger.error("Failed to read transaction", error=str(exc))
        reporter = ResultReporter(
            host.findings,
            reporter=config.reporter if config is not None else DEFAULT_REPORTER,
            logger=logger,
        )
        return await reporter.report(AnalysisOutcome.failed(exc), request)

    return await analyze_transaction(transaction, host, config, logger=logger)

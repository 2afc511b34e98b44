from __future__ import annotations

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .analyze import run
from .config import AnalyzerConfig
from .constants import ExitCode, Severity
from .host import (
    HostEnvironment,
    HttpxRequestSender,
    InMemoryFindingsStore,
    JsonlFindingsStore,
    RawMessage,
    StderrConsole,
    finding_to_dict,
)
from .logging import AnalysisLogger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pseudoscope",
        description="Infer server-side pseudocode for a captured HTTP transaction",
    )
    parser.add_argument("--request", type=Path, required=True, help="File holding the raw HTTP request")
    parser.add_argument("--response", type=Path, required=True, help="File holding the raw HTTP response")
    parser.add_argument(
        "--findings-out",
        type=Path,
        default=None,
        help="Append the finding to this JSONL file (default: keep in memory only)",
    )
    return parser


async def async_main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    console = StderrConsole()
    logger = AnalysisLogger(uuid.uuid4().hex[:12], sink=console.log)

    try:
        config = AnalyzerConfig()
    except ValidationError as exc:
        logger.error("Invalid configuration", error=str(exc))
        return ExitCode.ERROR

    try:
        request = RawMessage.from_file(args.request)
        response = RawMessage.from_file(args.response)
    except OSError as exc:
        logger.error("Failed to read transaction files", error=str(exc))
        return ExitCode.ERROR

    store = JsonlFindingsStore(args.findings_out) if args.findings_out else InMemoryFindingsStore()
    host = HostEnvironment(
        console=console,
        findings=store,
        requests=HttpxRequestSender(timeout_seconds=config.request_timeout_seconds),
    )

    finding = await run(request, response, host, config, logger=logger)
    if finding is None:
        logger.error("Finding was not recorded")
        return ExitCode.ERROR

    sys.stdout.write(json.dumps(finding_to_dict(finding), indent=2) + "\n")
    sys.stdout.flush()
    if finding.severity == Severity.MEDIUM.value:
        return ExitCode.SUCCESS
    return ExitCode.ERROR


def main(argv: Optional[list[str]] = None) -> int:
    return int(asyncio.run(async_main(argv)))


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, List

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from pseudoscope.config import AnalyzerConfig
from pseudoscope.host import HostEnvironment, InMemoryFindingsStore, RawMessage


@pytest.fixture(params=["asyncio"])
def anyio_backend(request):
    """Restrict anyio tests to asyncio only (trio is not installed)."""
    return request.param


class RecordingConsole:
    def __init__(self) -> None:
        self.lines: List[str] = []

    def log(self, line: str) -> None:
        self.lines.append(line)


class ScriptedSender:
    """Replay a script of results; exceptions in the script are raised."""

    def __init__(self, script: List[Any]) -> None:
        self._script = list(script)
        self.specs: List[Any] = []

    async def send(self, spec):
        self.specs.append(spec)
        item = self._script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def json_result(payload: Any) -> SimpleNamespace:
    """Result whose response exposes a plain structured body field."""
    return SimpleNamespace(response=SimpleNamespace(body=payload))


def success_payload(content: str = "pseudo") -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def error_payload(message: str) -> dict:
    return {"error": {"message": message, "type": "invalid_request_error"}}


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def store() -> InMemoryFindingsStore:
    return InMemoryFindingsStore()


@pytest.fixture
def make_host(console, store):
    def _make(script: List[Any]) -> HostEnvironment:
        return HostEnvironment(console=console, findings=store, requests=ScriptedSender(script))

    return _make


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> AnalyzerConfig:
    for name in ("OPENAI_API_KEY", "MAX_RETRIES", "RETRY_DELAY_SECONDS", "MAX_TOTAL_LENGTH"):
        monkeypatch.delenv(f"PSEUDOSCOPE_{name}", raising=False)
    return AnalyzerConfig(openai_api_key="sk-test-dummy")


@pytest.fixture
def raw_request() -> RawMessage:
    return RawMessage(
        b"GET /api/users/42 HTTP/1.1\r\nHost: example.test\r\nCookie: session=abc\r\n\r\n",
        reference="req-1",
    )


@pytest.fixture
def raw_response() -> RawMessage:
    return RawMessage(
        b'HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n{"id": 42, "name": "Ada"}',
        reference="res-1",
    )

"""Host environment contract and default implementations.

The pipeline only talks to its host through three narrow capabilities:
a console sink for log lines, a findings store, and a request sender.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .models import Finding


class ConsoleSink(Protocol):
    def log(self, line: str) -> Any: ...


class FindingsStore(Protocol):
    async def create(self, finding: Finding) -> Any: ...


class RequestSender(Protocol):
    async def send(self, spec: "RequestSpec") -> Any: ...


@dataclass
class RequestSpec:
    """Outbound request description handed to the host sender."""

    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    query: str = ""
    body: str = ""

    def set_header(self, name: str, value: str) -> None:
        self.remove_header(name)
        self.headers[name] = value

    def remove_header(self, name: str) -> None:
        for key in [k for k in self.headers if k.lower() == name.lower()]:
            del self.headers[key]

    def full_url(self) -> str:
        query = self.query.lstrip("?")
        if not query:
            return self.url
        separator = "&" if "?" in self.url else "?"
        return f"{self.url}{separator}{query}"


@dataclass
class HostEnvironment:
    console: ConsoleSink
    findings: FindingsStore
    requests: RequestSender


class StderrConsole:
    def log(self, line: str) -> None:
        sys.stderr.write(line + "\n")
        sys.stderr.flush()


class InMemoryFindingsStore:
    def __init__(self) -> None:
        self.findings: List[Finding] = []

    async def create(self, finding: Finding) -> Finding:
        self.findings.append(finding)
        return finding


def finding_to_dict(finding: Finding) -> Dict[str, Any]:
    request = finding.request
    return {
        "title": finding.title,
        "description": finding.description,
        "severity": finding.severity,
        "reporter": finding.reporter,
        "request": None if request is None else str(getattr(request, "reference", request)),
    }


class JsonlFindingsStore:
    """Append findings to a JSON Lines file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    async def create(self, finding: Finding) -> Finding:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(finding_to_dict(finding), sort_keys=True) + "\n")
        return finding


class RawBody:
    def __init__(self, data: bytes) -> None:
        self.data = data

    def to_text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


class RawMessage:
    """Captured request or response exposing get_raw().to_text()."""

    def __init__(self, data: bytes, reference: Optional[str] = None) -> None:
        self._data = data
        self.reference = reference

    @classmethod
    def from_file(cls, path: Path) -> "RawMessage":
        return cls(path.read_bytes(), reference=str(path))

    def get_raw(self) -> RawBody:
        return RawBody(self._data)


class HttpxBodyView:
    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    def to_text(self) -> str:
        return self._response.text

    def to_json(self) -> Any:
        return self._response.json()


class HttpxResponseView:
    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.status_code = response.status_code

    def get_body(self) -> HttpxBodyView:
        return HttpxBodyView(self._response)


@dataclass
class SendResult:
    response: Any


class HttpxRequestSender:
    """Default sender. Non-2xx responses are returned, not raised."""

    def __init__(self, timeout_seconds: float = 120) -> None:
        self.timeout = timeout_seconds

    async def send(self, spec: RequestSpec) -> SendResult:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.request(
                spec.method,
                spec.full_url(),
                headers=spec.headers,
                content=spec.body.encode("utf-8"),
            )
        return SendResult(response=HttpxResponseView(response))

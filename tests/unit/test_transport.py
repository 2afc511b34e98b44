from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import pytest

from pseudoscope.analyze.transport import TransportClient
from pseudoscope.errors import TransportError

from conftest import ScriptedSender


def test_request_spec_matches_chat_completions_contract() -> None:
    client = TransportClient(None, "sk-abc", model="o3-mini", endpoint="https://api.openai.com/v1/chat/completions")

    spec = client.build_request_spec("describe it")

    assert spec.method == "POST"
    assert spec.url == "https://api.openai.com/v1/chat/completions"
    assert spec.query == ""
    assert spec.headers["Content-Type"] == "application/json"
    assert spec.headers["Authorization"] == "Bearer sk-abc"
    assert "Cookie" not in spec.headers
    assert json.loads(spec.body) == {
        "model": "o3-mini",
        "messages": [{"role": "user", "content": "describe it"}],
    }


@pytest.mark.anyio
async def test_send_returns_raw_result_untouched() -> None:
    result = SimpleNamespace(body={"error": {"message": "bad key"}})
    sender = ScriptedSender([result])
    client = TransportClient(sender, "sk-abc")

    returned = await client.send_analysis_request("prompt")

    assert returned is result
    assert len(sender.specs) == 1


@pytest.mark.anyio
async def test_missing_send_primitive_raises() -> None:
    client = TransportClient(SimpleNamespace(send=None), "sk-abc")

    with pytest.raises(TransportError, match="request sender is unavailable"):
        await client.send_analysis_request("prompt")


@pytest.mark.anyio
async def test_httpx_transport_failure_is_reported_as_send_failure() -> None:
    sender = ScriptedSender([httpx.ConnectError("connection refused")])
    client = TransportClient(sender, "sk-abc")

    with pytest.raises(TransportError) as excinfo:
        await client.send_analysis_request("prompt")

    assert str(excinfo.value).startswith("Failed to send request")
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.anyio
async def test_other_dispatch_failures_keep_their_message() -> None:
    sender = ScriptedSender([RuntimeError("sandbox denied outbound call")])
    client = TransportClient(sender, "sk-abc")

    with pytest.raises(TransportError, match="sandbox denied outbound call"):
        await client.send_analysis_request("prompt")

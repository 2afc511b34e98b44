from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from ..constants import DEFAULT_MODEL, OPENAI_CHAT_COMPLETIONS_URL
from ..errors import TransportError
from ..host import RequestSender, RequestSpec
from ..logging import AnalysisLogger


class TransportClient:
    """Send one chat-completions call through the host's request sender."""

    def __init__(
        self,
        sender: Optional[RequestSender],
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        endpoint: str = OPENAI_CHAT_COMPLETIONS_URL,
        logger: Optional[AnalysisLogger] = None,
    ) -> None:
        self.sender = sender
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.logger = logger

    def build_payload(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": prompt,
                }
            ],
        }

    def build_request_spec(self, prompt: str) -> RequestSpec:
        spec = RequestSpec(url=self.endpoint)
        spec.method = "POST"
        spec.set_header("Content-Type", "application/json")
        spec.set_header("Authorization", f"Bearer {self.api_key}")
        spec.query = ""
        spec.remove_header("Cookie")
        spec.body = json.dumps(self.build_payload(prompt))
        return spec

    async def send_analysis_request(self, prompt: str) -> Any:
        """
        Dispatch the analysis call and return the sender's raw result.

        Raises TransportError when the call cannot be dispatched. Errors the
        API reports inside a delivered response are returned, not raised.
        """
        send = getattr(self.sender, "send", None)
        if not callable(send):
            raise TransportError(f"request sender is unavailable: send is {type(send).__name__}")

        spec = self.build_request_spec(prompt)
        if self.logger:
            self.logger.info(
                "Sending analysis request",
                endpoint=spec.url,
                model=self.model,
                body_chars=len(spec.body),
            )

        try:
            return await send(spec)
        except TransportError:
            raise
        except httpx.TransportError as exc:
            raise TransportError(f"Failed to send request: {exc!r}") from exc
        except Exception as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc

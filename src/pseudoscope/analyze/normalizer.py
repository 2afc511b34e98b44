from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ..logging import AnalysisLogger


@dataclass
class ExtractedBody:
    text: str
    data: Any = None


@dataclass
class ParsedBody:
    text: str
    data: Any = None

    @property
    def error_message(self) -> Optional[str]:
        """Message of an API-reported error, or None when there is none."""
        if not isinstance(self.data, dict):
            return None
        error = self.data.get("error")
        if error is None or error == "":
            return None
        if isinstance(error, dict):
            message = error.get("message")
            if message:
                return str(message)
        if isinstance(error, str):
            return error
        return json.dumps(error, default=str)

    @property
    def choices(self) -> List[Any]:
        if not isinstance(self.data, dict):
            return []
        choices = self.data.get("choices")
        if isinstance(choices, list):
            return choices
        return []


def _from_value(value: Any) -> Optional[ExtractedBody]:
    """Plain field: a string is text, anything else is a structured body."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return ExtractedBody(text=bytes(value).decode("utf-8", errors="replace"))
    if isinstance(value, str):
        return ExtractedBody(text=value)
    return ExtractedBody(text=json.dumps(value, default=str), data=value)


class BodyExtractor(ABC):
    name: str = "extractor"

    @abstractmethod
    def extract(self, raw: Any) -> Optional[ExtractedBody]:
        """Return the body this strategy can see, or None."""


class BodyAccessorExtractor(BodyExtractor):
    """raw.response.get_body() exposing to_text(), to_json(), or str()."""

    name = "response.get_body"

    def extract(self, raw: Any) -> Optional[ExtractedBody]:
        response = getattr(raw, "response", None)
        get_body = getattr(response, "get_body", None)
        if not callable(get_body):
            return None
        body = get_body()
        if body is None:
            return None

        to_text = getattr(body, "to_text", None)
        if callable(to_text):
            return ExtractedBody(text=to_text() or "")

        to_json = getattr(body, "to_json", None)
        if callable(to_json):
            data = to_json()
            return ExtractedBody(text=json.dumps(data, default=str), data=data)

        return ExtractedBody(text=str(body))


class ResponseFieldExtractor(BodyExtractor):
    """raw.response.body as a string or an object."""

    name = "response.body"

    def extract(self, raw: Any) -> Optional[ExtractedBody]:
        response = getattr(raw, "response", None)
        if response is None:
            return None
        return _from_value(getattr(response, "body", None))


class ResultFieldExtractor(BodyExtractor):
    """raw.body as a string or an object."""

    name = "body"

    def extract(self, raw: Any) -> Optional[ExtractedBody]:
        return _from_value(getattr(raw, "body", None))


DEFAULT_EXTRACTORS: Sequence[BodyExtractor] = (
    BodyAccessorExtractor(),
    ResponseFieldExtractor(),
    ResultFieldExtractor(),
)


class ResponseNormalizer:
    """Extract a text/JSON body from whatever shape the host sender returned."""

    def __init__(
        self,
        extractors: Sequence[BodyExtractor] = DEFAULT_EXTRACTORS,
        logger: Optional[AnalysisLogger] = None,
    ) -> None:
        self.extractors = list(extractors)
        self.logger = logger

    def normalize(self, raw: Any) -> Optional[ParsedBody]:
        if raw is None:
            return None

        extracted: Optional[ExtractedBody] = None
        for extractor in self.extractors:
            candidate = extractor.extract(raw)
            if candidate is not None and candidate.text:
                extracted = candidate
                if self.logger:
                    self.logger.info("Response body extracted", shape=extractor.name, chars=len(candidate.text))
                break

        if extracted is None:
            return None

        data = extracted.data
        if data is None:
            try:
                data = json.loads(extracted.text)
            except json.JSONDecodeError as exc:
                if self.logger:
                    self.logger.warning("Failed to parse response as JSON", error=str(exc))

        return ParsedBody(text=extracted.text, data=data)


def normalize(raw: Any, logger: Optional[AnalysisLogger] = None) -> Optional[ParsedBody]:
    return ResponseNormalizer(logger=logger).normalize(raw)

from __future__ import annotations

from .constants import ExitCode


class PseudoscopeError(Exception):
    """Base exception for all Pseudoscope errors."""

    exit_code: ExitCode = ExitCode.ERROR


class ConfigError(PseudoscopeError):
    """Configuration is missing or unusable (e.g. no API key)."""


class TransportError(PseudoscopeError):
    """The outbound call could not be dispatched."""


class UnexpectedResponseFormat(PseudoscopeError):
    """Response arrived but does not have the expected success shape."""


class RetriesExhausted(PseudoscopeError):
    """Retry ceiling reached without a usable response."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Severity levels accepted by the findings store."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ExitCode(int, Enum):
    """Process exit codes."""

    SUCCESS = 0
    ERROR = 2


class Limits:
    """Shared defaults for the analysis pipeline."""

    MAX_TOTAL_LENGTH = 50_000  # ~3-4 chars per token keeps this well under context limits
    MAX_RETRIES = 3
    RETRY_DELAY_SECONDS = 2.0
    REQUEST_TIMEOUT_SECONDS = 120


OPENAI_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "o3-mini"
DEFAULT_REPORTER = "OpenAI-Pseudocode-Analysis"
PLACEHOLDER_API_KEY = "YOUR_OPENAI_API_KEY_HERE"

FINDING_TITLE = "Pseudocode Analysis"
ERROR_FINDING_TITLE = "Pseudocode Analysis Error"
ERROR_DESCRIPTION_PREFIX = "Failed to generate pseudocode analysis: "

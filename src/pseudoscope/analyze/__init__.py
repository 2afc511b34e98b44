"""Request/response analysis pipeline."""

from .normalizer import ParsedBody, ResponseNormalizer, normalize
from .pipeline import analyze_transaction, run
from .prompt_builder import build_prompt
from .reporter import ResultReporter, extract_answer
from .retry import RetryController, classify_transport_error, is_network_error, is_size_limit_error
from .transport import TransportClient
from .truncation import truncate

__all__ = [
    "ParsedBody",
    "ResponseNormalizer",
    "ResultReporter",
    "RetryController",
    "TransportClient",
    "analyze_transaction",
    "build_prompt",
    "classify_transport_error",
    "extract_answer",
    "is_network_error",
    "is_size_limit_error",
    "normalize",
    "run",
    "truncate",
]

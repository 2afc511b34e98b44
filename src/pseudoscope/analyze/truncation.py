from __future__ import annotations

from ..models import TruncationResult

REQUEST_TRUNCATION_MARKER = "\n[... Request truncated due to size limits ...]"
RESPONSE_TRUNCATION_MARKER = "\n[... Response truncated due to size limits ...]"


def truncate(req: str, res: str, max_total: int) -> TruncationResult:
    """
    Trim request and response to share ``max_total`` characters.

    The budget is split in proportion to the original lengths. Markers are
    appended after the cut and are not counted against the budget.
    """
    total_length = len(req) + len(res)
    if total_length == 0:
        return TruncationResult(request=req, response=res)

    max_request_length = (max_total * len(req)) // total_length
    max_response_length = max_total - max_request_length

    truncated_request = req
    truncated_response = res

    if len(req) > max_request_length:
        truncated_request = req[:max_request_length] + REQUEST_TRUNCATION_MARKER
    if len(res) > max_response_length:
        truncated_response = res[:max_response_length] + RESPONSE_TRUNCATION_MARKER

    return TruncationResult(request=truncated_request, response=truncated_response)

"""API error rendering.

Every error response carries a single human-readable ``error`` string, the
same text the Socket.IO handlers send in their ``error`` event. Validation
errors keep the per-field breakdown under ``details``.
"""

from typing import Any

from rest_framework.exceptions import ValidationError
from rest_framework.views import exception_handler as drf_exception_handler


def _first_message(detail: Any) -> str:
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def exception_handler(exc, context):
    response = drf_exception_handler(exc, context)
    if response is None:
        return None
    data: dict[str, Any] = {"error": _first_message(response.data)}
    if isinstance(exc, ValidationError):
        data["details"] = response.data
    response.data = data
    return response

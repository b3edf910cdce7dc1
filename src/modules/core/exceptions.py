"""Domain error taxonomy and the API error envelope.

Every business failure raised by a service belongs to one of four kinds:

- ``validation``: malformed input, caller-fixable, never retried.
- ``not_found``: referenced record absent *or* owned by someone else
  (both cases look identical to the caller).
- ``conflict``: the request is well-formed but the current state forbids it.
- ``internal``: persistence failure unrelated to business rules; the only
  kind a caller may retry.

Services raise these from inside ``transaction.atomic`` blocks, so by the
time an error reaches the view the unit of work has been rolled back.
``api_exception_handler`` renders all errors (domain, DRF, pydantic and
database) in a single envelope::

    {"type": "conflict", "errors": [{"code": "...", "detail": "..."}]}
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.db import DatabaseError
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for structured business errors."""

    kind = "internal"
    code = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Unexpected error."

    def __init__(self, detail: Optional[str] = None, **extra: Any) -> None:
        self.detail = detail or self.default_detail
        self.extra = extra
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "detail": self.detail, **self.extra}


class ValidationError(DomainError):
    kind = "validation"
    code = "invalid"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."


class NotFoundError(DomainError):
    kind = "not_found"
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."


class ConflictError(DomainError):
    kind = "conflict"
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Request conflicts with the current state."


class InternalError(DomainError):
    kind = "internal"
    code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal error. The operation may be retried."


# ---------------------------------------------------------------------------
# DRF integration
# ---------------------------------------------------------------------------

_DRF_KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: "validation",
    status.HTTP_401_UNAUTHORIZED: "authentication",
    status.HTTP_403_FORBIDDEN: "permission",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def error_response(error: DomainError) -> Response:
    return Response(
        {"type": error.kind, "errors": [error.to_dict()]},
        status=error.status_code,
    )


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """``REST_FRAMEWORK["EXCEPTION_HANDLER"]`` entry point."""
    if isinstance(exc, DomainError):
        if isinstance(exc, InternalError):
            logger.error("api.internal_error", detail=exc.detail)
        return error_response(exc)

    if isinstance(exc, PydanticValidationError):
        errors = [
            {
                "code": "invalid",
                "detail": err["msg"],
                "field": ".".join(str(part) for part in err["loc"]),
            }
            for err in exc.errors()
        ]
        return Response(
            {"type": "validation", "errors": errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, DatabaseError):
        logger.exception("api.database_error")
        return error_response(InternalError())

    response = exception_handler(exc, context)
    if response is None:
        return None

    kind = _DRF_KIND_BY_STATUS.get(response.status_code, "error")
    response.data = {"type": kind, "errors": _flatten_drf_errors(response.data)}
    return response


def _flatten_drf_errors(data: Any) -> List[Dict[str, Any]]:
    """Turn DRF's `detail` / field-keyed payloads into a flat error list."""
    if isinstance(data, dict) and "detail" in data:
        detail = data["detail"]
        return [{"code": getattr(detail, "code", "error"), "detail": str(detail)}]
    if isinstance(data, dict):
        errors = []
        for field, messages in data.items():
            if not isinstance(messages, list):
                messages = [messages]
            for message in messages:
                errors.append(
                    {
                        "code": getattr(message, "code", "invalid"),
                        "detail": str(message),
                        "field": field,
                    }
                )
        return errors
    if isinstance(data, list):
        return [
            {"code": getattr(message, "code", "invalid"), "detail": str(message)}
            for message in data
        ]
    return [{"code": "error", "detail": str(data)}]

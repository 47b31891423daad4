"""
Normalized result type shared by every safe-convention operation.

Both transports (GraphQL and REST) report through ``APIResponse``: exactly one
of ``data``/``error`` describes the outcome, and every failure is reduced to a
single ``ErrorInfo(status, message)`` pair.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fly_admin.core.errors import APIError, FlyError

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
INTERNAL_ERROR_STATUS = 500

V = TypeVar("V")
T = TypeVar("T")


@dataclass(frozen=True)
class ErrorInfo:
    """Failure description carried by an error result."""

    status: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {"status": self.status, "message": self.message}


@dataclass(frozen=True)
class APIResponse(Generic[V]):
    """
    Tagged result of one API call.

    ``error`` is None on success. A success may still carry ``data=None`` when
    the endpoint answered with an empty body (e.g. DELETE).
    """

    data: V | None = None
    error: ErrorInfo | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.data is not None:
            raise ValueError("APIResponse cannot carry both data and error")

    @property
    def ok(self) -> bool:
        """Check if the call succeeded."""
        return self.error is None

    def unwrap(self) -> V | None:
        """
        Return ``data``, or raise the error as an exception.

        Raises:
            APIError: If this is an error result

        """
        if self.error is not None:
            raise APIError(self.error.message, status=self.error.status)
        return self.data


def error_from_exception(exc: BaseException) -> ErrorInfo:
    """
    Classify a failure into one ``ErrorInfo``.

    - ``APIError`` with an HTTP status: that status and the raw response body
      (``GraphQLError`` lands here with 500 and the serialized errors list)
    - anything else: 500 and the exception message, or a fixed fallback text
      when the exception carries no message
    """
    if isinstance(exc, APIError) and exc.answered:
        return ErrorInfo(status=exc.status, message=exc.message)

    message = exc.message if isinstance(exc, FlyError) else str(exc)
    return ErrorInfo(status=INTERNAL_ERROR_STATUS, message=message or UNKNOWN_ERROR_MESSAGE)


def capture(call: Callable[[], Any], parser: Callable[[Any], T] | None = None) -> APIResponse[T]:
    """
    Run ``call`` (and ``parser`` on its result) without letting failures escape.

    An empty payload (``None``) skips the parser and is returned as a
    successful result without data.

    Args:
        call: Zero-argument callable performing the request
        parser: Optional shaping applied to the decoded payload

    Returns:
        APIResponse with ``data`` on success, ``error`` otherwise

    """
    try:
        data = call()
        if parser is not None and data is not None:
            data = parser(data)
    except Exception as e:
        error = error_from_exception(e)
        logger.debug("Request failed with status %s: %s", error.status, error.message)
        return APIResponse(error=error)
    return APIResponse(data=data)

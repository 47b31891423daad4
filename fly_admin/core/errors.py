"""
Exceptions raised by the strict calling convention.
"""

import json
from typing import Any


class FlyError(Exception):
    """Base error for everything the Fly client raises."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to the CLI's error JSON."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(FlyError):
    """Client was constructed without the settings it needs."""


class ValidationError(FlyError):
    """Local input was rejected before any request was sent."""


class ResponseShapeError(FlyError):
    """A response did not have the structure its parser expects."""


class APIError(FlyError):
    """
    A Fly endpoint call failed.

    ``status`` is the HTTP code when the server answered, and 0 when no
    response arrived (connection failure, timeout or an unparseable body).
    """

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    @property
    def answered(self) -> bool:
        return self.status > 0

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.answered:
            result["status"] = self.status
        return result


class GraphQLError(APIError):
    """The GraphQL endpoint answered with a non-empty ``errors`` list."""

    def __init__(self, errors: list[Any]):
        super().__init__(json.dumps(errors, separators=(",", ":")), status=500)
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        # The structured list sits beside its serialized form in "error".
        result = super().to_dict()
        result["errors"] = self.errors
        return result

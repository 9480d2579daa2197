"""Error types raised by the Cortex connector core.

Only missing routing parameters and unresolvable identifiers abort an
operation. Per-instance transport failures during fan-out are absorbed by
the clients and aggregators and never surface through these exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

# Suggested HTTP status for hosts exposing the connector over HTTP
ERROR_HTTP_MAP = {
    "MISSING_FIELD": 400,
    "NOT_FOUND": 404,
    "INSTANCE_NOT_FOUND": 404,
    "INSTANCE_UNREACHABLE": 502,
    "JOB_SUBMISSION_FAILED": 502,
    "INVALID_RESPONSE": 502,
    "CONNECTOR_ERROR": 500,
}

# Retry guidance (true means client may retry safely)
RETRYABLE = {
    "INSTANCE_UNREACHABLE": True,
}


def http_status_for(code: str) -> int:
    return int(ERROR_HTTP_MAP.get(code, 500))


def is_retryable(code: str) -> bool:
    return bool(RETRYABLE.get(code, False))


class ConnectorError(Exception):
    """Base exception for all connector errors."""

    default_code = "CONNECTOR_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    @property
    def retryable(self) -> bool:
        return is_retryable(self.error_code)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class MissingFieldError(ConnectorError):
    """A required routing parameter was absent."""

    default_code = "MISSING_FIELD"

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} is missing", details={"field": field})
        self.field = field


class NotFoundError(ConnectorError):
    """A job, analyzer or instance id is unknown to every instance."""

    default_code = "NOT_FOUND"

    def __init__(self, kind: str, identifier: str, message: Optional[str] = None):
        super().__init__(
            message or f"{kind} {identifier} not found",
            details={"kind": kind, "id": identifier},
        )
        self.kind = kind
        self.identifier = identifier


class InstanceNotFoundError(NotFoundError):
    """The explicitly requested instance is not configured."""

    default_code = "INSTANCE_NOT_FOUND"

    def __init__(self, instance_id: str):
        super().__init__("instance", instance_id)


class InstanceUnreachableError(ConnectorError):
    """An instance could not be reached for a targeted (non fan-out) call."""

    default_code = "INSTANCE_UNREACHABLE"

    def __init__(self, instance_id: str, reason: str):
        super().__init__(
            f"instance {instance_id} unreachable: {reason}",
            details={"instance": instance_id, "reason": reason},
        )
        self.instance_id = instance_id
        self.reason = reason

"""错误分类模块：将守护进程返回的 HTTP 状态码映射到标准错误类别。

Error classification for daemon responses.

The daemon reuses a small set of HTTP status codes with consistent meaning
across endpoints. Classification is informative only; nothing in this
library retries on its basis.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorClass(str, Enum):
    """Standard classification of daemon status codes."""

    NOT_MODIFIED = "not_modified"
    """Action had no effect (container already started/stopped)."""

    BAD_PARAMETER = "bad_parameter"
    """Malformed request or invalid parameter value."""

    UNAUTHORIZED = "unauthorized"
    """Registry or daemon rejected the credentials."""

    FORBIDDEN = "forbidden"
    """Operation not permitted (read-only rootfs, pre-defined network)."""

    NOT_FOUND = "not_found"
    """No such container, image, network, or path."""

    CONFLICT = "conflict"
    """Name already in use, container paused, image in use."""

    SERVER_ERROR = "server_error"
    """Daemon-side failure (5xx)."""

    OTHER = "other"
    """Anything else."""

    @property
    def description(self) -> str | None:
        """Generic human-readable description used when the daemon sends none."""
        return _DESCRIPTIONS.get(self)


_DESCRIPTIONS: dict[ErrorClass, str] = {
    ErrorClass.NOT_MODIFIED: "not modified",
    ErrorClass.BAD_PARAMETER: "bad parameter",
    ErrorClass.UNAUTHORIZED: "unauthorized",
    ErrorClass.FORBIDDEN: "forbidden",
    ErrorClass.NOT_FOUND: "not found",
    ErrorClass.CONFLICT: "conflict",
    ErrorClass.SERVER_ERROR: "server error",
}

_STATUS_MAPPING: dict[int, ErrorClass] = {
    304: ErrorClass.NOT_MODIFIED,
    400: ErrorClass.BAD_PARAMETER,
    401: ErrorClass.UNAUTHORIZED,
    403: ErrorClass.FORBIDDEN,
    404: ErrorClass.NOT_FOUND,
    409: ErrorClass.CONFLICT,
}


def classify_status(status_code: int) -> ErrorClass:
    """Classify a daemon status code.

    Args:
        status_code: HTTP status code

    Returns:
        ErrorClass representing the error type
    """
    if status_code in _STATUS_MAPPING:
        return _STATUS_MAPPING[status_code]
    if 500 <= status_code < 600:
        return ErrorClass.SERVER_ERROR
    return ErrorClass.OTHER


def extract_error_message(body: Any) -> str | None:
    """Extract the daemon's error message from a response body.

    The daemon answers errors with ``{"message": "..."}``. Progress streams
    embed failures as ``{"error": "...", "errorDetail": {"message": "..."}}``.

    Args:
        body: Response body (parsed JSON)

    Returns:
        Error message if found, None otherwise
    """
    if not isinstance(body, dict) or not body:
        return None

    msg = body.get("message")
    if isinstance(msg, str) and msg:
        return msg

    detail = body.get("errorDetail")
    if isinstance(detail, dict):
        msg = detail.get("message")
        if isinstance(msg, str) and msg:
            return msg

    error = body.get("error")
    if isinstance(error, str) and error:
        return error

    return None

"""错误基类：所有错误共享一个根类型和结构化上下文。

Error types raised by aiowharf.

``WharfError`` is the root. Below it, each failure site has its own type:
``TransportError`` when the daemon cannot be reached, ``DaemonError`` for an
error status, ``DecodeError`` when a response cannot be interpreted, and
``UsageError`` for bad input caught before any request is sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic import ValidationError as PydanticValidationError

    from aiowharf.errors.classification import ErrorClass


@dataclass
class ErrorContext:
    """Where an error came from and what to do about it.

    Renders as ``[source] at 'field' (hint: ...)``, omitting unset parts.
    ``details`` is kept for callers and is not rendered.
    """

    source: str | None = None
    field_path: str | None = None
    hint: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        rendered = (
            (self.source, "[{}]"),
            (self.field_path, "at '{}'"),
            (self.hint, "(hint: {})"),
        )
        return " ".join(template.format(value) for value, template in rendered if value)


class WharfError(Exception):
    """Root of every error aiowharf raises.

    ``message`` is the bare message. ``str(error)`` appends the rendered
    context.
    """

    def __init__(self, message: str, context: ErrorContext | None = None) -> None:
        self.message = message
        self.context = context if context is not None else ErrorContext()
        super().__init__(self._render())

    def _render(self) -> str:
        return " ".join(part for part in (self.message, str(self.context)) if part)

    def with_hint(self, hint: str) -> WharfError:
        """Attach a hint and return the same error, for ``raise ... .with_hint()``."""
        self.context.hint = hint
        self.args = (self._render(),)
        return self


class TransportError(WharfError):
    """The daemon could not be reached or the connection broke.

    Covers refused connections, TLS failures, resets mid-stream and pool
    timeouts. The httpx exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.url = url
        self.__cause__ = cause


class DaemonError(WharfError):
    """The daemon answered with an error status.

    Attributes:
        status_code: HTTP status code
        error_class: Classification of the status code
        raw_error: Parsed error body, if it was JSON
        url: Request URL
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_class: ErrorClass,
        raw_error: dict[str, Any] | None = None,
        url: str | None = None,
    ) -> None:
        details: dict[str, Any] = {
            "status_code": status_code,
            "error_class": error_class.value,
        }
        if url:
            details["url"] = url
        super().__init__(message, ErrorContext(source="daemon", details=details))

        self.status_code = status_code
        self.error_class = error_class
        self.raw_error = raw_error or {}
        self.url = url

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409

    @property
    def is_not_modified(self) -> bool:
        return self.status_code == 304

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: dict[str, Any] | None = None,
        *,
        url: str | None = None,
        fallback: str | None = None,
    ) -> DaemonError:
        """Create DaemonError from an HTTP response.

        The daemon's own ``message`` is used verbatim when present. Otherwise
        the endpoint-specific ``fallback`` text, then the generic
        description of the status class.

        Args:
            status_code: HTTP status code
            body: Response body (parsed JSON)
            url: Request URL
            fallback: Endpoint-specific description of the status

        Returns:
            DaemonError with appropriate classification
        """
        from aiowharf.errors.classification import (
            classify_status,
            extract_error_message,
        )

        error_class = classify_status(status_code)
        message = (
            extract_error_message(body)
            or fallback
            or error_class.description
            or f"HTTP {status_code}"
        )

        return cls(
            message=message,
            status_code=status_code,
            error_class=error_class,
            raw_error=body,
            url=url,
        )


class DecodeError(WharfError):
    """Error while interpreting a daemon response.

    Raised when:
    - The body is not valid JSON
    - A required field is missing or has the wrong type
    - A multiplexed stream is truncated or carries an unknown stream type
    - A line of a JSON lines stream is malformed
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        offset: int | None = None,
        line: int | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="decode")
        if field:
            ctx.field_path = field
        if offset is not None:
            ctx.details["offset"] = offset
        if line is not None:
            ctx.details["line"] = line
        super().__init__(message, ctx)
        self.field = field
        self.offset = offset
        self.line = line

    @classmethod
    def from_validation(
        cls, model_name: str, exc: PydanticValidationError
    ) -> DecodeError:
        """Build a decode error naming the first field pydantic rejected."""
        errors = exc.errors()
        if not errors:
            return cls(f"Invalid {model_name} document")
        first = errors[0]
        path = ".".join(str(part) for part in first.get("loc", ()))
        if first.get("type") == "missing":
            message = f"{model_name} is missing required field '{path}'"
        else:
            message = f"{model_name} has invalid field '{path}': {first.get('msg')}"
        return cls(message, field=path or None)


class UsageError(WharfError):
    """Invalid input to a request builder.

    Raised when:
    - A required name or path is empty
    - The daemon address cannot be parsed
    - A request body cannot be serialized
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="usage")
        if field:
            ctx.field_path = field
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.actual = actual

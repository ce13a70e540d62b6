"""结构化日志：按键值字段记录，并屏蔽镜像仓库凭据。

Structured logging for aiowharf.

Every library logger lives under the ``aiowharf`` namespace and hands its
records to one package-level handler. Log calls take keyword fields:

    logger.debug("Response received", method="GET", status=200)

Fields, plus any bound with ``log_context``, are rendered after the
message. Registry credentials are masked on the way out.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, TextIO

ROOT_LOGGER = "aiowharf"
REDACTED = "***REDACTED***"

# LogRecord attribute carrying the keyword fields of one call
_FIELDS_ATTR = "wharf_fields"

_bound_fields: ContextVar[Mapping[str, Any] | None] = ContextVar(
    "aiowharf_log_fields", default=None
)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    def to_logging_level(self) -> int:
        return logging.getLevelName(self.value)

    @classmethod
    def from_env(cls, default: LogLevel) -> LogLevel:
        """Level named by WHARF_LOG_LEVEL (any case), else ``default``."""
        name = os.environ.get("WHARF_LOG_LEVEL", "").strip().upper()
        return cls.__members__.get(name, default)


def current_log_fields() -> dict[str, Any]:
    """Fields bound to the current task by ``log_context``."""
    return dict(_bound_fields.get() or {})


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach fields to every record logged inside the block.

    Bindings nest, and each task sees only its own.

    Example:
        >>> with log_context(daemon="unix:///var/run/docker.sock"):
        ...     await docker.containers().list()
    """
    token = _bound_fields.set({**current_log_fields(), **fields})
    try:
        yield
    finally:
        _bound_fields.reset(token)


class SensitiveDataMasker:
    """Redacts registry credentials from messages and fields."""

    PATTERNS: ClassVar[tuple[tuple[str, str], ...]] = (
        # X-Registry-Auth / X-Registry-Config header values
        (r"(X-Registry-(?:Auth|Config)[\"']?\s*[:=]\s*[\"']?)[^\"'\s,}]+", rf"\1{REDACTED}"),
        # Credential members of an auth document
        (r"(\"(?:password|identitytoken|registrytoken)\"\s*:\s*\")[^\"]*", rf"\1{REDACTED}"),
        (r"(Bearer\s+)\S+", rf"\1{REDACTED}"),
    )

    KEY_MARKERS: ClassVar[tuple[str, ...]] = ("password", "token", "secret", "auth")

    def __init__(self, patterns: Iterable[tuple[str, str]] | None = None) -> None:
        self._rules = [
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in (patterns or self.PATTERNS)
        ]

    def mask(self, text: str) -> str:
        for rule, replacement in self._rules:
            text = rule.sub(replacement, text)
        return text

    def is_sensitive_key(self, key: str) -> bool:
        lowered = key.lower()
        return any(marker in lowered for marker in self.KEY_MARKERS)

    def mask_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Mask a field map.

        Credential-looking keys lose their value entirely. Strings are
        pattern-masked, and nested maps and sequences are walked.
        """
        return {
            key: REDACTED if self.is_sensitive_key(key) else self._mask_value(value)
            for key, value in fields.items()
        }

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, Mapping):
            return self.mask_fields(value)
        if isinstance(value, (list, tuple)):
            return [self._mask_value(item) for item in value]
        return value


class _FieldsFormatter(logging.Formatter):
    def __init__(self, masker: SensitiveDataMasker | None = None) -> None:
        super().__init__()
        self.masker = masker or SensitiveDataMasker()

    def message(self, record: logging.LogRecord) -> str:
        return self.masker.mask(record.getMessage())

    def fields(self, record: logging.LogRecord, bound: bool = True) -> dict[str, Any]:
        own = getattr(record, _FIELDS_ATTR, None) or {}
        merged = {**current_log_fields(), **own} if bound else dict(own)
        return self.masker.mask_fields(merged)

    @staticmethod
    def timestamp(record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonFormatter(_FieldsFormatter):
    """One JSON object per record, fields at the top level."""

    def __init__(
        self, masker: SensitiveDataMasker | None = None, include_timestamp: bool = True
    ) -> None:
        super().__init__(masker)
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {}
        if self.include_timestamp:
            document["timestamp"] = self.timestamp(record)
        document["level"] = record.levelname
        document["logger"] = record.name
        document["message"] = self.message(record)
        document.update(self.fields(record))
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, default=str)


class TextFormatter(_FieldsFormatter):
    """``timestamp | LEVEL | logger | message | key=value ...``"""

    def __init__(
        self, masker: SensitiveDataMasker | None = None, include_bound: bool = True
    ) -> None:
        super().__init__(masker)
        self.include_bound = include_bound

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            self.timestamp(record),
            f"{record.levelname:<8}",
            record.name,
            self.message(record),
        ]
        fields = self.fields(record, bound=self.include_bound)
        if fields:
            parts.append(" ".join(f"{key}={value}" for key, value in fields.items()))
        line = " | ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class WharfLogger:
    """Keyword-field front end for a stdlib logger.

    Example:
        >>> logger = get_logger("aiowharf.transport")
        >>> logger.debug("Response received", method="GET", status=200)
    """

    _configured: ClassVar[bool] = False

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _emit(
        self, level: int, msg: str, fields: dict[str, Any], exc_info: bool = False
    ) -> None:
        if self._logger.isEnabledFor(level):
            # stacklevel 3 attributes the record to the caller of debug()/info()/...
            self._logger.log(
                level, msg, exc_info=exc_info, extra={_FIELDS_ATTR: fields}, stacklevel=3
            )

    def debug(self, msg: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, msg, fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._emit(logging.INFO, msg, fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._emit(logging.WARNING, msg, fields)

    def error(self, msg: str, exc_info: bool = False, **fields: Any) -> None:
        self._emit(logging.ERROR, msg, fields, exc_info)

    @classmethod
    def configure(
        cls,
        level: LogLevel = LogLevel.INFO,
        format: str = "text",
        stream: TextIO | None = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Route every aiowharf logger to one handler.

        Args:
            level: Minimum level for the whole package
            format: 'text' or 'json'
            stream: Destination (stderr by default)
            masker: Credential masker used by the formatter
        """
        formatter = JsonFormatter(masker) if format == "json" else TextFormatter(masker)
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(formatter)

        root = logging.getLogger(ROOT_LOGGER)
        root.handlers[:] = [handler]
        root.setLevel(level.to_logging_level())
        root.propagate = False
        cls._configured = True


def get_logger(name: str) -> WharfLogger:
    """Get a logger under the ``aiowharf`` namespace.

    The first call installs a stderr handler at WHARF_LOG_LEVEL (WARNING
    when unset) unless ``WharfLogger.configure`` ran before.
    """
    if not WharfLogger._configured:
        WharfLogger.configure(LogLevel.from_env(LogLevel.WARNING))
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return WharfLogger(logging.getLogger(name))

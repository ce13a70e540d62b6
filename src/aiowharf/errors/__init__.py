"""错误体系：提供与守护进程错误约定对齐的结构化错误类型。

Error hierarchy for aiowharf.

Every failure surfaces as one of four kinds: connection (TransportError),
daemon (DaemonError), decode (DecodeError) or usage (UsageError).
"""

from aiowharf.errors.base import (
    DaemonError,
    DecodeError,
    ErrorContext,
    TransportError,
    UsageError,
    WharfError,
)
from aiowharf.errors.classification import (
    ErrorClass,
    classify_status,
    extract_error_message,
)

__all__ = [
    "DaemonError",
    "DecodeError",
    # Classification
    "ErrorClass",
    "ErrorContext",
    "TransportError",
    "UsageError",
    # Base errors
    "WharfError",
    "classify_status",
    "extract_error_message",
]

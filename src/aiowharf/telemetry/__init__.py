"""
Telemetry layer - structured logging.

Provides:
- WharfLogger: keyword-field logger with credential masking
- log_context: task-scoped fields attached to every record
"""

from aiowharf.telemetry.logger import (
    JsonFormatter,
    LogLevel,
    SensitiveDataMasker,
    TextFormatter,
    WharfLogger,
    current_log_fields,
    get_logger,
    log_context,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "SensitiveDataMasker",
    "TextFormatter",
    "WharfLogger",
    "current_log_fields",
    "get_logger",
    "log_context",
]

"""
Frames of a container's output stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class StreamType(IntEnum):
    """Discriminant byte of a multiplexed frame header."""

    STDIN = 0
    STDOUT = 1
    STDERR = 2


@dataclass(frozen=True)
class StreamFrame:
    """One chunk of output labeled with the stream it came from."""

    stream: StreamType
    payload: bytes

    @property
    def text(self) -> str:
        """Payload decoded as UTF-8 (invalid bytes replaced)."""
        return self.payload.decode("utf-8", errors="replace")

    def __str__(self) -> str:
        return self.text

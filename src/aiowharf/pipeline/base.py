"""
Base abstractions for the pipeline layer.

Defines the interface every response stream decoder implements.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class Decoder(ABC):
    """Abstract decoder that converts a byte stream into records.

    Decoders are lazy and forward-only: they pull chunks from the
    underlying response as the consumer iterates, hold no more than one
    partial record in memory, and cannot be restarted. Chunk boundaries
    carry no meaning; a record may arrive split across any number of
    chunks.
    """

    @abstractmethod
    def decode(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[Any]:
        """Decode a byte stream.

        Args:
            byte_stream: Async iterator of raw bytes

        Yields:
            Decoded records
        """
        ...

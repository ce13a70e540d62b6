"""
Pipeline layer - decoding daemon responses.

- decode_json: JSON bodies into typed records
- MultiplexedStreamDecoder: framed stdout/stderr of logs, attach and exec
- RawStreamDecoder: unframed output of TTY containers
- JsonLinesDecoder: progress streams of pull, import and build
"""

from aiowharf.pipeline.base import Decoder
from aiowharf.pipeline.decode import (
    FRAME_HEADER_SIZE,
    JsonLinesDecoder,
    MultiplexedStreamDecoder,
    RawStreamDecoder,
    decode_json,
    decode_stream,
)

__all__ = [
    "FRAME_HEADER_SIZE",
    "Decoder",
    "JsonLinesDecoder",
    "MultiplexedStreamDecoder",
    "RawStreamDecoder",
    "decode_json",
    "decode_stream",
]

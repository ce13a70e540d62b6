"""
Response decoders.

Implements:
- decode_json: one JSON document into a typed record (or list of records)
- MultiplexedStreamDecoder: the daemon's framed stdout/stderr stream
- RawStreamDecoder: output of TTY containers, which is not framed
- JsonLinesDecoder: newline-delimited JSON (pull, build and import progress)
"""

from __future__ import annotations

import json
import struct
from functools import lru_cache
from typing import TYPE_CHECKING, Any, TypeVar, get_args, get_origin

from pydantic import TypeAdapter, ValidationError

from aiowharf.errors import DecodeError
from aiowharf.pipeline.base import Decoder
from aiowharf.types.stream import StreamFrame, StreamType

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

T = TypeVar("T")

# type (1 byte), reserved (3 bytes), payload length (4 bytes, big-endian)
FRAME_HEADER = struct.Struct(">B3xI")
FRAME_HEADER_SIZE = FRAME_HEADER.size


@lru_cache(maxsize=128)
def _adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def _model_name(model: Any) -> str:
    if get_origin(model) is list:
        (item,) = get_args(model)
        return f"list[{getattr(item, '__name__', item)}]"
    return getattr(model, "__name__", str(model))


def _parse_json(data: bytes | bytearray | str) -> Any:
    if isinstance(data, str):
        text = data
    else:
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"Response is not valid UTF-8 at byte {e.start}", offset=e.start
            ) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        offset = e.pos if isinstance(data, str) else len(text[: e.pos].encode("utf-8"))
        raise DecodeError(f"Malformed JSON at byte {offset}: {e.msg}", offset=offset) from e


def decode_json(model: type[T] | Any, data: bytes | bytearray | str | Any) -> T:
    """Decode a JSON document into a typed record.

    Args:
        model: A model class, or ``list[Model]`` for array responses
        data: Raw response body, or an already-parsed JSON value

    Returns:
        The validated record

    Raises:
        DecodeError: If the body is not JSON (with the byte offset) or does
            not match the model (naming the offending field)

    Example:
        >>> summaries = decode_json(list[ContainerSummary], response.content)
    """
    if isinstance(data, (bytes, bytearray, str)):
        data = _parse_json(data)

    try:
        return _adapter(model).validate_python(data)
    except ValidationError as e:
        raise DecodeError.from_validation(_model_name(model), e) from e


class MultiplexedStreamDecoder(Decoder):
    """Demultiplexer for the daemon's framed output stream.

    Each frame is an 8-byte header followed by the payload:
    ```
    [type, 0, 0, 0, size3, size2, size1, size0] payload...
    ```
    ``type`` is 0 (stdin), 1 (stdout) or 2 (stderr); ``size`` is the
    big-endian payload length. Zero-length frames are yielded as-is.
    """

    async def decode(
        self, byte_stream: AsyncIterator[bytes]
    ) -> AsyncIterator[StreamFrame]:
        """Decode frames until the stream ends.

        Raises:
            DecodeError: If the stream ends inside a header or a payload,
                or a header names an unknown stream type. ``offset`` is the
                stream position of the offending frame.
        """
        buffer = bytearray()
        offset = 0

        async for chunk in byte_stream:
            buffer += chunk

            while len(buffer) >= FRAME_HEADER_SIZE:
                stream, size = self._read_header(buffer, offset)
                end = FRAME_HEADER_SIZE + size
                if len(buffer) < end:
                    break
                payload = bytes(buffer[FRAME_HEADER_SIZE:end])
                del buffer[:end]
                offset += end
                yield StreamFrame(stream, payload)

        if not buffer:
            return
        if len(buffer) < FRAME_HEADER_SIZE:
            raise DecodeError(
                f"Stream ended inside a frame header at byte {offset}: "
                f"got {len(buffer)} of {FRAME_HEADER_SIZE} bytes",
                offset=offset,
            )
        _, size = self._read_header(buffer, offset)
        raise DecodeError(
            f"Stream ended inside a frame payload at byte {offset}: "
            f"expected {size} bytes, got {len(buffer) - FRAME_HEADER_SIZE}",
            offset=offset,
        )

    @staticmethod
    def _read_header(buffer: bytearray, offset: int) -> tuple[StreamType, int]:
        kind, size = FRAME_HEADER.unpack_from(buffer)
        try:
            stream = StreamType(kind)
        except ValueError:
            raise DecodeError(
                f"Unknown stream type {kind} in frame header at byte {offset}",
                offset=offset,
            ) from None
        return stream, size


class RawStreamDecoder(Decoder):
    """Pass-through decoder for TTY output.

    Containers with a TTY write a single unframed stream; every chunk is
    reported as stdout.
    """

    async def decode(
        self, byte_stream: AsyncIterator[bytes]
    ) -> AsyncIterator[StreamFrame]:
        async for chunk in byte_stream:
            if chunk:
                yield StreamFrame(StreamType.STDOUT, bytes(chunk))


class JsonLinesDecoder(Decoder):
    """JSON Lines (NDJSON) decoder.

    Parses newline-delimited JSON:
    ```
    {"status": "Pulling from library/alpine", "id": "3.19"}
    {"status": "Download complete", "id": "4abcf2066143"}
    ```

    Each line is decoded independently. Blank lines are skipped but still
    counted, so reported line numbers match the raw stream.
    """

    def __init__(
        self,
        model: type[Any] | None = None,
        *,
        on_error: Callable[[DecodeError], None] | None = None,
    ) -> None:
        """Initialize JSON Lines decoder.

        Args:
            model: Record type for each line; plain dicts when None
            on_error: Called with the error for a malformed line, after
                which decoding continues. Without it the error is raised.
        """
        self._model = model
        self._on_error = on_error

    def _decode_line(self, line: bytes, number: int) -> Any:
        try:
            value = _parse_json(line)
            if self._model is not None:
                value = decode_json(self._model, value)
        except DecodeError as e:
            raise DecodeError(
                f"Line {number}: {e.message}",
                field=e.field,
                offset=e.offset,
                line=number,
            ) from e
        return value

    def _report(self, error: DecodeError) -> None:
        if self._on_error is None:
            raise error
        self._on_error(error)

    async def decode(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[Any]:
        """Decode JSON Lines byte stream into records.

        Raises:
            DecodeError: For a malformed line, naming its 1-based number,
                unless ``on_error`` was given
        """
        buffer = bytearray()
        number = 0

        async for chunk in byte_stream:
            buffer += chunk

            while (newline := buffer.find(b"\n")) != -1:
                line = bytes(buffer[:newline]).strip()
                del buffer[: newline + 1]
                number += 1
                if not line:
                    continue
                try:
                    record = self._decode_line(line, number)
                except DecodeError as e:
                    self._report(e)
                    continue
                yield record

        # Last line without a trailing newline
        line = bytes(buffer).strip()
        if line:
            number += 1
            try:
                record = self._decode_line(line, number)
            except DecodeError as e:
                self._report(e)
                return
            yield record


def decode_stream(
    byte_stream: AsyncIterator[bytes], tty: bool = False
) -> AsyncIterator[StreamFrame]:
    """Decode a container output stream.

    Args:
        byte_stream: Raw response body chunks
        tty: True if the container was created with a TTY (unframed output)

    Returns:
        Lazy iterator of frames. The connection belongs to the response,
        so release it by leaving the response scope.

    Example:
        >>> async for frame in decode_stream(response.aiter_bytes()):
        ...     print(frame.stream.name, frame.text)
    """
    decoder: Decoder = RawStreamDecoder() if tty else MultiplexedStreamDecoder()
    return decoder.decode(byte_stream)

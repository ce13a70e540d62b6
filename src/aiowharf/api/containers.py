"""容器资源句柄：列表、创建、生命周期操作、归档和输出流。

Container handles.

A ``Container`` is a local handle on a remote container: an immutable id
plus the last snapshot fetched from the daemon. The snapshot goes stale
after any mutating call; call ``inspect()`` to refresh it.
"""

from __future__ import annotations

import base64
import binascii
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from aiowharf.errors import DecodeError, UsageError
from aiowharf.opts.containers import AttachOpts, ContainerLogsOpts
from aiowharf.pipeline import decode_json, decode_stream
from aiowharf.telemetry import get_logger
from aiowharf.types.containers import (
    ContainerCreated,
    ContainerInspect,
    ContainerSummary,
    ExecCreated,
    FileInfo,
    Process,
    TopResult,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from aiowharf.client.core import Docker
    from aiowharf.opts.containers import (
        ContainerBuilderOpts,
        ExecOpts,
        ListContainersOpts,
        RmContainerOpts,
        UploadArchiveOpts,
    )
    from aiowharf.transport import HttpTransport
    from aiowharf.types.stream import StreamFrame

logger = get_logger("aiowharf.containers")

PATH_STAT_HEADER = "X-Docker-Container-Path-Stat"

# Descriptions used when the daemon answers without a message
_CONTAINER_ERRORS = {404: "no such container", 500: "internal server error"}
_START_ERRORS = {**_CONTAINER_ERRORS, 304: "container already started"}
_STOP_ERRORS = {**_CONTAINER_ERRORS, 304: "container already stopped"}
_RENAME_ERRORS = {**_CONTAINER_ERRORS, 409: "name already in use"}
_REMOVE_ERRORS = {**_CONTAINER_ERRORS, 400: "bad parameter", 409: "conflict"}
_CREATE_ERRORS = {
    400: "bad parameter",
    404: "no such image",
    409: "conflict",
    500: "server error",
}
_ARCHIVE_ERRORS = {
    400: "bad parameter",
    404: "container or path does not exist",
    500: "server error",
}
_UPLOAD_ERRORS = {
    **_ARCHIVE_ERRORS,
    403: "permission denied, the volume or container rootfs is marked as read-only",
}
_EXEC_CREATE_ERRORS = {**_CONTAINER_ERRORS, 409: "container is paused"}
_EXEC_START_ERRORS = {404: "no such exec instance", 409: "container is stopped or paused"}


def _require(value: Any, field: str, what: str) -> Any:
    if not value:
        raise UsageError(f"{what} must not be empty", field=field, actual=value)
    return value


class Container:
    """Handle on one container.

    Example:
        >>> container = docker.container("f2ba9c7b3e24")
        >>> await container.start()
        >>> info = await container.inspect()
        >>> async for frame in container.logs():
        ...     print(frame.stream.name, frame.text, end="")
    """

    def __init__(
        self,
        docker: Docker,
        id: str,
        data: ContainerSummary | ContainerInspect | None = None,
    ) -> None:
        self._docker = docker
        self._id = _require(id, "id", "Container id")
        self._data = data

    @property
    def id(self) -> str:
        return self._id

    @property
    def data(self) -> ContainerSummary | ContainerInspect | None:
        """Last snapshot fetched from the daemon (list entry or inspect result)."""
        return self._data

    @property
    def _transport(self) -> HttpTransport:
        return self._docker.transport

    def _path(self, action: str | None = None) -> str:
        path = f"/containers/{quote(self._id, safe='')}"
        return f"{path}/{action}" if action else path

    def __repr__(self) -> str:
        return f"Container(id={self._id!r})"

    async def _post_action(
        self,
        action: str,
        errors: dict[int, str],
        params: dict[str, Any] | None = None,
    ) -> None:
        await self._transport.post(self._path(action), params=params, fallback=errors)
        logger.debug("Container action completed", container=self._id, action=action)

    async def start(self) -> None:
        """Start the container.

        Raises:
            DaemonError: 304 if already started, 404 if it does not exist
        """
        await self._post_action("start", _START_ERRORS)

    async def stop(self, timeout: int | None = None) -> None:
        """Stop the container.

        Args:
            timeout: Seconds to wait before killing it
        """
        await self._post_action("stop", _STOP_ERRORS, {"t": timeout})

    async def restart(self, timeout: int | None = None) -> None:
        await self._post_action("restart", _CONTAINER_ERRORS, {"t": timeout})

    async def kill(self, signal: str | None = None) -> None:
        """Send a signal (default SIGKILL)."""
        await self._post_action("kill", _CONTAINER_ERRORS, {"signal": signal})

    async def pause(self) -> None:
        await self._post_action("pause", _CONTAINER_ERRORS)

    async def unpause(self) -> None:
        await self._post_action("unpause", _CONTAINER_ERRORS)

    async def rename(self, new_name: str) -> None:
        """Rename the container.

        The handle keeps its id; the name is only a label on the daemon.

        Raises:
            UsageError: If ``new_name`` is empty
            DaemonError: 409 if the name is already in use
        """
        _require(new_name, "name", "New container name")
        await self._post_action("rename", _RENAME_ERRORS, {"name": new_name})

    async def remove(self, opts: RmContainerOpts | None = None) -> None:
        """Remove the container."""
        params = opts.to_query() if opts is not None else None
        await self._transport.delete(self._path(), params=params, fallback=_REMOVE_ERRORS)
        logger.debug("Container removed", container=self._id)

    async def inspect(self) -> ContainerInspect:
        """Fetch the container's full document and store it in ``data``."""
        response = await self._transport.get(self._path("json"), fallback=_CONTAINER_ERRORS)
        self._data = decode_json(ContainerInspect, response.content)
        return self._data

    async def top(self, ps_args: str | None = None) -> list[Process]:
        """List processes running in the container.

        Args:
            ps_args: Arguments passed to ``ps``, e.g. ``"aux"``
        """
        response = await self._transport.get(
            self._path("top"), params={"ps_args": ps_args}, fallback=_CONTAINER_ERRORS
        )
        return decode_json(TopResult, response.content).to_processes()

    async def archive(self, path: str) -> bytes:
        """Download a path from the container as a tar archive."""
        _require(path, "path", "Archive path")
        response = await self._transport.get(
            self._path("archive"), params={"path": path}, fallback=_ARCHIVE_ERRORS
        )
        return response.content

    @asynccontextmanager
    async def archive_stream(self, path: str) -> AsyncIterator[AsyncIterator[bytes]]:
        """Stream a path from the container as tar chunks.

        The connection is held until the block exits.

        Example:
            >>> async with container.archive_stream("/etc") as chunks:
            ...     async for chunk in chunks:
            ...         out.write(chunk)
        """
        _require(path, "path", "Archive path")
        async with self._transport.stream(
            "GET", self._path("archive"), params={"path": path}, fallback=_ARCHIVE_ERRORS
        ) as response:
            yield response.aiter_bytes()

    async def upload_archive(self, archive: bytes, opts: UploadArchiveOpts) -> None:
        """Extract a tar archive into a directory of the container.

        Raises:
            UsageError: If ``opts`` has no target path
            DaemonError: 403 if the target is read-only
        """
        _require(opts.get("path"), "path", "Upload path")
        await self._transport.request(
            "PUT",
            self._path("archive"),
            params=opts.to_query(),
            content=archive,
            headers={"Content-Type": "application/x-tar"},
            fallback=_UPLOAD_ERRORS,
        )
        logger.debug("Archive uploaded", container=self._id, size=len(archive))

    async def file_info(self, path: str) -> FileInfo:
        """Stat a path inside the container.

        Raises:
            DecodeError: If the daemon's stat header is missing or malformed
        """
        _require(path, "path", "File path")
        response = await self._transport.request(
            "HEAD", self._path("archive"), params={"path": path}, fallback=_ARCHIVE_ERRORS
        )
        header = response.headers.get(PATH_STAT_HEADER)
        if header is None:
            raise DecodeError(
                f"Response has no {PATH_STAT_HEADER} header", field=PATH_STAT_HEADER
            )
        try:
            raw = base64.b64decode(header, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(
                f"{PATH_STAT_HEADER} header is not valid base64", field=PATH_STAT_HEADER
            ) from e
        return decode_json(FileInfo, raw)

    async def logs(
        self, opts: ContainerLogsOpts | None = None, *, tty: bool = False
    ) -> AsyncIterator[StreamFrame]:
        """Stream the container's output.

        Args:
            opts: Log options; stdout and stderr are requested by default
            tty: True if the container has a TTY (output is not multiplexed)

        Yields:
            Output frames in the order the daemon wrote them

        Raises:
            DecodeError: If the stream is truncated mid-frame
        """
        if opts is None:
            opts = ContainerLogsOpts().stdout(True).stderr(True)
        async with self._transport.stream(
            "GET", self._path("logs"), params=opts.to_query(), fallback=_CONTAINER_ERRORS
        ) as response:
            async for frame in decode_stream(response.aiter_bytes(), tty=tty):
                yield frame

    async def attach(
        self, opts: AttachOpts | None = None, *, tty: bool = False
    ) -> AsyncIterator[StreamFrame]:
        """Attach to the container's output.

        Only output is read; nothing is written to the container's stdin.
        """
        if opts is None:
            opts = AttachOpts().stream(True).stdout(True).stderr(True)
        async with self._transport.stream(
            "POST", self._path("attach"), params=opts.to_query(), fallback=_CONTAINER_ERRORS
        ) as response:
            async for frame in decode_stream(response.aiter_bytes(), tty=tty):
                yield frame

    async def create_exec(self, opts: ExecOpts) -> str:
        """Create an exec instance and return its id."""
        _require(opts.get("Cmd"), "Cmd", "Exec command")
        response = await self._transport.post(
            self._path("exec"), json=opts.to_body(), fallback=_EXEC_CREATE_ERRORS
        )
        created = decode_json(ExecCreated, response.content)
        logger.debug("Exec created", container=self._id, exec_id=created.id)
        return created.id

    async def exec(self, opts: ExecOpts) -> AsyncIterator[StreamFrame]:
        """Run a command in the container and stream its output.

        A detached exec yields nothing and returns once the daemon has
        started the process.
        """
        exec_id = await self.create_exec(opts)
        path = f"/exec/{quote(exec_id, safe='')}/start"
        if opts.is_detached:
            await self._transport.post(
                path, json=opts.to_start_body(), fallback=_EXEC_START_ERRORS
            )
            return
        async with self._transport.stream(
            "POST", path, json=opts.to_start_body(), fallback=_EXEC_START_ERRORS
        ) as response:
            async for frame in decode_stream(response.aiter_bytes(), tty=opts.is_tty):
                yield frame


class Containers:
    """Container collection of one client."""

    def __init__(self, docker: Docker) -> None:
        self._docker = docker

    async def list(self, opts: ListContainersOpts | None = None) -> list[Container]:
        """List containers.

        Each handle carries its list entry as ``data``.
        """
        params = opts.to_query() if opts is not None else None
        response = await self._docker.transport.get(
            "/containers/json", params=params, fallback={400: "bad parameter"}
        )
        summaries = decode_json(list[ContainerSummary], response.content)
        return [Container(self._docker, summary.id, summary) for summary in summaries]

    def get(self, id: str) -> Container:
        """Return a handle without contacting the daemon."""
        return Container(self._docker, id)

    async def create(self, name: str, opts: ContainerBuilderOpts) -> Container:
        """Create a container.

        Args:
            name: Container name
            opts: Creation options (image, command, host config, ...)

        Returns:
            Handle with ``data`` unset until ``inspect()`` is called

        Raises:
            UsageError: If ``name`` is empty
            DaemonError: 404 if the image does not exist, 409 on a name clash
        """
        _require(name, "name", "Container name")
        response = await self._docker.transport.post(
            "/containers/create",
            params={"name": name},
            json=opts.to_body(),
            fallback=_CREATE_ERRORS,
        )
        created = decode_json(ContainerCreated, response.content)
        for warning in created.warnings or []:
            logger.warning("Daemon warning on create", container=created.id, warning=warning)
        logger.debug("Container created", container=created.id, name=name)
        return Container(self._docker, created.id)

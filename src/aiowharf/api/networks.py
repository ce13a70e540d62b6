"""
Network handles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from aiowharf.api.containers import Container
from aiowharf.errors import UsageError
from aiowharf.opts.networks import ListNetworksOpts
from aiowharf.pipeline import decode_json
from aiowharf.telemetry import get_logger
from aiowharf.types.networks import NetworkCreated, NetworksPruned, NetworkSummary

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aiowharf.client.core import Docker
    from aiowharf.opts.networks import NetworkCreateOpts

logger = get_logger("aiowharf.networks")

_NETWORK_ERRORS = {404: "no such network", 500: "server error"}
_REMOVE_ERRORS = {
    **_NETWORK_ERRORS,
    403: "operation not supported for pre-defined networks",
}
_CREATE_ERRORS = {
    400: "bad parameter",
    403: "operation not supported for pre-defined networks",
    404: "plugin not found",
    409: "network with the same name already exists",
    500: "server error",
}
_CONNECT_ERRORS = {
    400: "bad parameter",
    403: "operation not supported for swarm scoped networks",
    404: "network or container is not found",
    500: "server error",
}


def _container_id(container: Container | str) -> str:
    container_id = container.id if isinstance(container, Container) else container
    if not container_id:
        raise UsageError("Container id must not be empty", field="container")
    return container_id


class Network:
    """Handle on one network."""

    def __init__(
        self, docker: Docker, id: str, data: NetworkSummary | None = None
    ) -> None:
        if not id:
            raise UsageError("Network id must not be empty", field="id")
        self._docker = docker
        self._id = id
        self._data = data

    @property
    def id(self) -> str:
        return self._id

    @property
    def data(self) -> NetworkSummary | None:
        return self._data

    def _path(self, action: str | None = None) -> str:
        path = f"/networks/{quote(self._id, safe='')}"
        return f"{path}/{action}" if action else path

    def __repr__(self) -> str:
        return f"Network(id={self._id!r})"

    async def inspect(self) -> NetworkSummary:
        """Fetch the network's document and store it in ``data``."""
        response = await self._docker.transport.get(self._path(), fallback=_NETWORK_ERRORS)
        self._data = decode_json(NetworkSummary, response.content)
        return self._data

    async def remove(self) -> None:
        await Networks(self._docker).remove(self._id)

    async def connect(self, container: Container | str) -> None:
        """Connect a container to this network."""
        container_id = _container_id(container)
        await self._docker.transport.post(
            self._path("connect"),
            json={"Container": container_id},
            fallback=_CONNECT_ERRORS,
        )
        logger.debug("Container connected", network=self._id, container=container_id)

    async def disconnect(self, container: Container | str, force: bool = False) -> None:
        """Disconnect a container from this network."""
        container_id = _container_id(container)
        await self._docker.transport.post(
            self._path("disconnect"),
            json={"Container": container_id, "Force": force},
            fallback=_CONNECT_ERRORS,
        )
        logger.debug("Container disconnected", network=self._id, container=container_id)


class Networks:
    """Network collection of one client."""

    def __init__(self, docker: Docker) -> None:
        self._docker = docker

    async def list(self, opts: ListNetworksOpts | None = None) -> list[Network]:
        params = opts.to_query() if opts is not None else None
        response = await self._docker.transport.get(
            "/networks", params=params, fallback={500: "server error"}
        )
        summaries = decode_json(list[NetworkSummary], response.content)
        return [Network(self._docker, summary.id, summary) for summary in summaries]

    def get(self, id: str) -> Network:
        """Return a handle without contacting the daemon."""
        return Network(self._docker, id)

    async def create(self, name: str, opts: NetworkCreateOpts | None = None) -> Network:
        """Create a network.

        Returns:
            Handle with ``data`` unset until ``inspect()`` is called
        """
        if not name:
            raise UsageError("Network name must not be empty", field="name")
        body: dict[str, Any] = {"Name": name}
        if opts is not None:
            body.update(opts.to_body())
        response = await self._docker.transport.post(
            "/networks/create", json=body, fallback=_CREATE_ERRORS
        )
        created = decode_json(NetworkCreated, response.content)
        if created.warning:
            logger.warning("Daemon warning on create", network=created.id, warning=created.warning)
        logger.debug("Network created", network=created.id, name=name)
        return Network(self._docker, created.id)

    async def remove(self, id: str) -> None:
        """Remove a network.

        Raises:
            DaemonError: 403 for the daemon's pre-defined networks
        """
        if not id:
            raise UsageError("Network id must not be empty", field="id")
        await self._docker.transport.delete(
            f"/networks/{quote(id, safe='')}", fallback=_REMOVE_ERRORS
        )
        logger.debug("Network removed", network=id)

    async def prune(self, filters: Mapping[str, list[str]] | None = None) -> list[str]:
        """Delete unused networks and return their names."""
        opts = ListNetworksOpts()
        if filters:
            opts.filters(filters)
        response = await self._docker.transport.post(
            "/networks/prune", params=opts.to_query(), fallback={500: "server error"}
        )
        return decode_json(NetworksPruned, response.content).networks_deleted or []

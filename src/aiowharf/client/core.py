"""核心客户端实现：连接守护进程并提供容器、镜像和网络的资源句柄。

Core Docker client implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from aiowharf.api import Container, Containers, Image, Images, Network, Networks
from aiowharf.pipeline import decode_json
from aiowharf.telemetry import get_logger
from aiowharf.transport import HttpTransport, parse_daemon_url

if TYPE_CHECKING:
    from aiowharf.client.builder import DockerBuilder
    from aiowharf.opts.auth import AuthOpts
    from aiowharf.transport import DaemonAddress, PoolConfig, PoolStats

logger = get_logger("aiowharf.client")


class Docker:
    """Async client for one container daemon.

    The client owns a single pooled transport. Handles returned by
    ``containers()``, ``images()`` and the other accessors borrow it, so
    they are cheap to create and valid until the client is closed. Any
    number of calls may run concurrently on one client.

    Example:
        >>> async with Docker("http://127.0.0.1:2375") as docker:
        ...     for container in await docker.containers().list():
        ...         print(container.id, container.data.status)

        >>> # Unix socket, pinned API version
        >>> docker = (
        ...     Docker.builder()
        ...     .base_url("unix:///var/run/docker.sock")
        ...     .api_version("1.43")
        ...     .build()
        ... )
    """

    def __init__(
        self,
        base_url: str | DaemonAddress,
        *,
        api_version: str | None = None,
        timeout: float | None = None,
        pool: PoolConfig | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Daemon address (``http://``, ``https://``, ``tcp://``
                or ``unix://``)
            api_version: Optional API version prefix, e.g. "1.43"
            timeout: Read/write timeout in seconds
            pool: Connection pool limits and timeouts

        Raises:
            UsageError: If the address cannot be parsed
        """
        address = parse_daemon_url(base_url) if isinstance(base_url, str) else base_url
        self._transport = HttpTransport(
            address, api_version=api_version, timeout=timeout, pool=pool
        )
        logger.debug("Client created", daemon=str(address), api_version=api_version)

    @classmethod
    def builder(cls) -> DockerBuilder:
        """Get a builder for creating clients.

        Returns:
            DockerBuilder instance
        """
        from aiowharf.client.builder import DockerBuilder

        return DockerBuilder()

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def address(self) -> DaemonAddress:
        return self._transport.address

    @property
    def stats(self) -> PoolStats:
        """Request and stream counters of the transport."""
        return self._transport.stats

    def containers(self) -> Containers:
        return Containers(self)

    def container(self, id: str) -> Container:
        """Handle on one container (no request is made)."""
        return Container(self, id)

    def images(self) -> Images:
        return Images(self)

    def image(self, name: str) -> Image:
        """Handle on one image (no request is made)."""
        return Image(self, name)

    def networks(self) -> Networks:
        return Networks(self)

    def network(self, id: str) -> Network:
        """Handle on one network (no request is made)."""
        return Network(self, id)

    async def version(self) -> dict[str, Any]:
        """Daemon and API version information."""
        response = await self._transport.get("/version", fallback={500: "server error"})
        return decode_json(dict[str, Any], response.content)

    async def info(self) -> dict[str, Any]:
        """System-wide information about the daemon."""
        response = await self._transport.get("/info", fallback={500: "server error"})
        return decode_json(dict[str, Any], response.content)

    async def ping(self) -> bool:
        """Check that the daemon answers.

        Returns:
            True if the daemon replied ``OK``

        Raises:
            TransportError: If the daemon cannot be reached
        """
        response = await self._transport.get("/_ping", fallback={500: "server error"})
        return response.text.strip() == "OK"

    async def authenticate(self, auth: AuthOpts) -> str:
        """Validate registry credentials with the daemon.

        Returns:
            Identity token to use instead of the password, or "" if the
            registry issued none

        Raises:
            DaemonError: 401 if the credentials are rejected
        """
        response = await self._transport.post(
            "/auth",
            json=auth.to_body(),
            fallback={401: "auth error", 500: "server error"},
        )
        result = decode_json(dict[str, Any], response.content)
        logger.debug(
            "Registry login succeeded",
            server=auth.get("serveraddress"),
            status=result.get("Status"),
        )
        return result.get("IdentityToken") or ""

    async def close(self) -> None:
        """Close the client and release every pooled connection."""
        await self._transport.close()

    async def __aenter__(self) -> Docker:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Docker({str(self.address)!r})"

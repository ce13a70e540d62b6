"""
Builder for fluent client construction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from aiowharf.errors import UsageError

if TYPE_CHECKING:
    from aiowharf.client.core import Docker
    from aiowharf.transport import PoolConfig


class DockerBuilder:
    """Builder for creating Docker clients with custom configuration.

    Example:
        >>> docker = (
        ...     DockerBuilder()
        ...     .base_url("tcp://10.0.0.5:2375")
        ...     .api_version("1.43")
        ...     .timeout(30)
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        """Initialize the builder."""
        self._base_url: str | None = None
        self._api_version: str | None = None
        self._timeout: float | None = None
        self._pool: PoolConfig | None = None

    def base_url(self, url: str) -> DockerBuilder:
        """Set the daemon address.

        Args:
            url: ``http://``, ``https://``, ``tcp://`` or ``unix://`` address

        Returns:
            Self for chaining
        """
        self._base_url = url
        return self

    def api_version(self, version: str) -> DockerBuilder:
        """Pin the API version, e.g. "1.43".

        Returns:
            Self for chaining
        """
        self._api_version = version
        return self

    def timeout(self, seconds: float) -> DockerBuilder:
        """Set request timeout.

        Args:
            seconds: Timeout in seconds

        Returns:
            Self for chaining
        """
        self._timeout = seconds
        return self

    def pool(self, config: PoolConfig) -> DockerBuilder:
        """Set connection pool limits.

        Returns:
            Self for chaining
        """
        self._pool = config
        return self

    def build(self) -> Docker:
        """Build the client.

        Raises:
            UsageError: If no base URL was set, or it cannot be parsed
        """
        from aiowharf.client.core import Docker

        if not self._base_url:
            raise UsageError(
                "Docker client needs a base URL", field="base_url"
            ).with_hint("call .base_url('unix:///var/run/docker.sock')")

        return Docker(
            self._base_url,
            api_version=self._api_version,
            timeout=self._timeout,
            pool=self._pool,
        )

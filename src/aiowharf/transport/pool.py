"""
Connection pool settings and counters for the HTTP transport.

The pool itself is httpx.AsyncClient's: each request checks a connection
out and returns it when its response is closed. ``PoolConfig`` sizes it and
sets its timeouts, ``PoolStats`` counts what went through it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

import httpx


@dataclass(frozen=True)
class PoolConfig:
    """Limits and timeouts of one transport's pool.

    Timeouts are in seconds. A ``read_timeout`` of None waits forever,
    which followed log streams need.
    """

    max_connections: int = 100
    max_keepalive_connections: int = 20
    keepalive_expiry: float = 30.0
    connect_timeout: float = 10.0
    read_timeout: float | None = 60.0
    write_timeout: float = 60.0
    pool_timeout: float = 30.0

    @classmethod
    def default(cls) -> PoolConfig:
        return cls()

    @classmethod
    def streaming(cls) -> PoolConfig:
        """Settings for clients that mostly follow logs or attach."""
        return cls(read_timeout=None)

    def with_timeout(self, seconds: float) -> PoolConfig:
        """Copy with read and write timeouts set to ``seconds``.

        The connect timeout is lowered too when it would exceed ``seconds``.
        """
        return replace(
            self,
            connect_timeout=min(self.connect_timeout, seconds),
            read_timeout=seconds,
            write_timeout=seconds,
        )

    def to_httpx_limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_connections=self.max_connections,
            max_keepalive_connections=self.max_keepalive_connections,
            keepalive_expiry=self.keepalive_expiry,
        )

    def to_httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
            pool=self.pool_timeout,
        )


@dataclass
class PoolStats:
    """Request and stream counters of one transport.

    ``requests_failed`` counts both network failures and error statuses.
    A stream counts as closed once its connection is back in the pool.
    """

    requests_total: int = 0
    requests_successful: int = 0
    requests_failed: int = 0
    streams_opened: int = 0
    streams_closed: int = 0

    @property
    def streams_active(self) -> int:
        return self.streams_opened - self.streams_closed

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "streams_active": self.streams_active}

"""
Daemon address parsing.

Turns the user-supplied address string into the pieces the HTTP transport
needs: the base URL httpx talks to and, for Unix sockets, the socket path.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from aiowharf.errors import UsageError

_DEFAULT_PORTS: dict[str, int] = {
    "http": 2375,
    "tcp": 2375,
    "https": 2376,
}


@dataclass(frozen=True)
class DaemonAddress:
    """Parsed daemon address.

    Attributes:
        scheme: Wire scheme ('http', 'https' or 'unix')
        host: Host name or IP ('localhost' for Unix sockets)
        port: TCP port (None for Unix sockets)
        socket_path: Filesystem path of the Unix socket, if any
    """

    scheme: str
    host: str
    port: int | None = None
    socket_path: str | None = None

    @property
    def is_unix(self) -> bool:
        return self.socket_path is not None

    @property
    def base_url(self) -> str:
        """URL handed to httpx as the client base URL."""
        if self.is_unix:
            return "http://localhost"
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}"

    def __str__(self) -> str:
        if self.is_unix:
            return f"unix://{self.socket_path}"
        return self.base_url


def parse_daemon_url(address: str) -> DaemonAddress:
    """Parse a daemon address string.

    Supported forms:
        - ``http://host[:port]`` and ``https://host[:port]``
        - ``tcp://host[:port]`` (plain HTTP)
        - ``unix:///path/to/docker.sock``

    Args:
        address: Address string

    Returns:
        DaemonAddress

    Raises:
        UsageError: If the address cannot be parsed into scheme/host/port
    """
    if not address or not address.strip():
        raise UsageError("Daemon address is empty", field="base_url")

    address = address.strip()
    if "://" not in address:
        raise UsageError(
            f"Daemon address has no scheme: {address!r}",
            field="base_url",
            actual=address,
        ).with_hint("use http://host:port, https://host:port or unix:///path")

    scheme, _, rest = address.partition("://")
    scheme = scheme.lower()

    if scheme == "unix":
        if not rest:
            raise UsageError(
                f"Unix socket address has no path: {address!r}",
                field="base_url",
                actual=address,
            )
        path = rest if rest.startswith("/") else f"/{rest}"
        return DaemonAddress(scheme="unix", host="localhost", socket_path=path)

    if scheme not in _DEFAULT_PORTS:
        raise UsageError(
            f"Unsupported daemon address scheme {scheme!r}",
            field="base_url",
            actual=address,
        )

    parts = urlsplit(f"//{rest}")
    try:
        port = parts.port
    except ValueError as e:
        raise UsageError(
            f"Invalid port in daemon address {address!r}",
            field="base_url",
            actual=address,
        ) from e

    if not parts.hostname:
        raise UsageError(
            f"Daemon address has no host: {address!r}",
            field="base_url",
            actual=address,
        )
    if parts.path not in ("", "/") or parts.query or parts.fragment:
        raise UsageError(
            f"Daemon address must not carry a path or query: {address!r}",
            field="base_url",
            actual=address,
        )

    return DaemonAddress(
        scheme="http" if scheme == "tcp" else scheme,
        host=parts.hostname,
        port=port if port is not None else _DEFAULT_PORTS[scheme],
    )

"""HTTP 传输层：基于 httpx 的异步 HTTP 客户端，支持流式传输和连接池。

HTTP transport using httpx for async requests to the daemon.

Provides:
- One pooled httpx.AsyncClient per transport (TCP or Unix socket)
- Buffered requests and scoped streaming responses over one send path
- Translation of daemon error bodies into DaemonError
- Translation of network failures into TransportError
"""

from __future__ import annotations

import json as json_module
import os
import time
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING, Any

import httpx

from aiowharf.errors import DaemonError, TransportError, UsageError
from aiowharf.telemetry import get_logger
from aiowharf.transport.address import DaemonAddress, parse_daemon_url
from aiowharf.transport.pool import PoolConfig, PoolStats

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

logger = get_logger("aiowharf.transport")

_UA_VERSION: str | None = None


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("WHARF_HTTP_TRUST_ENV", "0") == "1"


def _env_timeout() -> float | None:
    raw = os.getenv("WHARF_HTTP_TIMEOUT_SECS")
    if raw:
        with suppress(ValueError):
            return float(raw)
    return None


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            from importlib.metadata import PackageNotFoundError, version

            _UA_VERSION = version("aiowharf")
        except PackageNotFoundError:
            _UA_VERSION = "0.0.0"
    return _UA_VERSION


def encode_query_value(value: Any) -> str:
    """Encode one query parameter value the way the daemon parses it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json_module.dumps(value, separators=(",", ":"))
    return str(value)


def encode_json_body(body: Any) -> bytes:
    """Serialize a JSON request body.

    Raises:
        UsageError: If the body holds values that cannot be encoded
            (non-JSON types, lone surrogates)
    """
    try:
        return json_module.dumps(
            body, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as e:
        raise UsageError(f"Request body cannot be encoded: {e}") from e


class HttpTransport:
    """HTTP transport for daemon communication.

    The underlying httpx.AsyncClient is the connection pool: every request
    checks a connection out and returns it when the response is closed, so
    any number of tasks may share one transport.

    Example:
        >>> transport = HttpTransport("http://127.0.0.1:2375")
        >>> response = await transport.request("GET", "/containers/json")
        >>> async with transport.stream("GET", "/containers/abc/logs",
        ...                             params={"follow": True}) as resp:
        ...     async for chunk in resp.aiter_bytes():
        ...         process(chunk)
    """

    def __init__(
        self,
        address: DaemonAddress | str,
        *,
        api_version: str | None = None,
        timeout: float | None = None,
        pool: PoolConfig | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            address: Daemon address (parsed or string)
            api_version: Optional API version prefix, e.g. "1.43"
            timeout: Read/write timeout in seconds
            pool: Pool limits and timeouts
        """
        self._address = (
            address if isinstance(address, DaemonAddress) else parse_daemon_url(address)
        )
        self._api_version = api_version.lstrip("v") if api_version else None

        # Resolve timeout: explicit, then env, then pool defaults
        self._pool = pool or PoolConfig.default()
        if timeout is None:
            timeout = _env_timeout()
        if timeout is not None:
            self._pool = self._pool.with_timeout(timeout)

        self._stats = PoolStats()
        self._client: httpx.AsyncClient | None = None

    @property
    def address(self) -> DaemonAddress:
        return self._address

    @property
    def api_version(self) -> str | None:
        return self._api_version

    @property
    def stats(self) -> PoolStats:
        return self._stats

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            transport = None
            if self._address.is_unix:
                transport = httpx.AsyncHTTPTransport(
                    uds=self._address.socket_path,
                    limits=self._pool.to_httpx_limits(),
                )

            self._client = httpx.AsyncClient(
                base_url=self._address.base_url,
                timeout=self._pool.to_httpx_timeout(),
                limits=self._pool.to_httpx_limits(),
                transport=transport,
                trust_env=_trust_env_enabled(),
                headers={"User-Agent": f"aiowharf/{_get_ua_version()}"},
            )

        return self._client

    async def close(self) -> None:
        """Close the HTTP client and every pooled connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def build_path(self, path: str) -> str:
        """Prefix ``path`` with the API version, if one is configured."""
        if not path.startswith("/"):
            path = f"/{path}"
        if self._api_version:
            return f"/v{self._api_version}{path}"
        return path

    def url_for(self, path: str) -> str:
        return f"{self._address}{self.build_path(path)}"

    def _build_request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None,
        json: Any,
        content: bytes | None,
        headers: Mapping[str, str] | None,
    ) -> httpx.Request:
        request_headers: dict[str, str] = {"Accept": "application/json"}
        body: bytes | None = content
        if json is not None:
            body = encode_json_body(json)
            request_headers["Content-Type"] = "application/json"
        if headers:
            request_headers.update(headers)

        query = None
        if params:
            query = {k: encode_query_value(v) for k, v in params.items() if v is not None}

        return self._get_client().build_request(
            method,
            self.build_path(path),
            params=query,
            content=body,
            headers=request_headers,
        )

    def _transport_error(self, error: httpx.HTTPError, path: str) -> TransportError:
        url = self.url_for(path)
        if isinstance(error, httpx.ConnectError):
            message = f"Connection failed: {error}"
        elif isinstance(error, httpx.TimeoutException):
            message = f"Request timed out: {error}"
        else:
            message = f"HTTP error: {error}"
        return TransportError(message, url=url, cause=error)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        fallback: Mapping[int, str] | None = None,
    ) -> httpx.Response:
        """Send a request and return the response with its body unread.

        Non-2xx responses are read, closed and raised as DaemonError.
        """
        request = self._build_request(
            method, path, params=params, json=json, content=content, headers=headers
        )
        client = self._get_client()
        self._stats.requests_total += 1
        started = time.monotonic()

        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            self._stats.requests_failed += 1
            logger.debug("Request failed", method=method, path=path, error=str(e))
            raise self._transport_error(e, path) from e

        elapsed_ms = round((time.monotonic() - started) * 1000, 1)
        logger.debug(
            "Response received",
            method=method,
            path=request.url.raw_path.decode("ascii", "replace"),
            status=response.status_code,
            elapsed_ms=elapsed_ms,
        )

        if 200 <= response.status_code < 300:
            self._stats.requests_successful += 1
            return response

        self._stats.requests_failed += 1
        try:
            raw = await response.aread()
        except httpx.HTTPError as e:
            raise self._transport_error(e, path) from e
        finally:
            await response.aclose()

        body = None
        with suppress(ValueError):
            body = json_module.loads(raw) if raw else None

        error = DaemonError.from_response(
            status_code=response.status_code,
            body=body if isinstance(body, dict) else None,
            url=str(request.url),
            fallback=(fallback or {}).get(response.status_code),
        )
        logger.debug(
            "Daemon returned an error",
            method=method,
            path=path,
            status=response.status_code,
            message=error.message,
        )
        raise error

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        fallback: Mapping[int, str] | None = None,
    ) -> httpx.Response:
        """Make a request and read the whole body.

        Args:
            method: HTTP method
            path: Request path (relative to the daemon root)
            params: Query parameters
            json: JSON body
            content: Raw body (e.g. a tar archive)
            headers: Additional headers
            fallback: Status code to description map used when the daemon
                sends no message

        Returns:
            HTTP response with its content loaded

        Raises:
            TransportError: On network/connection errors
            DaemonError: On non-2xx responses
            UsageError: If the JSON body cannot be encoded
        """
        response = await self._send(
            method,
            path,
            params=params,
            json=json,
            content=content,
            headers=headers,
            fallback=fallback,
        )
        try:
            await response.aread()
        except httpx.HTTPError as e:
            raise self._transport_error(e, path) from e
        finally:
            await response.aclose()
        return response

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        fallback: Mapping[int, str] | None = None,
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params, fallback=fallback)

    async def post(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        fallback: Mapping[int, str] | None = None,
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request(
            "POST", path, params=params, json=json, fallback=fallback
        )

    async def delete(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        fallback: Mapping[int, str] | None = None,
    ) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path, params=params, fallback=fallback)

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        fallback: Mapping[int, str] | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Make a streaming request.

        The connection stays checked out for the lifetime of the block and is
        released on exit, whether the body was fully read, abandoned, or the
        task was cancelled. Read failures inside the block surface as
        TransportError.

        Yields:
            HTTP response for streaming

        Example:
            >>> async with transport.stream("GET", path) as resp:
            ...     async for chunk in resp.aiter_bytes():
            ...         process(chunk)
        """
        response = await self._send(
            method,
            path,
            params=params,
            json=json,
            content=content,
            headers=headers,
            fallback=fallback,
        )
        self._stats.streams_opened += 1
        try:
            yield response
        except httpx.HTTPError as e:
            raise self._transport_error(e, path) from e
        finally:
            await response.aclose()
            self._stats.streams_closed += 1

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

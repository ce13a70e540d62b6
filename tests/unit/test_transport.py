"""Tests for transport module."""

import base64
import json

import httpx
import pytest

from aiowharf.errors import DaemonError, TransportError, UsageError
from aiowharf.opts import AuthOpts
from aiowharf.transport import (
    REGISTRY_AUTH_HEADER,
    DaemonAddress,
    HttpTransport,
    PoolConfig,
    encode_json_body,
    encode_query_value,
    encode_registry_auth,
    get_registry_auth_header,
    get_registry_config_header,
    parse_daemon_url,
)


class TestParseDaemonUrl:
    """Tests for daemon address parsing."""

    def test_http_with_port(self) -> None:
        """Test plain HTTP address."""
        address = parse_daemon_url("http://127.0.0.1:2375")
        assert address == DaemonAddress(scheme="http", host="127.0.0.1", port=2375)
        assert address.base_url == "http://127.0.0.1:2375"
        assert not address.is_unix

    def test_tcp_is_http(self) -> None:
        """Test tcp:// is spoken as HTTP."""
        address = parse_daemon_url("tcp://10.0.0.5:4243")
        assert address.scheme == "http"
        assert address.base_url == "http://10.0.0.5:4243"

    def test_default_ports(self) -> None:
        """Test the daemon's conventional ports are applied."""
        assert parse_daemon_url("http://docker.local").port == 2375
        assert parse_daemon_url("tcp://docker.local").port == 2375
        assert parse_daemon_url("https://docker.local").port == 2376

    def test_unix_socket(self) -> None:
        """Test Unix socket address."""
        address = parse_daemon_url("unix:///var/run/docker.sock")
        assert address.is_unix
        assert address.socket_path == "/var/run/docker.sock"
        assert address.base_url == "http://localhost"
        assert str(address) == "unix:///var/run/docker.sock"

    def test_ipv6_host(self) -> None:
        """Test IPv6 hosts are bracketed in the base URL."""
        address = parse_daemon_url("http://[::1]:2375")
        assert address.host == "::1"
        assert address.base_url == "http://[::1]:2375"

    @pytest.mark.parametrize(
        "address",
        [
            "",
            "127.0.0.1:2375",
            "ftp://host",
            "unix://",
            "http://host:notaport",
            "http://:2375",
            "http://host:2375/containers",
        ],
    )
    def test_invalid_addresses(self, address: str) -> None:
        """Test malformed addresses raise UsageError."""
        with pytest.raises(UsageError) as exc_info:
            parse_daemon_url(address)
        assert exc_info.value.field == "base_url"


class TestEncoding:
    """Tests for query and body encoding helpers."""

    def test_query_values(self) -> None:
        """Test booleans and filter maps encode the way the daemon parses them."""
        assert encode_query_value(True) == "true"
        assert encode_query_value(False) == "false"
        assert encode_query_value(10) == "10"
        assert encode_query_value({"status": ["running"]}) == '{"status":["running"]}'

    def test_json_body_is_compact_utf8(self) -> None:
        """Test bodies are compact JSON without ASCII escaping."""
        assert encode_json_body({"Name": "café"}) == '{"Name":"café"}'.encode()

    def test_unencodable_body(self) -> None:
        """Test non-JSON values raise UsageError."""
        with pytest.raises(UsageError):
            encode_json_body({"Cmd": object()})


class TestRegistryAuth:
    """Tests for registry credential headers."""

    def test_encode_round_trip(self) -> None:
        """Test the header decodes back to the credentials."""
        auth = AuthOpts().username("ci").password("s3cret").server_address("ghcr.io")
        decoded = json.loads(base64.urlsafe_b64decode(encode_registry_auth(auth)))
        assert decoded == {"username": "ci", "password": "s3cret", "serveraddress": "ghcr.io"}

    def test_empty_auth_has_no_header(self) -> None:
        """Test no header is sent without credentials."""
        assert get_registry_auth_header(None) == {}
        assert get_registry_auth_header(AuthOpts()) == {}
        assert REGISTRY_AUTH_HEADER in get_registry_auth_header(AuthOpts().username("u"))

    def test_build_config_keyed_by_registry(self) -> None:
        """Test build credentials are keyed by registry address."""
        auth = AuthOpts().username("u").password("p").server_address("ghcr.io")
        header = get_registry_config_header(auth)["X-Registry-Config"]
        assert list(json.loads(base64.urlsafe_b64decode(header))) == ["ghcr.io"]


class TestPoolConfig:
    """Tests for pool configuration."""

    def test_streaming_disables_read_timeout(self) -> None:
        """Test the streaming preset waits forever for output."""
        assert PoolConfig.streaming().to_httpx_timeout().read is None

    def test_with_timeout(self) -> None:
        """Test an explicit timeout overrides read and write."""
        config = PoolConfig.default().with_timeout(5)
        timeout = config.to_httpx_timeout()
        assert timeout.read == 5
        assert timeout.write == 5
        assert timeout.connect == 5

    def test_env_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test WHARF_HTTP_TIMEOUT_SECS applies when no timeout is given."""
        monkeypatch.setenv("WHARF_HTTP_TIMEOUT_SECS", "7.5")
        transport = HttpTransport("http://127.0.0.1:2375")
        assert transport._pool.read_timeout == 7.5


class TestHttpTransport:
    """Tests for HttpTransport."""

    def test_api_version_prefix(self) -> None:
        """Test the version prefix is added to every path."""
        transport = HttpTransport("http://127.0.0.1:2375", api_version="v1.43")
        assert transport.build_path("/containers/json") == "/v1.43/containers/json"
        assert transport.build_path("_ping") == "/v1.43/_ping"
        assert HttpTransport("http://127.0.0.1:2375").build_path("/_ping") == "/_ping"

    @pytest.mark.asyncio
    async def test_request_encodes_params(self, httpx_mock) -> None:
        """Test query parameters are encoded and None values dropped."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/containers/json?all=true&limit=5",
            method="GET",
            json=[],
        )
        transport = HttpTransport("http://127.0.0.1:2375")

        response = await transport.get(
            "/containers/json", params={"all": True, "limit": 5, "size": None}
        )

        assert response.json() == []
        assert transport.stats.requests_successful == 1
        await transport.close()

    @pytest.mark.asyncio
    async def test_json_body_headers(self, httpx_mock) -> None:
        """Test JSON bodies are sent with a JSON content type."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/auth", method="POST", json={"Status": "Login Succeeded"}
        )
        transport = HttpTransport("http://127.0.0.1:2375")

        await transport.post("/auth", json={"username": "u"})

        request = httpx_mock.get_request()
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"].startswith("aiowharf/")
        assert request.content == b'{"username":"u"}'
        await transport.close()

    @pytest.mark.asyncio
    async def test_daemon_error_message(self, httpx_mock) -> None:
        """Test a non-2xx status becomes DaemonError with the daemon's message."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/containers/abc/json",
            status_code=404,
            json={"message": "no such container: abc"},
        )
        transport = HttpTransport("http://127.0.0.1:2375")

        with pytest.raises(DaemonError) as exc_info:
            await transport.get("/containers/abc/json", fallback={404: "no such container"})

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "no such container: abc"
        assert transport.stats.requests_failed == 1
        await transport.close()

    @pytest.mark.asyncio
    async def test_daemon_error_fallback_for_non_json(self, httpx_mock) -> None:
        """Test the endpoint fallback is used when the body is not JSON."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/containers/abc/start",
            method="POST",
            status_code=500,
            content=b"panic",
        )
        transport = HttpTransport("http://127.0.0.1:2375")

        with pytest.raises(DaemonError) as exc_info:
            await transport.post(
                "/containers/abc/start", fallback={500: "internal server error"}
            )

        assert exc_info.value.message == "internal server error"
        await transport.close()

    @pytest.mark.asyncio
    async def test_connection_failure(self, httpx_mock) -> None:
        """Test an unreachable daemon raises TransportError."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        transport = HttpTransport("http://127.0.0.1:2375")

        with pytest.raises(TransportError) as exc_info:
            await transport.get("/_ping")

        assert "Connection failed" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        await transport.close()

    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock) -> None:
        """Test a timeout raises TransportError."""
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))
        transport = HttpTransport("http://127.0.0.1:2375")

        with pytest.raises(TransportError) as exc_info:
            await transport.get("/_ping")

        assert "timed out" in exc_info.value.message
        await transport.close()

    @pytest.mark.asyncio
    async def test_stream_released_when_abandoned(self, httpx_mock) -> None:
        """Test a stream left unread is still returned to the pool."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/containers/abc/logs", content=b"x" * 1024
        )
        transport = HttpTransport("http://127.0.0.1:2375")

        async with transport.stream("GET", "/containers/abc/logs") as response:
            assert response.status_code == 200
            assert transport.stats.streams_active == 1

        assert transport.stats.streams_active == 0
        await transport.close()

    @pytest.mark.asyncio
    async def test_stream_released_on_error(self, httpx_mock) -> None:
        """Test a stream is released when the consumer raises."""
        httpx_mock.add_response(url="http://127.0.0.1:2375/containers/abc/logs", content=b"")
        transport = HttpTransport("http://127.0.0.1:2375")

        with pytest.raises(RuntimeError):
            async with transport.stream("GET", "/containers/abc/logs"):
                raise RuntimeError("consumer failed")

        assert transport.stats.streams_closed == 1
        await transport.close()

    @pytest.mark.asyncio
    async def test_stream_error_status_not_opened(self, httpx_mock) -> None:
        """Test an error status raises before the block is entered."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/containers/abc/logs",
            status_code=404,
            json={"message": "no such container: abc"},
        )
        transport = HttpTransport("http://127.0.0.1:2375")

        with pytest.raises(DaemonError):
            async with transport.stream("GET", "/containers/abc/logs"):
                raise AssertionError("block must not run")

        assert transport.stats.streams_opened == 0
        await transport.close()

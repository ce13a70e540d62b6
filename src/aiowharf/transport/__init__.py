"""
Transport layer - HTTP client for daemon communication.

Provides httpx-based transport with:
- Address parsing (http, https, tcp, unix)
- Connection pooling and scoped streaming
- Daemon error translation
- Registry auth headers
"""

from aiowharf.transport.address import DaemonAddress, parse_daemon_url
from aiowharf.transport.auth import (
    REGISTRY_AUTH_HEADER,
    REGISTRY_CONFIG_HEADER,
    encode_registry_auth,
    get_registry_auth_header,
    get_registry_config_header,
)
from aiowharf.transport.http import HttpTransport, encode_json_body, encode_query_value
from aiowharf.transport.pool import PoolConfig, PoolStats

__all__ = [
    "REGISTRY_AUTH_HEADER",
    "REGISTRY_CONFIG_HEADER",
    "DaemonAddress",
    "HttpTransport",
    "PoolConfig",
    "PoolStats",
    "encode_json_body",
    "encode_query_value",
    "encode_registry_auth",
    "get_registry_auth_header",
    "get_registry_config_header",
    "parse_daemon_url",
]

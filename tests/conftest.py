"""Root pytest fixtures for aiowharf tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from aiowharf import Docker

DAEMON_URL = "http://127.0.0.1:2375"


@pytest.fixture
def daemon_url() -> str:
    """Base URL every mocked request is matched against."""
    return DAEMON_URL


@pytest.fixture
def docker() -> Docker:
    """Client pointed at the mocked daemon (construction does no I/O)."""
    return Docker(DAEMON_URL)


@pytest.fixture
def mux_frame() -> Callable[[int, bytes], bytes]:
    """Build one frame of the daemon's multiplexed output stream."""

    def build(stream: int, payload: bytes) -> bytes:
        return bytes([stream, 0, 0, 0]) + len(payload).to_bytes(4, "big") + payload

    return build

"""异步容器守护进程客户端：通过 HTTP 控制 API 管理容器、镜像和网络。

aiowharf: async client for the container daemon HTTP API.

Typed option builders in, typed records and demultiplexed output streams
out, over one pooled httpx connection per client.
"""
from __future__ import annotations

from typing import Any

from aiowharf.api import Container, Containers, Image, Images, Network, Networks
from aiowharf.client import Docker, DockerBuilder
from aiowharf.errors import (
    DaemonError,
    DecodeError,
    ErrorClass,
    TransportError,
    UsageError,
    WharfError,
)
from aiowharf.opts import (
    AttachOpts,
    AuthOpts,
    ContainerBuilderOpts,
    ContainerLogsOpts,
    CreateContainerOpts,
    CreateImageOpts,
    ExecOpts,
    ImageBuilderOpts,
    ListContainersOpts,
    ListImagesOpts,
    ListNetworksOpts,
    NetworkCreateOpts,
    RmContainerOpts,
    UploadArchiveOpts,
)
from aiowharf.transport import PoolConfig
from aiowharf.types import StreamFrame, StreamType

__version__ = "0.1.0"


def connect(base_url: str, **kwargs: Any) -> Docker:
    """Create a client for the daemon at ``base_url``.

    Keyword arguments are passed to ``Docker``.
    """
    return Docker(base_url, **kwargs)


__all__ = [
    # Client
    "Docker",
    "DockerBuilder",
    "PoolConfig",
    "connect",
    # Handles
    "Container",
    "Containers",
    "Image",
    "Images",
    "Network",
    "Networks",
    # Options
    "AttachOpts",
    "AuthOpts",
    "ContainerBuilderOpts",
    "ContainerLogsOpts",
    "CreateContainerOpts",
    "CreateImageOpts",
    "ExecOpts",
    "ImageBuilderOpts",
    "ListContainersOpts",
    "ListImagesOpts",
    "ListNetworksOpts",
    "NetworkCreateOpts",
    "RmContainerOpts",
    "UploadArchiveOpts",
    # Errors
    "DaemonError",
    "DecodeError",
    "ErrorClass",
    "TransportError",
    "UsageError",
    "WharfError",
    # Streams
    "StreamFrame",
    "StreamType",
    # Version
    "__version__",
]

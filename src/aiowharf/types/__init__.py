"""
Domain records decoded from daemon responses.
"""

from aiowharf.types.base import DaemonModel
from aiowharf.types.containers import (
    ContainerCreated,
    ContainerInspect,
    ContainerState,
    ContainerSummary,
    ExecCreated,
    FileInfo,
    Port,
    Process,
    TopResult,
)
from aiowharf.types.images import (
    DeletedItem,
    ErrorDetail,
    ImageHistory,
    ImageInspect,
    ImageMatch,
    ImagesDeleted,
    ImageSummary,
    ProgressDetail,
    ProgressEvent,
)
from aiowharf.types.networks import (
    NetworkCreated,
    NetworkInspect,
    NetworksPruned,
    NetworkSummary,
)
from aiowharf.types.stream import StreamFrame, StreamType

__all__ = [
    "ContainerCreated",
    "ContainerInspect",
    "ContainerState",
    "ContainerSummary",
    "DaemonModel",
    "DeletedItem",
    "ErrorDetail",
    "ExecCreated",
    "FileInfo",
    "ImageHistory",
    "ImageInspect",
    "ImageMatch",
    "ImageSummary",
    "ImagesDeleted",
    "NetworkCreated",
    "NetworkInspect",
    "NetworkSummary",
    "NetworksPruned",
    "Port",
    "Process",
    "ProgressDetail",
    "ProgressEvent",
    "StreamFrame",
    "StreamType",
    "TopResult",
]

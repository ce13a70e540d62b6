"""
Request options - fluent builders encoded to query strings or JSON bodies.
"""

from aiowharf.opts.auth import AuthOpts
from aiowharf.opts.base import BodyOpts, FiltersMixin, Opts, QueryOpts
from aiowharf.opts.containers import (
    AttachOpts,
    ContainerBuilderOpts,
    ContainerLogsOpts,
    CreateContainerOpts,
    ExecOpts,
    ListContainersOpts,
    RmContainerOpts,
    UploadArchiveOpts,
)
from aiowharf.opts.images import (
    CreateImageOpts,
    ImageBuilderOpts,
    ListImagesOpts,
    PruneImagesOpts,
    PullOpts,
    SearchImagesOpts,
)
from aiowharf.opts.networks import ListNetworksOpts, NetworkCreateOpts

__all__ = [
    "AttachOpts",
    "AuthOpts",
    "BodyOpts",
    "ContainerBuilderOpts",
    "ContainerLogsOpts",
    "CreateContainerOpts",
    "CreateImageOpts",
    "ExecOpts",
    "FiltersMixin",
    "ImageBuilderOpts",
    "ListContainersOpts",
    "ListImagesOpts",
    "ListNetworksOpts",
    "NetworkCreateOpts",
    "Opts",
    "PruneImagesOpts",
    "PullOpts",
    "QueryOpts",
    "RmContainerOpts",
    "SearchImagesOpts",
    "UploadArchiveOpts",
]

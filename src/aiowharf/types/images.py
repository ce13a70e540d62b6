"""
Image documents and progress events.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from aiowharf.types.base import DaemonModel


class ImageSummary(DaemonModel):
    """One entry of ``GET /images/json``."""

    id: str = Field(alias="Id")
    parent_id: str | None = Field(default=None, alias="ParentId")
    repo_tags: list[str] | None = Field(default=None, alias="RepoTags")
    repo_digests: list[str] | None = Field(default=None, alias="RepoDigests")
    created: int | None = Field(default=None, alias="Created")
    size: int | None = Field(default=None, alias="Size")
    shared_size: int | None = Field(default=None, alias="SharedSize")
    virtual_size: int | None = Field(default=None, alias="VirtualSize")
    labels: dict[str, str] | None = Field(default=None, alias="Labels")
    containers: int | None = Field(default=None, alias="Containers")


class ImageInspect(DaemonModel):
    """Result of ``GET /images/{name}/json``."""

    id: str = Field(alias="Id")
    repo_tags: list[str] | None = Field(default=None, alias="RepoTags")
    repo_digests: list[str] | None = Field(default=None, alias="RepoDigests")
    parent: str | None = Field(default=None, alias="Parent")
    comment: str | None = Field(default=None, alias="Comment")
    created: str | None = Field(default=None, alias="Created")
    container: str | None = Field(default=None, alias="Container")
    docker_version: str | None = Field(default=None, alias="DockerVersion")
    author: str | None = Field(default=None, alias="Author")
    architecture: str | None = Field(default=None, alias="Architecture")
    os: str | None = Field(default=None, alias="Os")
    size: int | None = Field(default=None, alias="Size")
    virtual_size: int | None = Field(default=None, alias="VirtualSize")
    config: dict[str, Any] | None = Field(default=None, alias="Config")
    root_fs: dict[str, Any] | None = Field(default=None, alias="RootFS")


class ImageHistory(DaemonModel):
    """One layer of ``GET /images/{name}/history``."""

    id: str = Field(alias="Id")
    created: int | None = Field(default=None, alias="Created")
    created_by: str | None = Field(default=None, alias="CreatedBy")
    tags: list[str] | None = Field(default=None, alias="Tags")
    size: int | None = Field(default=None, alias="Size")
    comment: str | None = Field(default=None, alias="Comment")


class ImageMatch(DaemonModel):
    """One result of ``GET /images/search``."""

    name: str
    description: str | None = None
    is_official: bool = False
    is_automated: bool = False
    star_count: int = 0


class DeletedItem(DaemonModel):
    untagged: str | None = Field(default=None, alias="Untagged")
    deleted: str | None = Field(default=None, alias="Deleted")


class ImagesDeleted(DaemonModel):
    """Result of ``POST /images/prune``."""

    images_deleted: list[DeletedItem] | None = Field(default=None, alias="ImagesDeleted")
    space_reclaimed: int = Field(default=0, alias="SpaceReclaimed")


class ProgressDetail(DaemonModel):
    current: int | None = None
    total: int | None = None


class ErrorDetail(DaemonModel):
    code: int | None = None
    message: str | None = None


class ProgressEvent(DaemonModel):
    """One JSON line of a pull, import or build stream.

    Pull lines carry ``status``/``progress``; build lines carry ``stream``.
    A line with ``error`` reports a failure after the 200 response.
    """

    id: str | None = None
    status: str | None = None
    stream: str | None = None
    progress: str | None = None
    progress_detail: ProgressDetail | None = Field(default=None, alias="progressDetail")
    error: str | None = None
    error_detail: ErrorDetail | None = Field(default=None, alias="errorDetail")
    aux: dict[str, Any] | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None or (
            self.error_detail is not None and self.error_detail.message is not None
        )

    @property
    def error_message(self) -> str | None:
        if self.error_detail is not None and self.error_detail.message:
            return self.error_detail.message
        return self.error

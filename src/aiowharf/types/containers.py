"""
Container documents.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from aiowharf.types.base import DaemonModel


class Port(DaemonModel):
    """A port mapping as reported by ``/containers/json``."""

    private_port: int = Field(alias="PrivatePort")
    public_port: int | None = Field(default=None, alias="PublicPort")
    ip: str | None = Field(default=None, alias="IP")
    type: str = Field(alias="Type", description="tcp, udp or sctp")


class ContainerSummary(DaemonModel):
    """One entry of ``GET /containers/json``."""

    id: str = Field(alias="Id")
    names: list[str] | None = Field(default=None, alias="Names")
    image: str | None = Field(default=None, alias="Image")
    image_id: str | None = Field(default=None, alias="ImageID")
    command: str | None = Field(default=None, alias="Command")
    created: int | None = Field(default=None, alias="Created")
    state: str | None = Field(default=None, alias="State")
    status: str | None = Field(default=None, alias="Status")
    ports: list[Port] | None = Field(default=None, alias="Ports")
    labels: dict[str, str] | None = Field(default=None, alias="Labels")
    size_rw: int | None = Field(default=None, alias="SizeRw")
    size_root_fs: int | None = Field(default=None, alias="SizeRootFs")
    host_config: dict[str, Any] | None = Field(default=None, alias="HostConfig")
    network_settings: dict[str, Any] | None = Field(
        default=None, alias="NetworkSettings"
    )
    mounts: list[dict[str, Any]] | None = Field(default=None, alias="Mounts")


class ContainerState(DaemonModel):
    status: str | None = Field(default=None, alias="Status")
    running: bool = Field(default=False, alias="Running")
    paused: bool = Field(default=False, alias="Paused")
    restarting: bool = Field(default=False, alias="Restarting")
    oom_killed: bool = Field(default=False, alias="OOMKilled")
    dead: bool = Field(default=False, alias="Dead")
    pid: int | None = Field(default=None, alias="Pid")
    exit_code: int | None = Field(default=None, alias="ExitCode")
    error: str | None = Field(default=None, alias="Error")
    started_at: str | None = Field(default=None, alias="StartedAt")
    finished_at: str | None = Field(default=None, alias="FinishedAt")


class ContainerInspect(DaemonModel):
    """Result of ``GET /containers/{id}/json``."""

    id: str = Field(alias="Id")
    name: str | None = Field(default=None, alias="Name")
    created: str | None = Field(default=None, alias="Created")
    path: str | None = Field(default=None, alias="Path")
    args: list[str] | None = Field(default=None, alias="Args")
    state: ContainerState | None = Field(default=None, alias="State")
    image: str | None = Field(default=None, alias="Image")
    resolv_conf_path: str | None = Field(default=None, alias="ResolvConfPath")
    hostname_path: str | None = Field(default=None, alias="HostnamePath")
    hosts_path: str | None = Field(default=None, alias="HostsPath")
    log_path: str | None = Field(default=None, alias="LogPath")
    restart_count: int | None = Field(default=None, alias="RestartCount")
    driver: str | None = Field(default=None, alias="Driver")
    platform: str | None = Field(default=None, alias="Platform")
    exec_ids: list[str] | None = Field(default=None, alias="ExecIDs")
    config: dict[str, Any] | None = Field(default=None, alias="Config")
    host_config: dict[str, Any] | None = Field(default=None, alias="HostConfig")
    network_settings: dict[str, Any] | None = Field(
        default=None, alias="NetworkSettings"
    )
    mounts: list[dict[str, Any]] | None = Field(default=None, alias="Mounts")

    @property
    def is_running(self) -> bool:
        return self.state is not None and self.state.running


class ContainerCreated(DaemonModel):
    """Result of ``POST /containers/create``."""

    id: str = Field(alias="Id")
    warnings: list[str] | None = Field(default=None, alias="Warnings")


class ExecCreated(DaemonModel):
    id: str = Field(alias="Id")


class FileInfo(DaemonModel):
    """Stat of a path inside a container.

    Decoded from the base64 JSON ``X-Docker-Container-Path-Stat`` header.
    """

    name: str
    size: int
    mode: int
    mtime: str
    link_target: str = Field(default="", alias="linkTarget")

    @property
    def is_dir(self) -> bool:
        # ModeDir bit of the reported file mode
        return bool(self.mode & (1 << 31))


# One row of ``ps`` output keyed by column title (PID, USER, CMD, ...)
Process = dict[str, str]


class TopResult(DaemonModel):
    """Result of ``GET /containers/{id}/top``."""

    titles: list[str] | None = Field(default=None, alias="Titles")
    processes: list[list[str]] | None = Field(default=None, alias="Processes")

    def to_processes(self) -> list[Process]:
        """Pair each process row with the column titles."""
        titles = self.titles or []
        return [dict(zip(titles, row)) for row in self.processes or []]

"""
Network documents.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from aiowharf.types.base import DaemonModel


class NetworkSummary(DaemonModel):
    """A network as reported by ``GET /networks`` and ``GET /networks/{id}``."""

    id: str = Field(alias="Id")
    name: str | None = Field(default=None, alias="Name")
    created: str | None = Field(default=None, alias="Created")
    scope: str | None = Field(default=None, alias="Scope")
    driver: str | None = Field(default=None, alias="Driver")
    enable_ipv6: bool | None = Field(default=None, alias="EnableIPv6")
    internal: bool | None = Field(default=None, alias="Internal")
    attachable: bool | None = Field(default=None, alias="Attachable")
    ingress: bool | None = Field(default=None, alias="Ingress")
    ipam: dict[str, Any] | None = Field(default=None, alias="IPAM")
    containers: dict[str, dict[str, Any]] | None = Field(
        default=None, alias="Containers"
    )
    options: dict[str, str] | None = Field(default=None, alias="Options")
    labels: dict[str, str] | None = Field(default=None, alias="Labels")


# Inspect returns the same document as list entries
NetworkInspect = NetworkSummary


class NetworkCreated(DaemonModel):
    """Result of ``POST /networks/create``."""

    id: str = Field(alias="Id")
    warning: str | None = Field(default=None, alias="Warning")


class NetworksPruned(DaemonModel):
    networks_deleted: list[str] | None = Field(default=None, alias="NetworksDeleted")

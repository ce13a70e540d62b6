"""
Options for network endpoints.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from aiowharf.opts.base import BodyOpts, FiltersMixin, QueryOpts


class ListNetworksOpts(FiltersMixin, QueryOpts):
    """Query for ``GET /networks``."""


class NetworkCreateOpts(BodyOpts):
    """Body for ``POST /networks/create``.

    The network name is passed to ``Networks.create`` and merged into the
    body there.
    """

    def driver(self, driver: str) -> NetworkCreateOpts:
        """Driver name, e.g. ``bridge`` or ``overlay``."""
        return self._set("Driver", driver)

    def internal(self, internal: bool) -> NetworkCreateOpts:
        """Restrict external access to the network."""
        return self._set("Internal", internal)

    def attachable(self, attachable: bool) -> NetworkCreateOpts:
        return self._set("Attachable", attachable)

    def ingress(self, ingress: bool) -> NetworkCreateOpts:
        return self._set("Ingress", ingress)

    def enable_ipv6(self, enable: bool) -> NetworkCreateOpts:
        return self._set("EnableIPv6", enable)

    def check_duplicate(self, check: bool) -> NetworkCreateOpts:
        return self._set("CheckDuplicate", check)

    def ipam(self, ipam: Mapping[str, Any]) -> NetworkCreateOpts:
        """IP address management config, e.g. ``{"Config": [{"Subnet": "10.0.0.0/24"}]}``."""
        return self._set("IPAM", dict(ipam))

    def options(self, options: Mapping[str, str]) -> NetworkCreateOpts:
        """Driver-specific options."""
        return self._set("Options", dict(options))

    def labels(self, labels: Mapping[str, str]) -> NetworkCreateOpts:
        return self._set("Labels", dict(labels))

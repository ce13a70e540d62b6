"""
Registry credential headers.

The daemon receives registry credentials for pulls and builds through the
``X-Registry-Auth`` header: a base64url-encoded JSON object.
"""

from __future__ import annotations

import base64
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aiowharf.opts.auth import AuthOpts

REGISTRY_AUTH_HEADER = "X-Registry-Auth"
REGISTRY_CONFIG_HEADER = "X-Registry-Config"
DEFAULT_REGISTRY = "https://index.docker.io/v1/"


def encode_registry_auth(auth: AuthOpts) -> str:
    """Encode credentials for the ``X-Registry-Auth`` header.

    Args:
        auth: Registry credentials

    Returns:
        base64url-encoded JSON document
    """
    payload = json.dumps(auth.to_body(), separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii")


def get_registry_auth_header(auth: AuthOpts | None) -> dict[str, str]:
    """Build the registry auth header.

    Args:
        auth: Registry credentials, or None

    Returns:
        Header dictionary (empty when no credentials are given)
    """
    if auth is None or auth.is_empty():
        return {}
    return {REGISTRY_AUTH_HEADER: encode_registry_auth(auth)}


def get_registry_config_header(auth: AuthOpts | None) -> dict[str, str]:
    """Build the ``X-Registry-Config`` header used by image builds.

    Builds may pull base images from several registries, so credentials are
    sent as a map keyed by registry address.
    """
    if auth is None or auth.is_empty():
        return {}
    body = auth.to_body()
    config = {body.get("serveraddress", DEFAULT_REGISTRY): body}
    payload = json.dumps(config, separators=(",", ":")).encode("utf-8")
    return {REGISTRY_CONFIG_HEADER: base64.urlsafe_b64encode(payload).decode("ascii")}

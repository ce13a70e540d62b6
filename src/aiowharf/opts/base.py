"""
Builder base classes for request options.

Every options type is a mutable builder: setters store one wire-level key
and return ``self`` for chaining. Nothing is validated or serialized until
the terminal encode step, and unset fields never reach the wire.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

import httpx

from aiowharf.transport.http import encode_json_body, encode_query_value

_OptsT = TypeVar("_OptsT", bound="Opts")


class Opts:
    """Ordered store of wire-level option values."""

    def __init__(self) -> None:
        self._opts: dict[str, Any] = {}

    def _set(self: _OptsT, key: str, value: Any) -> _OptsT:
        self._opts[key] = value
        return self

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under a wire-level key."""
        return self._opts.get(key, default)

    def is_empty(self) -> bool:
        return not self._opts

    def copy(self: _OptsT) -> _OptsT:
        """Return an independent copy of this builder."""
        clone = copy.copy(self)
        clone._opts = copy.deepcopy(self._opts)
        return clone

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._opts == other._opts  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._opts!r})"


class QueryOpts(Opts):
    """Options encoded as URL query parameters.

    Example:
        >>> opts = ListContainersOpts().all(True).filter("status", "running")
        >>> opts.encode()
        'all=true&filters=%7B%22status%22%3A%5B%22running%22%5D%7D'
    """

    def to_query(self) -> dict[str, str]:
        """Return the query parameters as strings, in setter order.

        Filter maps and lists are JSON-serialized into a single value.
        Parameters set to None are left out.
        """
        return {
            key: encode_query_value(value)
            for key, value in self._opts.items()
            if value is not None
        }

    def encode(self) -> str:
        """Return the percent-encoded query string ('' when nothing is set)."""
        return str(httpx.QueryParams(self.to_query()))


class FiltersMixin:
    """Setters for the daemon's ``filters`` query parameter.

    The daemon expects a JSON map of filter name to list of values.
    """

    _opts: dict[str, Any]

    def filters(self, filters: Mapping[str, Iterable[str]]):
        """Replace all filters.

        Args:
            filters: Map of filter name to accepted values,
                e.g. ``{"status": ["running"], "label": ["env=prod"]}``

        Returns:
            Self for chaining
        """
        self._opts["filters"] = {key: list(values) for key, values in filters.items()}
        return self

    def filter(self, key: str, value: str):
        """Add one value to a filter.

        Returns:
            Self for chaining
        """
        current = self._opts.setdefault("filters", {})
        current.setdefault(key, []).append(value)
        return self


class BodyOpts(Opts):
    """Options encoded as a JSON request body.

    Keys containing dots address nested objects: ``HostConfig.Memory`` is
    emitted as ``{"HostConfig": {"Memory": ...}}``.
    """

    def to_body(self) -> dict[str, Any]:
        """Return the JSON body document ({} when nothing is set)."""
        body: dict[str, Any] = {}
        for key, value in self._opts.items():
            target = body
            *parents, leaf = key.split(".")
            for part in parents:
                target = target.setdefault(part, {})
            target[leaf] = copy.deepcopy(value)
        return body

    def encode(self) -> bytes:
        """Return the compact UTF-8 JSON body.

        Raises:
            UsageError: If a stored value cannot be encoded
        """
        return encode_json_body(self.to_body())

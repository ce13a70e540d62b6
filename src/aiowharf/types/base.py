"""
Base model for daemon documents.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class DaemonModel(BaseModel):
    """A JSON document reported by the daemon.

    Fields use Python names with the daemon's names as aliases. Fields the
    model does not declare are kept as extras, so newer daemons never break
    decoding and ``to_document`` reproduces everything that was reported.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_document(self) -> dict[str, Any]:
        """Rebuild the daemon's document (daemon field names, reported fields only)."""
        return self.model_dump(by_alias=True, exclude_unset=True)

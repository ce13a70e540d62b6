"""
Client layer - User-facing API.

This module provides:
- Docker: Main entry point, owning the connection pool
- DockerBuilder: Fluent construction of clients
"""

from aiowharf.client.builder import DockerBuilder
from aiowharf.client.core import Docker

__all__ = [
    "Docker",
    "DockerBuilder",
]

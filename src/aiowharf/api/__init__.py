"""
Resource handles - containers, images and networks of one daemon.
"""

from aiowharf.api.containers import Container, Containers
from aiowharf.api.images import Image, Images
from aiowharf.api.networks import Network, Networks

__all__ = [
    "Container",
    "Containers",
    "Image",
    "Images",
    "Network",
    "Networks",
]

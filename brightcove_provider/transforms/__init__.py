"""Default transforms from Brightcove records to catalog entities."""

from .collection import PROVIDER_SOURCE, collection_transform
from .video import format_images, format_sources, video_transform

__all__ = [
    "PROVIDER_SOURCE",
    "collection_transform",
    "format_images",
    "format_sources",
    "video_transform",
]

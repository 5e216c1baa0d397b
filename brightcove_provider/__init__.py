"""
Brightcove catalog provider.

Resolves Brightcove playlists and videos into normalized catalog collections
and videos, answering queries on the catalog bus.
"""

from .client import BrightcoveClient, BoundedRequestExecutor
from .errors import (
    BrightcoveError,
    ConfigurationError,
    EmptyResponseError,
    NotFoundError,
    PlaylistNotFoundError,
    ResponseParseError,
    TransportError,
    UnexpectedContentTypeError,
    UpstreamError,
    VideoNotFoundError,
)
from .handlers import create_client, create_playlist_handler, create_video_handler, initialize
from .models import CredentialOverride, Credentials, merge_credentials
from .transforms import collection_transform, video_transform
from .visibility import is_visible

__all__ = [
    "BoundedRequestExecutor",
    "BrightcoveClient",
    "BrightcoveError",
    "ConfigurationError",
    "CredentialOverride",
    "Credentials",
    "EmptyResponseError",
    "NotFoundError",
    "PlaylistNotFoundError",
    "ResponseParseError",
    "TransportError",
    "UnexpectedContentTypeError",
    "UpstreamError",
    "VideoNotFoundError",
    "collection_transform",
    "create_client",
    "create_playlist_handler",
    "create_video_handler",
    "initialize",
    "is_visible",
    "merge_credentials",
    "video_transform",
]

__version__ = "0.1.0"

"""Fetch orchestrators for Brightcove playlists and videos."""

from .common import channel_credentials
from .playlist import fetch_brightcove_playlist
from .video import fetch_brightcove_video

__all__ = ["channel_credentials", "fetch_brightcove_playlist", "fetch_brightcove_video"]

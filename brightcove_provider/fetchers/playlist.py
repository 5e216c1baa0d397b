"""
Playlist fetcher: resolves one Brightcove playlist into a catalog collection.

Every video of the playlist becomes a child video spec submitted to the bus.
Children are submitted newest first and awaited together; the collection's
``relationships.entities.data`` keeps submission order.
"""

import asyncio
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..errors import PlaylistNotFoundError
from ..visibility import sort_by_published_at
from .common import channel_credentials, report_not_found

logger = logging.getLogger(__name__)

SET_ITEM_SPEC = {"role": "catalog", "cmd": "setItemSpec"}
VIDEO_SPEC_SOURCE = "brightcove-video"

SPEC_SUFFIX_MATCHER = re.compile(r"Spec$")


def video_spec(channel_id: Any, video: Mapping[str, Any]) -> Dict[str, Any]:
    """Child spec for one playlist video."""
    spec: Dict[str, Any] = {
        "channel": channel_id,
        "type": "videoSpec",
        "source": VIDEO_SPEC_SOURCE,
        "video": video,
    }
    if video.get("id"):
        spec["id"] = f"spec-brightcove-video-{video['id']}"
    return spec


def relationship(result: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": result["resource"],
        "type": SPEC_SUFFIX_MATCHER.sub("", result["type"]),
    }


def fetch_brightcove_playlist(bus: Any, client: Any, transform: Callable) -> Callable:
    """Build the playlist fetcher.

    Raises:
        PlaylistNotFoundError: If the playlist is absent
    """

    async def fetch(
        channel: Mapping[str, Any],
        spec: Mapping[str, Any],
        playlist_id: str,
        collection: Optional[Mapping[str, Any]] = None,
        skip_schedule_check: bool = False,
    ) -> Dict[str, Any]:
        logger.debug(f"fetch_brightcove_playlist id: {playlist_id}")
        credentials = client.resolve_credentials(channel_credentials(channel))

        playlist = await client.get_playlist(playlist_id, credentials=credentials)
        if not playlist:
            error = PlaylistNotFoundError(playlist_id)
            await report_not_found(bus, spec, error, "playlist not found")
            raise error

        assembled: Dict[str, Any] = {**(collection or {}), **transform(spec, playlist)}

        videos = await client.get_videos_by_playlist(
            playlist_id,
            credentials=credentials,
            skip_schedule_check=skip_schedule_check,
        )
        children = [video_spec(channel.get("id"), video) for video in sort_by_published_at(videos or [])]

        # gather keeps submission order regardless of completion order
        results: List[Mapping[str, Any]] = await asyncio.gather(
            *(bus.send_command(SET_ITEM_SPEC, child) for child in children)
        )

        relationships = dict(assembled.get("relationships") or {})
        relationships["entities"] = {"data": [relationship(result) for result in results]}
        assembled["relationships"] = relationships
        return assembled

    return fetch

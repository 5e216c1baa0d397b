"""Video fetcher: resolves one Brightcove video into a catalog video."""

import logging
from typing import Any, Callable, Dict, Mapping

from ..errors import VideoNotFoundError
from .common import channel_credentials, report_not_found

logger = logging.getLogger(__name__)


def fetch_brightcove_video(bus: Any, client: Any, transform: Callable) -> Callable:
    """Build the video fetcher.

    The returned coroutine function takes ``channel``, ``spec``, ``video_id``
    and ``skip_schedule_check`` and returns the transformed video entity.

    Raises:
        VideoNotFoundError: If the video is absent or outside its schedule
    """

    async def fetch(
        channel: Mapping[str, Any],
        spec: Mapping[str, Any],
        video_id: str,
        skip_schedule_check: bool = False,
    ) -> Dict[str, Any]:
        logger.debug(f"fetch_brightcove_video id: {video_id}")
        credentials = client.resolve_credentials(channel_credentials(channel))

        video = await client.get_video(
            video_id,
            credentials=credentials,
            skip_schedule_check=skip_schedule_check,
        )
        if not video:
            error = VideoNotFoundError(video_id)
            await report_not_found(bus, spec, error, "video not found")
            raise error

        sources = await client.get_video_sources(video_id, credentials=credentials)
        return transform(spec, video, sources)

    return fetch

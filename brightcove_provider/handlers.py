"""
Bus query handlers and provider initialization.

The catalog core asks providers for entities with queries shaped like
``{"spec": {...}, "object": {...}}``. This module wires the playlist and
video fetchers to those queries.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from .channels import ChannelLookup, create_channel_cache
from .client import BrightcoveClient
from .config import get_settings
from .errors import ConfigurationError
from .fetchers import fetch_brightcove_playlist, fetch_brightcove_video
from .transforms import collection_transform, video_transform

logger = logging.getLogger(__name__)

PROVIDER_NAME = "brightcove-provider"
PLAYLIST_QUERY = {"role": "provider", "cmd": "get", "source": "brightcove-playlist"}
VIDEO_QUERY = {"role": "provider", "cmd": "get", "source": "brightcove-video"}

Handler = Callable[[Mapping[str, Any]], Any]


def _skip_schedule_check(spec: Mapping[str, Any], default: bool) -> bool:
    if spec.get("skipScheduleCheck") is None:
        return default
    return bool(spec["skipScheduleCheck"])


def _require_id(spec: Mapping[str, Any], key: str) -> str:
    resource_id = (spec.get(key) or {}).get("id")
    if not resource_id or not isinstance(resource_id, str):
        raise ConfigurationError(f"brightcove-{key}-provider spec.{key}.id String is required")
    return resource_id


def create_playlist_handler(
    bus: Any,
    get_channel: ChannelLookup,
    client: BrightcoveClient,
    transform: Callable = collection_transform,
    skip_schedule_check: bool = False,
) -> Handler:
    """Handler resolving ``spec.playlist.id`` into a collection entity."""
    get_collection = fetch_brightcove_playlist(bus, client, transform)

    async def handler(args: Mapping[str, Any]) -> Dict[str, Any]:
        spec = args.get("spec") or {}
        playlist_id = _require_id(spec, "playlist")

        channel = await get_channel(spec.get("channel"))
        return await get_collection(
            channel=channel,
            spec=spec,
            playlist_id=playlist_id,
            collection=args.get("object"),
            skip_schedule_check=_skip_schedule_check(spec, skip_schedule_check),
        )

    return handler


def create_video_handler(
    bus: Any,
    get_channel: ChannelLookup,
    client: BrightcoveClient,
    transform: Callable = video_transform,
    skip_schedule_check: bool = False,
) -> Handler:
    """Handler resolving ``spec.video.id`` into a video entity."""
    get_video = fetch_brightcove_video(bus, client, transform)

    async def handler(args: Mapping[str, Any]) -> Dict[str, Any]:
        spec = args.get("spec") or {}
        video_id = _require_id(spec, "video")

        channel = await get_channel(spec.get("channel"))
        return await get_video(
            channel=channel,
            spec=spec,
            video_id=video_id,
            skip_schedule_check=_skip_schedule_check(spec, skip_schedule_check),
        )

    return handler


def create_client(
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    account_id: Optional[str] = None,
    **options: Any,
) -> BrightcoveClient:
    """Create a client, requiring a complete set of default credentials.

    Raises:
        ConfigurationError: If client id, client secret or account id is missing
    """
    for name, value in (
        ("clientId", client_id),
        ("clientSecret", client_secret),
        ("accountId", account_id),
    ):
        if not value or not isinstance(value, str):
            raise ConfigurationError(f"{PROVIDER_NAME} requires a Brightcove {name}")

    return BrightcoveClient(
        client_id=client_id,
        client_secret=client_secret,
        account_id=account_id,
        **options,
    )


async def initialize(
    bus: Any,
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    account_id: Optional[str] = None,
    policy_key: Optional[str] = None,
    concurrent_request_limit: Optional[int] = None,
    skip_schedule_check: Optional[bool] = None,
    collection_transform: Callable = collection_transform,
    video_transform: Callable = video_transform,
    get_channel: Optional[ChannelLookup] = None,
    client: Optional[BrightcoveClient] = None,
) -> Dict[str, Any]:
    """Register the playlist and video query handlers on ``bus``.

    Arguments default to the ``BRIGHTCOVE_*`` settings. Credentials may be
    incomplete here; channel secrets complete them per request.

    Returns:
        ``{"name": "brightcove-provider", "client": client}``
    """
    if bus is None:
        raise ConfigurationError(f"{PROVIDER_NAME} requires a bus")

    settings = get_settings()
    if skip_schedule_check is None:
        skip_schedule_check = settings.skip_schedule_check

    if client is None:
        client = BrightcoveClient(
            client_id=client_id or settings.client_id,
            client_secret=client_secret or settings.client_secret,
            account_id=account_id or settings.account_id,
            policy_key=policy_key or settings.policy_key,
            concurrent_request_limit=concurrent_request_limit or settings.concurrent_request_limit,
            skip_schedule_check=skip_schedule_check,
        )

    if get_channel is None:
        get_channel = create_channel_cache(bus, ttl=settings.channel_cache_ttl)

    await bus.query_handler(
        PLAYLIST_QUERY,
        create_playlist_handler(
            bus, get_channel, client, collection_transform, skip_schedule_check=skip_schedule_check
        ),
    )
    await bus.query_handler(
        VIDEO_QUERY,
        create_video_handler(
            bus, get_channel, client, video_transform, skip_schedule_check=skip_schedule_check
        ),
    )
    logger.info(f"{PROVIDER_NAME} initialized (account: {client.account_id or 'per-channel'})")

    return {"name": PROVIDER_NAME, "client": client}

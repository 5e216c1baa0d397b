"""Channel lookup over the bus with a short-lived in-memory cache."""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CHANNEL_QUERY = {"role": "store", "cmd": "get", "type": "channel"}
DEFAULT_CHANNEL_CACHE_TTL: float = 60.0

ChannelLookup = Callable[[str], Awaitable[Dict[str, Any]]]


def create_channel_cache(
    bus: Any,
    ttl: float = DEFAULT_CHANNEL_CACHE_TTL,
    clock: Callable[[], float] = time.monotonic,
) -> ChannelLookup:
    """Build ``get_channel(channel_id)`` backed by a bus query.

    Records are reused for ``ttl`` seconds so a playlist fan-out does not
    query the store once per child. ``ttl <= 0`` disables caching.

    Raises:
        ConfigurationError: If the channel does not exist
    """
    cache: Dict[str, Tuple[float, Dict[str, Any]]] = {}

    async def get_channel(channel_id: str) -> Dict[str, Any]:
        cached: Optional[Tuple[float, Dict[str, Any]]] = cache.get(channel_id)
        if cached and clock() - cached[0] < ttl:
            return cached[1]

        channel = await bus.query(CHANNEL_QUERY, {"type": "channel", "id": channel_id})
        if not channel:
            raise ConfigurationError(f'Channel not found for id "{channel_id}"', code="CHANNEL_NOT_FOUND")

        if ttl > 0:
            cache[channel_id] = (clock(), channel)
        logger.debug(f"Loaded channel {channel_id}")
        return channel

    return get_channel

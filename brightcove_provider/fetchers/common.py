"""Helpers shared by the playlist and video fetchers."""

import logging
from typing import Any, Dict, Mapping

from ..errors import NotFoundError
from ..metrics import PROVIDER_NOT_FOUND_TOTAL
from ..models import CredentialOverride

logger = logging.getLogger(__name__)

ERROR_EVENT = {"level": "error"}


def channel_credentials(channel: Mapping[str, Any]) -> CredentialOverride:
    """Credential override from the channel's ``secrets.brightcove`` record."""
    return CredentialOverride.from_secrets(channel.get("secrets"))


async def report_not_found(bus: Any, spec: Mapping[str, Any], error: NotFoundError, message: str) -> None:
    """Broadcast a not-found event; a failed broadcast is logged, not raised."""
    PROVIDER_NOT_FOUND_TOTAL.labels(code=error.code).inc()
    logger.warning(f"{error.message} (spec: {spec.get('id')})")

    payload: Dict[str, Any] = {
        "spec": spec,
        "error": error.to_dict(),
        "code": error.code,
        "message": message,
    }
    try:
        await bus.broadcast(ERROR_EVENT, payload)
    except Exception:
        logger.exception(f"Failed to broadcast {error.code} event")

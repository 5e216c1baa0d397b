"""
NATS-backed bus for the Brightcove provider.

Queries and commands use NATS request/reply. Replies are JSON envelopes:
``{"ok": true, "result": ...}`` or ``{"ok": false, "error": {...}}``.
Broadcasts are plain publishes.

Usage:
    bus = NatsBus(nats_url="nats://localhost:4222")
    await bus.connect()

    await bus.query_handler({"role": "provider", "cmd": "get", "source": "brightcove-video"}, handler)
    result = await bus.send_command({"role": "catalog", "cmd": "setItemSpec"}, spec)
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from nats.aio.client import Client as NATSClient
from nats.aio.msg import Msg
from nats.errors import NoRespondersError

from .base import BusError, Handler, Pattern, pattern_subject

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, BaseException):
        return {"message": str(value)}
    return str(value)


def encode(payload: Any) -> bytes:
    return json.dumps(payload, default=_json_default).encode()


def decode(data: bytes) -> Any:
    return json.loads(data.decode()) if data else None


class NatsBus:
    """Bus implementation over a NATS connection.

    Example:
        bus = NatsBus()
        await bus.connect()
        await bus.broadcast({"level": "error"}, {"message": "boom"})
        await bus.close()
    """

    def __init__(
        self,
        nats_url: str = "nats://localhost:4222",
        request_timeout: float = 30.0,
        queue_group: Optional[str] = "brightcove-provider",
        client: Optional[NATSClient] = None,
    ):
        """Initialize the bus.

        Args:
            nats_url: NATS server URL
            request_timeout: Seconds to wait for query/command replies
            queue_group: Queue group for handler subscriptions (load balancing)
            client: Optional NATS client (mainly for tests)
        """
        self.nats_url = nats_url
        self.request_timeout = request_timeout
        self.queue_group = queue_group
        self.nc: Optional[NATSClient] = client
        self._connected = client is not None
        self._lock = asyncio.Lock()
        self._subscriptions: List[Any] = []

    @property
    def is_connected(self) -> bool:
        return self._connected and self.nc is not None

    async def connect(self) -> None:
        """Connect to NATS with automatic reconnection.

        Raises:
            ConnectionError: If connection fails
        """
        async with self._lock:
            if self._connected:
                return

            try:
                self.nc = NATSClient()
                await self.nc.connect(
                    servers=self.nats_url,
                    connect_timeout=10,
                    reconnect_time_wait=2,
                    max_reconnect_attempts=-1,
                    disconnected_cb=self._on_disconnect,
                    reconnected_cb=self._on_reconnect,
                    error_cb=self._on_error,
                    closed_cb=self._on_close,
                )
                self._connected = True
                logger.info(f"Bus connected to {self.nats_url}")
            except Exception as e:
                logger.error(f"Failed to connect to NATS: {e}")
                raise ConnectionError(f"NATS connection failed: {e}") from e

    async def _on_disconnect(self):
        logger.warning("Disconnected from NATS server")

    async def _on_reconnect(self):
        logger.info("Reconnected to NATS server")

    async def _on_error(self, error):
        logger.error(f"NATS error: {error}")

    async def _on_close(self):
        logger.info("NATS connection closed")
        self._connected = False

    async def close(self) -> None:
        """Drain subscriptions and close the connection."""
        async with self._lock:
            if self.nc and self._connected:
                await self.nc.drain()
                self._connected = False
                logger.info("Bus closed")
            self._subscriptions.clear()

    async def _ensure_connected(self) -> NATSClient:
        if not self.is_connected:
            await self.connect()
        return self.nc

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _reply_handler(self, pattern: Pattern, handler: Handler) -> None:
        nc = await self._ensure_connected()
        subject = pattern_subject(pattern)

        async def wrapper(msg: Msg):
            try:
                result = await handler(decode(msg.data))
                reply = {"ok": True, "result": result}
            except Exception as e:
                logger.error(f"Handler for {subject} failed: {e}", exc_info=True)
                reply = {
                    "ok": False,
                    "error": {
                        "code": getattr(e, "code", e.__class__.__name__),
                        "message": str(e),
                    },
                }
            if msg.reply:
                await msg.respond(encode(reply))

        sub = await nc.subscribe(subject, cb=wrapper, queue=self.queue_group)
        self._subscriptions.append(sub)
        logger.info(f"Handling {subject} (queue: {self.queue_group or 'none'})")

    async def query_handler(self, pattern: Pattern, handler: Handler) -> None:
        """Answer queries matching ``pattern`` with ``handler``."""
        await self._reply_handler(pattern, handler)

    async def command_handler(self, pattern: Pattern, handler: Handler) -> None:
        """Execute commands matching ``pattern`` with ``handler``."""
        await self._reply_handler(pattern, handler)

    async def observe(self, pattern: Pattern, handler: Handler) -> None:
        """Receive broadcasts matching ``pattern``; handler errors are logged."""
        nc = await self._ensure_connected()
        subject = pattern_subject(pattern)

        async def wrapper(msg: Msg):
            try:
                await handler(decode(msg.data))
            except Exception as e:
                logger.error(f"Observer for {subject} failed: {e}", exc_info=True)

        sub = await nc.subscribe(subject, cb=wrapper)
        self._subscriptions.append(sub)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _request(self, pattern: Pattern, payload: Dict[str, Any]) -> Any:
        nc = await self._ensure_connected()
        subject = pattern_subject(pattern)

        try:
            response = await nc.request(subject, encode(payload), timeout=self.request_timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Request timeout for {subject}")
            raise BusError(subject, "no reply within timeout", code="BUS_TIMEOUT") from e
        except NoRespondersError as e:
            logger.warning(f"No handler registered for {subject}")
            raise BusError(subject, "no handler registered", code="BUS_NO_RESPONDERS") from e

        envelope = decode(response.data) or {}
        if not envelope.get("ok"):
            error = envelope.get("error") or {}
            raise BusError(
                subject,
                error.get("message", "handler failed"),
                code=error.get("code", "BUS_ERROR"),
            )
        return envelope.get("result")

    async def query(self, pattern: Pattern, payload: Dict[str, Any]) -> Any:
        return await self._request(pattern, payload)

    async def send_command(self, pattern: Pattern, payload: Dict[str, Any]) -> Any:
        return await self._request(pattern, payload)

    async def broadcast(self, pattern: Pattern, payload: Dict[str, Any]) -> None:
        nc = await self._ensure_connected()
        subject = pattern_subject(pattern)
        await nc.publish(subject, encode(payload))
        logger.debug(f"Broadcast to {subject}")

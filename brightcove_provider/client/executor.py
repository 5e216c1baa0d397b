"""
Bounded request executor for the Brightcove APIs.

All upstream traffic from one client goes through a single executor, which
admits at most ``limit`` requests at a time. Requests beyond the limit wait
for a slot in submission order.
"""

import asyncio
import json
import logging
import re
import time
from typing import Any, Optional

import httpx

from ..errors import (
    EmptyResponseError,
    ResponseParseError,
    TransportError,
    UnexpectedContentTypeError,
    UpstreamError,
)
from ..metrics import (
    BRIGHTCOVE_API_REQUEST_DURATION,
    BRIGHTCOVE_API_REQUESTS_IN_FLIGHT,
    BRIGHTCOVE_API_REQUESTS_QUEUED,
    BRIGHTCOVE_API_REQUESTS_TOTAL,
)
from ..models import RequestDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENT_REQUEST_LIMIT = 20

STATUS_CODE_20X_MATCHER = re.compile(r"^20\d$")
CONTENT_TYPE_MATCHER = re.compile(r"^application/json")


class BoundedRequestExecutor:
    """Executes HTTP requests behind a fixed-size concurrency gate.

    Outcomes:
    - 404 resolves to ``None`` (absent)
    - 204 resolves to an empty dict
    - other non-2xx statuses raise ``UpstreamError``
    - 2xx JSON bodies are parsed; bad or empty bodies raise
      ``ResponseParseError`` / ``EmptyResponseError``
    - 2xx non-JSON responses raise ``UnexpectedContentTypeError``
    - connection failures raise ``TransportError``
    """

    def __init__(
        self,
        limit: int = DEFAULT_CONCURRENT_REQUEST_LIMIT,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the executor.

        Args:
            limit: Maximum number of simultaneously outstanding requests
            timeout: Request timeout in seconds (ignored when http_client is given)
            http_client: Optional preconfigured httpx.AsyncClient
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        self.limit = limit
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(limit)
        self._client = http_client
        self._owns_client = http_client is None
        self._in_flight = 0
        self._queued = 0

    @property
    def in_flight(self) -> int:
        """Number of requests currently holding a slot."""
        return self._in_flight

    @property
    def queued(self) -> int:
        """Number of requests waiting for a slot."""
        return self._queued

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            timeout = httpx.Timeout(self.timeout, connect=10.0)
            self._client = httpx.AsyncClient(timeout=timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._client and self._owns_client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def execute(self, request: RequestDescriptor) -> Any:
        """Execute one request once a concurrency slot is free.

        Args:
            request: Fully resolved request descriptor

        Returns:
            Parsed JSON body, ``{}`` for 204, or ``None`` for 404
        """
        self._queued += 1
        BRIGHTCOVE_API_REQUESTS_QUEUED.inc()
        try:
            await self._semaphore.acquire()
        finally:
            self._queued -= 1
            BRIGHTCOVE_API_REQUESTS_QUEUED.dec()

        self._in_flight += 1
        BRIGHTCOVE_API_REQUESTS_IN_FLIGHT.inc()
        try:
            return await self._send(request)
        finally:
            self._in_flight -= 1
            BRIGHTCOVE_API_REQUESTS_IN_FLIGHT.dec()
            self._semaphore.release()

    async def _send(self, request: RequestDescriptor) -> Any:
        client = self._get_client()
        headers = {
            "authorization": request.authorization,
            "content-type": request.content_type,
        }
        content = None
        if request.method == "POST" and request.body:
            content = json.dumps(request.body)

        logger.debug(
            f"Brightcove request {request.method} {request.url} query={request.query}"
        )

        started = time.monotonic()
        try:
            response = await client.request(
                request.method,
                request.url,
                params=request.query or None,
                headers=headers,
                content=content,
            )
        except httpx.RequestError as e:
            BRIGHTCOVE_API_REQUESTS_TOTAL.labels(endpoint=request.endpoint, status="error").inc()
            logger.error(
                f"Brightcove request failed: {e.__class__.__name__} {request.method} {request.url}"
            )
            raise TransportError(
                f"Brightcove request failed: {e.__class__.__name__}: {e}",
                cause=e,
            ) from e
        finally:
            BRIGHTCOVE_API_REQUEST_DURATION.labels(endpoint=request.endpoint).observe(
                time.monotonic() - started
            )

        status = response.status_code
        BRIGHTCOVE_API_REQUESTS_TOTAL.labels(endpoint=request.endpoint, status=str(status)).inc()
        return self._interpret(request, response)

    @staticmethod
    def _interpret(request: RequestDescriptor, response: httpx.Response) -> Any:
        status = response.status_code

        if status == 404:
            logger.debug(f"Brightcove response 404 for {request.url}")
            return None

        if status == 204:
            return {}

        if not STATUS_CODE_20X_MATCHER.match(str(status)):
            body = response.text
            logger.warning(
                f"Brightcove API error: {status} {request.url} | Response: {body[:500]}"
            )
            raise UpstreamError(status, response.reason_phrase, body)

        content_type = response.headers.get("content-type")
        if not content_type or not CONTENT_TYPE_MATCHER.match(content_type):
            logger.error(f"Brightcove response has unexpected content-type: {content_type}")
            raise UnexpectedContentTypeError(content_type)

        if not response.content:
            logger.error("Brightcove response has an empty JSON body")
            raise EmptyResponseError("brightcove client received an empty JSON body")

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Brightcove response JSON parsing error: {e}")
            raise ResponseParseError(
                f"brightcove client JSON parsing error {e}",
                cause=e,
            ) from e

"""
Error taxonomy for the Brightcove provider.

Every error carries a ``kind`` (which layer produced it), a ``code`` (a stable
machine-readable identifier), a human ``message`` and the optional underlying
``cause``. ``to_dict()`` gives the JSON-safe form that is published on the bus.
"""

from typing import Any, Dict, Optional


class BrightcoveError(Exception):
    """Base exception for Brightcove provider errors."""

    kind = "error"
    default_code = "BRIGHTCOVE_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.cause = cause
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "code": self.code, "message": self.message}


class ConfigurationError(BrightcoveError):
    """Raised when a required credential or parameter is missing."""

    kind = "configuration"
    default_code = "CONFIGURATION_ERROR"


class TransportError(BrightcoveError):
    """Raised on network-level failures talking to the upstream API."""

    kind = "transport"
    default_code = "TRANSPORT_ERROR"


class UpstreamError(BrightcoveError):
    """Raised when the upstream API answers with a non-success status."""

    kind = "upstream"
    default_code = "UPSTREAM_ERROR"

    def __init__(
        self,
        status_code: int,
        status_message: str = "",
        body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.status_message = status_message
        self.body = body
        message = f"Brightcove API responded with {status_code}"
        if status_message:
            message += f" {status_message}"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["statusCode"] = self.status_code
        data["statusMessage"] = self.status_message
        return data


class ResponseError(BrightcoveError):
    """Base for successful responses that cannot be used."""

    kind = "response"


class ResponseParseError(ResponseError):
    """Raised when a JSON response body cannot be parsed."""

    default_code = "RESPONSE_PARSE_ERROR"


class EmptyResponseError(ResponseError):
    """Raised when a JSON response carries no body."""

    default_code = "EMPTY_RESPONSE"


class UnexpectedContentTypeError(ResponseError):
    """Raised when a successful response is not JSON."""

    default_code = "UNEXPECTED_CONTENT_TYPE"

    def __init__(self, content_type: Optional[str]) -> None:
        self.content_type = content_type
        super().__init__(
            "brightcove client expects content-type to be application/json, "
            f"got {content_type or 'none'}"
        )


class NotFoundError(BrightcoveError):
    """Raised when an upstream resource is absent (or not yet visible)."""

    kind = "not_found"
    default_code = "NOT_FOUND"


class PlaylistNotFoundError(NotFoundError):
    default_code = "PLAYLIST_NOT_FOUND"

    def __init__(self, playlist_id: str) -> None:
        self.playlist_id = playlist_id
        super().__init__(f'Playlist not found for id "{playlist_id}"')


class VideoNotFoundError(NotFoundError):
    default_code = "VIDEO_NOT_FOUND"

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f'Video not found for id "{video_id}"')

"""
Bus contract used by the provider.

The provider registers query handlers, dispatches commands, runs queries and
broadcasts events. Patterns are flat dicts such as
``{"role": "provider", "cmd": "get", "source": "brightcove-video"}``.
"""

from typing import Any, Awaitable, Callable, Dict, Mapping, Protocol

Pattern = Mapping[str, Any]
Handler = Callable[[Any], Awaitable[Any]]

SUBJECT_PREFIX = "catalog"


class BusError(RuntimeError):
    """Raised when a remote bus handler fails or does not answer."""

    def __init__(self, subject: str, message: str, code: str = "BUS_ERROR") -> None:
        self.subject = subject
        self.code = code
        super().__init__(f"{subject}: {message}")


def pattern_subject(pattern: Pattern, prefix: str = SUBJECT_PREFIX) -> str:
    """Map a pattern to a NATS subject; values are ordered by key name.

    Example:
        >>> pattern_subject({"role": "provider", "cmd": "get", "source": "brightcove-video"})
        'catalog.get.provider.brightcove-video'
    """
    tokens = [str(pattern[key]).replace(".", "_").replace(" ", "_") for key in sorted(pattern)]
    return ".".join([prefix, *tokens])


class Bus(Protocol):
    async def query_handler(self, pattern: Pattern, handler: Handler) -> None: ...

    async def command_handler(self, pattern: Pattern, handler: Handler) -> None: ...

    async def observe(self, pattern: Pattern, handler: Handler) -> None: ...

    async def query(self, pattern: Pattern, payload: Dict[str, Any]) -> Any: ...

    async def send_command(self, pattern: Pattern, payload: Dict[str, Any]) -> Any: ...

    async def broadcast(self, pattern: Pattern, payload: Dict[str, Any]) -> None: ...

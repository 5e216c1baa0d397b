"""Brightcove API client package."""

from .api import BrightcoveClient
from .auth import basic_authorization, bearer_authorization, policy_authorization
from .executor import DEFAULT_CONCURRENT_REQUEST_LIMIT, BoundedRequestExecutor

__all__ = [
    "BrightcoveClient",
    "BoundedRequestExecutor",
    "DEFAULT_CONCURRENT_REQUEST_LIMIT",
    "basic_authorization",
    "bearer_authorization",
    "policy_authorization",
]

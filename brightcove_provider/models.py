"""
Pydantic models for Brightcove credentials and request descriptors.

Credentials are immutable value objects. Overrides are applied with
``merge_credentials``, which copies instead of mutating.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Brightcove account credentials.

    Fields are optional because defaults may be incomplete until a channel's
    secrets are merged on top. Accepts the camelCase keys used in channel
    secrets as well as snake_case names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    client_id: Optional[str] = Field(None, alias="clientId")
    client_secret: Optional[str] = Field(None, alias="clientSecret")
    account_id: Optional[str] = Field(None, alias="accountId")
    policy_key: Optional[str] = Field(None, alias="policyKey")


class CredentialOverride(Credentials):
    """Per-call credential values; every defined field wins over the default."""

    access_token: Optional[str] = Field(None, alias="accessToken")

    @classmethod
    def from_secrets(
        cls,
        secrets: Optional[Mapping[str, Any]],
        provider: str = "brightcove",
    ) -> "CredentialOverride":
        """Build an override from a channel ``secrets`` record."""
        provider_secrets = (secrets or {}).get(provider) or {}
        return cls.model_validate(dict(provider_secrets))


def _defined(value: Any) -> bool:
    return value is not None and value != ""


def merge_credentials(
    defaults: Optional[Credentials],
    *overrides: Optional[Credentials],
) -> CredentialOverride:
    """Merge overrides onto defaults; later defined fields win.

    Empty strings and ``None`` never replace an existing value.
    """
    merged: Dict[str, Any] = {}
    for layer in (defaults, *overrides):
        if layer is None:
            continue
        for name, value in layer.model_dump(by_alias=False).items():
            if _defined(value):
                merged[name] = value
    return CredentialOverride(**merged)


@dataclass(frozen=True)
class RequestDescriptor:
    """A single upstream HTTP request, fully resolved."""

    method: str
    base_url: str
    path: str
    authorization: str
    endpoint: str = "unknown"  # metrics label, never the concrete path
    content_type: str = "application/json"
    query: Dict[str, Any] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

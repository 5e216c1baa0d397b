"""Authorization header builders for the Brightcove APIs."""

import base64


def basic_authorization(client_id: str, client_secret: str) -> str:
    """Basic auth header used for OAuth token issuance."""
    token = base64.b64encode(f"{client_id}:{client_secret}".encode("utf-8"))
    return f"Basic {token.decode('ascii')}"


def bearer_authorization(access_token: str) -> str:
    """Bearer auth header used for CMS and policy API calls."""
    return f"Bearer {access_token}"


def policy_authorization(policy_key: str) -> str:
    """BCOV-Policy header used for playback API calls."""
    return f"BCOV-Policy {policy_key}"

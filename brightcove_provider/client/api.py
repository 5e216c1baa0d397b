"""
Brightcove API client.

One method per remote resource. Each call resolves the effective account and
credentials (call-level values win over client defaults), acquires an OAuth
access token unless one is supplied or the playback API is used, and hands a
request descriptor to the bounded executor.

Endpoint reference:
https://docs.brightcove.com/en/video-cloud/cms-api/references/cms-api/versions/v1/index.html

Media and image URLs returned by the API are subject to change and should be
fetched again rather than stored.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import get_settings
from ..errors import ConfigurationError, EmptyResponseError
from ..models import CredentialOverride, Credentials, RequestDescriptor, merge_credentials
from ..visibility import Clock, filter_visible, is_visible, utc_now
from ..visibility import sort_by_release_date as sort_by_release
from .auth import basic_authorization, bearer_authorization, policy_authorization
from .executor import DEFAULT_CONCURRENT_REQUEST_LIMIT, BoundedRequestExecutor

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"


def _require(value: Optional[str], name: str, operation: str) -> str:
    if not value or not isinstance(value, str):
        article = "An" if name[0] in "aeiou" else "A"
        raise ConfigurationError(f"{article} {name} is required to {operation}()")
    return value


class BrightcoveClient:
    """Brightcove CMS / Playback / OAuth / Policy API client.

    Example:
        async with BrightcoveClient(client_id="...", client_secret="...",
                                    account_id="...") as client:
            playlist = await client.get_playlist("1234")
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        account_id: Optional[str] = None,
        policy_key: Optional[str] = None,
        concurrent_request_limit: int = DEFAULT_CONCURRENT_REQUEST_LIMIT,
        skip_schedule_check: bool = False,
        clock: Clock = utc_now,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        oauth_base_url: Optional[str] = None,
        cms_api_base_url: Optional[str] = None,
        playback_api_base_url: Optional[str] = None,
        policy_api_base_url: Optional[str] = None,
    ):
        """Initialize Brightcove client.

        Args:
            client_id: Default OAuth client id
            client_secret: Default OAuth client secret
            account_id: Default Video Cloud account id
            policy_key: Default playback policy key (enables the playback API path)
            concurrent_request_limit: Ceiling on simultaneously outstanding requests
            skip_schedule_check: Default for schedule visibility filtering
            clock: Callable returning the current time (UTC)
            http_client: Optional preconfigured httpx.AsyncClient
            timeout: Request timeout in seconds (defaults to settings)
        """
        settings = get_settings()
        self.defaults = Credentials(
            client_id=client_id,
            client_secret=client_secret,
            account_id=account_id,
            policy_key=policy_key,
        )
        self.concurrent_request_limit = concurrent_request_limit
        self.skip_schedule_check = skip_schedule_check
        self.clock = clock

        self.oauth_base_url = oauth_base_url or settings.oauth_base_url
        self.cms_api_base_url = cms_api_base_url or settings.cms_api_base_url
        self.playback_api_base_url = playback_api_base_url or settings.playback_api_base_url
        self.policy_api_base_url = policy_api_base_url or settings.policy_api_base_url

        self.executor = BoundedRequestExecutor(
            limit=concurrent_request_limit,
            timeout=timeout if timeout is not None else settings.request_timeout,
            http_client=http_client,
        )

        logger.debug(
            f"BrightcoveClient account_id={account_id} "
            f"concurrent_request_limit={concurrent_request_limit} "
            f"policy_key={'set' if policy_key else 'unset'}"
        )

    @property
    def client_id(self) -> Optional[str]:
        return self.defaults.client_id

    @property
    def client_secret(self) -> Optional[str]:
        return self.defaults.client_secret

    @property
    def account_id(self) -> Optional[str]:
        return self.defaults.account_id

    @property
    def policy_key(self) -> Optional[str]:
        return self.defaults.policy_key

    async def aclose(self) -> None:
        """Close HTTP client."""
        await self.executor.aclose()

    async def __aenter__(self) -> "BrightcoveClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Credentials and authorization
    # ------------------------------------------------------------------

    def resolve_credentials(
        self,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> CredentialOverride:
        """Merge call-level credentials onto the client defaults."""
        token = CredentialOverride(access_token=access_token) if access_token else None
        return merge_credentials(self.defaults, credentials, token)

    async def get_access_token(
        self,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Request an OAuth2 client-credentials access token.

        A supplied ``access_token`` short-circuits the request.

        Raises:
            ConfigurationError: If client id or secret is missing
        """
        creds = self.resolve_credentials(credentials, access_token)
        if creds.access_token:
            return {"access_token": creds.access_token}

        client_id = _require(creds.client_id, "clientId", "get_access_token")
        client_secret = _require(creds.client_secret, "clientSecret", "get_access_token")

        request = RequestDescriptor(
            method="POST",
            base_url=self.oauth_base_url,
            path="/access_token",
            endpoint="access_token",
            content_type="application/x-www-form-urlencoded",
            authorization=basic_authorization(client_id, client_secret),
            query={"grant_type": "client_credentials"},
        )
        return await self.executor.execute(request)

    async def _bearer(self, creds: CredentialOverride) -> str:
        auth = await self.get_access_token(creds)
        if not auth or not auth.get("access_token"):
            raise EmptyResponseError("brightcove token response carried no access_token")
        return bearer_authorization(auth["access_token"])

    async def _cms_get(
        self,
        creds: CredentialOverride,
        path: str,
        endpoint: str,
        query: Optional[Dict[str, Any]] = None,
    ) -> Any:
        authorization = await self._bearer(creds)
        request = RequestDescriptor(
            method="GET",
            base_url=self.cms_api_base_url,
            path=path,
            endpoint=endpoint,
            content_type=DEFAULT_CONTENT_TYPE,
            authorization=authorization,
            query=dict(query or {}),
        )
        return await self.executor.execute(request)

    def _check_schedule(self, skip_schedule_check: Optional[bool]) -> bool:
        if skip_schedule_check is None:
            skip_schedule_check = self.skip_schedule_check
        return not skip_schedule_check

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------

    async def get_playlist_count(
        self,
        query: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Count playlists in the account."""
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_playlist_count")
        return await self._cms_get(
            creds, f"/accounts/{account_id}/counts/playlists", "playlist_count", query
        )

    async def get_playlists(
        self,
        query: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> Optional[List[Dict[str, Any]]]:
        """List playlists in the account (supports CMS query params such as limit/offset/sort)."""
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_playlists")
        return await self._cms_get(creds, f"/accounts/{account_id}/playlists", "playlists", query)

    async def get_playlist(
        self,
        playlist_id: str,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Get a playlist by id.

        Returns:
            Playlist record, or None when the playlist does not exist
        """
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_playlist")
        playlist_id = _require(playlist_id, "playlistId", "get_playlist")
        return await self._cms_get(
            creds, f"/accounts/{account_id}/playlists/{playlist_id}", "playlist"
        )

    async def get_videos_by_playlist(
        self,
        playlist_id: str,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
        skip_schedule_check: Optional[bool] = None,
        sort_by_release_date: bool = False,
    ) -> List[Dict[str, Any]]:
        """Get the videos of a playlist.

        Not-yet-visible videos are dropped unless the schedule check is
        skipped. With ``sort_by_release_date`` the result is ordered newest
        first by schedule start (or ``published_at``).
        """
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_videos_by_playlist")
        playlist_id = _require(playlist_id, "playlistId", "get_videos_by_playlist")

        videos = await self._cms_get(
            creds, f"/accounts/{account_id}/playlists/{playlist_id}/videos", "playlist_videos"
        )
        videos = list(videos or [])

        if self._check_schedule(skip_schedule_check):
            videos = filter_visible(videos, self.clock())
        if sort_by_release_date:
            videos = sort_by_release(videos)
        return videos

    async def get_video_count_by_playlist(
        self,
        playlist_id: str,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Count the videos in a playlist."""
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_video_count_by_playlist")
        playlist_id = _require(playlist_id, "playlistId", "get_video_count_by_playlist")
        return await self._cms_get(
            creds,
            f"/accounts/{account_id}/counts/playlists/{playlist_id}/videos",
            "playlist_video_count",
        )

    # ------------------------------------------------------------------
    # Videos
    # ------------------------------------------------------------------

    async def get_video_count(
        self,
        query: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Count videos in the account."""
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_video_count")
        return await self._cms_get(
            creds, f"/accounts/{account_id}/counts/videos", "video_count", query
        )

    async def get_videos(
        self,
        query: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
        skip_schedule_check: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        """List videos in the account, dropping not-yet-visible ones."""
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_videos")
        videos = await self._cms_get(creds, f"/accounts/{account_id}/videos", "videos", query)
        videos = list(videos or [])

        if self._check_schedule(skip_schedule_check):
            videos = filter_visible(videos, self.clock())
        return videos

    async def _fetch_video(self, creds: CredentialOverride, account_id: str, video_id: str) -> Any:
        path = f"/accounts/{account_id}/videos/{video_id}"
        if creds.policy_key:
            request = RequestDescriptor(
                method="GET",
                base_url=self.playback_api_base_url,
                path=path,
                endpoint="playback_video",
                content_type=DEFAULT_CONTENT_TYPE,
                authorization=policy_authorization(creds.policy_key),
            )
            return await self.executor.execute(request)
        return await self._cms_get(creds, path, "video")

    async def get_video(
        self,
        video_id: str,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
        skip_schedule_check: Optional[bool] = None,
    ) -> Optional[Dict[str, Any]]:
        """Get a video by id (or ``ref:<reference_id>``).

        Uses the playback API when a policy key is available. A video that is
        not yet visible is reported as absent, exactly like a 404.
        """
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_video")
        video_id = _require(video_id, "videoId", "get_video")

        video = await self._fetch_video(creds, account_id, video_id)
        if video is None:
            return None

        if self._check_schedule(skip_schedule_check) and not is_visible(video, self.clock()):
            logger.debug(f"Video {video_id} is outside its schedule window")
            return None
        return video

    async def get_video_sources(
        self,
        video_id: str,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Get the media renditions of a video.

        On the playback API path the renditions come from the ``sources``
        array of the playback record.
        """
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "get_video_sources")
        video_id = _require(video_id, "videoId", "get_video_sources")

        if creds.policy_key:
            video = await self._fetch_video(creds, account_id, video_id)
            return list((video or {}).get("sources") or [])

        sources = await self._cms_get(
            creds, f"/accounts/{account_id}/videos/{video_id}/sources", "video_sources"
        )
        return list(sources or [])

    # ------------------------------------------------------------------
    # Policy keys
    # ------------------------------------------------------------------

    async def create_policy_key(
        self,
        body: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        access_token: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Issue a new playback policy key for the account."""
        creds = self.resolve_credentials(credentials, access_token)
        account_id = _require(creds.account_id, "accountId", "create_policy_key")
        authorization = await self._bearer(creds)

        request = RequestDescriptor(
            method="POST",
            base_url=self.policy_api_base_url,
            path=f"/accounts/{account_id}/policy_keys",
            endpoint="policy_keys",
            content_type=DEFAULT_CONTENT_TYPE,
            authorization=authorization,
            body={**(body or {}), "account-id": account_id},
        )
        return await self.executor.execute(request)

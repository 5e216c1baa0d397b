"""Tests for provider initialization and the channel cache."""

from unittest.mock import AsyncMock

import pytest

from brightcove_provider.bus import pattern_subject
from brightcove_provider.channels import CHANNEL_QUERY, create_channel_cache
from brightcove_provider.client import BrightcoveClient
from brightcove_provider.errors import ConfigurationError
from brightcove_provider.handlers import (
    PLAYLIST_QUERY,
    VIDEO_QUERY,
    create_client,
    initialize,
)

from .conftest import ACCOUNT_ID, CHANNEL_ID, CLIENT_ID, CLIENT_SECRET


# ============================================================================
# Test initialize
# ============================================================================

class TestInitialize:

    @pytest.mark.asyncio
    async def test_registers_both_query_handlers(self, bus):
        """initialize should register the playlist and video handlers"""
        provider = await initialize(bus, client_id=CLIENT_ID, client_secret=CLIENT_SECRET, account_id=ACCOUNT_ID)

        assert provider["name"] == "brightcove-provider"
        assert isinstance(provider["client"], BrightcoveClient)
        assert not hasattr(provider["client"], "bus")
        assert set(bus.handlers) == {pattern_subject(PLAYLIST_QUERY), pattern_subject(VIDEO_QUERY)}
        await provider["client"].aclose()

    @pytest.mark.asyncio
    async def test_options_reach_the_client(self, bus):
        """initialize options should configure the client"""
        provider = await initialize(
            bus,
            client_id=CLIENT_ID,
            client_secret=CLIENT_SECRET,
            account_id=ACCOUNT_ID,
            policy_key="key",
            concurrent_request_limit=3,
            skip_schedule_check=True,
        )
        client = provider["client"]

        assert client.policy_key == "key"
        assert client.concurrent_request_limit == 3
        assert client.executor.limit == 3
        assert client.skip_schedule_check is True
        await client.aclose()

    @pytest.mark.asyncio
    async def test_credentials_may_come_from_channels(self, bus):
        """initialize should accept missing default credentials"""
        provider = await initialize(bus)

        assert provider["client"].account_id is None
        assert len(bus.handlers) == 2
        await provider["client"].aclose()

    @pytest.mark.asyncio
    async def test_requires_bus(self):
        """initialize should reject a missing bus"""
        with pytest.raises(ConfigurationError, match="requires a bus"):
            await initialize(None)

    @pytest.mark.asyncio
    async def test_custom_video_transform(self, bus, upstream, make_client, channel):
        """A custom video transform should shape handler results"""
        def transform(spec, video, sources):
            return {"id": video["id"], "custom": True}

        client = make_client()
        upstream.json(
            "GET",
            f"https://edge.api.brightcove.com/playback/v1/accounts/{ACCOUNT_ID}/videos/V1",
            {"id": "V1", "sources": []},
        )
        channel["secrets"]["brightcove"]["policyKey"] = "key"

        async def get_channel(channel_id):
            return channel

        await initialize(bus, client=client, get_channel=get_channel, video_transform=transform)
        result = await bus.query(VIDEO_QUERY, {"spec": {"channel": CHANNEL_ID, "video": {"id": "V1"}}})

        assert result == {"id": "V1", "custom": True}


class TestCreateClient:

    def test_complete_credentials(self):
        """create_client should build a client from complete credentials"""
        client = create_client(CLIENT_ID, CLIENT_SECRET, ACCOUNT_ID, concurrent_request_limit=2)
        assert client.account_id == ACCOUNT_ID
        assert client.executor.limit == 2

    @pytest.mark.parametrize("missing,message", [
        ("client_id", "requires a Brightcove clientId"),
        ("client_secret", "requires a Brightcove clientSecret"),
        ("account_id", "requires a Brightcove accountId"),
    ])
    def test_missing_credential(self, missing, message):
        """create_client should name the missing credential"""
        options = {"client_id": CLIENT_ID, "client_secret": CLIENT_SECRET, "account_id": ACCOUNT_ID}
        options[missing] = None
        with pytest.raises(ConfigurationError, match=message):
            create_client(**options)


# ============================================================================
# Test channel cache
# ============================================================================

class TestChannelCache:

    @pytest.mark.asyncio
    async def test_queries_store_for_channel(self):
        """get_channel should query the store for the channel record"""
        bus = AsyncMock()
        bus.query.return_value = {"id": CHANNEL_ID}
        get_channel = create_channel_cache(bus)

        assert await get_channel(CHANNEL_ID) == {"id": CHANNEL_ID}
        bus.query.assert_awaited_once_with(CHANNEL_QUERY, {"type": "channel", "id": CHANNEL_ID})

    @pytest.mark.asyncio
    async def test_reuses_record_within_ttl(self):
        """Channel records should be reused until the TTL expires"""
        now = [100.0]
        bus = AsyncMock()
        bus.query.return_value = {"id": CHANNEL_ID}
        get_channel = create_channel_cache(bus, ttl=10, clock=lambda: now[0])

        await get_channel(CHANNEL_ID)
        now[0] += 5
        await get_channel(CHANNEL_ID)
        assert bus.query.await_count == 1

        now[0] += 10
        await get_channel(CHANNEL_ID)
        assert bus.query.await_count == 2

    @pytest.mark.asyncio
    async def test_zero_ttl_disables_cache(self):
        """A zero TTL should query the store every time"""
        bus = AsyncMock()
        bus.query.return_value = {"id": CHANNEL_ID}
        get_channel = create_channel_cache(bus, ttl=0)

        await get_channel(CHANNEL_ID)
        await get_channel(CHANNEL_ID)
        assert bus.query.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_channel(self):
        """An unknown channel should raise CHANNEL_NOT_FOUND"""
        bus = AsyncMock()
        bus.query.return_value = None
        get_channel = create_channel_cache(bus)

        with pytest.raises(ConfigurationError) as exc_info:
            await get_channel("nope")
        assert exc_info.value.code == "CHANNEL_NOT_FOUND"

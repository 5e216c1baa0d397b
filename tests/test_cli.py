"""Tests for the brightcove CLI."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from brightcove_provider.cli import REQUEST_METHODS, _serve, cli
from brightcove_provider.config import Settings
from brightcove_provider.errors import PlaylistNotFoundError

CREDENTIALS = ["--client-id", "id", "--client-secret", "secret", "--account-id", "acct"]


@pytest.fixture
def runner():
    return CliRunner()


class TestListCommand:

    def test_lists_every_request_method(self, runner):
        """list should print every request method with its template"""
        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        for name in REQUEST_METHODS:
            assert f"{name} --args" in result.output


class TestRequestCommand:

    def test_prints_json_result(self, runner):
        """req should print the method result as JSON"""
        with patch(
            "brightcove_provider.cli.BrightcoveClient.get_playlist",
            new=AsyncMock(return_value={"id": "1234"}),
        ) as get_playlist:
            result = runner.invoke(
                cli, ["req", "-m", "get_playlist", "-a", '{"playlist_id": "1234"}', *CREDENTIALS]
            )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"id": "1234"}
        get_playlist.assert_awaited_once_with(playlist_id="1234")

    def test_missing_credentials(self, runner):
        """req should fail with a usage error when credentials are missing"""
        result = runner.invoke(cli, ["req", "-m", "get_playlist"])

        assert result.exit_code == 2
        assert "--client-id" in result.output

    def test_invalid_json_args(self, runner):
        """req should reject --args that are not valid JSON"""
        result = runner.invoke(cli, ["req", "-m", "get_playlist", "-a", "{nope", *CREDENTIALS])

        assert result.exit_code == 2
        assert "JSON parsing error" in result.output

    def test_unknown_method(self, runner):
        """req should reject methods outside the known list"""
        result = runner.invoke(cli, ["req", "-m", "delete_everything", *CREDENTIALS])
        assert result.exit_code == 2

    def test_provider_error_exits_nonzero(self, runner):
        """Provider errors should be printed and exit with status 1"""
        with patch(
            "brightcove_provider.cli.BrightcoveClient.get_playlist",
            new=AsyncMock(side_effect=PlaylistNotFoundError("1234")),
        ):
            result = runner.invoke(
                cli, ["req", "-m", "get_playlist", "-a", '{"playlist_id": "1234"}', *CREDENTIALS]
            )

        assert result.exit_code == 1
        assert "PLAYLIST_NOT_FOUND" in result.output


class TestServeCommand:

    @pytest.mark.asyncio
    async def test_service_name_is_the_queue_group(self):
        """serve should subscribe handlers under the configured service name"""
        settings = Settings(service_name="brightcove-eu", nats_url="nats://bus:4222", metrics_port=0)
        bus = AsyncMock()

        with patch("brightcove_provider.cli.get_settings", return_value=settings), \
                patch("brightcove_provider.cli.NatsBus", return_value=bus) as nats_bus, \
                patch("brightcove_provider.cli.initialize", new=AsyncMock(side_effect=RuntimeError("stop"))):
            with pytest.raises(RuntimeError, match="stop"):
                await _serve()

        nats_bus.assert_called_once_with(nats_url="nats://bus:4222", queue_group="brightcove-eu")
        bus.connect.assert_awaited_once()

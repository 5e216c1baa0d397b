#!/usr/bin/env python3
"""
Brightcove provider CLI.

Usage:
    brightcove list
    brightcove req --method get_playlist --args '{"playlist_id": "1234"}'
    brightcove serve
"""

import asyncio
import json
import signal
import sys
from typing import Any, Dict, Optional

import click
import structlog
from prometheus_client import start_http_server

from .bus import NatsBus
from .client import BrightcoveClient
from .config import get_settings
from .errors import BrightcoveError
from .handlers import initialize
from .logging_config import configure_logging

# client method -> JSON argument template
REQUEST_METHODS: Dict[str, str] = {
    "get_access_token": '{}',
    "get_playlist_count": '{"query": "OBJECT"}',
    "get_playlists": '{"query": "OBJECT"}',
    "get_playlist": '{"playlist_id": "STRING"}',
    "get_videos_by_playlist": '{"playlist_id": "STRING", "sort_by_release_date": "BOOLEAN"}',
    "get_video_count_by_playlist": '{"playlist_id": "STRING"}',
    "get_video_count": '{"query": "OBJECT"}',
    "get_videos": '{"query": "OBJECT"}',
    "get_video": '{"video_id": "STRING", "skip_schedule_check": "BOOLEAN"}',
    "get_video_sources": '{"video_id": "STRING"}',
    "create_policy_key": '{"body": "OBJECT"}',
}


@click.group()
def cli():
    """Brightcove provider tools."""


@cli.command("list")
def list_command():
    """List Brightcove client request methods."""
    click.echo("Request methods:")
    click.echo("")
    for name, template in REQUEST_METHODS.items():
        click.echo(f"\t{name} --args {template}")


async def _request(client: BrightcoveClient, method: str, params: Dict[str, Any]) -> Any:
    async with client:
        return await getattr(client, method)(**params)


@cli.command("req")
@click.option("--method", "-m", type=click.Choice(sorted(REQUEST_METHODS)), default="get_access_token",
              show_default=True, help='Use the "list" command to see available methods')
@click.option("--args", "-a", "raw_args", default="{}", show_default=True,
              help="Arguments object as a JSON string")
@click.option("--client-id", help="Defaults to env var BRIGHTCOVE_CLIENT_ID")
@click.option("--client-secret", help="Defaults to env var BRIGHTCOVE_CLIENT_SECRET")
@click.option("--account-id", help="Defaults to env var BRIGHTCOVE_ACCOUNT_ID")
@click.option("--policy-key", help="Defaults to env var BRIGHTCOVE_POLICY_KEY")
def request_command(
    method: str,
    raw_args: str,
    client_id: Optional[str],
    client_secret: Optional[str],
    account_id: Optional[str],
    policy_key: Optional[str],
):
    """Make a Brightcove client request and print the JSON result."""
    settings = get_settings()
    client_id = client_id or settings.client_id
    client_secret = client_secret or settings.client_secret
    account_id = account_id or settings.account_id

    for flag, value in (("--client-id", client_id), ("--client-secret", client_secret),
                        ("--account-id", account_id)):
        if not value:
            raise click.UsageError(f"A value is required for {flag}")

    try:
        params = json.loads(raw_args)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"JSON parsing error: {e}", param_hint="--args") from e

    client = BrightcoveClient(
        client_id=client_id,
        client_secret=client_secret,
        account_id=account_id,
        policy_key=policy_key or settings.policy_key,
        concurrent_request_limit=settings.concurrent_request_limit,
    )

    try:
        result = asyncio.run(_request(client, method, params))
    except BrightcoveError as e:
        click.echo(json.dumps(e.to_dict(), indent=2), err=True)
        sys.exit(1)

    click.echo(json.dumps(result, indent=2))


async def _serve() -> None:
    settings = get_settings()
    logger = structlog.get_logger("brightcove_provider.serve")

    if settings.metrics_port:
        start_http_server(settings.metrics_port)
        logger.info("Metrics exporter started", port=settings.metrics_port)

    bus = NatsBus(nats_url=settings.nats_url, queue_group=settings.service_name)
    await bus.connect()

    provider = await initialize(bus)
    logger.info("Provider ready", name=provider["name"], nats_url=settings.nats_url)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    try:
        await stop.wait()
    finally:
        logger.info("Shutting down")
        await provider["client"].aclose()
        await bus.close()


@cli.command("serve")
def serve_command():
    """Serve playlist and video queries on the NATS bus."""
    configure_logging(get_settings().log_level)
    asyncio.run(_serve())


def main():
    cli()


if __name__ == "__main__":
    main()

"""Command line entry point for checking and fetching content.

Usage::

    content-client ping
    content-client get --id 1234 [--metadata] [--bypass-cache]
    content-client get --url /about/team

Endpoints, API key and cache are read from ``CONTENT_CLIENT_*`` environment
variables; ``--primary-url`` and ``--secondary-url`` override them.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from content_client.cache.base import CacheProvider
from content_client.cache.redis import RedisCacheProvider
from content_client.connections.connection import ContentConnection
from content_client.content.models import RawContentResponse
from content_client.core.config import Settings, get_settings
from content_client.core.errors import ContentClientError
from content_client.core.redis import create_redis_client

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="content-client",
        description="Check content service endpoints and fetch published content.",
    )
    parser.add_argument("--primary-url", help="Primary endpoint (overrides CONTENT_CLIENT_PRIMARY_URL).")
    parser.add_argument("--secondary-url", help="Failover endpoint (overrides CONTENT_CLIENT_SECONDARY_URL).")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: CONTENT_CLIENT_LOG_LEVEL or INFO).",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("ping", help="Probe each endpoint once and report its health.")

    get = commands.add_parser("get", help="Fetch a published content item.")
    selector = get.add_mutually_exclusive_group(required=True)
    selector.add_argument("--id", type=int, dest="content_id", help="Content id.")
    selector.add_argument("--url", help="Content url, e.g. /about/team.")
    get.add_argument(
        "--metadata",
        action="store_true",
        default=False,
        help="Print the rendered meta tags before the content.",
    )
    get.add_argument(
        "--bypass-cache",
        action="store_true",
        default=False,
        help="Skip the cache for this request.",
    )
    return parser.parse_args(argv)


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    overrides = {
        name: value
        for name, value in (("primary_url", args.primary_url), ("secondary_url", args.secondary_url))
        if value
    }
    return settings.model_copy(update=overrides) if overrides else settings


async def _ping(connection: ContentConnection) -> int:
    """Probe every target once; succeed when at least one is alive."""
    targets = [connection.primary] + ([connection.secondary] if connection.secondary else [])
    alive = 0
    for target in targets:
        try:
            response = await connection.client.get(target.ping)
        except httpx.HTTPError as exc:
            print(f"  {target.ping}  DOWN  ({exc.__class__.__name__})")
            continue
        if response.status_code == httpx.codes.OK:
            alive += 1
            print(f"  {target.ping}  UP")
        else:
            print(f"  {target.ping}  DOWN  (HTTP {response.status_code})")
    return 0 if alive else 1


async def _get(connection: ContentConnection, args: argparse.Namespace) -> int:
    request = connection.new_request()
    if args.url:
        content: RawContentResponse = await request.get_published_content_including_metadata_by_url(
            args.url, args.bypass_cache
        )
    else:
        content = await request.get_published_content_including_metadata(args.content_id, args.bypass_cache)

    if content.is_empty:
        print("No content found.", file=sys.stderr)
        return 1
    if args.metadata:
        print(content.rendered_meta_tags)
    print(content.rendered_content_html)
    return 0


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    """Create the connection and execute the selected command."""
    redis_client = create_redis_client(settings) if settings.redis_url else None
    cache: CacheProvider | None = RedisCacheProvider(redis_client) if redis_client is not None else None

    try:
        async with ContentConnection.from_settings(settings, cache=cache) as connection:
            if args.command == "ping":
                return await _ping(connection)
            return await _get(connection, args)
    finally:
        if redis_client is not None:
            await redis_client.aclose()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _parse_args(argv)
    settings = _resolve_settings(args)

    logging.basicConfig(
        level=getattr(logging, args.log_level or settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        exit_code = asyncio.run(_run(args, settings))
    except ContentClientError as exc:
        logger.error("%s", exc)
        exit_code = 2
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

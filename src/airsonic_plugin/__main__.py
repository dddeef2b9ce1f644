"""
Airsonic plugin command line.

Runs plugin operations against a live server and prints the results as JSON.
Credentials come from --url/--username/--password or the AIRSONIC_URL,
AIRSONIC_USERNAME and AIRSONIC_PASSWORD environment variables.
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from typing import Any, List, Optional

from . import __version__
from .config import credentials_from_environment
from .logger import setup_logging
from .plugin import AirsonicPlugin


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="python -m airsonic_plugin",
        description="Exercise the Airsonic plugin against a Subsonic-compatible server",
        epilog="Example: python -m airsonic_plugin --url music.local:4040 search 'beatles' --type album",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--url", help="Server address (default: $AIRSONIC_URL)")
    parser.add_argument("--username", help="Username (default: $AIRSONIC_USERNAME)")
    parser.add_argument("--password", help="Password (default: $AIRSONIC_PASSWORD)")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("status", help="Negotiate a session and show the server status")

    search = commands.add_parser("search", help="Search songs, albums or artists")
    search.add_argument("query")
    search.add_argument("--type", choices=AirsonicPlugin.supported_search_type, default="music")
    search.add_argument("--page", type=int, default=1)

    album = commands.add_parser("album", help="List an album's tracks")
    album.add_argument("id")

    artist = commands.add_parser("artist", help="List an artist's albums or tracks")
    artist.add_argument("id")
    artist.add_argument("--type", choices=("album", "music"), default="album")

    commands.add_parser("toplists", help="Show newest, recent and random albums")

    toplist = commands.add_parser("toplist", help="Show one top-list album with its tracks")
    toplist.add_argument("id")

    stream = commands.add_parser("stream", help="Print an authenticated stream URL")
    stream.add_argument("id")

    lyric = commands.add_parser("lyric", help="Fetch lyrics by artist and title")
    lyric.add_argument("artist")
    lyric.add_argument("title")

    return parser


def _to_json(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    return value


async def run_command(args: argparse.Namespace) -> Any:
    """Run the selected plugin operation and return its JSON-ready result."""
    credentials = credentials_from_environment()
    credentials = replace(
        credentials,
        url=args.url or credentials.url,
        username=args.username or credentials.username,
        password=args.password or credentials.password,
    )
    variables = {
        "url": credentials.url,
        "username": credentials.username,
        "password": credentials.password,
    }

    async with AirsonicPlugin(lambda: variables) as plugin:
        if args.command == "status":
            result = await plugin.init()
        elif args.command == "search":
            result = await plugin.search(args.query, args.page, args.type)
        elif args.command == "album":
            result = await plugin.get_album_info({"id": args.id}, 1)
        elif args.command == "artist":
            result = await plugin.get_artist_works({"id": args.id}, 1, args.type)
        elif args.command == "toplists":
            result = await plugin.get_top_lists()
        elif args.command == "toplist":
            result = await plugin.get_top_list_detail({"id": args.id})
        elif args.command == "stream":
            result = await plugin.get_media_source({"id": args.id})
        else:
            result = await plugin.get_lyric({"artist": args.artist, "title": args.title})

    return _to_json(result)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 = success, 1 = not configured or not connected)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    result = asyncio.run(run_command(args))
    print(json.dumps(result, indent=2, ensure_ascii=False))

    if args.command == "status" and not result.get("connected"):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

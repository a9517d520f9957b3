"""Command-line entry point for mpdwire."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from mpdwire.api import MpdClient, MpdConnectionError, MpdError, MpdUnexpectedError
from mpdwire.api.types import Meta, MultiQuery, Query, Song
from mpdwire.core.config import ConfigManager, resolve_connection
from mpdwire.core.discovery import ServerDiscovery

logger = logging.getLogger(__name__)

_QUERY_COMMANDS = ("find", "search", "count")


def build_query(terms: Sequence[str]) -> Query | MultiQuery:
    """Build a query from alternating META TEXT terms.

    Raises:
        ValueError: On an odd number of terms or an unknown metadata name.
    """
    if not terms or len(terms) % 2:
        raise ValueError("expected META TEXT pairs")
    by_name = {meta.value.lower(): meta for meta in Meta}
    queries: list[Query] = []
    for name, text in zip(terms[::2], terms[1::2], strict=True):
        meta = by_name.get(name.lower())
        if meta is None:
            raise ValueError(f"unknown metadata type: {name}")
        queries.append(Query(meta, text))
    if len(queries) == 1:
        return queries[0]
    return MultiQuery(tuple(queries))


def format_song(song: Song) -> str:
    if song.artist:
        return f"{song.artist} - {song.display_title}"
    return song.display_title


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mpdwire", description="MPD command-line client")
    parser.add_argument("--host", default=None, help="server hostname or IP")
    parser.add_argument("--port", type=int, default=None, help="TCP port (default: 6600)")
    parser.add_argument("--password", default=None, help="server password")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="show player status")
    sub.add_parser("stats", help="show database statistics")
    sub.add_parser("outputs", help="list output devices")
    sub.add_parser("current", help="show the current song")
    sub.add_parser("playlist", help="list the current playlist")
    ls = sub.add_parser("ls", help="list a database directory")
    ls.add_argument("path", nargs="?", default="")
    for name in _QUERY_COMMANDS:
        query = sub.add_parser(name, help=f"{name} songs by metadata")
        query.add_argument("terms", nargs="+", metavar="TERM", help="alternating META TEXT terms")
    discover = sub.add_parser("discover", help="find MPD servers via mDNS")
    discover.add_argument("--timeout", type=float, default=3.0)
    discover.add_argument("--save", action="store_true", help="save found servers as profiles")
    return parser


async def run_command(client: MpdClient, args: argparse.Namespace) -> None:  # noqa: PLR0912
    """Run one sub-command against a connected client."""
    if args.command == "status":
        status = await client.status()
        print(f"state: {status.state.value}")
        print(f"volume: {status.volume}")
        print(f"repeat: {int(status.repeat)} random: {int(status.random)}")
        print(f"playlist: {status.playlist_length} entries (version {status.playlist_version})")
        if status.song_pos is not None:
            print(f"song: {status.song_pos.value} time: {status.elapsed}/{status.total}")
        if status.error:
            print(f"error: {status.error}")
    elif args.command == "stats":
        stats = await client.stats()
        print(f"artists: {stats.artists}")
        print(f"albums: {stats.albums}")
        print(f"songs: {stats.songs}")
        print(f"uptime: {stats.uptime}")
        print(f"db_playtime: {stats.db_playtime}")
    elif args.command == "outputs":
        for device in await client.outputs():
            mark = "*" if device.enabled else " "
            print(f"{mark} {device.id}: {device.name}")
    elif args.command == "current":
        song = await client.current_song()
        print(format_song(song) if song else "(stopped)")
    elif args.command == "playlist":
        for position, song in enumerate(await client.playlist_info()):
            print(f"{position}: {format_song(song)}")
    elif args.command == "ls":
        directories, songs = await client.ls_info(args.path)
        for directory in directories:
            print(f"{directory}/")
        for song in songs:
            print(song.file)
    elif args.command == "count":
        count = await client.count(build_query(args.terms))
        print(f"songs: {count.songs}")
        print(f"playtime: {count.playtime}")
    elif args.command in ("find", "search"):
        query = build_query(args.terms)
        songs = await client.find(query) if args.command == "find" else await client.search(query)
        for song in songs:
            print(f"{song.file}\t{format_song(song)}")


async def run(args: argparse.Namespace) -> int:
    profile = resolve_connection(args.host, args.port, args.password, config=ConfigManager())
    client = MpdClient(profile.host, profile.port, profile.password)
    try:
        async with client:
            await run_command(client, args)
    except MpdConnectionError as e:
        logger.error("Connection failed: %s", e)
        return 2
    except MpdError as e:
        logger.error("%s", e)
        return 1
    except MpdUnexpectedError as e:
        logger.error("Could not decode response: %s", e)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the mpdwire command line.

    Returns:
        Exit code (0 for success).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "discover":
        servers = ServerDiscovery.discover_all(timeout=args.timeout)
        if not servers:
            logger.warning("No MPD servers found via mDNS")
            return 1
        for server in servers:
            print(f"{server.display_name}\t{server.hostname or server.host}:{server.port}")
        if args.save:
            config = ConfigManager()
            for server in servers:
                config.add_server_profile(server.to_profile())
            config.sync()
        return 0

    if args.command in _QUERY_COMMANDS:
        try:
            build_query(args.terms)
        except ValueError as e:
            parser.error(str(e))

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())

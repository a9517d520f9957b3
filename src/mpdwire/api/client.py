"""Async MPD client.

This module provides an asyncio-based MPD client. The client owns the
socket session; every command method builds its command text with
:mod:`mpdwire.api.commands`, sends it, and decodes the reply with
:mod:`mpdwire.api.parse`.

Example:
    async with MpdClient("192.168.1.100") as client:
        status = await client.status()
        if status.is_playing:
            song = await client.current_song()
            print(f"Playing: {song.title} by {song.artist}")
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Self

from mpdwire.api import commands
from mpdwire.api.parse import (
    parse_count,
    parse_entries,
    parse_outputs,
    parse_pos_ids,
    parse_song,
    parse_songs,
    parse_stats,
    parse_status,
    take_int,
    take_values,
    take_values_of,
)
from mpdwire.api.protocol import check_response, format_command, format_command_list, parse_pairs
from mpdwire.api.types import (
    Count,
    Device,
    Id,
    Meta,
    MultiQuery,
    PLIndex,
    Pos,
    Query,
    Song,
    Stats,
    Status,
)

logger = logging.getLogger(__name__)

DEFAULT_PORT = 6600
CONNECT_TIMEOUT = 5.0
COMMAND_TIMEOUT = 10.0


class MpdConnectionError(Exception):
    """Failed to connect to MPD server."""


class MpdClient:
    """Async MPD client.

    Attributes:
        host: MPD server hostname or IP.
        port: MPD server port (default 6600).
        password: Optional password for authentication.
        timeout: Seconds to wait for a command's response.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        password: str = "",
        timeout: float = COMMAND_TIMEOUT,
    ) -> None:
        """Initialize MPD client.

        Args:
            host: MPD server hostname or IP.
            port: MPD server port.
            password: Optional password for authentication.
            timeout: Seconds to wait for a command's response.
        """
        self.host = host
        self.port = port
        self.password = password
        self.timeout = timeout

        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._lock = asyncio.Lock()
        self._version: str = ""

    @property
    def is_connected(self) -> bool:
        """Return True if connected to MPD."""
        return self._writer is not None and not self._writer.is_closing()

    @property
    def version(self) -> str:
        """Return MPD protocol version from initial handshake."""
        return self._version

    async def connect(self) -> None:
        """Connect to MPD server.

        Raises:
            MpdConnectionError: If connection fails.
            MpdError: If authentication fails.
        """
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=CONNECT_TIMEOUT,
            )

            # Read greeting: "OK MPD version"
            greeting = await self._read_line()
            if not greeting.startswith("OK MPD "):
                raise MpdConnectionError(f"Invalid MPD greeting: {greeting}")

            self._version = greeting[7:]
            logger.info("Connected to MPD %s at %s:%d", self._version, self.host, self.port)

            if self.password:
                await self._command(commands.password(self.password))

        except TimeoutError as e:
            raise MpdConnectionError(f"Connection to {self.host}:{self.port} timed out") from e
        except OSError as e:
            raise MpdConnectionError(f"Failed to connect to {self.host}:{self.port}: {e}") from e

    async def disconnect(self) -> None:
        """Disconnect from MPD server."""
        if self._writer:
            try:
                self._writer.close()
                await self._writer.wait_closed()
            except (OSError, TimeoutError, asyncio.CancelledError) as e:
                logger.debug("Expected error during MPD disconnect: %s", e)
            finally:
                self._writer = None
                self._reader = None
                logger.info("Disconnected from MPD")

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        """Async context manager exit."""
        await self.disconnect()

    async def _read_line(self) -> str:
        """Read a single line from MPD."""
        if not self._reader:
            raise MpdConnectionError("Not connected")
        line = await self._reader.readline()
        if not line:
            raise MpdConnectionError("Connection closed by MPD")
        return line.decode("utf-8").rstrip("\n")

    async def _read_until_ok(self) -> list[str]:
        """Read response lines until OK or ACK.

        Returns:
            List of response lines (including final OK/ACK).
        """
        lines: list[str] = []
        while True:
            line = await self._read_line()
            lines.append(line)
            if line == "OK" or line.startswith("ACK "):
                break
        return lines

    async def _send(self, text: str, *, wait_forever: bool = False) -> list[str]:
        """Send command text and read the response.

        Args:
            text: One command line, or a command list.
            wait_forever: Disable the response timeout (used by idle).

        Returns:
            List of response lines (without OK).

        Raises:
            MpdConnectionError: If not connected or the response times out.
            MpdError: If the daemon answers with ACK.
        """
        async with self._lock:
            if not self._writer:
                raise MpdConnectionError("Not connected")

            logger.debug("MPD command: %s", text)

            self._writer.write(f"{text}\n".encode())
            await self._writer.drain()

            try:
                timeout = None if wait_forever else self.timeout
                lines = await asyncio.wait_for(self._read_until_ok(), timeout=timeout)
            except TimeoutError as e:
                # A late reply would be read as the next command's response
                self._writer.close()
                self._writer = None
                self._reader = None
                raise MpdConnectionError(f"Timed out waiting for response to {text!r}") from e

            return check_response(lines)

    async def _command(self, command: str) -> list[str]:
        """Send a single formatted command."""
        return await self._send(command)

    async def _command_list(self, command_lines: Sequence[str]) -> list[str]:
        """Send several commands as one batch and return the joined response."""
        return await self._send(format_command_list(command_lines))

    async def _pairs(self, command: str) -> list[tuple[str, str]]:
        return parse_pairs(await self._command(command))

    # -------------------------------------------------------------------------
    # Admin Commands
    # -------------------------------------------------------------------------

    async def enable_output(self, output_id: int) -> None:
        """Turn on an output device."""
        await self._command(commands.enable_output(output_id))

    async def disable_output(self, output_id: int) -> None:
        """Turn off an output device."""
        await self._command(commands.disable_output(output_id))

    async def outputs(self) -> list[Device]:
        """Retrieve information for all output devices."""
        return parse_outputs(await self._pairs(format_command("outputs")))

    async def update(self, paths: Sequence[str] = ()) -> None:
        """Update the database.

        If no paths are given, the whole music directory is scanned.
        """
        await self.update_id(paths)

    async def update_id(self, paths: Sequence[str] = ()) -> int:
        """Update the database and return the update job ID."""
        lines = commands.update(paths)
        if len(lines) == 1:
            response = await self._command(lines[0])
        else:
            response = await self._command_list(lines)
        return take_int(parse_pairs(response), "updating_db")

    # -------------------------------------------------------------------------
    # Database Commands
    # -------------------------------------------------------------------------

    async def list_tags(self, meta: Meta, query: Query | MultiQuery | None = None) -> list[str]:
        """List all values of a tag, optionally restricted by a query."""
        return take_values(await self._pairs(commands.list_tags(meta, query)))

    async def list_artists(self) -> list[str]:
        """List the artists in the database."""
        return await self.list_tags(Meta.ARTIST)

    async def list_albums(self, artist: str | None = None) -> list[str]:
        """List the albums in the database, optionally of one artist."""
        query = Query(Meta.ARTIST, artist) if artist is not None else None
        return await self.list_tags(Meta.ALBUM, query)

    async def list_album(self, artist: str, album: str) -> list[Song]:
        """List the songs in an album of some artist."""
        return await self.find(MultiQuery((Query(Meta.ARTIST, artist), Query(Meta.ALBUM, album))))

    async def ls_info(self, path: str = "") -> tuple[list[str], list[Song]]:
        """Non-recursively list a database directory.

        Returns:
            Tuple of (subdirectory paths, songs).
        """
        entries = parse_entries(await self._pairs(commands.ls_info(path)))
        return entries.directories, entries.songs

    async def list_all(self, path: str = "") -> list[str]:
        """Recursively list the file paths under a directory."""
        return take_values_of(await self._pairs(commands.list_all(path)), "file")

    async def list_all_info(self, path: str = "") -> tuple[list[str], list[Song]]:
        """Recursive version of ls_info."""
        entries = parse_entries(await self._pairs(commands.list_all_info(path)))
        return entries.directories, entries.songs

    async def find(self, query: Query | MultiQuery) -> list[Song]:
        """Search the database for songs exactly matching a query."""
        return parse_songs(await self._pairs(commands.find(query)))

    async def find_artist(self, artist: str) -> list[Song]:
        return await self.find(Query(Meta.ARTIST, artist))

    async def find_album(self, album: str) -> list[Song]:
        return await self.find(Query(Meta.ALBUM, album))

    async def find_title(self, title: str) -> list[Song]:
        return await self.find(Query(Meta.TITLE, title))

    async def search(self, query: Query | MultiQuery) -> list[Song]:
        """Search the database using case insensitive partial matching."""
        return parse_songs(await self._pairs(commands.search(query)))

    async def search_artist(self, artist: str) -> list[Song]:
        return await self.search(Query(Meta.ARTIST, artist))

    async def search_album(self, album: str) -> list[Song]:
        return await self.search(Query(Meta.ALBUM, album))

    async def search_title(self, title: str) -> list[Song]:
        return await self.search(Query(Meta.TITLE, title))

    async def count(self, query: Query | MultiQuery) -> Count:
        """Count the songs matching a query and their total play time."""
        return parse_count(await self._pairs(commands.count(query)))

    # -------------------------------------------------------------------------
    # Playlist Commands
    # -------------------------------------------------------------------------

    async def add_(self, plname: str, path: str) -> None:
        """Add a song or directory to a playlist.

        Adds to the current playlist if plname is empty. A stored playlist
        that does not exist yet is created.
        """
        await self._command(commands.add(plname, path))

    async def add(self, plname: str, path: str) -> list[str]:
        """Like add_, but return the files that were added."""
        await self.add_(plname, path)
        return await self.list_all(path)

    async def add_id(self, path: str) -> Id:
        """Add a song to the current playlist and return its playlist ID."""
        return Id(take_int(await self._pairs(commands.add_id(path)), "Id"))

    async def add_many(self, plname: str, paths: Sequence[str]) -> None:
        """Add several paths in one command list."""
        if not paths:
            return
        if len(paths) == 1:
            await self.add_(plname, paths[0])
            return
        await self._command_list([commands.add(plname, path) for path in paths])

    async def clear(self, plname: str = "") -> None:
        """Clear a playlist, the current one if plname is empty."""
        await self._command(commands.clear(plname))

    async def delete(self, plname: str, index: PLIndex) -> None:
        """Remove an entry from a playlist.

        A stored playlist only accepts positions.
        """
        await self._command(commands.delete(plname, index))

    async def delete_many(self, plname: str, indexes: Sequence[PLIndex]) -> None:
        """Remove several entries in one command list.

        The daemon stops at the first failing command, so duplicates stop
        the deletion.
        """
        if not indexes:
            return
        if len(indexes) == 1:
            await self.delete(plname, indexes[0])
            return
        await self._command_list([commands.delete(plname, index) for index in indexes])

    async def load(self, plname: str) -> None:
        """Load a stored playlist into the current playlist."""
        await self._command(commands.load(plname))

    async def move(self, plname: str, index: PLIndex, to: int) -> None:
        """Move an entry to a new position."""
        await self._command(commands.move(plname, index, to))

    async def rm(self, plname: str) -> None:
        """Delete a stored playlist."""
        await self._command(commands.rm(plname))

    async def rename(self, plname: str, new_name: str) -> None:
        """Rename a stored playlist."""
        await self._command(commands.rename(plname, new_name))

    async def save(self, plname: str) -> None:
        """Save the current playlist."""
        await self._command(commands.save(plname))

    async def swap(self, first: PLIndex, second: PLIndex) -> None:
        """Swap two entries; both must be positions or both IDs."""
        await self._command(commands.swap(first, second))

    async def shuffle(self) -> None:
        """Shuffle the current playlist."""
        await self._command(commands.shuffle())

    async def playlist_info(self, index: PLIndex | None = None) -> list[Song]:
        """Retrieve metadata for one entry, or for the whole current playlist."""
        return parse_songs(await self._pairs(commands.playlist_info(index)))

    async def get_playlist(self) -> list[Song]:
        """Retrieve the current playlist."""
        return await self.playlist_info()

    async def list_playlist(self, plname: str) -> list[str]:
        """Retrieve the file paths in a stored playlist."""
        return take_values(await self._pairs(commands.list_playlist(plname)))

    async def list_playlist_info(self, plname: str) -> list[Song]:
        """Retrieve metadata for the songs in a stored playlist."""
        return parse_songs(await self._pairs(commands.list_playlist_info(plname)))

    async def plchanges(self, version: int) -> list[Song]:
        """Retrieve songs changed since a playlist version."""
        return parse_songs(await self._pairs(commands.plchanges(version)))

    async def plchanges_pos_id(self, version: int) -> list[tuple[Pos, Id]]:
        """Like plchanges, but return only positions and IDs."""
        return parse_pos_ids(await self._pairs(commands.plchanges_pos_id(version)))

    async def playlist_find(self, query: Query | MultiQuery) -> list[Song]:
        """Search the current playlist with strict matching."""
        return parse_songs(await self._pairs(commands.playlist_find(query)))

    async def playlist_search(self, query: Query | MultiQuery) -> list[Song]:
        """Search the current playlist case-insensitively."""
        return parse_songs(await self._pairs(commands.playlist_search(query)))

    async def current_song(self) -> Song | None:
        """Get the currently playing song.

        Returns:
            Song if one is playing or paused, None otherwise.
        """
        current_status = await self.status()
        if current_status.is_stopped:
            return None
        pairs = await self._pairs(format_command("currentsong"))
        if not pairs:
            return None
        return parse_song(pairs)

    async def crop(self, start: PLIndex | None = None, end: PLIndex | None = None) -> None:
        """Crop the current playlist to the entries between start and end.

        Both bounds are inclusive. None leaves that side of the playlist
        alone, as does an ID that is not in the playlist.
        """
        playlist = await self.playlist_info()

        def find_by_id(song_id: int) -> int | None:
            for i, song in enumerate(playlist):
                if song.index == Id(song_id):
                    return i
            return None

        first = 0
        if isinstance(start, Pos):
            first = start.value
        elif isinstance(start, Id):
            first = find_by_id(start.value) or 0

        tail: list[Song] = []
        if isinstance(end, Pos):
            tail = playlist[max(end.value + 1, first) :]
        elif isinstance(end, Id):
            last = find_by_id(end.value)
            if last is not None:
                tail = playlist[max(last + 1, first) :]

        doomed = playlist[:first] + tail
        await self.delete_many("", [song.index for song in doomed if song.index is not None])

    async def prune(self) -> None:
        """Remove duplicate entries from the current playlist.

        The last occurrence of each file is kept.
        """
        await self.delete_many("", await self._find_duplicates())

    async def _find_duplicates(self) -> list[PLIndex]:
        playlist = await self.playlist_info()
        duplicates: list[PLIndex] = []
        for i, song in enumerate(playlist):
            if song in playlist[i + 1 :] and song.index is not None:
                duplicates.append(song.index)
        return duplicates

    # -------------------------------------------------------------------------
    # Playback Commands
    # -------------------------------------------------------------------------

    async def crossfade(self, seconds: int) -> None:
        """Set crossfading between songs."""
        await self._command(commands.crossfade(seconds))

    async def play(self, index: PLIndex | None = None) -> None:
        """Begin or continue playing.

        Args:
            index: Entry to start from, or None for the current song.
        """
        await self._command(commands.play(index))

    async def pause(self, state: bool) -> None:
        """Pause (True) or resume (False) playback."""
        await self._command(commands.pause(state))

    async def stop(self) -> None:
        """Stop playback."""
        await self._command(format_command("stop"))

    async def next(self) -> None:
        """Skip to next track."""
        await self._command(format_command("next"))

    async def previous(self) -> None:
        """Skip to previous track."""
        await self._command(format_command("previous"))

    async def seek(self, index: PLIndex | None, seconds: int) -> None:
        """Seek to a point in a song.

        Seeks in the current song if no index is given; does nothing when
        stopped.
        """
        if index is None:
            current_status = await self.status()
            if current_status.is_stopped or current_status.song_id is None:
                return
            index = current_status.song_id
        await self._command(commands.seek(index, seconds))

    async def random(self, state: bool) -> None:
        """Set random mode."""
        await self._command(commands.random(state))

    async def repeat(self, state: bool) -> None:
        """Set repeat mode."""
        await self._command(commands.repeat(state))

    async def set_volume(self, volume: int) -> None:
        """Set volume.

        Args:
            volume: Volume level (0-100).
        """
        await self._command(commands.set_volume(max(0, min(100, volume))))

    async def volume(self, change: int) -> None:
        """Change the volume by a relative amount."""
        await self._command(commands.volume(change))

    async def toggle(self) -> None:
        """Toggle play/pause. Plays if stopped."""
        current_status = await self.status()
        if current_status.is_playing:
            await self.pause(True)
        else:
            await self.play()

    # -------------------------------------------------------------------------
    # Status & Info Commands
    # -------------------------------------------------------------------------

    async def status(self) -> Status:
        """Get current player status."""
        return parse_status(await self._pairs(format_command("status")))

    async def stats(self) -> Stats:
        """Get database statistics."""
        return parse_stats(await self._pairs(format_command("stats")))

    async def clear_error(self) -> None:
        """Clear the current error message in status."""
        await self._command(format_command("clearerror"))

    async def commands(self) -> list[str]:
        """Retrieve the commands available to this session."""
        return take_values(await self._pairs(format_command("commands")))

    async def not_commands(self) -> list[str]:
        """Retrieve the commands denied by access restrictions."""
        return take_values(await self._pairs(format_command("notcommands")))

    async def tag_types(self) -> list[str]:
        """Retrieve the available song metadata types."""
        return take_values(await self._pairs(format_command("tagtypes")))

    async def url_handlers(self) -> list[str]:
        """Retrieve the supported URL handlers."""
        return take_values(await self._pairs(format_command("urlhandlers")))

    # -------------------------------------------------------------------------
    # Listing Shortcuts
    # -------------------------------------------------------------------------

    async def ls_dirs(self, path: str = "") -> list[str]:
        """List directories non-recursively."""
        directories, _ = await self.ls_info(path)
        return directories

    async def ls_files(self, path: str = "") -> list[str]:
        """List song files non-recursively."""
        _, songs = await self.ls_info(path)
        return [song.file for song in songs]

    async def ls_playlists(self) -> list[str]:
        """List all stored playlists."""
        return parse_entries(await self._pairs(commands.ls_info())).playlists

    async def complete(self, path: str) -> list[str | Song]:
        """Return the directories and songs whose path starts with path.

        A single matching directory is descended into.
        """
        directories, songs = await self.ls_info(path.rpartition("/")[0])
        matches: list[str | Song] = [d for d in directories if d.startswith(path)]
        matches.extend(song for song in songs if song.file.startswith(path))
        if len(matches) == 1 and isinstance(matches[0], str):
            return await self.complete(matches[0] + "/")
        return matches

    # -------------------------------------------------------------------------
    # Utility Commands
    # -------------------------------------------------------------------------

    async def ping(self) -> None:
        """Ping MPD server to check connection."""
        await self._command(format_command("ping"))

    async def idle(self, *subsystems: str) -> list[str]:
        """Wait for changes in specified subsystems.

        This is a blocking command that waits until something changes.

        Args:
            *subsystems: Subsystems to watch (player, mixer, options, etc.).
                         If empty, watches all subsystems.

        Returns:
            List of changed subsystems.
        """
        pairs = parse_pairs(await self._send(commands.idle(*subsystems), wait_forever=True))
        return take_values_of(pairs, "changed")

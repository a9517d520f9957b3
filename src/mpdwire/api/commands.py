"""MPD command text builders.

Each function returns the command line for one daemon command, choosing
the verb from the kind of playlist index it is given. Playlist commands
act on the current playlist when the playlist name is empty.
"""

from collections.abc import Sequence

from mpdwire.api.protocol import format_command
from mpdwire.api.types import Id, Meta, MultiQuery, PLIndex, Pos, Query


# -----------------------------------------------------------------------------
# Admin
# -----------------------------------------------------------------------------


def enable_output(output_id: int) -> str:
    return format_command("enableoutput", output_id)


def disable_output(output_id: int) -> str:
    return format_command("disableoutput", output_id)


def update(paths: Sequence[str] = ()) -> list[str]:
    """Return update commands, one per path, or a single bare update."""
    if not paths:
        return [format_command("update")]
    return [format_command("update", path) for path in paths]


# -----------------------------------------------------------------------------
# Database
# -----------------------------------------------------------------------------


def list_tags(meta: Meta, query: Query | MultiQuery | None = None) -> str:
    return format_command("list", meta, query)


def ls_info(path: str | None = None) -> str:
    return format_command("lsinfo", path)


def list_all(path: str = "") -> str:
    return format_command("listall", path)


def list_all_info(path: str = "") -> str:
    return format_command("listallinfo", path)


def find(query: Query | MultiQuery) -> str:
    return format_command("find", query)


def search(query: Query | MultiQuery) -> str:
    return format_command("search", query)


def count(query: Query | MultiQuery) -> str:
    return format_command("count", query)


# -----------------------------------------------------------------------------
# Playlist
# -----------------------------------------------------------------------------


def add(plname: str, path: str) -> str:
    """Add a path to a stored playlist, or to the current one."""
    if not plname:
        return format_command("add", path)
    return format_command("playlistadd", plname, path)


def add_id(path: str) -> str:
    return format_command("addid", path)


def clear(plname: str = "") -> str:
    if not plname:
        return format_command("clear")
    return format_command("playlistclear", plname)


def delete(plname: str, index: PLIndex) -> str:
    """Remove an entry from a playlist.

    Raises:
        ValueError: If an ID is given for a stored playlist.
    """
    if not plname:
        if isinstance(index, Id):
            return format_command("deleteid", index)
        return format_command("delete", index)
    if isinstance(index, Id):
        raise ValueError("delete within a stored playlist requires a position")
    return format_command("playlistdelete", plname, index)


def load(plname: str) -> str:
    return format_command("load", plname)


def move(plname: str, index: PLIndex, to: int) -> str:
    """Move an entry to a new position.

    Raises:
        ValueError: If an ID is given for a stored playlist.
    """
    if not plname:
        if isinstance(index, Id):
            return format_command("moveid", index, to)
        return format_command("move", index, to)
    if isinstance(index, Id):
        raise ValueError("move within a stored playlist requires a position")
    return format_command("playlistmove", plname, index, to)


def rm(plname: str) -> str:
    return format_command("rm", plname)


def rename(plname: str, new_name: str) -> str:
    return format_command("rename", plname, new_name)


def save(plname: str) -> str:
    return format_command("save", plname)


def swap(first: PLIndex, second: PLIndex) -> str:
    """Swap two entries of the current playlist.

    Raises:
        ValueError: If positions and IDs are mixed.
    """
    if isinstance(first, Pos) and isinstance(second, Pos):
        return format_command("swap", first, second)
    if isinstance(first, Id) and isinstance(second, Id):
        return format_command("swapid", first, second)
    raise ValueError("swap cannot mix position and ID arguments")


def shuffle() -> str:
    return format_command("shuffle")


def playlist_info(index: PLIndex | None = None) -> str:
    if isinstance(index, Id):
        return format_command("playlistid", index)
    return format_command("playlistinfo", index)


def list_playlist(plname: str) -> str:
    return format_command("listplaylist", plname)


def list_playlist_info(plname: str) -> str:
    return format_command("listplaylistinfo", plname)


def plchanges(version: int) -> str:
    return format_command("plchanges", version)


def plchanges_pos_id(version: int) -> str:
    return format_command("plchangesposid", version)


def playlist_find(query: Query | MultiQuery) -> str:
    return format_command("playlistfind", query)


def playlist_search(query: Query | MultiQuery) -> str:
    return format_command("playlistsearch", query)


# -----------------------------------------------------------------------------
# Playback
# -----------------------------------------------------------------------------


def crossfade(seconds: int) -> str:
    return format_command("crossfade", seconds)


def play(index: PLIndex | None = None) -> str:
    if isinstance(index, Id):
        return format_command("playid", index)
    return format_command("play", index)


def pause(state: bool) -> str:
    return format_command("pause", state)


def seek(index: PLIndex, seconds: int) -> str:
    if isinstance(index, Id):
        return format_command("seekid", index, seconds)
    return format_command("seek", index, seconds)


def random(state: bool) -> str:
    return format_command("random", state)


def repeat(state: bool) -> str:
    return format_command("repeat", state)


def set_volume(volume: int) -> str:
    return format_command("setvol", volume)


def volume(change: int) -> str:
    """Relative volume change (deprecated by the daemon in favour of setvol)."""
    return format_command("volume", change)


# -----------------------------------------------------------------------------
# Miscellaneous
# -----------------------------------------------------------------------------


def password(secret: str) -> str:
    return format_command("password", secret)


def idle(*subsystems: str) -> str:
    # Subsystem names are bare tokens
    return " ".join(["idle", *subsystems])

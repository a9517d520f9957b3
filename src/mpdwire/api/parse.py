"""MPD response decoding.

Each record type has a table mapping recognised wire keys to setters.
A setter parses one value and returns an updated copy of the record;
:func:`build_record` folds a pair sequence through the table starting
from the record's zero value. A key missing from the table, or a value
its parser rejects, fails the whole record with :class:`MpdUnexpectedError`.
"""

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any, TypeVar

from mpdwire.api.protocol import (
    MpdUnexpectedError,
    Pair,
    partition_entries,
    split_groups,
)
from mpdwire.api.types import Count, Device, Entries, Id, Pos, Song, State, Stats, Status

logger = logging.getLogger(__name__)

R = TypeVar("R")
Setter = Callable[[R, str], R]

_INT_PATTERN = re.compile(r"-?[0-9]+")

# Keys that open a new entity in multi-record responses
SONG_GROUP_KEYS = ("file",)
OUTPUT_GROUP_KEYS = ("outputid",)
POS_ID_GROUP_KEYS = ("cpos",)


# -----------------------------------------------------------------------------
# Primitive field parsers
# -----------------------------------------------------------------------------


def parse_int(value: str) -> int:
    """Parse a base-10 signed integer."""
    if not _INT_PATTERN.fullmatch(value):
        raise MpdUnexpectedError(value)
    return int(value)


def parse_bool(value: str) -> bool:
    """Parse "1" or "0"."""
    if value == "1":
        return True
    if value == "0":
        return False
    raise MpdUnexpectedError(value)


def parse_pair(value: str, sep: str = ":") -> tuple[int, int]:
    """Parse "N<sep>M" into two integers, splitting on the first separator."""
    first, found, rest = value.partition(sep)
    if not found:
        raise MpdUnexpectedError(value)
    return parse_int(first), parse_int(rest)


def parse_triple(value: str, sep: str = ":") -> tuple[int, int, int]:
    """Parse "N<sep>M<sep>K" into three integers."""
    first, found, rest = value.partition(sep)
    if not found:
        raise MpdUnexpectedError(value)
    second, third = parse_pair(rest, sep)
    return parse_int(first), second, third


def parse_fraction(value: str) -> tuple[int, int]:
    """Parse a "N/M" number/total field.

    A bare "N" is read as (N, 0).
    """
    if "/" not in value:
        return parse_int(value), 0
    return parse_pair(value, "/")


def parse_state(value: str) -> State:
    """Parse a playback state token."""
    try:
        return State(value)
    except ValueError as e:
        raise MpdUnexpectedError(value) from e


# -----------------------------------------------------------------------------
# Generic record building
# -----------------------------------------------------------------------------


def build_record(pairs: Iterable[Pair], empty: R, setters: Mapping[str, Setter[R]]) -> R:
    """Fold pairs into a record.

    Args:
        pairs: Ordered (key, value) pairs for a single record.
        empty: Record holding the default for every field.
        setters: Recognised keys and the setter for each.

    Returns:
        The record with every supplied field applied, last write winning.

    Raises:
        MpdUnexpectedError: On an unrecognised key or an unparseable value.
    """
    record = empty
    for key, value in pairs:
        setter = setters.get(key)
        if setter is None:
            logger.debug("Rejecting %s pair %s: %s", type(empty).__name__, key, value)
            raise MpdUnexpectedError(value, key)
        try:
            record = setter(record, value)
        except MpdUnexpectedError as e:
            logger.debug("Bad value for %s: %r", key, value)
            raise MpdUnexpectedError(value, key) from e
    return record


def _set(field_name: str, parser: Callable[[str], Any] | None = None) -> Setter[Any]:
    """Return a setter storing the parsed value in one field."""

    def setter(record: Any, value: str) -> Any:
        return replace(record, **{field_name: parser(value) if parser else value})

    return setter


def _ignore(record: R, _value: str) -> R:
    return record


_STATUS_SETTERS: dict[str, Setter[Status]] = {
    "state": _set("state", parse_state),
    "volume": _set("volume", parse_int),
    "repeat": _set("repeat", parse_bool),
    "random": _set("random", parse_bool),
    "playlist": _set("playlist_version", parse_int),
    "playlistlength": _set("playlist_length", parse_int),
    "song": _set("song_pos", lambda v: Pos(parse_int(v))),
    "songid": _set("song_id", lambda v: Id(parse_int(v))),
    "time": _set("time", parse_pair),
    "bitrate": _set("bitrate", parse_int),
    "xfade": _set("xfade", parse_int),
    "audio": _set("audio", parse_triple),
    "updating_db": _set("updating_db", parse_int),
    "error": _set("error"),
}

_STATS_SETTERS: dict[str, Setter[Stats]] = {
    "artists": _set("artists", parse_int),
    "albums": _set("albums", parse_int),
    "songs": _set("songs", parse_int),
    "uptime": _set("uptime", parse_int),
    "playtime": _set("playtime", parse_int),
    "db_playtime": _set("db_playtime", parse_int),
    "db_update": _set("db_update", parse_int),
}

_COUNT_SETTERS: dict[str, Setter[Count]] = {
    "songs": _set("songs", parse_int),
    "playtime": _set("playtime", parse_int),
}

_DEVICE_SETTERS: dict[str, Setter[Device]] = {
    "outputid": _set("id", parse_int),
    "outputname": _set("name"),
    "outputenabled": _set("enabled", parse_bool),
}

# Song keys are case sensitive: tags are capitalised, "file" is not
_SONG_SETTERS: dict[str, Setter[Song]] = {
    "Artist": _set("artist"),
    "Album": _set("album"),
    "Title": _set("title"),
    "Genre": _set("genre"),
    "Name": _set("name"),
    "Composer": _set("composer"),
    "Performer": _set("performer"),
    "Date": _set("date", parse_int),
    "Track": _set("track", parse_fraction),
    "Disc": _set("disc", parse_fraction),
    "file": _set("file"),
    "Time": _set("length", parse_int),
    "Id": _set("index", lambda v: Id(parse_int(v))),
    # Id is the preferred playlist index
    "Pos": _ignore,
}


# -----------------------------------------------------------------------------
# Record decoders
# -----------------------------------------------------------------------------


def parse_status(pairs: Iterable[Pair]) -> Status:
    """Decode a status response."""
    return build_record(pairs, Status(), _STATUS_SETTERS)


def parse_stats(pairs: Iterable[Pair]) -> Stats:
    """Decode a stats response."""
    return build_record(pairs, Stats(), _STATS_SETTERS)


def parse_count(pairs: Iterable[Pair]) -> Count:
    """Decode a count response."""
    return build_record(pairs, Count(), _COUNT_SETTERS)


def parse_device(pairs: Iterable[Pair]) -> Device:
    """Decode one output device."""
    return build_record(pairs, Device(), _DEVICE_SETTERS)


def parse_outputs(pairs: Iterable[Pair]) -> list[Device]:
    """Decode every output device of an outputs response."""
    return [parse_device(group) for group in split_groups(pairs, OUTPUT_GROUP_KEYS)]


def parse_song(pairs: Iterable[Pair]) -> Song:
    """Decode one song."""
    return build_record(pairs, Song(), _SONG_SETTERS)


def parse_songs(pairs: Iterable[Pair]) -> list[Song]:
    """Decode a response listing several songs."""
    return [parse_song(group) for group in split_groups(pairs, SONG_GROUP_KEYS)]


def parse_entries(pairs: Iterable[Pair]) -> Entries:
    """Decode a directory listing (lsinfo, listallinfo).

    Directory and playlist names are collected separately; the remaining
    pairs are grouped into songs.
    """
    directories, playlists, song_pairs = partition_entries(pairs)
    return Entries(
        directories=directories,
        playlists=playlists,
        songs=parse_songs(song_pairs),
    )


def parse_pos_ids(pairs: Iterable[Pair]) -> list[tuple[Pos, Id]]:
    """Decode a plchangesposid response into (position, ID) tuples.

    Raises:
        MpdUnexpectedError: On an unknown key, a bad number or a group
            missing either field.
    """
    result: list[tuple[Pos, Id]] = []
    for group in split_groups(pairs, POS_ID_GROUP_KEYS):
        pos: Pos | None = None
        song_id: Id | None = None
        for key, value in group:
            if key == "cpos":
                pos = Pos(_parse_keyed(key, value))
            elif key == "Id":
                song_id = Id(_parse_keyed(key, value))
            else:
                raise MpdUnexpectedError(value, key)
        if pos is None or song_id is None:
            raise MpdUnexpectedError(repr(group))
        result.append((pos, song_id))
    return result


def _parse_keyed(key: str, value: str) -> int:
    try:
        return parse_int(value)
    except MpdUnexpectedError as e:
        raise MpdUnexpectedError(value, key) from e


def take_values(pairs: Iterable[Pair]) -> list[str]:
    """Return the values of all pairs, in order."""
    return [value for _, value in pairs]


def take_values_of(pairs: Iterable[Pair], key: str) -> list[str]:
    """Return the values of pairs with the given key, in order."""
    return [value for k, value in pairs if k == key]


def take_int(pairs: Iterable[Pair], key: str) -> int:
    """Return the first value for key as an integer.

    Raises:
        MpdUnexpectedError: If the key is absent or not an integer.
    """
    for k, value in pairs:
        if k == key:
            return _parse_keyed(k, value)
    raise MpdUnexpectedError(f"missing {key}")

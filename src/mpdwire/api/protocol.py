"""MPD protocol text handling.

MPD uses a simple line-based text protocol:
- Commands are sent as plain text lines
- Responses are key-value pairs: "key: value"
- Responses end with "OK" or "ACK [error@list_num] {command} message"
- Several commands can be batched between "command_list_begin" and
  "command_list_end"; the daemon answers with one concatenated response

This module turns response lines into ordered pairs, splits flat pair
sequences into per-entity groups and renders typed arguments as command
text. It holds no state and performs no I/O.

Reference: https://mpd.readthedocs.io/en/stable/protocol.html
"""

import re
from collections.abc import Iterable, Sequence
from enum import Enum

from mpdwire.api.types import Id, MultiQuery, Pos, Query


Pair = tuple[str, str]

COMMAND_LIST_BEGIN = "command_list_begin"
COMMAND_LIST_END = "command_list_end"

# Pattern for ACK responses: ACK [error@command_listNum] {current_command} message_text
ACK_PATTERN = re.compile(r"ACK \[(\d+)@\d+\] \{(\w*)\} (.+)")

# Daemon argument tokenizer: a quoted string with backslash escapes, or a bare word.
# Neither may span a line break.
_ARG_PATTERN = re.compile(r'"((?:\\[^\r\n]|[^"\\\r\n])*)"|([^ \t"\r\n]+)')
_UNESCAPE_PATTERN = re.compile(r"\\(.)")
_LINE_BREAKS = ("\n", "\r")


class MpdError(Exception):
    """MPD protocol error reported by the daemon."""

    def __init__(self, code: int, command: str, message: str) -> None:
        self.code = code
        self.command = command
        self.message = message
        super().__init__(f"MPD error {code} in {command}: {message}")


class MpdUnexpectedError(Exception):
    """Response text that could not be decoded.

    Attributes:
        key: Key of the offending pair, or None for a bare text fragment.
        value: The offending value or text fragment.
    """

    def __init__(self, value: str, key: str | None = None) -> None:
        self.key = key
        self.value = value
        if key is None:
            super().__init__(f"Unexpected input: {value!r}")
        else:
            super().__init__(f"Unexpected input: {key!r}: {value!r}")

    @property
    def pair(self) -> Pair | None:
        """Return the offending (key, value) pair, if the error has a key."""
        if self.key is None:
            return None
        return (self.key, self.value)


def check_response(lines: Sequence[str]) -> list[str]:
    """Strip the terminating OK from a response, raising on ACK.

    Args:
        lines: Raw response lines, including the final OK/ACK.

    Returns:
        Response lines without OK.

    Raises:
        MpdError: If the response contains an ACK line.
    """
    result: list[str] = []
    for line in lines:
        if line.startswith("ACK "):
            match = ACK_PATTERN.match(line)
            if match:
                raise MpdError(int(match.group(1)), match.group(2), match.group(3))
            raise MpdError(0, "", line)
        if line == "OK":
            continue
        result.append(line)
    return result


def parse_pairs(lines: Iterable[str]) -> list[Pair]:
    """Parse response lines into ordered key-value pairs.

    Keys keep the case the daemon sent and pairs keep their order;
    repeated keys are not merged. A line without a separator becomes a
    pair with an empty value.

    Args:
        lines: Response lines (without the final OK).

    Returns:
        List of (key, value) pairs.
    """
    pairs: list[Pair] = []
    for line in lines:
        if line == "OK":
            continue
        key, _, value = line.partition(": ")
        pairs.append((key, value))
    return pairs


def split_groups(pairs: Iterable[Pair], group_keys: Iterable[str]) -> list[list[Pair]]:
    """Split a flat pair sequence into one group per entity.

    A new group starts at every pair whose key is a group-start key,
    unless the current group is still empty. The first pair always opens
    the first group, whatever its key.

    Args:
        pairs: Ordered (key, value) pairs.
        group_keys: Keys that mark the start of a new entity.

    Returns:
        Groups of pairs in input order. Empty input gives an empty list.
    """
    starts = frozenset(group_keys)
    groups: list[list[Pair]] = []
    current: list[Pair] = []
    for pair in pairs:
        if pair[0] in starts and current:
            groups.append(current)
            current = []
        current.append(pair)
    if current:
        groups.append(current)
    return groups


def partition_entries(pairs: Iterable[Pair]) -> tuple[list[str], list[str], list[Pair]]:
    """Separate a directory listing into directories, playlists and songs.

    Args:
        pairs: Ordered pairs from lsinfo/listallinfo.

    Returns:
        Tuple of (directory names, playlist names, remaining song pairs).
    """
    directories: list[str] = []
    playlists: list[str] = []
    songs: list[Pair] = []
    for key, value in pairs:
        if key == "directory":
            directories.append(value)
        elif key == "playlist":
            playlists.append(value)
        else:
            songs.append((key, value))
    return directories, playlists, songs


def quote_arg(arg: str) -> str:
    """Quote a free-text argument for an MPD command.

    Inside quotes, backslash and double-quote must be escaped; every other
    character is passed through unchanged. A line break would end the
    command early and cannot be escaped, so it is refused.

    Args:
        arg: The argument to quote.

    Returns:
        Argument wrapped in double quotes.

    Raises:
        MpdUnexpectedError: If the argument contains a line break.
    """
    if any(brk in arg for brk in _LINE_BREAKS):
        raise MpdUnexpectedError(arg)
    escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def split_args(text: str) -> list[str]:
    """Split argument text the way the daemon tokenizes it.

    Args:
        text: Argument text following the command verb.

    Returns:
        Unquoted arguments.

    Raises:
        MpdUnexpectedError: If the text contains an unterminated quote or
            a line break.
    """
    args: list[str] = []
    pos = 0
    while pos < len(text):
        if text[pos] in " \t":
            pos += 1
            continue
        match = _ARG_PATTERN.match(text, pos)
        if match is None:
            raise MpdUnexpectedError(text[pos:])
        quoted, bare = match.groups()
        args.append(bare if quoted is None else _UNESCAPE_PATTERN.sub(r"\1", quoted))
        pos = match.end()
    return args


def render_query(query: Query | MultiQuery) -> str:
    """Render a query as command argument text.

    Example:
        render_query(Query(Meta.ALBUM, "Foo")) == 'Album "Foo"'

    Args:
        query: A single or compound query.

    Returns:
        Query text; compound members are joined with spaces in order.
    """
    if isinstance(query, MultiQuery):
        return " ".join(render_query(q) for q in query.queries)
    return f"{query.meta.value} {quote_arg(query.text)}"


def format_arg(arg: object) -> str:
    """Render one typed command argument.

    Free text is always quoted; numbers, flags, enum tokens and playlist
    indexes are written bare.

    Raises:
        TypeError: If the argument type has no wire form.
    """
    if isinstance(arg, str):
        return quote_arg(arg)
    if isinstance(arg, bool):
        return "1" if arg else "0"
    if isinstance(arg, int):
        return str(arg)
    if isinstance(arg, Enum):
        return str(arg.value)
    if isinstance(arg, Pos | Id):
        return str(arg.value)
    if isinstance(arg, Query | MultiQuery):
        return render_query(arg)
    raise TypeError(f"Cannot format {type(arg).__name__} as an MPD argument")


def format_command(command: str, *args: object) -> str:
    """Format an MPD command with arguments.

    Args:
        command: The MPD command name.
        *args: Command arguments; None values are skipped.

    Returns:
        Formatted command string (without newline).
    """
    rendered = [format_arg(arg) for arg in args if arg is not None]
    if not rendered:
        return command
    return f"{command} {' '.join(rendered)}"


def format_command_list(commands: Sequence[str]) -> str:
    """Wrap commands in list sentinels so they run as one batch.

    Args:
        commands: Formatted command lines.

    Returns:
        Batch text, newline separated (without trailing newline).
    """
    return "\n".join([COMMAND_LIST_BEGIN, *commands, COMMAND_LIST_END])

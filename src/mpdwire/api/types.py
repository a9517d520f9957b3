"""MPD protocol data types.

This module defines frozen dataclasses and enums for MPD requests and
responses. Every record has a zero-valued default for each field so that
the record builders in :mod:`mpdwire.api.parse` can start from an empty
value and fold response pairs into it.
"""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Pos:
    """A zero-based position in a playlist.

    Positions change whenever the playlist is modified.
    """

    value: int


@dataclass(frozen=True)
class Id:
    """A playlist entry ID assigned by the daemon.

    IDs stay with an entry when the playlist is reordered.
    """

    value: int


PLIndex = Pos | Id


class State(Enum):
    """Playback state, valued by its wire token."""

    PLAYING = "play"
    STOPPED = "stop"
    PAUSED = "pause"


class Meta(Enum):
    """Metadata scope used to filter database and playlist queries."""

    ARTIST = "Artist"
    ALBUM = "Album"
    TITLE = "Title"
    TRACK = "Track"
    NAME = "Name"
    GENRE = "Genre"
    DATE = "Date"
    COMPOSER = "Composer"
    PERFORMER = "Performer"
    DISC = "Disc"
    ANY = "Any"
    FILENAME = "Filename"


@dataclass(frozen=True)
class Query:
    """A single metadata-scoped query.

    Example:
        Query(Meta.ALBUM, "Foo") matches songs whose album is "Foo".
    """

    meta: Meta
    text: str


@dataclass(frozen=True)
class MultiQuery:
    """Several queries that must all match."""

    queries: tuple["Query | MultiQuery", ...] = ()


@dataclass(frozen=True)
class Status:
    """MPD player status.

    Attributes:
        state: Playback state.
        volume: Volume level (0-100).
        repeat: Repeat mode enabled.
        random: Random mode enabled.
        playlist_version: Incremented by the daemon on every playlist change.
        playlist_length: Number of entries in the current playlist.
        song_pos: Position of the current song, if any.
        song_id: ID of the current song, if any.
        time: Elapsed and total seconds of the current song.
        bitrate: Bitrate of the current song in kbps.
        xfade: Crossfade width in seconds.
        audio: Sample rate, bits per sample and channel count.
        updating_db: Job ID of a running database update.
        error: Last error message.
    """

    state: State = State.STOPPED
    volume: int = 0
    repeat: bool = False
    random: bool = False
    playlist_version: int = 0
    playlist_length: int = 0
    song_pos: Pos | None = None
    song_id: Id | None = None
    time: tuple[int, int] = (0, 0)
    bitrate: int = 0
    xfade: int = 0
    audio: tuple[int, int, int] = (0, 0, 0)
    updating_db: int = 0
    error: str = ""

    @property
    def is_playing(self) -> bool:
        """Return True if currently playing."""
        return self.state is State.PLAYING

    @property
    def is_paused(self) -> bool:
        """Return True if paused."""
        return self.state is State.PAUSED

    @property
    def is_stopped(self) -> bool:
        """Return True if stopped."""
        return self.state is State.STOPPED

    @property
    def elapsed(self) -> int:
        """Return elapsed seconds of the current song."""
        return self.time[0]

    @property
    def total(self) -> int:
        """Return total seconds of the current song."""
        return self.time[1]

    @property
    def progress(self) -> float:
        """Return playback progress as a fraction (0.0 to 1.0)."""
        if self.total <= 0:
            return 0.0
        return min(1.0, self.elapsed / self.total)


@dataclass(frozen=True)
class Stats:
    """Daemon-wide statistics.

    Attributes:
        artists: Number of artists.
        albums: Number of albums.
        songs: Number of songs.
        uptime: Daemon uptime in seconds.
        playtime: Time spent playing in seconds.
        db_playtime: Total play time of all songs in the database.
        db_update: Last database update in UNIX time.
    """

    artists: int = 0
    albums: int = 0
    songs: int = 0
    uptime: int = 0
    playtime: int = 0
    db_playtime: int = 0
    db_update: int = 0


@dataclass(frozen=True)
class Count:
    """Result of a count query."""

    songs: int = 0
    playtime: int = 0


@dataclass(frozen=True)
class Device:
    """An audio output device.

    Attributes:
        id: Output ID.
        name: Output name as configured in mpd.conf.
        enabled: Whether the output is enabled.
    """

    id: int = 0
    name: str = ""
    enabled: bool = False


@dataclass(frozen=True, eq=False)
class Song:
    """A song from the database or a playlist.

    Two songs are equal when their file paths are equal; no other field
    takes part in comparison or hashing.

    Attributes:
        file: Path relative to the music directory.
        artist: Artist tag.
        album: Album tag.
        title: Title tag.
        genre: Genre tag.
        name: Name tag (usually set by streams).
        composer: Composer tag.
        performer: Performer tag.
        length: Length in seconds.
        date: Release year.
        track: Track number and total tracks.
        disc: Disc number and total discs.
        index: Playlist ID when the song comes from the current playlist.
    """

    file: str = ""
    artist: str = ""
    album: str = ""
    title: str = ""
    genre: str = ""
    name: str = ""
    composer: str = ""
    performer: str = ""
    length: int = 0
    date: int = 0
    track: tuple[int, int] = (0, 0)
    disc: tuple[int, int] = (0, 0)
    index: Id | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Song):
            return NotImplemented
        return self.file == other.file

    def __hash__(self) -> int:
        return hash(self.file)

    @property
    def display_title(self) -> str:
        """Return title for display, with filename fallback."""
        if self.title:
            return self.title
        name = self.file.rsplit("/", 1)[-1]
        if "." in name:
            name = name.rsplit(".", 1)[0]
        return name


@dataclass(frozen=True)
class Entries:
    """Contents of a database directory listing."""

    directories: list[str] = field(default_factory=list)
    playlists: list[str] = field(default_factory=list)
    songs: list[Song] = field(default_factory=list)

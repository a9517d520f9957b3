"""Shared fixtures for mpdwire tests."""

import pytest


@pytest.fixture
def status_lines() -> list[str]:
    """Return a complete status response from a playing daemon."""
    return [
        "volume: 75",
        "repeat: 1",
        "random: 0",
        "playlist: 12",
        "playlistlength: 4",
        "xfade: 5",
        "state: play",
        "song: 2",
        "songid: 42",
        "time: 45:180",
        "bitrate: 320",
        "audio: 44100:16:2",
        "updating_db: 3",
        "error: problems opening audio device",
    ]


@pytest.fixture
def song_lines() -> list[str]:
    """Return a playlistinfo response with two songs."""
    return [
        "file: albums/Pink Moon/01 Pink Moon.flac",
        "Artist: Nick Drake",
        "Album: Pink Moon",
        "Title: Pink Moon",
        "Date: 1972",
        "Track: 1/11",
        "Disc: 1/1",
        "Time: 125",
        "Pos: 0",
        "Id: 10",
        "file: albums/Pink Moon/02 Place To Be.flac",
        "Artist: Nick Drake",
        "Title: Place To Be",
        "Track: 2/11",
        "Time: 163",
        "Pos: 1",
        "Id: 11",
    ]

"""Tests for MPD response decoding."""

import itertools
import random

import pytest

from mpdwire.api.parse import (
    build_record,
    parse_bool,
    parse_count,
    parse_device,
    parse_entries,
    parse_fraction,
    parse_int,
    parse_outputs,
    parse_pair,
    parse_pos_ids,
    parse_song,
    parse_songs,
    parse_state,
    parse_stats,
    parse_status,
    parse_triple,
    take_int,
    take_values,
    take_values_of,
)
from mpdwire.api.protocol import MpdUnexpectedError, parse_pairs
from mpdwire.api.types import Count, Device, Id, Pos, Song, State, Stats, Status


class TestPrimitiveParsers:
    """Tests for the primitive field parsers."""

    @pytest.mark.parametrize(("text", "expected"), [("0", 0), ("42", 42), ("-7", -7)])
    def test_parse_int(self, text: str, expected: int) -> None:
        """Test valid integers."""
        assert parse_int(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "4.5", " 4", "4 ", "+4", "1_000", "٣"])
    def test_parse_int_rejects(self, text: str) -> None:
        """Test anything but a plain base-10 integer fails."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_int(text)
        assert excinfo.value.value == text
        assert excinfo.value.pair is None

    def test_parse_bool(self) -> None:
        """Test exactly 1 and 0 are accepted."""
        assert parse_bool("1") is True
        assert parse_bool("0") is False

    @pytest.mark.parametrize("text", ["", "2", "true", "01", "yes"])
    def test_parse_bool_rejects(self, text: str) -> None:
        """Test other boolean spellings fail."""
        with pytest.raises(MpdUnexpectedError):
            parse_bool(text)

    def test_parse_pair(self) -> None:
        """Test the colon pair splitter."""
        assert parse_pair("3:45") == (3, 45)

    @pytest.mark.parametrize("text", ["foo:45", "3:foo", "345", "3:4:5", ""])
    def test_parse_pair_rejects(self, text: str) -> None:
        """Test a bad half or a missing separator fails."""
        with pytest.raises(MpdUnexpectedError):
            parse_pair(text)

    def test_parse_pair_other_separator(self) -> None:
        """Test the splitter with a slash separator."""
        assert parse_pair("2/12", "/") == (2, 12)

    def test_parse_triple(self) -> None:
        """Test the audio format triple."""
        assert parse_triple("44100:16:2") == (44100, 16, 2)

    @pytest.mark.parametrize("text", ["44100:16", "44100:f:2", "44100:16:2:1", "44100"])
    def test_parse_triple_rejects(self, text: str) -> None:
        """Test malformed triples fail."""
        with pytest.raises(MpdUnexpectedError):
            parse_triple(text)

    def test_parse_fraction(self) -> None:
        """Test number/total fields."""
        assert parse_fraction("3/12") == (3, 12)

    def test_parse_fraction_without_total(self) -> None:
        """Test a bare number reads as (number, 0)."""
        assert parse_fraction("7") == (7, 0)

    @pytest.mark.parametrize("text", ["", "/12", "3/", "a/b", "3/12/1"])
    def test_parse_fraction_rejects(self, text: str) -> None:
        """Test malformed fractions fail."""
        with pytest.raises(MpdUnexpectedError):
            parse_fraction(text)

    def test_parse_state(self) -> None:
        """Test every state token."""
        assert parse_state("play") is State.PLAYING
        assert parse_state("pause") is State.PAUSED
        assert parse_state("stop") is State.STOPPED

    def test_parse_state_rejects(self) -> None:
        """Test an unknown state token fails."""
        with pytest.raises(MpdUnexpectedError):
            parse_state("Play")


class TestBuildRecord:
    """Tests for the generic record fold."""

    def test_unknown_key_reports_pair(self) -> None:
        """Test an unrecognised key fails with that exact pair."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            build_record([("a", "1"), ("b", "2")], Count(), {})
        assert excinfo.value.pair == ("a", "1")

    def test_parser_failure_reports_pair(self) -> None:
        """Test a value failure names the key it came from."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_count([("songs", "many")])
        assert excinfo.value.pair == ("songs", "many")
        assert isinstance(excinfo.value.__cause__, MpdUnexpectedError)

    def test_last_write_wins(self) -> None:
        """Test a repeated key overwrites the earlier value."""
        assert parse_count([("songs", "1"), ("songs", "9")]).songs == 9

    def test_empty_record_untouched(self) -> None:
        """Test the default record is never mutated."""
        empty = Count()
        build_record([("songs", "5")], empty, {"songs": lambda r, v: Count(int(v), r.playtime)})
        assert empty == Count()


class TestParseStatus:
    """Tests for parse_status."""

    def test_full_status(self, status_lines: list[str]) -> None:
        """Test every recognised key."""
        status = parse_status(parse_pairs(status_lines))
        assert status == Status(
            state=State.PLAYING,
            volume=75,
            repeat=True,
            random=False,
            playlist_version=12,
            playlist_length=4,
            song_pos=Pos(2),
            song_id=Id(42),
            time=(45, 180),
            bitrate=320,
            xfade=5,
            audio=(44100, 16, 2),
            updating_db=3,
            error="problems opening audio device",
        )

    def test_key_order_does_not_matter(self, status_lines: list[str]) -> None:
        """Test permutations of the 14 keys decode identically."""
        expected = parse_status(parse_pairs(status_lines))
        rng = random.Random(1234)
        for _ in range(50):
            shuffled = status_lines[:]
            rng.shuffle(shuffled)
            assert parse_status(parse_pairs(shuffled)) == expected

    def test_reversed_order(self, status_lines: list[str]) -> None:
        """Test the fully reversed response."""
        assert parse_status(parse_pairs(reversed(status_lines))) == parse_status(
            parse_pairs(status_lines)
        )

    def test_missing_song_keys(self, status_lines: list[str]) -> None:
        """Test song position and ID stay absent when not sent."""
        lines = [line for line in status_lines if not line.startswith(("song:", "songid:"))]
        status = parse_status(parse_pairs(lines))
        assert status.song_pos is None
        assert status.song_id is None
        assert status.volume == 75
        assert status.time == (45, 180)

    def test_empty_status(self) -> None:
        """Test no pairs gives the default status."""
        assert parse_status([]) == Status()
        assert Status().state is State.STOPPED

    @pytest.mark.parametrize("position", [0, 7, 14])
    def test_unknown_key_anywhere(self, status_lines: list[str], position: int) -> None:
        """Test one unknown key fails the record wherever it appears."""
        pairs = parse_pairs(status_lines)
        pairs.insert(position, ("consume", "0"))
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_status(pairs)
        assert excinfo.value.pair == ("consume", "0")

    def test_bad_state(self) -> None:
        """Test an unknown state token fails."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_status([("state", "rewind")])
        assert excinfo.value.pair == ("state", "rewind")

    def test_bad_time(self) -> None:
        """Test a malformed time field fails."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_status([("time", "foo:45")])
        assert excinfo.value.pair == ("time", "foo:45")

    def test_error_is_free_text(self) -> None:
        """Test the error value is stored verbatim."""
        assert parse_status([("error", "ACK: 1: 2")]).error == "ACK: 1: 2"

    def test_keys_are_case_sensitive(self) -> None:
        """Test a capitalised status key is not recognised."""
        with pytest.raises(MpdUnexpectedError):
            parse_status([("Volume", "10")])


class TestParseStatsAndCount:
    """Tests for parse_stats and parse_count."""

    def test_stats(self) -> None:
        """Test every stats key."""
        lines = [
            "artists: 120",
            "albums: 340",
            "songs: 4021",
            "uptime: 3600",
            "playtime: 1200",
            "db_playtime: 987654",
            "db_update: 1700000000",
        ]
        assert parse_stats(parse_pairs(lines)) == Stats(
            artists=120,
            albums=340,
            songs=4021,
            uptime=3600,
            playtime=1200,
            db_playtime=987654,
            db_update=1700000000,
        )

    def test_empty_stats(self) -> None:
        """Test no pairs gives the zero-valued stats."""
        assert parse_stats([]) == Stats()

    def test_stats_rejects_unknown_key(self) -> None:
        """Test an unknown stats key fails."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_stats([("artists", "1"), ("genres", "3")])
        assert excinfo.value.pair == ("genres", "3")

    def test_count(self) -> None:
        """Test a count response."""
        assert parse_count([("songs", "12"), ("playtime", "2890")]) == Count(12, 2890)

    def test_count_rejects_stats_key(self) -> None:
        """Test a key from another record fails."""
        with pytest.raises(MpdUnexpectedError):
            parse_count([("artists", "1")])


class TestParseOutputs:
    """Tests for device decoding."""

    def test_two_outputs(self) -> None:
        """Test one device per outputid group."""
        lines = [
            "outputid: 0",
            "outputname: My ALSA Device",
            "outputenabled: 1",
            "outputid: 1",
            "outputname: HTTP stream",
            "outputenabled: 0",
        ]
        assert parse_outputs(parse_pairs(lines)) == [
            Device(0, "My ALSA Device", True),
            Device(1, "HTTP stream", False),
        ]

    def test_no_outputs(self) -> None:
        """Test an empty response gives no devices."""
        assert parse_outputs([]) == []

    def test_bad_enabled_flag(self) -> None:
        """Test a malformed flag fails the whole list."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_outputs([("outputid", "0"), ("outputenabled", "yes")])
        assert excinfo.value.pair == ("outputenabled", "yes")

    def test_unknown_device_key(self) -> None:
        """Test an unknown key fails the device."""
        with pytest.raises(MpdUnexpectedError):
            parse_device([("outputid", "0"), ("plugin", "alsa")])


class TestParseSongs:
    """Tests for song decoding."""

    def test_two_songs(self, song_lines: list[str]) -> None:
        """Test a playlist response gives one song per file key."""
        songs = parse_songs(parse_pairs(song_lines))
        assert len(songs) == 2

        first = songs[0]
        assert first.file == "albums/Pink Moon/01 Pink Moon.flac"
        assert first.artist == "Nick Drake"
        assert first.album == "Pink Moon"
        assert first.title == "Pink Moon"
        assert first.date == 1972
        assert first.track == (1, 11)
        assert first.disc == (1, 1)
        assert first.length == 125
        assert first.index == Id(10)

        second = songs[1]
        assert second.album == ""
        assert second.track == (2, 11)
        assert second.disc == (0, 0)
        assert second.index == Id(11)

    def test_pos_is_ignored(self) -> None:
        """Test Pos is accepted but the ID is used as the index."""
        song = parse_song([("file", "a.mp3"), ("Pos", "3")])
        assert song.index is None
        song = parse_song([("file", "a.mp3"), ("Pos", "not-a-number"), ("Id", "8")])
        assert song.index == Id(8)

    def test_all_text_tags(self) -> None:
        """Test every free-text tag lands in its field."""
        song = parse_song(
            [
                ("file", "x.ogg"),
                ("Genre", "Folk"),
                ("Name", "Radio"),
                ("Composer", "C"),
                ("Performer", "P"),
            ]
        )
        assert (song.genre, song.name, song.composer, song.performer) == (
            "Folk",
            "Radio",
            "C",
            "P",
        )

    def test_track_without_total(self) -> None:
        """Test a bare track number."""
        assert parse_song([("file", "a.mp3"), ("Track", "4")]).track == (4, 0)

    def test_unknown_tag_fails(self) -> None:
        """Test an unrecognised tag fails the song."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_songs([("file", "a.mp3"), ("Last-Modified", "2020-01-01T00:00:00Z")])
        assert excinfo.value.key == "Last-Modified"

    def test_lowercase_tag_fails(self) -> None:
        """Test tags are matched case-sensitively."""
        with pytest.raises(MpdUnexpectedError):
            parse_song([("file", "a.mp3"), ("artist", "A")])

    def test_bad_date(self) -> None:
        """Test a non-numeric date fails."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_song([("file", "a.mp3"), ("Date", "1972-02-25")])
        assert excinfo.value.pair == ("Date", "1972-02-25")

    def test_empty_response(self) -> None:
        """Test no pairs gives no songs."""
        assert parse_songs([]) == []


class TestSongEquality:
    """Tests for Song identity."""

    def test_same_path_equal(self) -> None:
        """Test songs with the same path are equal whatever their tags."""
        a = Song(file="a.mp3", title="One", length=100, index=Id(1))
        b = Song(file="a.mp3", artist="Someone", track=(3, 9))
        assert a == b
        assert hash(a) == hash(b)

    def test_different_path_unequal(self) -> None:
        """Test songs with different paths differ even with identical tags."""
        assert Song(file="a.mp3", title="T") != Song(file="b.mp3", title="T")

    def test_dedupe_by_path(self) -> None:
        """Test a set of songs collapses duplicates by path."""
        songs = [Song(file="a"), Song(file="b", title="x"), Song(file="a", title="y")]
        assert len(set(songs)) == 2
        assert Song(file="b") in songs

    def test_not_equal_to_other_types(self) -> None:
        """Test comparison with a non-song."""
        assert Song(file="a") != "a"


class TestParseEntries:
    """Tests for directory listing decoding."""

    def test_mixed_listing(self) -> None:
        """Test directories, playlists and songs are separated."""
        lines = [
            "directory: albums",
            "directory: singles",
            "file: loose.mp3",
            "Title: Loose",
            "playlist: party",
            "file: other.mp3",
        ]
        entries = parse_entries(parse_pairs(lines))
        assert entries.directories == ["albums", "singles"]
        assert entries.playlists == ["party"]
        assert [song.file for song in entries.songs] == ["loose.mp3", "other.mp3"]
        assert entries.songs[0].title == "Loose"

    def test_only_directories(self) -> None:
        """Test a listing without songs."""
        entries = parse_entries([("directory", "a")])
        assert entries.directories == ["a"]
        assert entries.songs == []


class TestParsePosIds:
    """Tests for plchangesposid decoding."""

    def test_pairs(self) -> None:
        """Test position and ID groups."""
        lines = ["cpos: 0", "Id: 5", "cpos: 1", "Id: 9"]
        assert parse_pos_ids(parse_pairs(lines)) == [(Pos(0), Id(5)), (Pos(1), Id(9))]

    def test_missing_id(self) -> None:
        """Test a group without an ID fails."""
        with pytest.raises(MpdUnexpectedError):
            parse_pos_ids([("cpos", "0")])

    def test_unknown_key(self) -> None:
        """Test an unknown key fails."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            parse_pos_ids([("cpos", "0"), ("Id", "1"), ("file", "a")])
        assert excinfo.value.pair == ("file", "a")


class TestTakeHelpers:
    """Tests for value extraction helpers."""

    def test_take_values(self) -> None:
        """Test values are returned in order."""
        assert take_values([("Artist", "A"), ("Artist", "B")]) == ["A", "B"]

    def test_take_values_of(self) -> None:
        """Test values are filtered by key."""
        pairs = [("directory", "d"), ("file", "a"), ("file", "b")]
        assert take_values_of(pairs, "file") == ["a", "b"]

    def test_take_int(self) -> None:
        """Test the first value for a key is parsed."""
        assert take_int([("updating_db", "4")], "updating_db") == 4

    def test_take_int_missing(self) -> None:
        """Test a missing key fails."""
        with pytest.raises(MpdUnexpectedError):
            take_int([], "Id")

    def test_take_int_bad_value(self) -> None:
        """Test a bad value names its key."""
        with pytest.raises(MpdUnexpectedError) as excinfo:
            take_int([("Id", "x")], "Id")
        assert excinfo.value.pair == ("Id", "x")


class TestStatusPermutations:
    """Tests for systematic status key permutations."""

    def test_status_permutation_sample(self, status_lines: list[str]) -> None:
        """Test a sample of systematic permutations of the first keys."""
        expected = parse_status(parse_pairs(status_lines))
        head, tail = status_lines[:5], status_lines[5:]
        for permutation in itertools.permutations(head):
            assert parse_status(parse_pairs([*permutation, *tail])) == expected

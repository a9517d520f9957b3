"""Tests for ServerProfile model."""

from dataclasses import FrozenInstanceError

import pytest

from mpdwire.models.profile import ServerProfile, create_profile


class TestServerProfile:
    """Test ServerProfile dataclass."""

    def test_creation_with_defaults(self) -> None:
        """Test profile creation with default port, password and auto_connect."""
        profile = ServerProfile(id="test-1", name="Test Server", host="192.168.1.100")
        assert profile.port == 6600
        assert profile.password == ""
        assert profile.auto_connect is False

    def test_with_auto_connect(self) -> None:
        """Test creating a copy with different auto_connect value."""
        profile = ServerProfile(id="test-1", name="Test", host="192.168.1.100", password="pw")
        updated = profile.with_auto_connect(True)

        assert updated.auto_connect is True
        assert updated.password == "pw"
        assert profile.auto_connect is False

    def test_is_immutable(self) -> None:
        """Test that ServerProfile is frozen."""
        profile = ServerProfile(id="test-1", name="Test", host="h")
        with pytest.raises(FrozenInstanceError):
            profile.host = "other"  # type: ignore[misc]


class TestCreateProfile:
    """Test create_profile factory."""

    def test_id_depends_on_host_and_port(self) -> None:
        """Test the generated ID is stable per host:port."""
        a = create_profile("A", "music.lan")
        b = create_profile("B", "music.lan")
        c = create_profile("C", "music.lan", port=6601)

        assert a.id == b.id
        assert a.id != c.id
        assert len(a.id) == 8

    def test_passes_fields(self) -> None:
        """Test all fields are set."""
        profile = create_profile("Den", "den.lan", 6601, "pw", auto_connect=True)
        assert (profile.name, profile.host, profile.port) == ("Den", "den.lan", 6601)
        assert profile.password == "pw"
        assert profile.auto_connect is True

"""Configuration manager using QSettings for persistent storage."""

import logging
import os
from collections.abc import Mapping
from typing import cast

from PySide6.QtCore import QSettings

from mpdwire.models.profile import DEFAULT_MPD_PORT, ServerProfile

logger = logging.getLogger(__name__)

# Settings keys
_KEY_SERVERS = "servers"
_KEY_LAST_SERVER = "last_server"
_KEY_COMMAND_TIMEOUT = "mpd/command_timeout"

DEFAULT_HOST = "localhost"
DEFAULT_COMMAND_TIMEOUT = 10.0

# Environment variables honoured by MPD clients
ENV_HOST = "MPD_HOST"
ENV_PORT = "MPD_PORT"


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\mpdwire\\mpdwire
    - macOS: ~/Library/Preferences/com.mpdwire.mpdwire.plist
    - Linux: ~/.config/mpdwire/mpdwire.conf

    Example:
        config = ConfigManager()
        profiles = config.get_server_profiles()
        config.save_server_profiles(profiles)
    """

    def __init__(self, organization: str = "mpdwire", application: str = "mpdwire") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    def get_server_profiles(self) -> list[ServerProfile]:
        """Load saved server profiles.

        Returns:
            List of ServerProfile objects, or empty list if none saved.
        """
        raw_data = self._settings.value(_KEY_SERVERS, [], list)
        profiles: list[ServerProfile] = []

        if not isinstance(raw_data, list):
            return profiles

        data = cast(list[object], raw_data)
        for raw_item in data:
            if not isinstance(raw_item, dict):
                continue
            item = cast(dict[str, object], raw_item)
            try:
                id_val = item.get("id", "")
                name_val = item.get("name", "")
                host_val = item.get("host", "")
                port_val = item.get("port", DEFAULT_MPD_PORT)
                password_val = item.get("password", "")
                auto_val = item.get("auto_connect", False)
                profiles.append(
                    ServerProfile(
                        id=str(id_val) if id_val else "",
                        name=str(name_val) if name_val else "",
                        host=str(host_val) if host_val else "",
                        port=int(port_val) if isinstance(port_val, int) else DEFAULT_MPD_PORT,
                        password=str(password_val) if password_val else "",
                        auto_connect=bool(auto_val),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping invalid server profile entry: %s", e)
                continue

        return profiles

    def save_server_profiles(self, profiles: list[ServerProfile]) -> None:
        """Persist server profiles."""
        data = [
            {
                "id": p.id,
                "name": p.name,
                "host": p.host,
                "port": p.port,
                "password": p.password,
                "auto_connect": p.auto_connect,
            }
            for p in profiles
        ]
        self._settings.setValue(_KEY_SERVERS, data)

    def add_server_profile(self, profile: ServerProfile) -> None:
        """Add a server profile (replacing if ID exists)."""
        profiles = [p for p in self.get_server_profiles() if p.id != profile.id]
        profiles.append(profile)
        self.save_server_profiles(profiles)

    def remove_server_profile(self, profile_id: str) -> bool:
        """Remove a server profile by ID.

        Returns:
            True if profile was removed, False if not found.
        """
        profiles = self.get_server_profiles()
        original_count = len(profiles)
        profiles = [p for p in profiles if p.id != profile_id]

        if len(profiles) < original_count:
            self.save_server_profiles(profiles)
            return True
        return False

    def get_profile(self, profile_id: str) -> ServerProfile | None:
        """Get a server profile by ID."""
        for profile in self.get_server_profiles():
            if profile.id == profile_id:
                return profile
        return None

    def get_last_server_id(self) -> str | None:
        """Get the last connected server ID."""
        value = self._settings.value(_KEY_LAST_SERVER, None, str)
        return str(value) if value else None

    def set_last_server_id(self, server_id: str) -> None:
        """Set the last connected server ID."""
        self._settings.setValue(_KEY_LAST_SERVER, server_id)

    def get_auto_connect_profile(self) -> ServerProfile | None:
        """Get the profile marked for auto-connect.

        If multiple profiles have auto_connect=True, returns the first one.
        """
        for profile in self.get_server_profiles():
            if profile.auto_connect:
                return profile
        return None

    def get_default_profile(self) -> ServerProfile | None:
        """Return the auto-connect profile, else the last used one."""
        profile = self.get_auto_connect_profile()
        if profile:
            return profile
        last_id = self.get_last_server_id()
        return self.get_profile(last_id) if last_id else None

    def get_command_timeout(self) -> float:
        """Return seconds to wait for a command response (default 10)."""
        value = self._settings.value(_KEY_COMMAND_TIMEOUT, DEFAULT_COMMAND_TIMEOUT, float)
        return max(0.1, float(value))  # type: ignore[arg-type]

    def set_command_timeout(self, seconds: float) -> None:
        """Set seconds to wait for a command response."""
        self._settings.setValue(_KEY_COMMAND_TIMEOUT, max(0.1, seconds))

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()


def parse_mpd_host(value: str) -> tuple[str, str]:
    """Split an MPD_HOST value into (host, password).

    MPD_HOST may carry a password as "password@host".
    """
    password, sep, host = value.rpartition("@")
    if not sep:
        return value, ""
    return host, password


def resolve_connection(
    host: str | None = None,
    port: int | None = None,
    password: str | None = None,
    config: ConfigManager | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerProfile:
    """Work out which server to connect to.

    Explicit arguments win, then MPD_HOST/MPD_PORT, then the saved default
    profile, then localhost:6600.

    Returns:
        A ServerProfile describing the connection target.
    """
    env = os.environ if environ is None else environ
    saved = config.get_default_profile() if config else None

    resolved_host = DEFAULT_HOST
    resolved_port = DEFAULT_MPD_PORT
    resolved_password = ""
    name = DEFAULT_HOST

    if saved:
        resolved_host, resolved_port, resolved_password = saved.host, saved.port, saved.password
        name = saved.name

    env_host = env.get(ENV_HOST, "")
    if env_host:
        resolved_host, resolved_password = parse_mpd_host(env_host)
        name = resolved_host
    env_port = env.get(ENV_PORT, "")
    if env_port:
        try:
            resolved_port = int(env_port)
        except ValueError:
            logger.warning("Ignoring invalid %s: %s", ENV_PORT, env_port)

    if host:
        resolved_host = host
        name = host
    if port:
        resolved_port = port
    if password is not None:
        resolved_password = password

    logger.debug("Resolved MPD server %s:%d", resolved_host, resolved_port)
    return ServerProfile(
        id=saved.id if saved and saved.host == resolved_host else "",
        name=name,
        host=resolved_host,
        port=resolved_port,
        password=resolved_password,
    )

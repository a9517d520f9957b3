"""Server profile data model for connection configuration."""

import hashlib
from dataclasses import dataclass, replace
from typing import Self

DEFAULT_MPD_PORT = 6600


@dataclass(frozen=True)
class ServerProfile:
    """Connection profile for an MPD server.

    Attributes:
        id: Unique identifier for the profile.
        name: Human-readable name (e.g., "Living Room", "Basement").
        host: Server hostname or IP address.
        port: TCP port (default 6600).
        password: Password sent after connecting, empty for none.
        auto_connect: Whether to connect to this profile by default.
    """

    id: str
    name: str
    host: str
    port: int = DEFAULT_MPD_PORT
    password: str = ""
    auto_connect: bool = False

    def with_auto_connect(self, auto_connect: bool) -> Self:
        """Return a copy with auto_connect changed."""
        return replace(self, auto_connect=auto_connect)


def create_profile(
    name: str,
    host: str,
    port: int = DEFAULT_MPD_PORT,
    password: str = "",
    auto_connect: bool = False,
) -> ServerProfile:
    """Create a new ServerProfile with a generated ID.

    Args:
        name: Human-readable name.
        host: Server hostname or IP.
        port: TCP port.
        password: Optional password.
        auto_connect: Whether to connect to it by default.

    Returns:
        New ServerProfile with unique ID based on host:port.
    """
    profile_id = hashlib.md5(f"{host}:{port}".encode()).hexdigest()[:8]
    return ServerProfile(
        id=profile_id,
        name=name,
        host=host,
        port=port,
        password=password,
        auto_connect=auto_connect,
    )

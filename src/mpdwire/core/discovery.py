"""Find MPD daemons announced over mDNS.

MPD registers itself as ``_mpd._tcp`` when built with zeroconf support.
Each announcement is turned into a :class:`DiscoveredServer`, which can be
saved as a :class:`~mpdwire.models.profile.ServerProfile`.
"""

from __future__ import annotations

import ipaddress
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Self

from zeroconf import IPVersion, ServiceBrowser, ServiceListener, Zeroconf

from mpdwire.models.profile import DEFAULT_MPD_PORT, ServerProfile, create_profile

logger = logging.getLogger(__name__)

MPD_SERVICE_TYPE = "_mpd._tcp.local."

FoundCallback = Callable[["DiscoveredServer"], None]
RemovedCallback = Callable[[str], None]


@dataclass
class DiscoveredServer:
    """An MPD daemon seen on the local network.

    Attributes:
        name: Full mDNS service name.
        host: Address to connect to (IPv4 preferred).
        port: MPD port from the SRV record.
        addresses: Every address the service announced.
        hostname: mDNS host name without trailing dot, if known.
    """

    name: str
    host: str
    port: int = DEFAULT_MPD_PORT
    addresses: list[str] = field(default_factory=list)
    hostname: str = ""

    @property
    def display_name(self) -> str:
        """Return the instance name without the service type suffix."""
        instance = self.name.removesuffix(f".{MPD_SERVICE_TYPE}")
        return instance or self.hostname or self.host

    def to_profile(self) -> ServerProfile:
        """Return a connection profile for this server."""
        return create_profile(self.display_name, self.host, self.port)


def _sort_addresses(addresses: list[str]) -> list[str]:
    """Order addresses IPv4 first, keeping announcement order otherwise."""
    return sorted(addresses, key=lambda a: ipaddress.ip_address(a.split("%")[0]).version)


class MpdServiceListener(ServiceListener):
    """Collects ``_mpd._tcp`` announcements from a ServiceBrowser."""

    def __init__(
        self,
        on_found: FoundCallback | None = None,
        on_removed: RemovedCallback | None = None,
    ) -> None:
        self._on_found = on_found
        self._on_removed = on_removed
        self._servers: dict[str, DiscoveredServer] = {}
        self._lock = threading.Lock()

    @property
    def servers(self) -> list[DiscoveredServer]:
        """Return the servers currently announced."""
        with self._lock:
            return list(self._servers.values())

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        """Resolve a new announcement and record it."""
        info = zc.get_service_info(type_, name)
        if info is None:
            logger.debug("No service info for %s", name)
            return

        addresses = _sort_addresses(info.parsed_scoped_addresses(IPVersion.All))
        if not addresses:
            logger.debug("Service %s announced no addresses", name)
            return

        server = DiscoveredServer(
            name=name,
            host=addresses[0],
            port=info.port or DEFAULT_MPD_PORT,
            addresses=addresses,
            hostname=(info.server or "").rstrip("."),
        )
        with self._lock:
            self._servers[name] = server
        logger.info(
            "Discovered MPD server %s at %s:%d", server.display_name, server.host, server.port
        )

        if self._on_found:
            self._on_found(server)

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:  # noqa: ARG002
        """Forget a server that went away."""
        with self._lock:
            removed = self._servers.pop(name, None)
        if removed is None:
            return
        logger.info("MPD server gone: %s", removed.display_name)
        if self._on_removed:
            self._on_removed(name)

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        """Re-resolve a server whose records changed."""
        self.add_service(zc, type_, name)


class ServerDiscovery:
    """Browses the local network for MPD servers.

    Can run in the background with callbacks, or be used through the
    blocking helpers:

        server = ServerDiscovery.discover_one(timeout=3.0)
        if server:
            profile = server.to_profile()
    """

    def __init__(self) -> None:
        self._zeroconf: Zeroconf | None = None
        self._browser: ServiceBrowser | None = None
        self._listener: MpdServiceListener | None = None

    @property
    def is_running(self) -> bool:
        return self._zeroconf is not None

    @property
    def servers(self) -> list[DiscoveredServer]:
        """Return the servers found so far."""
        return self._listener.servers if self._listener else []

    def start(
        self,
        on_found: FoundCallback | None = None,
        on_removed: RemovedCallback | None = None,
    ) -> None:
        """Start browsing. Does nothing if already running."""
        if self.is_running:
            return
        self._zeroconf = Zeroconf()
        self._listener = MpdServiceListener(on_found=on_found, on_removed=on_removed)
        self._browser = ServiceBrowser(self._zeroconf, MPD_SERVICE_TYPE, self._listener)
        logger.debug("Browsing for %s", MPD_SERVICE_TYPE)

    def stop(self) -> None:
        """Stop browsing and release the mDNS socket."""
        if self._browser:
            self._browser.cancel()
            self._browser = None
        if self._zeroconf:
            self._zeroconf.close()
            self._zeroconf = None
        self._listener = None
        logger.debug("Stopped browsing for %s", MPD_SERVICE_TYPE)

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(self, *_: object) -> None:
        self.stop()

    @staticmethod
    def _browse(timeout: float, first_only: bool) -> list[DiscoveredServer]:
        done = threading.Event()

        def on_found(_: DiscoveredServer) -> None:
            if first_only:
                done.set()

        discovery = ServerDiscovery()
        discovery.start(on_found=on_found)
        try:
            done.wait(timeout=timeout)
            servers = discovery.servers
        finally:
            discovery.stop()
        return servers[:1] if first_only else servers

    @staticmethod
    def discover_one(timeout: float = 5.0) -> DiscoveredServer | None:
        """Wait for the first MPD server to be announced.

        Args:
            timeout: Maximum time to wait in seconds.

        Returns:
            The first server found, or None if none appeared in time.
        """
        servers = ServerDiscovery._browse(timeout, first_only=True)
        return servers[0] if servers else None

    @staticmethod
    def discover_all(timeout: float = 5.0) -> list[DiscoveredServer]:
        """Collect every MPD server announced within timeout seconds."""
        return ServerDiscovery._browse(timeout, first_only=False)

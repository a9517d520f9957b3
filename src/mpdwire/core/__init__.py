"""Configuration and server discovery.

Classes:
    ConfigManager: QSettings wrapper for configuration.
    ServerDiscovery: mDNS browser for MPD servers.
"""

from mpdwire.core.config import ConfigManager, resolve_connection
from mpdwire.core.discovery import DiscoveredServer, ServerDiscovery

__all__ = ["ConfigManager", "DiscoveredServer", "ServerDiscovery", "resolve_connection"]

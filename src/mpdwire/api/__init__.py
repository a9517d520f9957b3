"""MPD protocol API.

Example:
    from mpdwire.api import MpdClient

    async with MpdClient("192.168.1.100") as client:
        status = await client.status()
        songs = await client.find(Query(Meta.ARTIST, "Nick Drake"))
"""

from mpdwire.api.client import MpdClient, MpdConnectionError
from mpdwire.api.protocol import MpdError, MpdUnexpectedError
from mpdwire.api.types import (
    Count,
    Device,
    Entries,
    Id,
    Meta,
    MultiQuery,
    PLIndex,
    Pos,
    Query,
    Song,
    State,
    Stats,
    Status,
)

__all__ = [
    "MpdClient",
    "MpdConnectionError",
    "MpdError",
    "MpdUnexpectedError",
    "Count",
    "Device",
    "Entries",
    "Id",
    "Meta",
    "MultiQuery",
    "PLIndex",
    "Pos",
    "Query",
    "Song",
    "State",
    "Stats",
    "Status",
]

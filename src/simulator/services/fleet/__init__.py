"""Fleet management boundary."""

from .base import Commodity, FleetTransport
from .client import FleetClient, RemoteCommodity, RemoteTransport

__all__ = ["Commodity", "FleetTransport", "FleetClient", "RemoteCommodity", "RemoteTransport"]
